"""
Session scoped client state.

ExpenseStore owns the signed-in user, the collections fetched from the
backend and the api client holding the token. One store is opened per
session and discarded by logout(). Every operation consults the
authorization matrix, the transition table and input validation before
calling the backend, and local collections only change once the backend
has answered.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from policy import authorize, is_allowed, next_status, validate_rejection_reason
from policy.enums import (
    APPROVE,
    APPROVED,
    CREATE,
    DELETE_DRAFT,
    EDIT_DRAFT,
    MANAGE_CATEGORIES,
    MANAGE_USERS,
    REIMBURSE,
    REJECT,
    ROLES,
    SUBMIT,
    SUBMITTED,
)
from .api import ApiClient
from .config import ClientSettings
from .exceptions import (
    ApiError,
    AuthenticationError,
    InvalidTransitionError,
    NotFoundError,
    PolicyError,
    ValidationError,
)
from .models import ApprovalEvent, CategoryRecord, ExpenseRecord, UserProfile
from .session import SessionStorage

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


@dataclass
class BulkResult:
    """Outcome of a bulk approve or reject, item by item."""

    succeeded: list = field(default_factory=list)
    failed: dict = field(default_factory=dict)

    @property
    def ok(self):
        return not self.failed


def replace_by_id(records, record):
    return [record if item.id == record.id else item for item in records]


def upsert_first(records, record):
    """Replace the record with the same id, or put it first when missing."""
    if any(item.id == record.id for item in records):
        return replace_by_id(records, record)
    return [record] + list(records)


def remove_by_id(records, record_id):
    return [item for item in records if item.id != str(record_id)]


def validate_amount(amount):
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise ValidationError("Amount must be a number.", field="amount")
    if not value.is_finite():
        raise ValidationError("Amount must be a number.", field="amount")
    if value < 0:
        raise ValidationError("Amount cannot be negative.", field="amount")
    return value


def validate_password(password):
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            field="password",
        )
    return password


class ExpenseStore:
    def __init__(self, api: ApiClient, storage: SessionStorage = None):
        self.api = api
        self.storage = storage
        self.current_user = None
        self.clear_collections()

    @classmethod
    def open(cls, settings: ClientSettings = None, session=None):
        """Start a store, restoring the saved session when there is one."""
        settings = settings or ClientSettings.from_env()
        api = ApiClient(settings.api_url, timeout=settings.timeout, session=session)
        store = cls(api, SessionStorage(settings.session_file))
        token, profile = store.storage.load()
        if token:
            api.token = token
            store.current_user = UserProfile.from_payload(profile)
            logger.info("Restored session for %s", store.current_user.email)
        return store

    def clear_collections(self):
        self.expenses = []
        self.pending_approvals = []
        self.approved_for_reimbursement = []
        self.approval_history = []
        self.categories = []
        self.users = []

    @property
    def is_authenticated(self):
        return bool(self.api.token) and self.current_user is not None

    def require_user(self) -> UserProfile:
        if not self.is_authenticated:
            raise AuthenticationError("Not logged in.")
        return self.current_user

    def can(self, action) -> bool:
        return self.current_user is not None and is_allowed(self.current_user.role, action)

    def check(self, action, expense=None):
        """Run the matrix, ownership and transition checks for ``action``."""
        user = self.require_user()
        authorize(user, action, owner_id=expense.user_id if expense else None)
        if expense is not None:
            next_status(expense.status, action)

    def find_expense(self, expense_id):
        expense_id = str(expense_id)
        for collection in (
            self.expenses,
            self.pending_approvals,
            self.approved_for_reimbursement,
            self.approval_history,
        ):
            for expense in collection:
                if expense.id == expense_id:
                    return expense
        return None

    # Session

    def start_session(self, payload):
        self.api.token = payload["access"]
        self.current_user = UserProfile.from_payload(payload["user"])
        if self.storage:
            self.storage.save(self.api.token, self.current_user.to_payload())
        logger.info("Signed in as %s (%s)", self.current_user.email, self.current_user.role)
        return self.current_user

    def login(self, email, password):
        if not email or not password:
            raise ValidationError("Email and password are required.", field="email")
        return self.start_session(self.api.login(email.strip().lower(), password))

    def register(
        self,
        name,
        email,
        password,
        invite_code=None,
        organisation_name=None,
        department=None,
    ):
        validate_password(password)
        if bool(invite_code) == bool(organisation_name):
            raise ValidationError(
                "Provide either an invite code or a new organisation name."
            )
        data = {"name": name, "email": email, "password": password}
        if department:
            data["department"] = department
        if invite_code:
            data["invite_code"] = invite_code
        else:
            data["organisation_name"] = organisation_name
        return self.start_session(self.api.register(**data))

    def logout(self):
        if self.current_user:
            logger.info("Signed out %s", self.current_user.email)
        self.api.token = None
        self.current_user = None
        self.clear_collections()
        if self.storage:
            self.storage.clear()

    def refresh_profile(self):
        self.require_user()
        self.current_user = UserProfile.from_payload(self.api.me())
        if self.storage:
            self.storage.save(self.api.token, self.current_user.to_payload())
        return self.current_user

    # Fetching

    def fetch_expenses(self, **params):
        self.require_user()
        self.expenses = [
            ExpenseRecord.from_payload(item) for item in self.api.list_expenses(**params)
        ]
        return self.expenses

    def fetch_pending_approvals(self):
        self.check(APPROVE)
        self.pending_approvals = [
            ExpenseRecord.from_payload(item) for item in self.api.pending_expenses()
        ]
        return self.pending_approvals

    def fetch_approved_for_reimbursement(self):
        self.check(REIMBURSE)
        self.approved_for_reimbursement = [
            ExpenseRecord.from_payload(item) for item in self.api.approved_expenses()
        ]
        return self.approved_for_reimbursement

    def fetch_approval_history(self):
        self.check(APPROVE)
        self.approval_history = [
            ExpenseRecord.from_payload(item) for item in self.api.approval_history()
        ]
        return self.approval_history

    def fetch_categories(self):
        self.require_user()
        self.categories = [
            CategoryRecord.from_payload(item) for item in self.api.list_categories()
        ]
        return self.categories

    def fetch_all_categories(self):
        self.check(MANAGE_CATEGORIES)
        return [CategoryRecord.from_payload(item) for item in self.api.all_categories()]

    def fetch_users(self):
        self.check(MANAGE_USERS)
        self.users = [UserProfile.from_payload(item) for item in self.api.list_users()]
        return self.users

    def fetch_history(self, expense_id):
        self.require_user()
        return [
            ApprovalEvent.from_payload(item)
            for item in self.api.expense_history(expense_id)
        ]

    def load(self):
        """Fetch every collection the signed-in role may see."""
        self.fetch_expenses()
        self.fetch_categories()
        if self.can(APPROVE):
            self.fetch_pending_approvals()
            self.fetch_approval_history()
        if self.can(REIMBURSE):
            self.fetch_approved_for_reimbursement()
        if self.can(MANAGE_USERS):
            self.fetch_users()

    def refresh_expense(self, expense_id):
        """Re-read one expense and fold it into every collection it belongs to."""
        try:
            expense = ExpenseRecord.from_payload(self.api.get_expense(expense_id))
        except NotFoundError:
            self.forget_expense(expense_id)
            return None
        self.expenses = replace_by_id(self.expenses, expense)
        self.approval_history = replace_by_id(self.approval_history, expense)
        if expense.status == SUBMITTED:
            self.pending_approvals = replace_by_id(self.pending_approvals, expense)
        else:
            self.pending_approvals = remove_by_id(self.pending_approvals, expense.id)
        if expense.status == APPROVED:
            self.approved_for_reimbursement = replace_by_id(
                self.approved_for_reimbursement, expense
            )
        else:
            self.approved_for_reimbursement = remove_by_id(
                self.approved_for_reimbursement, expense.id
            )
        return expense

    def forget_expense(self, expense_id):
        self.expenses = remove_by_id(self.expenses, expense_id)
        self.pending_approvals = remove_by_id(self.pending_approvals, expense_id)
        self.approved_for_reimbursement = remove_by_id(
            self.approved_for_reimbursement, expense_id
        )
        self.approval_history = remove_by_id(self.approval_history, expense_id)

    def call_transition(self, expense_id, call):
        """Run ``call``; on a stale status refresh the expense, then re-raise."""
        try:
            return ExpenseRecord.from_payload(call())
        except InvalidTransitionError:
            try:
                self.refresh_expense(expense_id)
            except ApiError as exc:
                logger.warning("Could not refresh expense %s: %s", expense_id, exc)
            raise

    # Drafts

    def create_expense(
        self,
        title,
        amount,
        category_id,
        description=None,
        expense_date=None,
        receipt_url=None,
    ):
        self.check(CREATE)
        if not title or not str(title).strip():
            raise ValidationError("Title is required.", field="title")
        if not category_id:
            raise ValidationError("Category is required.", field="category")
        data = {
            "title": str(title).strip(),
            "amount": str(validate_amount(amount)),
            "category": str(category_id),
            "description": description,
            "expense_date": expense_date.isoformat() if expense_date else None,
            "receipt_url": receipt_url,
        }
        expense = ExpenseRecord.from_payload(self.api.create_expense(data))
        self.expenses = [expense] + self.expenses
        return expense

    def update_expense(self, expense_id, **changes):
        """PUT the full draft with ``changes`` applied; uncached drafts are read first."""
        expense = self.find_expense(expense_id)
        if expense is None:
            self.require_user()
            expense = ExpenseRecord.from_payload(self.api.get_expense(expense_id))
        self.check(EDIT_DRAFT, expense)
        if "amount" in changes:
            changes["amount"] = str(validate_amount(changes["amount"]))
        if changes.get("expense_date") is not None and hasattr(
            changes["expense_date"], "isoformat"
        ):
            changes["expense_date"] = changes["expense_date"].isoformat()
        if "category_id" in changes:
            changes["category"] = str(changes.pop("category_id"))
        data = expense.to_request()
        data.update(changes)
        updated = self.call_transition(
            expense_id, lambda: self.api.update_expense(expense_id, data)
        )
        self.expenses = replace_by_id(self.expenses, updated)
        return updated

    def delete_expense(self, expense_id):
        expense = self.find_expense(expense_id)
        self.check(DELETE_DRAFT, expense)
        try:
            self.api.delete_expense(expense_id)
        except InvalidTransitionError:
            self.refresh_expense(expense_id)
            raise
        except NotFoundError:
            self.forget_expense(expense_id)
            raise
        self.forget_expense(expense_id)

    # Transitions

    def submit_expense(self, expense_id):
        self.check(SUBMIT, self.find_expense(expense_id))
        expense = self.call_transition(
            expense_id, lambda: self.api.submit_expense(expense_id)
        )
        self.expenses = replace_by_id(self.expenses, expense)
        return expense

    def approve_expense(self, expense_id):
        self.check(APPROVE, self.find_expense(expense_id))
        expense = self.call_transition(
            expense_id, lambda: self.api.approve_expense(expense_id)
        )
        self.pending_approvals = remove_by_id(self.pending_approvals, expense.id)
        self.approval_history = upsert_first(self.approval_history, expense)
        self.expenses = replace_by_id(self.expenses, expense)
        return expense

    def reject_expense(self, expense_id, reason):
        reason = validate_rejection_reason(reason)
        self.check(REJECT, self.find_expense(expense_id))
        expense = self.call_transition(
            expense_id, lambda: self.api.reject_expense(expense_id, reason)
        )
        self.pending_approvals = remove_by_id(self.pending_approvals, expense.id)
        self.approval_history = upsert_first(self.approval_history, expense)
        self.expenses = replace_by_id(self.expenses, expense)
        return expense

    def reimburse_expense(self, expense_id):
        self.check(REIMBURSE, self.find_expense(expense_id))
        expense = self.call_transition(
            expense_id, lambda: self.api.reimburse_expense(expense_id)
        )
        self.approved_for_reimbursement = remove_by_id(
            self.approved_for_reimbursement, expense.id
        )
        self.approval_history = upsert_first(self.approval_history, expense)
        self.expenses = replace_by_id(self.expenses, expense)
        return expense

    def bulk_approve(self, expense_ids=None) -> BulkResult:
        """Approve each pending expense in turn; failures are collected, not raised."""
        self.check(APPROVE)
        if expense_ids is None:
            expense_ids = [expense.id for expense in self.pending_approvals]
        return self.fold(list(expense_ids), self.approve_expense, "approve")

    def bulk_reject(self, reason, expense_ids=None) -> BulkResult:
        reason = validate_rejection_reason(reason)
        self.check(REJECT)
        if expense_ids is None:
            expense_ids = [expense.id for expense in self.pending_approvals]
        return self.fold(
            list(expense_ids),
            lambda expense_id: self.reject_expense(expense_id, reason),
            "reject",
        )

    def fold(self, expense_ids, operation, name):
        result = BulkResult()
        for expense_id in expense_ids:
            try:
                operation(expense_id)
            except (PolicyError, ApiError) as exc:
                logger.warning("Bulk %s failed for %s: %s", name, expense_id, exc)
                result.failed[str(expense_id)] = exc
            else:
                result.succeeded.append(str(expense_id))
        logger.info(
            "Bulk %s: %s succeeded, %s failed",
            name,
            len(result.succeeded),
            len(result.failed),
        )
        return result

    # Administration

    def check_other_user(self, user_id, message, field_name):
        self.check(MANAGE_USERS)
        if str(user_id) == self.current_user.id:
            raise ValidationError(message, field=field_name)

    def fold_user(self, payload):
        user = UserProfile.from_payload(payload)
        self.users = replace_by_id(self.users, user)
        return user

    def update_user_role(self, user_id, role):
        self.check_other_user(user_id, "Cannot change your own role", "role")
        if role not in ROLES:
            raise ValidationError(f"Unknown role {role}.", field="role")
        return self.fold_user(self.api.update_user_role(user_id, role))

    def update_user_department(self, user_id, department):
        self.check(MANAGE_USERS)
        return self.fold_user(self.api.update_user_department(user_id, department))

    def toggle_user_active(self, user_id):
        self.check_other_user(user_id, "Cannot deactivate your own account", "is_active")
        return self.fold_user(self.api.toggle_user_active(user_id))

    def reset_user_password(self, user_id, new_password):
        self.check_other_user(
            user_id, "Cannot reset your own password via admin panel", "new_password"
        )
        validate_password(new_password)
        self.api.reset_user_password(user_id, new_password)

    def get_invite_code(self):
        self.check(MANAGE_USERS)
        return self.api.invite_code()["invite_code"]

    def create_category(self, name, icon=None, description=None):
        self.check(MANAGE_CATEGORIES)
        if not name or not name.strip():
            raise ValidationError("Category name is required", field="name")
        data = {"name": name.strip()}
        if icon:
            data["icon"] = icon
        if description is not None:
            data["description"] = description
        category = CategoryRecord.from_payload(self.api.create_category(data))
        self.categories = self.categories + [category]
        return category

    def update_category(self, category_id, **changes):
        self.check(MANAGE_CATEGORIES)
        if "name" in changes and not (changes["name"] or "").strip():
            raise ValidationError("Category name is required", field="name")
        category = CategoryRecord.from_payload(
            self.api.update_category(category_id, changes)
        )
        self.categories = replace_by_id(self.categories, category)
        return category

    def toggle_category(self, category_id):
        self.check(MANAGE_CATEGORIES)
        category = CategoryRecord.from_payload(self.api.toggle_category(category_id))
        if category.is_active:
            self.categories = upsert_first(self.categories, category)
        else:
            self.categories = remove_by_id(self.categories, category.id)
        return category
