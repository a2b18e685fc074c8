EMPLOYEE = "EMPLOYEE"
MANAGER = "MANAGER"
FINANCE = "FINANCE"
ADMIN = "ADMIN"

ROLES = (EMPLOYEE, MANAGER, FINANCE, ADMIN)

ROLE_OPTIONS = (
    (EMPLOYEE, "EMPLOYEE"),
    (MANAGER, "MANAGER"),
    (FINANCE, "FINANCE"),
    (ADMIN, "ADMIN"),
)

DRAFT = "DRAFT"
SUBMITTED = "SUBMITTED"
APPROVED = "APPROVED"
REJECTED = "REJECTED"
REIMBURSED = "REIMBURSED"

EXPENSE_STATUSES = (DRAFT, SUBMITTED, APPROVED, REJECTED, REIMBURSED)

EXPENSE_STATUS_OPTIONS = (
    (DRAFT, "DRAFT"),
    (SUBMITTED, "SUBMITTED"),
    (APPROVED, "APPROVED"),
    (REJECTED, "REJECTED"),
    (REIMBURSED, "REIMBURSED"),
)

# Actions understood by the authorization matrix and the transition table.
CREATE = "create"
EDIT_DRAFT = "edit_draft"
DELETE_DRAFT = "delete_draft"
SUBMIT = "submit"
APPROVE = "approve"
REJECT = "reject"
REIMBURSE = "reimburse"
MANAGE_USERS = "manage_users"
MANAGE_CATEGORIES = "manage_categories"

ACTIONS = (
    CREATE,
    EDIT_DRAFT,
    DELETE_DRAFT,
    SUBMIT,
    APPROVE,
    REJECT,
    REIMBURSE,
    MANAGE_USERS,
    MANAGE_CATEGORIES,
)

OWNER_ONLY_ACTIONS = frozenset({EDIT_DRAFT, DELETE_DRAFT, SUBMIT})
REVIEW_ACTIONS = frozenset({APPROVE, REJECT, REIMBURSE})
