from dataclasses import dataclass, asdict
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from dateutil.parser import isoparse


def parse_datetime(value) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    return isoparse(value)


def parse_date(value) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return isoparse(value).date()


def parse_id(value) -> Optional[str]:
    return str(value) if value is not None else None


@dataclass
class ExpenseRecord:
    id: str
    title: str
    amount: Decimal
    status: str
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    user_department: Optional[str] = None
    category_id: Optional[str] = None
    category_name: str = ""
    category_icon: Optional[str] = None
    description: Optional[str] = None
    rejection_reason: Optional[str] = None
    expense_date: Optional[date] = None
    receipt_url: Optional[str] = None
    receipt: Optional[str] = None
    created_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    reimbursed_at: Optional[datetime] = None
    approved_by_name: Optional[str] = None
    rejected_by_name: Optional[str] = None
    reimbursed_by_name: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: dict) -> "ExpenseRecord":
        return cls(
            id=parse_id(payload["id"]),
            title=payload.get("title", ""),
            amount=Decimal(str(payload.get("amount", "0"))),
            status=payload["status"],
            user_id=parse_id(payload.get("user")),
            user_name=payload.get("user_name"),
            user_department=payload.get("user_department"),
            category_id=parse_id(payload.get("category")),
            category_name=payload.get("category_name") or "",
            category_icon=payload.get("category_icon"),
            description=payload.get("description"),
            rejection_reason=payload.get("rejection_reason"),
            expense_date=parse_date(payload.get("expense_date")),
            receipt_url=payload.get("receipt_url"),
            receipt=payload.get("receipt"),
            created_at=parse_datetime(payload.get("created_at")),
            submitted_at=parse_datetime(payload.get("submitted_at")),
            approved_at=parse_datetime(payload.get("approved_at")),
            reimbursed_at=parse_datetime(payload.get("reimbursed_at")),
            approved_by_name=payload.get("approved_by_name"),
            rejected_by_name=payload.get("rejected_by_name"),
            reimbursed_by_name=payload.get("reimbursed_by_name"),
        )

    def to_request(self) -> dict:
        """Fields accepted by the create and edit endpoints."""
        return {
            "title": self.title,
            "amount": str(self.amount),
            "category": self.category_id,
            "description": self.description,
            "expense_date": self.expense_date.isoformat() if self.expense_date else None,
            "receipt_url": self.receipt_url,
        }


@dataclass
class UserProfile:
    id: str
    email: str
    name: str = ""
    role: str = "EMPLOYEE"
    department: Optional[str] = None
    is_active: bool = True
    organisation: Optional[str] = None
    organisation_name: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: dict) -> "UserProfile":
        return cls(
            id=parse_id(payload["id"]),
            email=payload["email"],
            name=payload.get("name") or "",
            role=payload.get("role", "EMPLOYEE"),
            department=payload.get("department"),
            is_active=payload.get("is_active", True),
            organisation=parse_id(payload.get("organisation")),
            organisation_name=payload.get("organisation_name"),
        )

    def to_payload(self) -> dict:
        return asdict(self)


@dataclass
class CategoryRecord:
    id: str
    name: str
    icon: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = True

    @classmethod
    def from_payload(cls, payload: dict) -> "CategoryRecord":
        return cls(
            id=parse_id(payload["id"]),
            name=payload["name"],
            icon=payload.get("icon"),
            description=payload.get("description"),
            is_active=payload.get("is_active", True),
        )


@dataclass
class ApprovalEvent:
    id: str
    action: str
    actor_id: Optional[str] = None
    actor_name: Optional[str] = None
    comment: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_payload(cls, payload: dict) -> "ApprovalEvent":
        return cls(
            id=parse_id(payload["id"]),
            action=payload["action"],
            actor_id=parse_id(payload.get("actor")),
            actor_name=payload.get("actor_name"),
            comment=payload.get("comment"),
            created_at=parse_datetime(payload.get("created_at")),
        )
