"""
Dashboard and analytics figures derived from a list of expenses.

All functions are pure: they never mutate their input and are meant to
be recomputed from the current snapshot whenever it changes.
"""
import calendar
import math
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional

from dateutil.relativedelta import relativedelta

from policy.enums import (
    APPROVED,
    DRAFT,
    EXPENSE_STATUSES,
    REIMBURSED,
    REJECTED,
    SUBMITTED,
)
from .models import ExpenseRecord

ZERO = Decimal("0")

THIS_MONTH = "THIS_MONTH"
LAST_3_MONTHS = "LAST_3_MONTHS"
THIS_YEAR = "THIS_YEAR"
ALL_TIME = "ALL_TIME"
DATE_RANGES = (THIS_MONTH, LAST_3_MONTHS, THIS_YEAR, ALL_TIME)

SORT_DEFAULT = "DEFAULT"
SORT_EXPENSE_DATE = "EXPENSE_DATE"
SORT_CREATED_AT = "CREATED_AT"
SORT_AMOUNT = "AMOUNT"
SORT_STATUS = "STATUS"
SORT_CATEGORY = "CATEGORY"
SORT_TITLE = "TITLE"


@dataclass
class CategoryTotal:
    name: str
    icon: Optional[str]
    amount: Decimal
    count: int


@dataclass
class MonthlyTotal:
    key: int
    label: str
    month: str
    year: int
    amount: Decimal
    count: int


def effective_date(expense: ExpenseRecord) -> Optional[date]:
    if expense.expense_date:
        return expense.expense_date
    if expense.created_at:
        return expense.created_at.date()
    return None


def total(expenses: Iterable[ExpenseRecord]) -> Decimal:
    return sum((expense.amount for expense in expenses), ZERO)


def totals_by_status(expenses, user_id) -> dict:
    """Sum of amounts per status over the expenses owned by ``user_id``."""
    totals = {status: ZERO for status in EXPENSE_STATUSES}
    for expense in expenses:
        if expense.user_id == str(user_id):
            totals[expense.status] += expense.amount
    return totals


def dashboard_totals(expenses, user_id) -> dict:
    totals = totals_by_status(expenses, user_id)
    return {
        "total": sum(totals.values(), ZERO),
        "pending": totals[SUBMITTED],
        "approved": totals[APPROVED] + totals[REIMBURSED],
        "rejected": totals[REJECTED],
    }


def category_breakdown(expenses) -> List[CategoryTotal]:
    """Amount and count per category name, in first-encountered order."""
    breakdown = OrderedDict()
    for expense in expenses:
        entry = breakdown.get(expense.category_name)
        if entry is None:
            breakdown[expense.category_name] = CategoryTotal(
                name=expense.category_name,
                icon=expense.category_icon,
                amount=expense.amount,
                count=1,
            )
        else:
            entry.amount += expense.amount
            entry.count += 1
    return list(breakdown.values())


def top_categories(expenses, limit=5) -> List[CategoryTotal]:
    # sorted() is stable, ties keep their first-encountered order
    ranked = sorted(category_breakdown(expenses), key=lambda entry: entry.amount, reverse=True)
    return ranked[:limit]


def month_key(day: date) -> int:
    return day.year * 100 + (day.month - 1)


def monthly_trend(expenses) -> List[MonthlyTotal]:
    months = {}
    for expense in expenses:
        day = effective_date(expense)
        if day is None:
            continue
        key = month_key(day)
        entry = months.get(key)
        if entry is None:
            months[key] = MonthlyTotal(
                key=key,
                label=f"{calendar.month_abbr[day.month]} '{day.year % 100:02d}",
                month=calendar.month_name[day.month],
                year=day.year,
                amount=expense.amount,
                count=1,
            )
        else:
            entry.amount += expense.amount
            entry.count += 1
    return [months[key] for key in sorted(months)]


def percentage_change(current, previous) -> float:
    if not previous:
        return 0.0
    return float((Decimal(current) - Decimal(previous)) / Decimal(previous) * 100)


def in_month(expense, year, month) -> bool:
    day = effective_date(expense)
    return day is not None and day.year == year and day.month == month


def month_over_month_change(expenses, today: date) -> float:
    last_month = today - relativedelta(months=1)
    this_total = total(e for e in expenses if in_month(e, today.year, today.month))
    last_total = total(
        e for e in expenses if in_month(e, last_month.year, last_month.month)
    )
    return percentage_change(this_total, last_total)


def approval_days(expense) -> Optional[int]:
    if not expense.submitted_at or not expense.approved_at:
        return None
    seconds = abs((expense.approved_at - expense.submitted_at).total_seconds())
    return math.ceil(seconds / 86400)


def average_approval_days(expenses) -> Optional[float]:
    """Mean approval latency in days, None when no expense was approved."""
    days = [approval_days(expense) for expense in expenses]
    days = [value for value in days if value is not None]
    if not days:
        return None
    return sum(days) / len(days)


def format_day(day: date) -> str:
    return day.strftime("%d/%m/%Y")


def search_text(expense) -> str:
    parts = [
        expense.title or "",
        expense.category_name or "",
        expense.status or "",
        expense.description or "",
        expense.rejection_reason or "",
    ]
    day = effective_date(expense)
    if day is not None:
        month = calendar.month_name[day.month].lower()
        mon = calendar.month_abbr[day.month].lower()
        parts += [
            str(day.day),
            month,
            mon,
            f"{day.day} {month}",
            f"{month} {day.day}",
            f"{day.day} {mon}",
            f"{mon} {day.day}",
            format_day(day),
        ]
    if expense.created_at:
        parts.append(format_day(expense.created_at.date()))
    return " ".join(parts).lower()


def matches_search(expense, query) -> bool:
    term = (query or "").lower().strip()
    if not term:
        return True
    return term in search_text(expense)


def search_expenses(expenses, query) -> list:
    return [expense for expense in expenses if matches_search(expense, query)]


def filter_by_date_range(expenses, date_range, today: date) -> list:
    start_of_month = today.replace(day=1)
    starts = {
        THIS_MONTH: start_of_month,
        LAST_3_MONTHS: start_of_month - relativedelta(months=3),
        THIS_YEAR: today.replace(month=1, day=1),
    }
    if date_range == ALL_TIME:
        return list(expenses)
    if date_range not in starts:
        raise ValueError(f"Unknown date range {date_range}")
    start = starts[date_range]
    return [
        expense
        for expense in expenses
        if effective_date(expense) is not None and effective_date(expense) >= start
    ]


def summary(expenses) -> dict:
    expenses = list(expenses)
    count = len(expenses)
    amount = total(expenses)
    counts = {status: 0 for status in EXPENSE_STATUSES}
    for expense in expenses:
        counts[expense.status] += 1
    approved = counts[APPROVED] + counts[REIMBURSED]
    return {
        "total": amount,
        "count": count,
        "average": amount / count if count else ZERO,
        "draft": counts[DRAFT],
        "pending": counts[SUBMITTED],
        "approved": counts[APPROVED],
        "rejected": counts[REJECTED],
        "reimbursed": counts[REIMBURSED],
        "approval_rate": approved / count * 100 if count else 0.0,
    }


def biggest_expense(expenses) -> Optional[ExpenseRecord]:
    biggest = None
    for expense in expenses:
        if biggest is None or expense.amount > biggest.amount:
            biggest = expense
    return biggest


def nullable(value):
    return (value is None, value)


SORT_KEYS = {
    SORT_EXPENSE_DATE: lambda e: nullable(effective_date(e)),
    SORT_CREATED_AT: lambda e: nullable(e.created_at),
    SORT_AMOUNT: lambda e: e.amount,
    SORT_STATUS: lambda e: e.status,
    SORT_CATEGORY: lambda e: (e.category_name or "").lower(),
    SORT_TITLE: lambda e: (e.title or "").lower(),
}


def sort_expenses(expenses, sort_by=SORT_DEFAULT, descending=False) -> list:
    """DEFAULT always lists the newest expense first."""
    if sort_by == SORT_DEFAULT:
        return sorted(expenses, key=SORT_KEYS[SORT_CREATED_AT], reverse=True)
    if sort_by not in SORT_KEYS:
        raise ValueError(f"Unknown sort field {sort_by}")
    return sorted(expenses, key=SORT_KEYS[sort_by], reverse=descending)


def format_inr(amount) -> str:
    """Render an amount with the rupee sign and Indian digit grouping."""
    value = Decimal(str(amount)).quantize(Decimal("0.01"))
    sign = "-" if value < 0 else ""
    whole, _, fraction = f"{abs(value):.2f}".partition(".")
    head, tail = whole[:-3], whole[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return f"{sign}₹{','.join(groups + [tail])}.{fraction}"
