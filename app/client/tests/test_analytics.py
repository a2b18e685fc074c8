from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from client import analytics
from client.models import ExpenseRecord

USER_ID = "0b7c6d8e-1111-4c4c-9f9f-000000000001"
OTHER_ID = "0b7c6d8e-2222-4c4c-9f9f-000000000002"


def make_expense(
    category="Travel",
    amount="100",
    status="DRAFT",
    user_id=USER_ID,
    expense_date=None,
    created_at=datetime(2024, 12, 1, 9, 30, tzinfo=timezone.utc),
    **extra,
):
    make_expense.counter += 1
    return ExpenseRecord(
        id=f"expense-{make_expense.counter}",
        title=extra.pop("title", f"Expense {make_expense.counter}"),
        amount=Decimal(amount),
        status=status,
        user_id=user_id,
        category_name=category,
        expense_date=expense_date,
        created_at=created_at,
        **extra,
    )


make_expense.counter = 0


@pytest.fixture
def fixture_set():
    return [
        make_expense("Travel", "450"),
        make_expense("Meals", "85"),
        make_expense("Travel", "32.5"),
    ]


def test_category_breakdown_matches_manual_sum(fixture_set):
    breakdown = analytics.category_breakdown(fixture_set)
    assert [(entry.name, entry.amount, entry.count) for entry in breakdown] == [
        ("Travel", Decimal("482.5"), 2),
        ("Meals", Decimal("85"), 1),
    ]


def test_category_breakdown_does_not_mutate_input(fixture_set):
    amounts = [expense.amount for expense in fixture_set]
    analytics.category_breakdown(fixture_set)
    assert [expense.amount for expense in fixture_set] == amounts


def test_category_breakdown_of_nothing_is_empty():
    assert analytics.category_breakdown([]) == []


def test_top_categories_is_stable_and_truncated():
    expenses = [
        make_expense("Software", "10"),
        make_expense("Meals", "50"),
        make_expense("Transport", "50"),
        make_expense("Travel", "90"),
        make_expense("Other", "5"),
        make_expense("Training", "1"),
    ]
    top = analytics.top_categories(expenses)
    assert [entry.name for entry in top] == [
        "Travel",
        "Meals",
        "Transport",
        "Software",
        "Other",
    ]
    assert [entry.name for entry in analytics.top_categories(expenses, limit=2)] == [
        "Travel",
        "Meals",
    ]


def test_totals_by_status_only_counts_the_user():
    expenses = [
        make_expense(amount="100", status="SUBMITTED"),
        make_expense(amount="40", status="APPROVED"),
        make_expense(amount="60", status="REIMBURSED"),
        make_expense(amount="25", status="REJECTED"),
        make_expense(amount="999", status="SUBMITTED", user_id=OTHER_ID),
    ]
    totals = analytics.totals_by_status(expenses, USER_ID)
    assert totals == {
        "DRAFT": Decimal("0"),
        "SUBMITTED": Decimal("100"),
        "APPROVED": Decimal("40"),
        "REJECTED": Decimal("25"),
        "REIMBURSED": Decimal("60"),
    }
    assert analytics.dashboard_totals(expenses, USER_ID) == {
        "total": Decimal("225"),
        "pending": Decimal("100"),
        "approved": Decimal("100"),
        "rejected": Decimal("25"),
    }


def test_monthly_trend_sorts_numerically():
    expenses = [
        make_expense(amount="10", expense_date=date(2024, 12, 5)),
        make_expense(amount="20", expense_date=date(2025, 1, 3)),
        make_expense(amount="5", expense_date=date(2024, 2, 10)),
        make_expense(amount="15", expense_date=date(2024, 12, 20)),
        make_expense(
            amount="1", created_at=datetime(2024, 4, 2, tzinfo=timezone.utc)
        ),
    ]
    trend = analytics.monthly_trend(expenses)
    assert [entry.label for entry in trend] == [
        "Feb '24",
        "Apr '24",
        "Dec '24",
        "Jan '25",
    ]
    assert [entry.key for entry in trend] == [202401, 202403, 202411, 202500]
    december = trend[2]
    assert december.month == "December"
    assert december.amount == Decimal("25")
    assert december.count == 2


def test_month_over_month_change():
    today = date(2025, 3, 15)
    expenses = [
        make_expense(amount="200", expense_date=date(2025, 3, 2)),
        make_expense(amount="100", expense_date=date(2025, 2, 20)),
    ]
    assert analytics.month_over_month_change(expenses, today) == pytest.approx(100.0)


@pytest.mark.parametrize("this_month", ["0", "10", "5000"])
def test_month_over_month_change_is_zero_without_last_month(this_month):
    today = date(2025, 3, 15)
    expenses = [make_expense(amount=this_month, expense_date=date(2025, 3, 2))]
    assert analytics.month_over_month_change(expenses, today) == 0


def test_month_over_month_change_across_new_year():
    today = date(2025, 1, 10)
    expenses = [
        make_expense(amount="50", expense_date=date(2025, 1, 2)),
        make_expense(amount="100", expense_date=date(2024, 12, 31)),
    ]
    assert analytics.month_over_month_change(expenses, today) == pytest.approx(-50.0)


def test_approval_days_rounds_up():
    submitted = datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)
    expense = make_expense(
        status="APPROVED",
        submitted_at=submitted,
        approved_at=submitted + timedelta(days=1, hours=2),
    )
    assert analytics.approval_days(expense) == 2


def test_average_approval_days():
    submitted = datetime(2025, 1, 1, tzinfo=timezone.utc)
    expenses = [
        make_expense(
            status="APPROVED",
            submitted_at=submitted,
            approved_at=submitted + timedelta(days=1),
        ),
        make_expense(
            status="REIMBURSED",
            submitted_at=submitted,
            approved_at=submitted + timedelta(days=4),
        ),
        make_expense(status="SUBMITTED", submitted_at=submitted),
    ]
    assert analytics.average_approval_days(expenses) == pytest.approx(2.5)


def test_average_approval_days_is_none_when_nothing_approved():
    submitted = datetime(2025, 1, 1, tzinfo=timezone.utc)
    expenses = [
        make_expense(status="SUBMITTED", submitted_at=submitted) for _ in range(3)
    ]
    assert analytics.average_approval_days(expenses) is None
    assert analytics.average_approval_days([]) is None


@pytest.mark.parametrize(
    "query,expected",
    [
        ("december 28", True),
        ("dec 28", True),
        ("28", True),
        ("28 december", True),
        ("  DEC 28 ", True),
        ("28/12/2024", True),
        ("january", False),
        ("", True),
        ("taxi", True),
        ("meals", True),
        ("submitted", True),
        ("receipt missing", False),
    ],
)
def test_matches_search(query, expected):
    expense = make_expense(
        "Meals",
        title="Taxi and dinner",
        status="SUBMITTED",
        expense_date=date(2024, 12, 28),
        created_at=datetime(2024, 12, 29, 10, 0, tzinfo=timezone.utc),
    )
    assert analytics.matches_search(expense, query) is expected


def test_search_uses_rejection_reason_and_created_date():
    expense = make_expense(
        status="REJECTED",
        rejection_reason="Receipt missing",
        created_at=datetime(2024, 11, 3, 8, 0, tzinfo=timezone.utc),
    )
    assert analytics.search_expenses([expense], "receipt missing") == [expense]
    assert analytics.search_expenses([expense], "nov 3") == [expense]
    assert analytics.search_expenses([expense], "03/11/2024") == [expense]


def test_filter_by_date_range():
    today = date(2025, 3, 15)
    expenses = [
        make_expense(title="this month", expense_date=date(2025, 3, 1)),
        make_expense(title="december", expense_date=date(2024, 12, 1)),
        make_expense(title="november", expense_date=date(2024, 11, 30)),
        make_expense(title="january", expense_date=date(2025, 1, 1)),
    ]

    def titles(date_range):
        return [e.title for e in analytics.filter_by_date_range(expenses, date_range, today)]

    assert titles(analytics.THIS_MONTH) == ["this month"]
    assert titles(analytics.LAST_3_MONTHS) == ["this month", "december", "january"]
    assert titles(analytics.THIS_YEAR) == ["this month", "january"]
    assert len(titles(analytics.ALL_TIME)) == 4
    with pytest.raises(ValueError):
        analytics.filter_by_date_range(expenses, "FOREVER", today)


def test_summary_and_biggest_expense():
    expenses = [
        make_expense(amount="100", status="APPROVED", title="a"),
        make_expense(amount="300", status="REIMBURSED", title="b"),
        make_expense(amount="300", status="REJECTED", title="c"),
        make_expense(amount="100", status="DRAFT", title="d"),
    ]
    stats = analytics.summary(expenses)
    assert stats["total"] == Decimal("800")
    assert stats["count"] == 4
    assert stats["average"] == Decimal("200")
    assert stats["approval_rate"] == pytest.approx(50.0)
    assert stats["draft"] == 1
    assert analytics.biggest_expense(expenses).title == "b"
    assert analytics.biggest_expense([]) is None
    assert analytics.summary([])["approval_rate"] == 0.0


def test_sort_expenses():
    older = make_expense(
        amount="5", title="Zebra", created_at=datetime(2024, 1, 1, tzinfo=timezone.utc)
    )
    newer = make_expense(
        amount="50", title="apple", created_at=datetime(2024, 6, 1, tzinfo=timezone.utc)
    )
    expenses = [older, newer]
    assert analytics.sort_expenses(expenses) == [newer, older]
    assert analytics.sort_expenses(expenses, analytics.SORT_AMOUNT) == [older, newer]
    assert analytics.sort_expenses(expenses, analytics.SORT_AMOUNT, descending=True) == [
        newer,
        older,
    ]
    assert analytics.sort_expenses(expenses, analytics.SORT_TITLE) == [newer, older]
    assert expenses == [older, newer]


@pytest.mark.parametrize(
    "amount,expected",
    [
        ("482.5", "₹482.50"),
        ("482500.5", "₹4,82,500.50"),
        ("1234567", "₹12,34,567.00"),
        ("0", "₹0.00"),
    ],
)
def test_format_inr(amount, expected):
    assert analytics.format_inr(amount) == expected
