import random
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

from budgeting import (
    calculate_budget_status,
    calculate_spent,
    evaluate_budget_alerts,
    is_in_window,
    percentage_used,
)
from database import TransactionType

GROCERIES = 1
RENT = 2


def _budget(amount="500.00", start=date(2024, 1, 1), end=None, category_id=GROCERIES, **kw):
    fields = dict(
        id=kw.pop("id", 1),
        name=kw.pop("name", "Groceries"),
        user_id=kw.pop("user_id", 7),
        amount=Decimal(amount),
        start_date=start,
        end_date=end,
        category_id=category_id,
    )
    return SimpleNamespace(**fields)


def _txn(amount, day, category_id=GROCERIES, type=TransactionType.EXPENSE):
    return SimpleNamespace(
        amount=Decimal(amount), date=day, category_id=category_id, type=type
    )


def test_example_only_in_window_same_category_expenses_count():
    budget = _budget()
    transactions = [
        _txn("120.00", date(2024, 1, 10)),
        _txn("50.00", date(2024, 1, 11), type=TransactionType.INCOME),
        _txn("30.00", date(2024, 1, 12), category_id=RENT),
        _txn("200.00", date(2023, 12, 31)),
    ]

    status = calculate_budget_status(budget, transactions)

    assert status.spent == Decimal("120.00")
    assert status.remaining == Decimal("380.00")
    assert status.percentage_used == 24.0


def test_no_transactions_means_nothing_spent():
    status = calculate_budget_status(_budget(), [])

    assert status.spent == 0
    assert status.percentage_used == 0
    assert status.remaining == Decimal("500.00")


def test_remaining_goes_negative_when_over_budget():
    budget = _budget(amount="100.00")
    status = calculate_budget_status(
        budget, [_txn("80.00", date(2024, 2, 1)), _txn("45.50", date(2024, 2, 2))]
    )

    assert status.spent == Decimal("125.50")
    assert status.remaining == Decimal("-25.50")
    assert status.percentage_used == 125.5


def test_window_bounds_are_inclusive():
    budget = _budget(start=date(2024, 3, 1), end=date(2024, 3, 31))
    transactions = [
        _txn("10.00", date(2024, 2, 29)),
        _txn("1.00", date(2024, 3, 1)),
        _txn("2.00", date(2024, 3, 31)),
        _txn("10.00", date(2024, 4, 1)),
    ]

    assert calculate_spent(budget, transactions) == Decimal("3.00")
    assert is_in_window(budget, date(2024, 3, 15))
    assert not is_in_window(budget, date(2024, 4, 1))


def test_open_ended_budget_counts_everything_after_start():
    budget = _budget(start=date(2024, 1, 1))
    assert calculate_spent(budget, [_txn("5.00", date(2030, 1, 1))]) == Decimal("5.00")


def test_order_of_transactions_does_not_matter():
    budget = _budget()
    transactions = [_txn(f"{i}.25", date(2024, 1, i)) for i in range(1, 29)]
    expected = calculate_spent(budget, transactions)

    shuffled = list(transactions)
    random.Random(42).shuffle(shuffled)

    assert calculate_spent(budget, shuffled) == expected


def test_zero_or_negative_amount_reports_zero_percent():
    assert percentage_used(Decimal("0"), Decimal("10")) == 0
    assert percentage_used(Decimal("-5"), Decimal("10")) == 0

    status = calculate_budget_status(
        _budget(amount="0"), [_txn("10.00", date(2024, 1, 5))]
    )
    assert status.percentage_used == 0
    assert status.remaining == Decimal("-10.00")


def test_type_given_as_plain_string_is_understood():
    txn = _txn("40.00", date(2024, 1, 5), type="Expense")
    assert calculate_spent(_budget(), [txn]) == Decimal("40.00")


def test_alerts_emitted_once_per_budget_at_or_above_threshold():
    over = _budget(id=1, name="Food", amount="100.00", user_id=1)
    exactly = _budget(id=2, name="Fuel", amount="100.00", user_id=2)
    under = _budget(id=3, name="Fun", amount="1000.00", user_id=1)
    transactions = {
        1: [_txn("90.00", date(2024, 1, 3))],
        2: [_txn("80.00", date(2024, 1, 3))],
    }

    alerts = evaluate_budget_alerts([over, exactly, under], transactions, threshold=80)

    assert [a.budget_id for a in alerts] == [1, 2]
    assert alerts[0].user_id == 1
    assert alerts[0].budget_name == "Food"
    assert alerts[0].percentage_used == 90.0
    assert alerts[1].percentage_used == 80.0


def test_budget_only_sees_its_owners_transactions():
    budget = _budget(amount="100.00", user_id=1)
    transactions = {2: [_txn("99.00", date(2024, 1, 3))]}

    assert evaluate_budget_alerts([budget], transactions, threshold=80) == []


def test_usage_just_under_threshold_does_not_alert():
    budget = _budget(amount="300.00", user_id=1)
    transactions = {1: [_txn("239.99", date(2024, 1, 3))]}

    # 79.9967% displays as 80.0 but is still under the threshold
    assert calculate_budget_status(budget, transactions[1]).percentage_used == 80.0
    assert evaluate_budget_alerts([budget], transactions, threshold=80) == []

    transactions[1].append(_txn("0.01", date(2024, 1, 4)))
    assert len(evaluate_budget_alerts([budget], transactions, threshold=80)) == 1
