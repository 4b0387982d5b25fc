import csv
import logging
from datetime import date, datetime
from decimal import Decimal
from io import StringIO

from dateutil.relativedelta import relativedelta
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import Category, MonthlyReport, Transaction, TransactionType, User

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def _money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENTS)


def month_bounds(year: int, month: int):
    first = date(year, month, 1)
    return first, first + relativedelta(months=1, days=-1)


def previous_month(today: date):
    first = today.replace(day=1) - relativedelta(months=1)
    return first.year, first.month


def build_monthly_summary(db: Session, user_id: int, year: int, month: int) -> dict:
    """Income, expenses and per-category totals for one calendar month."""
    start, end = month_bounds(year, month)
    rows = (
        db.query(
            Category.name.label("category"),
            Transaction.type,
            func.sum(Transaction.amount).label("total"),
        )
        .outerjoin(Category, Transaction.category_id == Category.id)
        .filter(
            Transaction.user_id == user_id,
            Transaction.date >= start,
            Transaction.date <= end,
        )
        .group_by(Category.name, Transaction.type)
        .order_by(Transaction.type, Category.name)
        .all()
    )

    by_category = [
        {
            "category": row.category or "Uncategorized",
            "type": row.type,
            "total": _money(row.total),
        }
        for row in rows
    ]
    total_income = sum(
        (r["total"] for r in by_category if r["type"] == TransactionType.INCOME),
        Decimal("0.00"),
    )
    total_expenses = sum(
        (r["total"] for r in by_category if r["type"] == TransactionType.EXPENSE),
        Decimal("0.00"),
    )
    return {
        "period": f"{year:04d}-{month:02d}",
        "total_income": total_income,
        "total_expenses": total_expenses,
        "net": total_income - total_expenses,
        "by_category": by_category,
    }


def save_monthly_report(db: Session, user_id: int, year: int, month: int) -> MonthlyReport:
    summary = build_monthly_summary(db, user_id, year, month)
    report = (
        db.query(MonthlyReport)
        .filter(
            MonthlyReport.user_id == user_id,
            MonthlyReport.period == summary["period"],
        )
        .first()
    )
    if report is None:
        report = MonthlyReport(user_id=user_id, period=summary["period"])
        db.add(report)
    report.total_income = summary["total_income"]
    report.total_expenses = summary["total_expenses"]
    report.generated_at = datetime.utcnow()
    db.commit()
    db.refresh(report)
    return report


def generate_monthly_reports(db: Session, today: date) -> int:
    """Store every user's report for the month before ``today``."""
    year, month = previous_month(today)
    user_ids = [user_id for (user_id,) in db.query(User.id).order_by(User.id)]
    for user_id in user_ids:
        save_monthly_report(db, user_id, year, month)
    logger.info(
        "Generated %d monthly reports for %04d-%02d", len(user_ids), year, month
    )
    return len(user_ids)


def list_monthly_reports(db: Session, user_id: int):
    return (
        db.query(MonthlyReport)
        .filter(MonthlyReport.user_id == user_id)
        .order_by(MonthlyReport.period.desc())
        .all()
    )


def build_transactions_csv(db: Session, user_id: int) -> str:
    """
    CSV export containing:
    - All transactions, newest first
    - Expense totals per category
    """
    rows = (
        db.query(Transaction, Category.name)
        .outerjoin(Category, Transaction.category_id == Category.id)
        .filter(Transaction.user_id == user_id)
        .order_by(Transaction.date.desc(), Transaction.id.desc())
        .all()
    )

    csv_data = StringIO()
    writer = csv.writer(csv_data)
    writer.writerow(["Date", "Description", "Category", "Type", "Amount"])

    totals = {}
    for t, category_name in rows:
        category_name = category_name or "Uncategorized"
        writer.writerow(
            [t.date.isoformat(), t.description, category_name, t.type.value, _money(t.amount)]
        )
        if t.type == TransactionType.EXPENSE:
            totals[category_name] = totals.get(category_name, Decimal("0.00")) + _money(
                t.amount
            )

    writer.writerow([])
    writer.writerow(["Category", "Total Spending"])
    for category_name in sorted(totals):
        writer.writerow([category_name, totals[category_name]])

    return csv_data.getvalue()
