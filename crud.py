# crud.py: per-user queries, always scoped by an explicit user id

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

import config
from database import (
    Budget,
    Category,
    Transaction,
    TransactionType,
)


@dataclass
class TransactionFilter:
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    category_id: Optional[int] = None
    type: Optional[TransactionType] = None
    page: int = 1
    page_size: int = config.DEFAULT_PAGE_SIZE

    @property
    def effective_page_size(self) -> int:
        return max(1, min(self.page_size, config.MAX_PAGE_SIZE))

    @property
    def offset(self) -> int:
        return (max(self.page, 1) - 1) * self.effective_page_size


# Transactions


def list_transactions(db: Session, user_id: int, filters: TransactionFilter):
    """Return ``(items, total_count)`` for one page of matching transactions."""
    query = db.query(Transaction).filter(Transaction.user_id == user_id)

    if filters.start_date:
        query = query.filter(Transaction.date >= filters.start_date)
    if filters.end_date:
        query = query.filter(Transaction.date <= filters.end_date)
    if filters.category_id is not None:
        query = query.filter(Transaction.category_id == filters.category_id)
    if filters.type is not None:
        query = query.filter(Transaction.type == filters.type)

    total_count = query.count()
    items = (
        query.order_by(Transaction.date.desc(), Transaction.id.desc())
        .offset(filters.offset)
        .limit(filters.effective_page_size)
        .all()
    )
    return items, total_count


def get_transaction(db: Session, transaction_id: int, user_id: int):
    return (
        db.query(Transaction)
        .filter(Transaction.id == transaction_id, Transaction.user_id == user_id)
        .first()
    )


def create_transaction(db: Session, user_id: int, data) -> Transaction:
    transaction = Transaction(
        description=data.description,
        amount=data.amount,
        type=data.type,
        date=data.date,
        category_id=data.category_id,
        user_id=user_id,
    )
    db.add(transaction)
    db.commit()
    db.refresh(transaction)
    return transaction


def update_transaction(db: Session, transaction: Transaction, data) -> Transaction:
    transaction.description = data.description
    transaction.amount = data.amount
    transaction.type = data.type
    transaction.date = data.date
    transaction.category_id = data.category_id
    transaction.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(transaction)
    return transaction


def delete_transaction(db: Session, transaction: Transaction):
    db.delete(transaction)
    db.commit()


def list_expenses_for_users(db: Session, user_ids):
    """Expense transactions grouped by owner, for budget evaluation."""
    grouped = {user_id: [] for user_id in user_ids}
    if not grouped:
        return grouped
    rows = (
        db.query(Transaction)
        .filter(
            Transaction.user_id.in_(list(grouped)),
            Transaction.type == TransactionType.EXPENSE,
        )
        .all()
    )
    for row in rows:
        grouped[row.user_id].append(row)
    return grouped


def list_budget_transactions(db: Session, budget: Budget):
    """Expense transactions that can count toward ``budget``."""
    query = db.query(Transaction).filter(
        Transaction.user_id == budget.user_id,
        Transaction.category_id == budget.category_id,
        Transaction.type == TransactionType.EXPENSE,
        Transaction.date >= budget.start_date,
    )
    if budget.end_date is not None:
        query = query.filter(Transaction.date <= budget.end_date)
    return query.all()


# Categories


def list_categories(db: Session, user_id: int):
    return (
        db.query(Category)
        .filter(Category.user_id == user_id)
        .order_by(Category.name)
        .all()
    )


def get_category(db: Session, category_id: int, user_id: int):
    return (
        db.query(Category)
        .filter(Category.id == category_id, Category.user_id == user_id)
        .first()
    )


def create_category(db: Session, user_id: int, data, is_default=False) -> Category:
    category = Category(
        name=data.name,
        icon=data.icon,
        color=data.color,
        is_default=is_default,
        user_id=user_id,
    )
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def create_default_categories(db: Session, user_id: int):
    for name in config.DEFAULT_CATEGORIES:
        db.add(Category(name=name, is_default=True, user_id=user_id))
    db.commit()


def update_category(db: Session, category: Category, data) -> Category:
    category.name = data.name
    category.icon = data.icon
    category.color = data.color
    category.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(category)
    return category


def delete_category(db: Session, category: Category):
    """Delete a category, detaching its transactions and dropping its budgets."""
    db.query(Transaction).filter(Transaction.category_id == category.id).update(
        {Transaction.category_id: None}, synchronize_session=False
    )
    db.query(Budget).filter(Budget.category_id == category.id).delete(
        synchronize_session=False
    )
    db.delete(category)
    db.commit()


# Budgets


def list_budgets(db: Session, user_id: int):
    return (
        db.query(Budget)
        .filter(Budget.user_id == user_id)
        .order_by(Budget.start_date.desc(), Budget.id.desc())
        .all()
    )


def get_budget(db: Session, budget_id: int, user_id: int):
    return (
        db.query(Budget)
        .filter(Budget.id == budget_id, Budget.user_id == user_id)
        .first()
    )


def list_active_budgets(db: Session, today: date):
    """Budgets of every user whose spend window contains ``today``."""
    return (
        db.query(Budget)
        .filter(
            Budget.start_date <= today,
            or_(Budget.end_date.is_(None), Budget.end_date >= today),
        )
        .order_by(Budget.id)
        .all()
    )


def create_budget(db: Session, user_id: int, data) -> Budget:
    budget = Budget(
        name=data.name,
        amount=data.amount,
        period=data.period,
        start_date=data.start_date,
        end_date=data.end_date,
        category_id=data.category_id,
        user_id=user_id,
    )
    db.add(budget)
    db.commit()
    db.refresh(budget)
    return budget


def update_budget(db: Session, budget: Budget, data) -> Budget:
    budget.name = data.name
    budget.amount = data.amount
    budget.period = data.period
    budget.start_date = data.start_date
    budget.end_date = data.end_date
    budget.category_id = data.category_id
    budget.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(budget)
    return budget


def delete_budget(db: Session, budget: Budget):
    db.delete(budget)
    db.commit()
