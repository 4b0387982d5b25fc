from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional

import config
import crud
import notifications
import reports
from budgeting import calculate_budget_status
from database import get_db, User, TransactionType
from schemas import (
    TransactionCreate,
    TransactionResponse,
    TransactionPage,
    CategoryCreate,
    CategoryResponse,
    BudgetCreate,
    BudgetResponse,
    BudgetStatusResponse,
    NotificationResponse,
    MonthlySummary,
    MonthlyReportResponse,
)
from auth import get_current_user


router = APIRouter()


def _require_category(db: Session, category_id: Optional[int], user_id: int):
    if category_id is None:
        return
    if crud.get_category(db, category_id, user_id) is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown category"
        )


# Transactions


@router.get("/transactions", response_model=TransactionPage)
async def list_transactions(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    category_id: Optional[int] = None,
    transaction_type: Optional[TransactionType] = Query(None, alias="type"),
    page: int = Query(1, ge=1),
    page_size: int = Query(config.DEFAULT_PAGE_SIZE, ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    filters = crud.TransactionFilter(
        start_date=start_date,
        end_date=end_date,
        category_id=category_id,
        type=transaction_type,
        page=page,
        page_size=page_size,
    )
    items, total_count = crud.list_transactions(db, current_user.id, filters)
    return TransactionPage(
        items=[TransactionResponse.model_validate(item) for item in items],
        total_count=total_count,
        page=page,
        page_size=filters.effective_page_size,
    )


@router.post(
    "/transactions",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_transaction(
    transaction: TransactionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _require_category(db, transaction.category_id, current_user.id)
    return crud.create_transaction(db, current_user.id, transaction)


@router.get("/transactions/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    transaction = crud.get_transaction(db, transaction_id, current_user.id)
    if not transaction:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return transaction


@router.put("/transactions/{transaction_id}", response_model=TransactionResponse)
async def update_transaction(
    transaction_id: int,
    data: TransactionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    transaction = crud.get_transaction(db, transaction_id, current_user.id)
    if not transaction:
        raise HTTPException(status_code=404, detail="Transaction not found")
    _require_category(db, data.category_id, current_user.id)
    return crud.update_transaction(db, transaction, data)


@router.delete("/transactions/{transaction_id}")
async def delete_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    transaction = crud.get_transaction(db, transaction_id, current_user.id)
    if not transaction:
        raise HTTPException(status_code=404, detail="Transaction not found")
    crud.delete_transaction(db, transaction)
    return {"message": "Transaction deleted successfully"}


# Categories


@router.get("/categories", response_model=list[CategoryResponse])
async def list_categories(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return crud.list_categories(db, current_user.id)


@router.post(
    "/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED
)
async def create_category(
    category: CategoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return crud.create_category(db, current_user.id, category)


@router.put("/categories/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    data: CategoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    category = crud.get_category(db, category_id, current_user.id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return crud.update_category(db, category, data)


@router.delete("/categories/{category_id}")
async def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    category = crud.get_category(db, category_id, current_user.id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    crud.delete_category(db, category)
    return {"message": "Category deleted successfully"}


# Budgets


@router.get("/budgets", response_model=list[BudgetResponse])
async def list_budgets(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return crud.list_budgets(db, current_user.id)


@router.post(
    "/budgets", response_model=BudgetResponse, status_code=status.HTTP_201_CREATED
)
async def create_budget(
    budget: BudgetCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _require_category(db, budget.category_id, current_user.id)
    return crud.create_budget(db, current_user.id, budget)


@router.get("/budgets/{budget_id}", response_model=BudgetResponse)
async def get_budget(
    budget_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    budget = crud.get_budget(db, budget_id, current_user.id)
    if not budget:
        raise HTTPException(status_code=404, detail="Budget not found")
    return budget


@router.get("/budgets/{budget_id}/status", response_model=BudgetStatusResponse)
async def get_budget_status(
    budget_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    budget = crud.get_budget(db, budget_id, current_user.id)
    if not budget:
        raise HTTPException(status_code=404, detail="Budget not found")
    result = calculate_budget_status(budget, crud.list_budget_transactions(db, budget))
    return BudgetStatusResponse(
        budget_id=budget.id,
        name=result.name,
        amount=result.amount,
        spent=result.spent,
        remaining=result.remaining,
        percentage_used=result.percentage_used,
    )


@router.put("/budgets/{budget_id}", response_model=BudgetResponse)
async def update_budget(
    budget_id: int,
    data: BudgetCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    budget = crud.get_budget(db, budget_id, current_user.id)
    if not budget:
        raise HTTPException(status_code=404, detail="Budget not found")
    _require_category(db, data.category_id, current_user.id)
    return crud.update_budget(db, budget, data)


@router.delete("/budgets/{budget_id}")
async def delete_budget(
    budget_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    budget = crud.get_budget(db, budget_id, current_user.id)
    if not budget:
        raise HTTPException(status_code=404, detail="Budget not found")
    crud.delete_budget(db, budget)
    return {"message": "Budget deleted successfully"}


# Notifications


@router.get("/notifications", response_model=list[NotificationResponse])
async def list_notifications(
    unread_only: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return notifications.list_notifications(db, current_user.id, unread_only)


@router.post(
    "/notifications/{notification_id}/read", response_model=NotificationResponse
)
async def mark_notification_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    notification = notifications.mark_read(db, notification_id, current_user.id)
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification


# Reports


@router.get("/reports", response_model=list[MonthlyReportResponse])
async def list_reports(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return reports.list_monthly_reports(db, current_user.id)


@router.get("/reports/monthly", response_model=MonthlySummary)
async def get_monthly_summary(
    year: Optional[int] = Query(None, ge=1900, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if year is None or month is None:
        year, month = reports.previous_month(config.today())
    return reports.build_monthly_summary(db, current_user.id, year, month)


@router.get("/export-report")
async def export_financial_report(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    csv_data = reports.build_transactions_csv(db, current_user.id)

    response = StreamingResponse(
        iter([csv_data]),
        media_type="text/csv",
        headers={
            "Content-Disposition": f"attachment; filename={current_user.username}_financial_report.csv"
        },
    )

    return response
