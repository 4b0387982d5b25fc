from pydantic import BaseModel, constr, condecimal, field_validator, model_validator
import datetime as dt
from decimal import Decimal
from typing import Optional

import config
from database import TransactionType, BudgetPeriod


class UserBase(BaseModel):
    username: constr(min_length=3, max_length=50)


class UserCreate(UserBase):
    password: constr(min_length=6)


class UserLogin(UserBase):
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class TransactionBase(BaseModel):
    description: constr(strip_whitespace=True, min_length=1, max_length=500)
    amount: condecimal(gt=0, decimal_places=2)
    type: TransactionType
    date: dt.date
    category_id: Optional[int] = None


class TransactionCreate(TransactionBase):
    @field_validator("date")
    @classmethod
    def not_in_future(cls, value):
        if value > config.today() + dt.timedelta(days=1):
            raise ValueError("Transaction date cannot be more than one day in the future")
        return value


class TransactionResponse(TransactionBase):
    id: int
    user_id: int
    created_at: dt.datetime
    updated_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True


class TransactionPage(BaseModel):
    items: list[TransactionResponse]
    total_count: int
    page: int
    page_size: int


class CategoryCreate(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=100)
    icon: Optional[constr(max_length=50)] = None
    color: Optional[constr(max_length=20)] = None


class CategoryResponse(CategoryCreate):
    id: int
    user_id: int
    is_default: bool
    created_at: dt.datetime
    updated_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True


class BudgetCreate(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=100)
    amount: condecimal(gt=0, decimal_places=2)
    period: BudgetPeriod
    start_date: dt.date
    end_date: Optional[dt.date] = None
    category_id: int

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_date is not None and self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class BudgetResponse(BudgetCreate):
    id: int
    user_id: int
    created_at: dt.datetime
    updated_at: Optional[dt.datetime] = None
    last_alerted_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True


class BudgetStatusResponse(BaseModel):
    budget_id: int
    name: str
    amount: Decimal
    spent: Decimal
    remaining: Decimal
    percentage_used: float


class NotificationResponse(BaseModel):
    id: int
    budget_name: str
    percentage_used: float
    message: str
    is_read: bool
    created_at: dt.datetime

    class Config:
        from_attributes = True


class CategoryTotal(BaseModel):
    category: str
    type: TransactionType
    total: Decimal


class MonthlySummary(BaseModel):
    period: str
    total_income: Decimal
    total_expenses: Decimal
    net: Decimal
    by_category: list[CategoryTotal]


class MonthlyReportResponse(BaseModel):
    id: int
    period: str
    total_income: Decimal
    total_expenses: Decimal
    generated_at: dt.datetime

    class Config:
        from_attributes = True
