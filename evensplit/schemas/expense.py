from datetime import date as Date, datetime
from decimal import Decimal
from typing import List
from pydantic import BaseModel, ConfigDict, Field, model_validator

from evensplit.core.splits import PaymentMode, Share, SplitMode
from evensplit.core.validation import (
    SINGLE_PAYER_ROWS_ERROR, find_duplicate_participants, validate_payments, validate_splits,
)

class ShareInput(BaseModel):
    user_id: int
    amount: Decimal | None = None
    percentage: Decimal | None = Field(default=None, ge=0, le=100)

    def to_share(self) -> Share:
        return Share(self.user_id, self.amount, self.percentage)

class ExpenseBase(BaseModel):
    title: str = Field(min_length=1, max_length=256)
    amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    category: str | None = Field(default=None, max_length=100)
    description: str | None = None
    date: Date
    split_mode: SplitMode = SplitMode.EQUAL
    payment_mode: PaymentMode = PaymentMode.SINGLE
    splits: List[ShareInput] | None = None
    payments: List[ShareInput] | None = None

    @model_validator(mode="after")
    def check_shares(self):
        # Same rules the service applies after materializing, checked on the raw payload
        if self.splits:
            shares = [s.to_share() for s in self.splits]
            if find_duplicate_participants(shares):
                raise ValueError("Duplicate users found in splits")
            result = validate_splits(self.amount, shares, self.split_mode)
            if not result.is_valid:
                raise ValueError(result.error)

        if self.payments:
            shares = [p.to_share() for p in self.payments]
            if self.payment_mode is PaymentMode.SINGLE and len(shares) > 1:
                raise ValueError(SINGLE_PAYER_ROWS_ERROR)
            if find_duplicate_participants(shares):
                raise ValueError("Duplicate users found in payments")
            result = validate_payments(self.amount, shares, self.payment_mode)
            if not result.is_valid:
                raise ValueError(result.error)

        return self

class ExpenseCreate(ExpenseBase):
    group_id: int | None = None

class ExpenseUpdate(ExpenseBase):
    reason: str | None = Field(default=None, max_length=500)

class ShareOut(BaseModel):
    user_id: int
    amount: Decimal
    percentage: Decimal | None = None

    model_config = ConfigDict(from_attributes=True)

class ExpenseOut(BaseModel):
    id: int
    title: str
    amount: Decimal
    currency: str
    category: str | None = None
    description: str | None = None
    date: Date
    created_by: int
    group_id: int | None = None
    split_mode: SplitMode
    payment_mode: PaymentMode
    created_at: datetime | None = None
    updated_at: datetime | None = None
    splits: List[ShareOut] = []
    payments: List[ShareOut] = []

class HistoryOut(BaseModel):
    id: int
    change_type: str
    changed_by: int
    reason: str | None = None
    changes: List[str]
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

class CommentCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    comment: str = Field(min_length=1, max_length=1000)

class CommentOut(BaseModel):
    id: int
    expense_id: int
    user_id: int
    comment: str
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

class DebtOut(BaseModel):
    from_id: int
    to_id: int
    amount: Decimal

class ExpenseDetailOut(ExpenseOut):
    history: List[HistoryOut] = []
    comments: List[CommentOut] = []
    debts: List[DebtOut] = []
