from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

MAX_AMOUNT = 99_999_999


def _strip_required(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


class AccountBase(BaseModel):
    description: str = Field(max_length=500)
    amount: float = Field(gt=0, le=MAX_AMOUNT)
    due_date: date
    payment_method: Optional[str] = Field(None, max_length=100)
    category: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = Field(None, max_length=1000)
    document_number: Optional[str] = Field(None, max_length=100)

    @field_validator("description")
    @classmethod
    def _strip_description(cls, value: str) -> str:
        return _strip_required(value)

    @field_validator("payment_method", "category", "notes", "document_number", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class AccountPayableWrite(AccountBase):
    supplier: Optional[str] = Field(None, max_length=255)
    status: Literal["pending", "paid"] = "pending"
    paid_date: Optional[date] = None
    paid_amount: Optional[float] = Field(None, gt=0, le=MAX_AMOUNT)

    @model_validator(mode="after")
    def _paid_requires_method(self):
        if self.status == "paid" and not self.payment_method:
            raise ValueError("payment_method is required when status is paid")
        return self


class AccountReceivableWrite(AccountBase):
    customer: Optional[str] = Field(None, max_length=255)
    payment_method: str = Field(min_length=1, max_length=100)
    status: Literal["pending", "received"] = "pending"
    received_date: Optional[date] = None
    received_amount: Optional[float] = Field(None, gt=0, le=MAX_AMOUNT)


class AccountPayableRead(BaseModel):
    id: int
    description: str
    amount: float
    due_date: date
    supplier: Optional[str]
    payment_method: Optional[str]
    category: Optional[str]
    notes: Optional[str]
    document_number: Optional[str]
    status: str
    paid_date: Optional[date]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AccountReceivableRead(BaseModel):
    id: int
    description: str
    amount: float
    due_date: date
    customer: Optional[str]
    payment_method: Optional[str]
    category: Optional[str]
    notes: Optional[str]
    document_number: Optional[str]
    status: str
    received_date: Optional[date]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SettleRequest(BaseModel):
    payment_method: str = Field(min_length=1, max_length=100)
    amount: float = Field(gt=0, le=MAX_AMOUNT)
    settled_on: Optional[date] = None


class CashFlowWrite(BaseModel):
    type: Literal["income", "expense"]
    description: str = Field(max_length=500)
    amount: float = Field(gt=0, le=MAX_AMOUNT)
    date: date
    category: Optional[str] = Field(None, max_length=100)
    payment_method: Optional[str] = Field(None, max_length=100)

    @field_validator("description")
    @classmethod
    def _strip_description(cls, value: str) -> str:
        return _strip_required(value)


class CashFlowRead(BaseModel):
    id: int
    type: str
    description: str
    amount: float
    date: date
    category: Optional[str]
    payment_method: Optional[str]
    reference_id: Optional[int]
    reference_type: Optional[str]

    model_config = ConfigDict(from_attributes=True)


class CategoryWrite(BaseModel):
    name: str = Field(max_length=100)
    type: Literal["expense", "income"]
    description: Optional[str] = Field(None, max_length=500)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        return _strip_required(value)


class CategoryRead(BaseModel):
    id: int
    name: str
    type: str
    description: Optional[str]

    model_config = ConfigDict(from_attributes=True)
