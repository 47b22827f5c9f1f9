"""
Company model - a counterparty you buy from and pay.

Totals are derived, never edited directly:
- total_bought = sum of purchase amounts
- total_paid = sum of payment amounts
- remaining_amount = total_bought - total_paid
  (> 0 you owe them, < 0 they owe you, == 0 settled)
"""

import datetime as dt
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ledger.models.base import Money, ZERO, _utcnow, new_id


class CompanyBase(BaseModel):
    """Base company schema."""
    name: str = Field("", max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = Field(None, max_length=300)


class CompanyCreate(CompanyBase):
    """Company creation schema."""
    pass


class CompanyUpdate(BaseModel):
    """Company update schema. Totals are not editable."""
    name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = Field(None, max_length=300)


class Company(CompanyBase):
    """Stored company record."""
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str = Field(default_factory=new_id, validation_alias=AliasChoices("id", "_id"))
    owner_id: Optional[str] = None

    total_bought: Money = ZERO
    total_paid: Money = ZERO
    remaining_amount: Money = ZERO
    last_transaction_date: Optional[dt.date] = None

    created_at: dt.datetime = Field(default_factory=_utcnow)
    updated_at: dt.datetime = Field(default_factory=_utcnow)

    def is_settled(self) -> bool:
        return self.remaining_amount == ZERO
