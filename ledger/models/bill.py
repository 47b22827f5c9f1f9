"""
Bill payment records - the name-keyed variant of the ledger.

Each record carries the company as a bare name string together with a bill
total and what has been paid against it. Summaries group these by name, so
two different companies sharing a display name end up merged; the id-keyed
Company/Transaction path does not have that problem.
"""

import datetime as dt
from decimal import Decimal
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ledger.models.base import Money, ZERO, _utcnow, new_id
from ledger.models.transaction import PaymentMethod


class BillPaymentCreate(BaseModel):
    company: str = ""
    bill_description: str = ""
    total_amount: Optional[Money] = None
    paid_amount: Optional[Money] = None
    payment_date: Optional[dt.date] = None
    payment_method: PaymentMethod = PaymentMethod.CASH
    reference_number: str = ""


class BillPayment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_id, validation_alias=AliasChoices("id", "_id"))
    company: str
    bill_description: str
    total_amount: Money
    paid_amount: Money = ZERO
    remaining_amount: Money = ZERO
    payment_date: dt.date
    payment_method: PaymentMethod = PaymentMethod.CASH
    reference_number: str = ""
    created_at: dt.datetime = Field(default_factory=_utcnow)


class CompanySummary(BaseModel):
    """Per-name rollup of bill payments. total_remaining is signed."""
    company: str
    total_bills: int = 0
    total_amount: Decimal = ZERO
    total_paid: Decimal = ZERO
    total_remaining: Decimal = ZERO
    last_payment_date: Optional[dt.date] = None
    transactions: List[BillPayment] = Field(default_factory=list)
