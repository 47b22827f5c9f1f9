"""
Transaction model - a purchase from or a payment to a company.

- company_name is a snapshot of the company's name when the transaction was
  recorded; renaming the company later does not touch it.
- date is the business date entered by the user, created_at is when the
  record was written. "Last transaction" ordering uses created_at.
"""

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ledger.models.base import Money, _utcnow, new_id


class TransactionType(str, Enum):
    PURCHASE = "purchase"
    PAYMENT = "payment"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    UPI = "upi"
    CHECK = "check"
    OTHER = "other"

    @property
    def label(self) -> str:
        return PAYMENT_METHOD_LABELS[self]


PAYMENT_METHOD_LABELS = {
    PaymentMethod.CASH: "Cash",
    PaymentMethod.CARD: "Credit/Debit Card",
    PaymentMethod.BANK_TRANSFER: "Bank Transfer",
    PaymentMethod.UPI: "UPI",
    PaymentMethod.CHECK: "Check",
    PaymentMethod.OTHER: "Other",
}


class TransactionCreate(BaseModel):
    """Transaction submission. Amount, date and description are checked by the validator."""
    company_id: str
    type: TransactionType = TransactionType.PURCHASE
    description: str = Field("", max_length=500)
    amount: Optional[Money] = None
    date: Optional[dt.date] = None
    payment_method: Optional[PaymentMethod] = None
    paid_by: Optional[str] = Field(None, max_length=100)
    reference_number: Optional[str] = Field(None, max_length=100)


class TransactionUpdate(BaseModel):
    """Full-record update; unset fields keep their stored value."""
    company_id: Optional[str] = None
    type: Optional[TransactionType] = None
    description: Optional[str] = Field(None, max_length=500)
    amount: Optional[Money] = None
    date: Optional[dt.date] = None
    payment_method: Optional[PaymentMethod] = None
    paid_by: Optional[str] = Field(None, max_length=100)
    reference_number: Optional[str] = Field(None, max_length=100)


class Transaction(BaseModel):
    """Stored transaction record."""
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str = Field(default_factory=new_id, validation_alias=AliasChoices("id", "_id"))
    owner_id: Optional[str] = None

    company_id: str
    company_name: str
    type: TransactionType
    description: str = ""
    amount: Money
    date: dt.date
    payment_method: Optional[PaymentMethod] = None
    paid_by: Optional[str] = None
    reference_number: Optional[str] = None

    created_at: dt.datetime = Field(default_factory=_utcnow)


class TransactionFilter(BaseModel):
    """Query filters for transaction lists and exports."""
    company_id: Optional[str] = None
    type: Optional[TransactionType] = None
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    payment_method: Optional[PaymentMethod] = None
    paid_by: Optional[str] = None
    search: Optional[str] = None

    def matches(self, transaction: Transaction) -> bool:
        if self.company_id and transaction.company_id != self.company_id:
            return False
        if self.type and transaction.type != self.type:
            return False
        if self.start_date and transaction.date < self.start_date:
            return False
        if self.end_date and transaction.date > self.end_date:
            return False
        if self.payment_method and transaction.payment_method != self.payment_method:
            return False
        if self.paid_by and transaction.paid_by != self.paid_by:
            return False
        if self.search:
            term = self.search.strip().lower()
            haystack = [
                transaction.description,
                transaction.company_name,
                transaction.reference_number or "",
                transaction.payment_method.label if transaction.payment_method else "",
            ]
            return any(term in value.lower() for value in haystack)
        return True
