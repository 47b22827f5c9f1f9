"""Field validation for companies, transactions, settings and bill payments.

Validators never raise for bad input. They return ``Ok(cleaned)`` or the
first ``ValidationError`` found, field by field in form order.
"""
import re
from decimal import Decimal
from typing import Iterable, Optional, Union

from ledger.core.result import Ok, ValidationError
from ledger.models.base import ZERO
from ledger.models.bill import BillPayment, BillPaymentCreate
from ledger.models.company import Company, CompanyCreate
from ledger.models.settings import UserSettingsUpdate
from ledger.models.transaction import TransactionCreate, TransactionType

PHONE_DIGITS = 10
_NON_DIGITS = re.compile(r"\D")


def normalize_phone(raw: Optional[str]) -> Optional[str]:
    """Strip everything but digits; blank input becomes None."""
    if raw is None or not raw.strip():
        return None
    return _NON_DIGITS.sub("", raw)


def name_key(name: str) -> str:
    """Comparison key for company-name uniqueness."""
    return " ".join(name.split()).lower()


def validate_company(
    data: CompanyCreate,
    existing_names: Iterable[str] = ()
) -> Union[Ok[CompanyCreate], ValidationError]:
    """
    Validate company form input.

    Rules:
    - name is required after trimming
    - phone, if given, must have exactly 10 digits once normalized
    - name must not match another company of the same owner
    """
    name = data.name.strip() if data.name else ""
    if not name:
        return ValidationError("name", "Company name is required", "required")

    phone = normalize_phone(data.phone)
    if phone is not None and len(phone) != PHONE_DIGITS:
        return ValidationError(
            "phone",
            f"Please enter a valid {PHONE_DIGITS}-digit phone number",
            "invalid_phone"
        )

    key = name_key(name)
    if any(name_key(existing) == key for existing in existing_names):
        return ValidationError("name", "Company with this name already exists", "already_exists")

    address = data.address.strip() if data.address else None
    return Ok(CompanyCreate(name=name, phone=phone, address=address or None))


def validate_transaction(
    data: TransactionCreate,
    company: Company,
    available_balance: Optional[Decimal] = None
) -> Union[Ok[TransactionCreate], ValidationError]:
    """
    Validate a transaction against the company it is recorded for.

    Rules:
    - amount is required and must be > 0
    - a payment must not exceed the company's remaining amount
      (available_balance overrides it, e.g. when editing an existing payment)
    - date is required
    - blank description becomes "{type} - {company name}"
    """
    if data.amount is None or data.amount <= ZERO:
        return ValidationError("amount", "Amount must be greater than 0", "invalid_amount")

    if data.type == TransactionType.PAYMENT:
        cap = company.remaining_amount if available_balance is None else available_balance
        if data.amount > cap:
            return ValidationError(
                "amount",
                f"Payment cannot exceed remaining amount of {cap}",
                "exceeds_balance"
            )

    if data.date is None:
        return ValidationError("date", "Date is required", "required")

    description = data.description.strip() if data.description else ""
    if not description:
        description = f"{data.type.value} - {company.name}"

    paid_by = data.paid_by.strip() if data.paid_by else None
    reference_number = data.reference_number.strip() if data.reference_number else None

    return Ok(data.model_copy(update={
        "description": description,
        "paid_by": paid_by or None,
        "reference_number": reference_number or None,
    }))


def validate_settings(data: UserSettingsUpdate) -> Union[Ok[UserSettingsUpdate], ValidationError]:
    """Both display names are required and must differ."""
    user1 = (data.user1_name or "").strip()
    user2 = (data.user2_name or "").strip()

    if not user1:
        return ValidationError("user1_name", "User 1 name is required", "required")
    if not user2:
        return ValidationError("user2_name", "User 2 name is required", "required")
    if user1.lower() == user2.lower():
        return ValidationError("user2_name", "User names must be different", "names_must_differ")

    return Ok(UserSettingsUpdate(user1_name=user1, user2_name=user2))


def validate_bill_payment(data: BillPaymentCreate) -> Union[Ok[BillPayment], ValidationError]:
    """
    Validate a bill payment record and derive its remaining amount.

    Rules:
    - company, bill description and reference number are required
    - total_amount > 0
    - 0 <= paid_amount <= total_amount
    - payment date is required
    """
    company = data.company.strip()
    if not company:
        return ValidationError("company", "Company name is required", "required")

    description = data.bill_description.strip()
    if not description:
        return ValidationError("bill_description", "Bill description is required", "required")

    if data.total_amount is None or data.total_amount <= ZERO:
        return ValidationError("total_amount", "Total amount must be greater than 0", "invalid_amount")

    if data.paid_amount is None or data.paid_amount < ZERO:
        return ValidationError("paid_amount", "Paid amount cannot be negative", "invalid_amount")

    if data.paid_amount > data.total_amount:
        return ValidationError("paid_amount", "Paid amount cannot exceed total amount", "exceeds_balance")

    if data.payment_date is None:
        return ValidationError("payment_date", "Payment date is required", "required")

    reference = data.reference_number.strip()
    if not reference:
        return ValidationError("reference_number", "Reference number is required", "required")

    return Ok(BillPayment(
        company=company,
        bill_description=description,
        total_amount=data.total_amount,
        paid_amount=data.paid_amount,
        remaining_amount=data.total_amount - data.paid_amount,
        payment_date=data.payment_date,
        payment_method=data.payment_method,
        reference_number=reference
    ))
