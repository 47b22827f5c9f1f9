"""CSV export for transaction lists and bill payments."""
import csv
import datetime as dt
import io
import re
from typing import Iterable, Optional

from ledger.models.bill import BillPayment
from ledger.models.transaction import Transaction

TRANSACTION_HEADERS = ["Date", "Type", "Description", "Amount", "Payment Method", "Paid By"]
BILL_PAYMENT_HEADERS = [
    "Company",
    "Bill Description",
    "Total Amount",
    "Paid Amount",
    "Remaining Amount",
    "Payment Date",
    "Payment Method",
    "Reference Number",
]

_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\r\n]+')
_LINE_BREAKS = re.compile(r"[\r\n]+")


def _single_line(value: str) -> str:
    """One CSV record per physical line."""
    return _LINE_BREAKS.sub(" ", value)


def _writer(buffer: io.StringIO):
    # Strings are quoted; Decimal amounts count as numbers and are written bare
    return csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")


def export_transactions_csv(transactions: Iterable[Transaction]) -> str:
    """One header row plus one row per transaction, amounts with two decimals."""
    buffer = io.StringIO()
    writer = _writer(buffer)
    writer.writerow(TRANSACTION_HEADERS)
    for txn in transactions:
        writer.writerow([
            txn.date.isoformat(),
            txn.type.value,
            _single_line(txn.description),
            txn.amount,
            txn.payment_method.value if txn.payment_method else "",
            _single_line(txn.paid_by or ""),
        ])
    return buffer.getvalue()


def export_bill_payments_csv(bill_payments: Iterable[BillPayment]) -> str:
    buffer = io.StringIO()
    writer = _writer(buffer)
    writer.writerow(BILL_PAYMENT_HEADERS)
    for bill in bill_payments:
        writer.writerow([
            _single_line(bill.company),
            _single_line(bill.bill_description),
            bill.total_amount,
            bill.paid_amount,
            bill.remaining_amount,
            bill.payment_date.isoformat(),
            bill.payment_method.label,
            _single_line(bill.reference_number),
        ])
    return buffer.getvalue()


def export_filename(
    company_name: Optional[str] = None,
    on_date: Optional[dt.date] = None,
    kind: str = "transactions"
) -> str:
    """
    Download name for an export.

    transactions: "{company}-transactions-{YYYY-MM-DD}.csv" ("all" without a company)
    payments:     "payments-{company}-{YYYY-MM-DD}.csv"
    """
    on_date = on_date or dt.date.today()
    label = _UNSAFE_FILENAME_CHARS.sub("_", company_name.strip()) if company_name else "all"
    if kind == "payments":
        return f"payments-{label}-{on_date.isoformat()}.csv"
    return f"{label}-transactions-{on_date.isoformat()}.csv"
