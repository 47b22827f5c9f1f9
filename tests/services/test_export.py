import csv
import datetime as dt
import io
from decimal import Decimal

from ledger.models.bill import BillPayment
from ledger.models.transaction import PaymentMethod, Transaction, TransactionType
from ledger.services.export_service import (
    BILL_PAYMENT_HEADERS,
    TRANSACTION_HEADERS,
    export_bill_payments_csv,
    export_filename,
    export_transactions_csv,
)


def sample_transactions():
    return [
        Transaction(
            company_id="c1",
            company_name="Acme",
            type=TransactionType.PURCHASE,
            description='Steel, "grade A"',
            amount=Decimal("1000"),
            date=dt.date(2024, 3, 1)
        ),
        Transaction(
            company_id="c1",
            company_name="Acme",
            type=TransactionType.PAYMENT,
            description="payment - Acme",
            amount=Decimal("12.5"),
            date=dt.date(2024, 3, 2),
            payment_method=PaymentMethod.BANK_TRANSFER,
            paid_by="User 1"
        ),
    ]


def test_transactions_csv_has_header_and_one_row_each():
    content = export_transactions_csv(sample_transactions())

    lines = content.splitlines()
    assert len(lines) == 3
    assert lines[0] == ",".join(f'"{h}"' for h in TRANSACTION_HEADERS)
    assert lines[1] == '"2024-03-01","purchase","Steel, ""grade A""",1000.00,"",""'
    assert lines[2] == '"2024-03-02","payment","payment - Acme",12.50,"bank_transfer","User 1"'


def test_transactions_csv_parses_back():
    rows = list(csv.reader(io.StringIO(export_transactions_csv(sample_transactions()))))

    assert rows[1][2] == 'Steel, "grade A"'
    assert rows[2][3] == "12.50"


def test_empty_export_is_header_only():
    assert export_transactions_csv([]).splitlines() == [",".join(f'"{h}"' for h in TRANSACTION_HEADERS)]


def test_bill_payments_csv_uses_method_label():
    bill = BillPayment(
        company="Acme",
        bill_description="March",
        total_amount=Decimal("100"),
        paid_amount=Decimal("40"),
        remaining_amount=Decimal("60"),
        payment_date=dt.date(2024, 3, 5),
        payment_method=PaymentMethod.CARD,
        reference_number="INV-9"
    )

    rows = list(csv.reader(io.StringIO(export_bill_payments_csv([bill]))))

    assert rows[0] == BILL_PAYMENT_HEADERS
    assert rows[1] == ["Acme", "March", "100.00", "40.00", "60.00", "2024-03-05", "Credit/Debit Card", "INV-9"]


def test_export_filenames():
    day = dt.date(2024, 3, 9)

    assert export_filename("Acme Supplies", day) == "Acme Supplies-transactions-2024-03-09.csv"
    assert export_filename(None, day) == "all-transactions-2024-03-09.csv"
    assert export_filename("A/B", day) == "A_B-transactions-2024-03-09.csv"
    assert export_filename("Acme", day, kind="payments") == "payments-Acme-2024-03-09.csv"


def test_line_breaks_do_not_split_rows():
    txn = Transaction(
        company_id="c1",
        company_name="Acme",
        type=TransactionType.PURCHASE,
        description="line1\nline2\r\nline3",
        amount=Decimal("5"),
        date=dt.date(2024, 3, 1),
        paid_by="User\n1"
    )

    lines = export_transactions_csv([txn]).splitlines()

    assert len(lines) == 2
    assert lines[1] == '"2024-03-01","purchase","line1 line2 line3",5.00,"","User 1"'
