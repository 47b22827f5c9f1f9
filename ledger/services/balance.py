"""
Balance aggregation - per-company and portfolio totals.

Core algorithm (per company):
1. Keep only the transactions that belong to the company
2. Sum purchases into total_bought, payments into total_paid
3. remaining_amount = total_bought - total_paid
4. last_transaction_date = business date of the most recently created
   transaction (created_at, ties broken by id)

Everything here is pure: no store access, no side effects. Callers persist
the returned totals. Amounts are Decimal throughout so repeated additions do
not drift.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel

from ledger.models.base import ZERO
from ledger.models.bill import BillPayment, CompanySummary
from ledger.models.company import Company
from ledger.models.transaction import Transaction, TransactionType


class BalanceStatus(str, Enum):
    YOU_OWE = "you_owe"
    THEY_OWE_YOU = "they_owe_you"
    SETTLED = "settled"


class CompanyTotals(BaseModel):
    total_bought: Decimal = ZERO
    total_paid: Decimal = ZERO
    remaining_amount: Decimal = ZERO
    last_transaction_date: Optional[dt.date] = None


class PortfolioTotals(BaseModel):
    total_outstanding: Decimal = ZERO
    total_receivable: Decimal = ZERO
    total_bought_all: Decimal = ZERO
    total_paid_all: Decimal = ZERO
    company_count: int = 0


class BillPortfolioTotals(BaseModel):
    total_amount: Decimal = ZERO
    total_paid: Decimal = ZERO
    total_outstanding: Decimal = ZERO
    total_bills: int = 0
    company_count: int = 0


def recompute_company_totals(
    company_id: str,
    transactions: Iterable[Transaction]
) -> CompanyTotals:
    """
    Derive a company's totals from its full, all-time transaction set.

    Transactions for other companies are ignored, so callers may pass an
    unfiltered list.
    """
    total_bought = ZERO
    total_paid = ZERO
    latest: Optional[Transaction] = None

    for txn in transactions:
        if txn.company_id != company_id:
            continue

        if txn.type == TransactionType.PURCHASE:
            total_bought += txn.amount
        else:
            total_paid += txn.amount

        if latest is None or (txn.created_at, txn.id) > (latest.created_at, latest.id):
            latest = txn

    return CompanyTotals(
        total_bought=total_bought,
        total_paid=total_paid,
        remaining_amount=total_bought - total_paid,
        last_transaction_date=latest.date if latest else None
    )


def balance_status(remaining_amount: Decimal) -> BalanceStatus:
    """Classify a signed balance."""
    if remaining_amount > ZERO:
        return BalanceStatus.YOU_OWE
    if remaining_amount < ZERO:
        return BalanceStatus.THEY_OWE_YOU
    return BalanceStatus.SETTLED


def portfolio_totals(companies: Iterable[Company]) -> PortfolioTotals:
    """
    Cross-company totals.

    total_outstanding only counts companies you owe; credit balances (they
    owe you) go to total_receivable instead of offsetting it.
    """
    totals = PortfolioTotals()
    for company in companies:
        totals.company_count += 1
        totals.total_bought_all += company.total_bought
        totals.total_paid_all += company.total_paid
        if company.remaining_amount > ZERO:
            totals.total_outstanding += company.remaining_amount
        elif company.remaining_amount < ZERO:
            totals.total_receivable += -company.remaining_amount
    return totals


def outstanding_companies(companies: Iterable[Company]) -> List[Company]:
    """Companies you still owe, largest balance first."""
    owed = [c for c in companies if c.remaining_amount > ZERO]
    return sorted(owed, key=lambda c: (-c.remaining_amount, c.name.lower()))


def recent_transactions(transactions: Iterable[Transaction], limit: int = 5) -> List[Transaction]:
    """Newest transactions by record creation time."""
    ordered = sorted(transactions, key=lambda t: (t.created_at, t.id), reverse=True)
    return ordered[:limit]


# ===== NAME-KEYED BILL VARIANT =====

def summarize_by_company_name(bill_payments: Iterable[BillPayment]) -> List[CompanySummary]:
    """
    Group bill payments by their bare company name.

    total_remaining is the signed sum per company. Same-named companies are
    merged, which is why the id-keyed path is preferred for new data.
    """
    summaries: Dict[str, CompanySummary] = {}

    for bill in bill_payments:
        summary = summaries.get(bill.company)
        if summary is None:
            summary = CompanySummary(company=bill.company)
            summaries[bill.company] = summary

        summary.total_bills += 1
        summary.total_amount += bill.total_amount
        summary.total_paid += bill.paid_amount
        summary.total_remaining += bill.remaining_amount
        summary.transactions.append(bill)

        if summary.last_payment_date is None or bill.payment_date > summary.last_payment_date:
            summary.last_payment_date = bill.payment_date

    for summary in summaries.values():
        summary.transactions.sort(key=lambda b: (b.payment_date, b.created_at), reverse=True)

    return sorted(summaries.values(), key=lambda s: s.company.lower())


def bill_portfolio_totals(summaries: Iterable[CompanySummary]) -> BillPortfolioTotals:
    """Portfolio totals for bill summaries; outstanding is clamped at zero per company."""
    totals = BillPortfolioTotals()
    for summary in summaries:
        totals.company_count += 1
        totals.total_bills += summary.total_bills
        totals.total_amount += summary.total_amount
        totals.total_paid += summary.total_paid
        totals.total_outstanding += max(ZERO, summary.total_remaining)
    return totals
