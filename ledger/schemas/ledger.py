from typing import List

from pydantic import BaseModel, Field

from ledger.models.bill import CompanySummary
from ledger.models.company import Company
from ledger.models.transaction import Transaction
from ledger.services.balance import BalanceStatus, BillPortfolioTotals, PortfolioTotals


class CompanyWithStatus(Company):
    """Company plus its balance classification."""
    status: BalanceStatus


class CompanyDetailResponse(BaseModel):
    company: CompanyWithStatus
    transactions: List[Transaction] = Field(default_factory=list)


class DashboardResponse(BaseModel):
    totals: PortfolioTotals
    companies: List[CompanyWithStatus] = Field(default_factory=list)
    outstanding_companies: List[CompanyWithStatus] = Field(default_factory=list)
    recent_transactions: List[Transaction] = Field(default_factory=list)


class CompanyDeleteResponse(BaseModel):
    success: bool = True
    deleted_transactions: int = 0


class BillSummaryResponse(BaseModel):
    totals: BillPortfolioTotals
    companies: List[CompanySummary] = Field(default_factory=list)


class SessionResponse(BaseModel):
    authenticated: bool
    user_id: str | None = None
    email: str | None = None
