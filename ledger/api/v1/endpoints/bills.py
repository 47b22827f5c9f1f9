"""Stateless summaries and CSV export for name-keyed bill payments."""
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Response, status

from ledger.core.result import Ok
from ledger.models.bill import BillPayment, BillPaymentCreate
from ledger.schemas.ledger import BillSummaryResponse
from ledger.services.balance import bill_portfolio_totals, summarize_by_company_name
from ledger.services.export_service import export_bill_payments_csv, export_filename
from ledger.services.validation import validate_bill_payment

router = APIRouter()


def _validated(bills: List[BillPaymentCreate]) -> List[BillPayment]:
    validated = []
    for index, bill in enumerate(bills):
        result = validate_bill_payment(bill)
        if not isinstance(result, Ok):
            detail = result.to_dict()
            detail["index"] = index
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)
        validated.append(result.value)
    return validated


@router.post("/summary", response_model=BillSummaryResponse)
async def summarize_bills(bills: List[BillPaymentCreate]):
    """Group bill payments by company name."""
    summaries = summarize_by_company_name(_validated(bills))
    return BillSummaryResponse(
        totals=bill_portfolio_totals(summaries),
        companies=summaries
    )


@router.post("/export")
async def export_bills(bills: List[BillPaymentCreate], company: Optional[str] = None):
    """Bill payments as CSV, optionally only one company's."""
    validated = _validated(bills)
    if company:
        validated = [b for b in validated if b.company == company]

    filename = export_filename(company, kind="payments")
    return Response(
        content=export_bill_payments_csv(validated),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )
