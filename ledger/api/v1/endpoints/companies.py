from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ledger.api.deps import get_ledger_service, unwrap
from ledger.models.company import Company, CompanyCreate, CompanyUpdate
from ledger.models.transaction import TransactionType
from ledger.schemas.ledger import CompanyDeleteResponse, CompanyDetailResponse
from ledger.services.export_service import export_filename, export_transactions_csv
from ledger.services.ledger_service import LedgerService

router = APIRouter()


@router.get("", response_model=List[Company])
async def list_companies(service: LedgerService = Depends(get_ledger_service)):
    """List companies, sorted by name."""
    return await service.list_companies()


@router.post("", response_model=Company, status_code=status.HTTP_201_CREATED)
async def create_company(
    company_data: CompanyCreate,
    service: LedgerService = Depends(get_ledger_service)
):
    """Create a company."""
    return unwrap(await service.create_company(company_data))


@router.get("/{company_id}", response_model=CompanyDetailResponse)
async def get_company(
    company_id: str,
    type: Optional[TransactionType] = None,
    service: LedgerService = Depends(get_ledger_service)
):
    """Company with its balance status and transactions, newest first."""
    detail = await service.company_detail(company_id, type)
    if detail is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Company not found")
    return detail


@router.patch("/{company_id}", response_model=Company)
async def update_company(
    company_id: str,
    company_data: CompanyUpdate,
    service: LedgerService = Depends(get_ledger_service)
):
    """Update name, phone or address."""
    return unwrap(await service.update_company(company_id, company_data))


@router.delete("/{company_id}", response_model=CompanyDeleteResponse)
async def delete_company(
    company_id: str,
    service: LedgerService = Depends(get_ledger_service)
):
    """Delete a company and all of its transactions."""
    removed = unwrap(await service.delete_company(company_id))
    return CompanyDeleteResponse(deleted_transactions=removed)


@router.get("/{company_id}/export")
async def export_company_transactions(
    company_id: str,
    type: Optional[TransactionType] = None,
    service: LedgerService = Depends(get_ledger_service)
):
    """Download the company's transactions as CSV."""
    detail = await service.company_detail(company_id, type)
    if detail is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Company not found")

    filename = export_filename(detail.company.name)
    return Response(
        content=export_transactions_csv(detail.transactions),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )
