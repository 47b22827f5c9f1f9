from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ledger.api.deps import get_ledger_service, unwrap
from ledger.models.transaction import (
    Transaction,
    TransactionCreate,
    TransactionFilter,
    TransactionUpdate,
)
from ledger.services.export_service import export_filename, export_transactions_csv
from ledger.services.ledger_service import LedgerService

router = APIRouter()


@router.get("", response_model=List[Transaction])
async def list_transactions(
    filters: TransactionFilter = Depends(),
    service: LedgerService = Depends(get_ledger_service)
):
    """List transactions, newest first, with optional filters."""
    return await service.list_transactions(filters)


@router.post("", response_model=Transaction, status_code=status.HTTP_201_CREATED)
async def add_transaction(
    transaction_data: TransactionCreate,
    service: LedgerService = Depends(get_ledger_service)
):
    """Record a purchase or payment and update the company's totals."""
    return unwrap(await service.add_transaction(transaction_data))


@router.get("/export")
async def export_transactions(
    filters: TransactionFilter = Depends(),
    service: LedgerService = Depends(get_ledger_service)
):
    """Download transactions (all, or filtered) as CSV."""
    transactions = await service.list_transactions(filters)

    company_name = None
    if filters.company_id:
        company = await service.get_company(filters.company_id)
        company_name = company.name if company else None

    filename = export_filename(company_name)
    return Response(
        content=export_transactions_csv(transactions),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.get("/{transaction_id}", response_model=Transaction)
async def get_transaction(
    transaction_id: str,
    service: LedgerService = Depends(get_ledger_service)
):
    transaction = await service.get_transaction(transaction_id)
    if transaction is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    return transaction


@router.put("/{transaction_id}", response_model=Transaction)
async def update_transaction(
    transaction_id: str,
    transaction_data: TransactionUpdate,
    service: LedgerService = Depends(get_ledger_service)
):
    """Update a transaction; affected companies are recomputed."""
    return unwrap(await service.update_transaction(transaction_id, transaction_data))


@router.delete("/{transaction_id}")
async def delete_transaction(
    transaction_id: str,
    service: LedgerService = Depends(get_ledger_service)
):
    """Delete a transaction. The company is kept and recomputed."""
    unwrap(await service.delete_transaction(transaction_id))
    return {"success": True}
