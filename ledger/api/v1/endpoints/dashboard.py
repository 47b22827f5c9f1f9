from fastapi import APIRouter, Depends, Query

from ledger.api.deps import get_ledger_service
from ledger.schemas.ledger import DashboardResponse
from ledger.services.ledger_service import LedgerService

router = APIRouter()


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    recent: int = Query(5, ge=1, le=50, description="Number of recent transactions"),
    service: LedgerService = Depends(get_ledger_service)
):
    """Portfolio totals, companies you owe, and the latest transactions."""
    return await service.dashboard(recent_limit=recent)
