from fastapi import APIRouter, Depends

from ledger.api.deps import get_ledger_service, unwrap
from ledger.models.settings import UserSettings, UserSettingsUpdate
from ledger.services.ledger_service import LedgerService

router = APIRouter()


@router.get("", response_model=UserSettings)
async def get_user_settings(service: LedgerService = Depends(get_ledger_service)):
    """Paid-by display names; defaults until saved once."""
    return await service.get_settings()


@router.put("", response_model=UserSettings)
async def save_user_settings(
    settings_data: UserSettingsUpdate,
    service: LedgerService = Depends(get_ledger_service)
):
    return unwrap(await service.save_settings(settings_data))
