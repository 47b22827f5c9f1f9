from fastapi import APIRouter
from ledger.api.v1.endpoints import auth, bills, companies, dashboard, settings, transactions


def build_api_router(include_auth: bool) -> APIRouter:
    api_router = APIRouter()

    if include_auth:
        api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
    api_router.include_router(companies.router, prefix="/companies", tags=["companies"])
    api_router.include_router(transactions.router, prefix="/transactions", tags=["transactions"])
    api_router.include_router(settings.router, prefix="/settings", tags=["settings"])
    api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
    api_router.include_router(bills.router, prefix="/bills", tags=["bills"])
    return api_router
