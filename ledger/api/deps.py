from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials

from ledger.core.auth import NotAuthenticatedError, resolve_user, security
from ledger.core.config import Settings
from ledger.core.result import NotFound, Ok, Result, StorageError, ValidationError
from ledger.db.mongo import get_db
from ledger.models.settings import UserSettings
from ledger.repositories.base import LedgerStore
from ledger.repositories.local_store import LocalStoreAdapter
from ledger.repositories.mongo_store import MongoLedgerStore
from ledger.services.ledger_service import LedgerService

STORAGE_ERROR_DETAIL = "Failed to save changes. Please try again."


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_ledger_store(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> LedgerStore:
    """
    Store for the current request.

    Local backend: the application's shared JSON store, no login needed.
    Mongo backend: a store scoped to the signed-in user.
    """
    settings = get_settings(request)
    if settings.STORAGE_BACKEND == "local":
        return LocalStoreAdapter(request.app.state.local_store)

    db = get_db(request)
    user = await resolve_user(credentials, db, settings)
    if user is None:
        raise NotAuthenticatedError()
    return MongoLedgerStore(db, user.id, settings.MONGODB_USE_TRANSACTIONS)


def get_ledger_service(
    request: Request,
    store: LedgerStore = Depends(get_ledger_store)
) -> LedgerService:
    settings = get_settings(request)
    defaults = UserSettings(
        user1_name=settings.DEFAULT_USER1_NAME,
        user2_name=settings.DEFAULT_USER2_NAME
    )
    return LedgerService(store, default_settings=defaults)


def unwrap(result: Result):
    """Return the value of an Ok result or raise the matching HTTP error."""
    if isinstance(result, Ok):
        return result.value

    if isinstance(result, ValidationError):
        code = (
            status.HTTP_409_CONFLICT
            if result.code == "already_exists"
            else status.HTTP_422_UNPROCESSABLE_ENTITY
        )
        raise HTTPException(status_code=code, detail=result.to_dict())

    if isinstance(result, NotFound):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=result.message)

    if isinstance(result, StorageError):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=STORAGE_ERROR_DETAIL
        )

    raise TypeError(f"Unexpected result: {result!r}")
