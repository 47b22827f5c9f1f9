"""
MongoLedgerStore - per-user ledger in MongoDB.

Collections:
- companies:      one document per company, unique (owner_id, name_key)
- transactions:   one document per transaction, indexed by (owner_id, company_id)
- user_settings:  one document per owner

Every query carries owner_id, so a store instance only ever sees the records
of the user it was built for. Amounts are stored as Decimal128, business
dates as ISO strings (BSON has no date-only type).
"""

import datetime as dt
import functools
import logging
from contextlib import asynccontextmanager
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from bson import Decimal128
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError, PyMongoError

from ledger.models.base import _utcnow
from ledger.models.company import Company
from ledger.models.settings import UserSettings
from ledger.models.transaction import Transaction
from ledger.repositories.base import DuplicateRecordError, LedgerStore, StoreError
from ledger.services.validation import name_key

logger = logging.getLogger(__name__)


def _encode(value: Any) -> Any:
    """Convert a model value to something BSON can store."""
    if isinstance(value, Decimal):
        return Decimal128(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dt.datetime):
        return value
    if isinstance(value, dt.date):
        return value.isoformat()
    return value


def _to_doc(values: Dict[str, Any]) -> Dict[str, Any]:
    doc = {key: _encode(value) for key, value in values.items()}
    if "id" in doc:
        doc["_id"] = doc.pop("id")
    return doc


def _mongo_errors(func):
    """Wrap driver failures into StoreError."""
    @functools.wraps(func)
    async def wrapper(self, *args, **kwargs):
        try:
            return await func(self, *args, **kwargs)
        except DuplicateKeyError as exc:
            raise DuplicateRecordError(str(exc)) from exc
        except PyMongoError as exc:
            logger.error("MongoDB operation %s failed: %s", func.__name__, exc)
            raise StoreError(str(exc)) from exc
    return wrapper


class MongoLedgerStore(LedgerStore):
    """Ledger store scoped to one owner."""

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        owner_id: str,
        use_transactions: bool = False
    ):
        self.db = db
        self.owner_id = owner_id
        self.use_transactions = use_transactions
        self.companies = db["companies"]
        self.transactions = db["transactions"]
        self.settings = db["user_settings"]
        self._session = None

    def _scoped(self, **filters) -> Dict[str, Any]:
        return {"owner_id": self.owner_id, **filters}

    # ===== COMPANIES =====

    @_mongo_errors
    async def list_companies(self) -> List[Company]:
        cursor = self.companies.find(self._scoped(), session=self._session).sort("name", 1)
        docs = await cursor.to_list(None)
        return [Company.model_validate(doc) for doc in docs]

    @_mongo_errors
    async def get_company(self, company_id: str) -> Optional[Company]:
        doc = await self.companies.find_one(self._scoped(_id=company_id), session=self._session)
        if doc:
            return Company.model_validate(doc)
        return None

    @_mongo_errors
    async def add_company(self, company: Company) -> str:
        doc = _to_doc(company.model_dump())
        doc["owner_id"] = self.owner_id
        doc["name_key"] = name_key(company.name)
        result = await self.companies.insert_one(doc, session=self._session)
        return str(result.inserted_id)

    @_mongo_errors
    async def update_company(self, company_id: str, updates: Dict[str, Any]) -> bool:
        changes = _to_doc({k: v for k, v in updates.items() if k not in ("id", "created_at", "owner_id")})
        if "name" in changes:
            changes["name_key"] = name_key(changes["name"])
        changes["updated_at"] = _utcnow()

        result = await self.companies.update_one(
            self._scoped(_id=company_id),
            {"$set": changes},
            session=self._session
        )
        return result.matched_count > 0

    @_mongo_errors
    async def delete_company(self, company_id: str) -> Optional[int]:
        company = await self.companies.find_one(self._scoped(_id=company_id), session=self._session)
        if not company:
            return None

        removed = await self.transactions.delete_many(
            self._scoped(company_id=company_id),
            session=self._session
        )
        await self.companies.delete_one(self._scoped(_id=company_id), session=self._session)
        return removed.deleted_count

    # ===== TRANSACTIONS =====

    @_mongo_errors
    async def list_transactions(self, company_id: Optional[str] = None) -> List[Transaction]:
        query = self._scoped(company_id=company_id) if company_id else self._scoped()
        cursor = self.transactions.find(query, session=self._session).sort("created_at", -1)
        docs = await cursor.to_list(None)
        return [Transaction.model_validate(doc) for doc in docs]

    @_mongo_errors
    async def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        doc = await self.transactions.find_one(self._scoped(_id=transaction_id), session=self._session)
        if doc:
            return Transaction.model_validate(doc)
        return None

    @_mongo_errors
    async def add_transaction(self, transaction: Transaction) -> str:
        doc = _to_doc(transaction.model_dump())
        doc["owner_id"] = self.owner_id
        result = await self.transactions.insert_one(doc, session=self._session)
        return str(result.inserted_id)

    @_mongo_errors
    async def update_transaction(self, transaction_id: str, updates: Dict[str, Any]) -> bool:
        changes = _to_doc({k: v for k, v in updates.items() if k not in ("id", "created_at", "owner_id")})
        if not changes:
            return await self.get_transaction(transaction_id) is not None

        result = await self.transactions.update_one(
            self._scoped(_id=transaction_id),
            {"$set": changes},
            session=self._session
        )
        return result.matched_count > 0

    @_mongo_errors
    async def delete_transaction(self, transaction_id: str) -> bool:
        result = await self.transactions.delete_one(
            self._scoped(_id=transaction_id),
            session=self._session
        )
        return result.deleted_count > 0

    # ===== SETTINGS =====

    @_mongo_errors
    async def get_settings(self) -> Optional[UserSettings]:
        doc = await self.settings.find_one(self._scoped(), session=self._session)
        if doc:
            return UserSettings.model_validate(doc)
        return None

    @_mongo_errors
    async def save_settings(self, settings: UserSettings) -> None:
        doc = _to_doc(settings.model_dump())
        doc["owner_id"] = self.owner_id
        doc["updated_at"] = _utcnow()
        await self.settings.update_one(
            self._scoped(),
            {"$set": doc, "$setOnInsert": {"created_at": _utcnow()}},
            upsert=True,
            session=self._session
        )

    # ===== UNIT OF WORK =====

    @asynccontextmanager
    async def atomic(self):
        """
        Run the enclosed writes in one multi-document transaction.

        Without transactions enabled (standalone server) the writes simply run
        in order.
        """
        if not self.use_transactions or self._session is not None:
            yield self
            return

        try:
            async with await self.db.client.start_session() as session:
                async with session.start_transaction():
                    self._session = session
                    try:
                        yield self
                    finally:
                        self._session = None
        except DuplicateKeyError as exc:
            raise DuplicateRecordError(str(exc)) from exc
        except PyMongoError as exc:
            logger.error("MongoDB transaction aborted: %s", exc)
            raise StoreError(str(exc)) from exc
