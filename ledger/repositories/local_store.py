"""
LocalLedgerStore - the whole ledger as one JSON document on disk.

Layout of the document:
{
    "ledger_companies": [ {...}, ... ],
    "ledger_transactions": [ {...}, ... ],
    "ledger_settings": {...} | null
}

Records are kept in flat lists with no indices; lookups are linear scans.
The store is synchronous. LocalStoreAdapter exposes it through the async
LedgerStore interface for the service layer.
"""

import copy
import json
import logging
import os
from contextlib import asynccontextmanager, contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from ledger.models.base import _utcnow
from ledger.models.company import Company
from ledger.models.settings import UserSettings
from ledger.models.transaction import Transaction
from ledger.repositories.base import LedgerStore, StoreError

logger = logging.getLogger(__name__)

COMPANIES_KEY = "ledger_companies"
TRANSACTIONS_KEY = "ledger_transactions"
SETTINGS_KEY = "ledger_settings"


def _empty_document() -> Dict[str, Any]:
    return {COMPANIES_KEY: [], TRANSACTIONS_KEY: [], SETTINGS_KEY: None}


class LocalLedgerStore:
    """Synchronous JSON-file store."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        # Working copy while inside transaction(); None otherwise
        self._pending: Optional[Dict[str, Any]] = None

    # ===== DOCUMENT I/O =====

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return _empty_document()
        try:
            with self.path.open(encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreError(f"Failed to load ledger from {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StoreError(f"Failed to load ledger from {self.path}: root is not an object")

        document = _empty_document()
        document.update(data)
        return document

    def _write(self, document: Dict[str, Any]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as exc:
            raise StoreError(f"Failed to save ledger to {self.path}: {exc}") from exc

    def _load(self) -> Dict[str, Any]:
        if self._pending is not None:
            return self._pending
        return self._read()

    def _save(self, document: Dict[str, Any]) -> None:
        # Inside transaction() the working copy is flushed on exit
        if self._pending is not None:
            self._pending = document
            return
        self._write(document)

    @contextmanager
    def transaction(self) -> Iterator["LocalLedgerStore"]:
        """
        Buffer every write in a working copy and flush it once.

        If the block raises, the working copy is dropped and the file on disk
        is left as it was. Nested calls join the outer transaction.
        """
        if self._pending is not None:
            yield self
            return

        self._pending = copy.deepcopy(self._read())
        try:
            yield self
            document = self._pending
        finally:
            self._pending = None
        self._write(document)

    # ===== COMPANIES =====

    def list_companies(self) -> List[Company]:
        return [Company.model_validate(doc) for doc in self._load()[COMPANIES_KEY]]

    def get_company(self, company_id: str) -> Optional[Company]:
        for doc in self._load()[COMPANIES_KEY]:
            if doc["id"] == company_id:
                return Company.model_validate(doc)
        return None

    def add_company(self, company: Company) -> str:
        document = self._load()
        document[COMPANIES_KEY].append(company.model_dump(mode="json"))
        self._save(document)
        return company.id

    def update_company(self, company_id: str, updates: Dict[str, Any]) -> bool:
        document = self._load()
        for index, doc in enumerate(document[COMPANIES_KEY]):
            if doc["id"] != company_id:
                continue
            company = Company.model_validate(doc)
            changes = dict(updates, updated_at=_utcnow())
            changes.pop("id", None)
            changes.pop("created_at", None)
            updated = Company.model_validate({**company.model_dump(), **changes})
            document[COMPANIES_KEY][index] = updated.model_dump(mode="json")
            self._save(document)
            return True
        return False

    def delete_company(self, company_id: str) -> Optional[int]:
        document = self._load()
        companies = document[COMPANIES_KEY]
        remaining = [doc for doc in companies if doc["id"] != company_id]
        if len(remaining) == len(companies):
            return None

        transactions = document[TRANSACTIONS_KEY]
        kept = [doc for doc in transactions if doc["company_id"] != company_id]
        document[COMPANIES_KEY] = remaining
        document[TRANSACTIONS_KEY] = kept
        self._save(document)
        return len(transactions) - len(kept)

    # ===== TRANSACTIONS =====

    def list_transactions(self, company_id: Optional[str] = None) -> List[Transaction]:
        return [
            Transaction.model_validate(doc)
            for doc in self._load()[TRANSACTIONS_KEY]
            if company_id is None or doc["company_id"] == company_id
        ]

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        for doc in self._load()[TRANSACTIONS_KEY]:
            if doc["id"] == transaction_id:
                return Transaction.model_validate(doc)
        return None

    def add_transaction(self, transaction: Transaction) -> str:
        document = self._load()
        document[TRANSACTIONS_KEY].append(transaction.model_dump(mode="json"))
        self._save(document)
        return transaction.id

    def update_transaction(self, transaction_id: str, updates: Dict[str, Any]) -> bool:
        document = self._load()
        for index, doc in enumerate(document[TRANSACTIONS_KEY]):
            if doc["id"] != transaction_id:
                continue
            changes = dict(updates)
            changes.pop("id", None)
            changes.pop("created_at", None)
            current = Transaction.model_validate(doc)
            updated = Transaction.model_validate({**current.model_dump(), **changes})
            document[TRANSACTIONS_KEY][index] = updated.model_dump(mode="json")
            self._save(document)
            return True
        return False

    def delete_transaction(self, transaction_id: str) -> bool:
        document = self._load()
        transactions = document[TRANSACTIONS_KEY]
        kept = [doc for doc in transactions if doc["id"] != transaction_id]
        if len(kept) == len(transactions):
            return False
        document[TRANSACTIONS_KEY] = kept
        self._save(document)
        return True

    # ===== SETTINGS =====

    def get_settings(self) -> Optional[UserSettings]:
        doc = self._load()[SETTINGS_KEY]
        return UserSettings.model_validate(doc) if doc else None

    def save_settings(self, settings: UserSettings) -> None:
        document = self._load()
        document[SETTINGS_KEY] = settings.model_dump(mode="json")
        self._save(document)

    # ===== UTILITY =====

    def clear_all(self) -> None:
        """Remove every company, transaction and the saved settings."""
        if self._pending is not None:
            self._pending = _empty_document()
            return
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise StoreError(f"Failed to clear ledger at {self.path}: {exc}") from exc
        logger.info("Cleared local ledger at %s", self.path)


class LocalStoreAdapter(LedgerStore):
    """Async LedgerStore facade over a LocalLedgerStore. Calls never suspend."""

    def __init__(self, local: LocalLedgerStore):
        self.local = local

    async def list_companies(self) -> List[Company]:
        return self.local.list_companies()

    async def get_company(self, company_id: str) -> Optional[Company]:
        return self.local.get_company(company_id)

    async def add_company(self, company: Company) -> str:
        return self.local.add_company(company)

    async def update_company(self, company_id: str, updates: Dict[str, Any]) -> bool:
        return self.local.update_company(company_id, updates)

    async def delete_company(self, company_id: str) -> Optional[int]:
        return self.local.delete_company(company_id)

    async def list_transactions(self, company_id: Optional[str] = None) -> List[Transaction]:
        return self.local.list_transactions(company_id)

    async def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return self.local.get_transaction(transaction_id)

    async def add_transaction(self, transaction: Transaction) -> str:
        return self.local.add_transaction(transaction)

    async def update_transaction(self, transaction_id: str, updates: Dict[str, Any]) -> bool:
        return self.local.update_transaction(transaction_id, updates)

    async def delete_transaction(self, transaction_id: str) -> bool:
        return self.local.delete_transaction(transaction_id)

    async def get_settings(self) -> Optional[UserSettings]:
        return self.local.get_settings()

    async def save_settings(self, settings: UserSettings) -> None:
        self.local.save_settings(settings)

    @asynccontextmanager
    async def atomic(self):
        with self.local.transaction():
            yield self
