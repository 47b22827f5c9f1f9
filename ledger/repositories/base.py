"""
LedgerStore - the storage interface the ledger service talks to.

Two implementations exist:
- LocalStoreAdapter over LocalLedgerStore: one JSON document on disk, no owner scoping
- MongoLedgerStore: Motor collections, every read and write scoped to one owner

Writes that must land together (a transaction plus its company's recomputed
totals) go inside ``async with store.atomic():``.
"""

from abc import ABC, abstractmethod
from typing import Any, AsyncContextManager, Dict, List, Optional

from ledger.models.company import Company
from ledger.models.settings import UserSettings
from ledger.models.transaction import Transaction


class StoreError(Exception):
    """The backing store failed to read or write."""
    pass


class DuplicateRecordError(StoreError):
    """A uniqueness constraint (company name per owner) was violated."""
    pass


class LedgerStore(ABC):
    """Async CRUD for companies, transactions and settings."""

    owner_id: Optional[str] = None

    # ===== COMPANIES =====

    @abstractmethod
    async def list_companies(self) -> List[Company]:
        pass

    @abstractmethod
    async def get_company(self, company_id: str) -> Optional[Company]:
        pass

    @abstractmethod
    async def add_company(self, company: Company) -> str:
        """Persist a new company and return its id."""
        pass

    @abstractmethod
    async def update_company(self, company_id: str, updates: Dict[str, Any]) -> bool:
        """Apply a partial update. Returns False if the company does not exist."""
        pass

    @abstractmethod
    async def delete_company(self, company_id: str) -> Optional[int]:
        """
        Delete a company and every transaction that references it.

        Returns the number of transactions removed, or None if the company
        does not exist.
        """
        pass

    # ===== TRANSACTIONS =====

    @abstractmethod
    async def list_transactions(self, company_id: Optional[str] = None) -> List[Transaction]:
        pass

    @abstractmethod
    async def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        pass

    @abstractmethod
    async def add_transaction(self, transaction: Transaction) -> str:
        pass

    @abstractmethod
    async def update_transaction(self, transaction_id: str, updates: Dict[str, Any]) -> bool:
        pass

    @abstractmethod
    async def delete_transaction(self, transaction_id: str) -> bool:
        pass

    # ===== SETTINGS =====

    @abstractmethod
    async def get_settings(self) -> Optional[UserSettings]:
        """Stored settings, or None if they were never saved."""
        pass

    @abstractmethod
    async def save_settings(self, settings: UserSettings) -> None:
        pass

    # ===== UNIT OF WORK =====

    @abstractmethod
    def atomic(self) -> AsyncContextManager["LedgerStore"]:
        """Group writes so they are committed together or not at all."""
        pass
