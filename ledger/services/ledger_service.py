"""
LedgerService - companies, transactions and settings over a LedgerStore.

Every write that changes a company's totals follows the same protocol:
1. validate the input (nothing is written on failure)
2. write the transaction (write_transaction / store update / store delete)
3. re-read the company's transactions and recompute its totals
   (recompute_and_save)
Steps 2 and 3 run inside ``store.atomic()`` so they are committed together.

Mutating calls return a Result: Ok, ValidationError, NotFound or StorageError.
"""

import logging
from decimal import Decimal
from typing import List, Optional

from ledger.core.result import NotFound, Ok, Result, StorageError, ValidationError
from ledger.models.company import Company, CompanyCreate, CompanyUpdate
from ledger.models.settings import UserSettings, UserSettingsUpdate
from ledger.models.transaction import (
    Transaction,
    TransactionCreate,
    TransactionFilter,
    TransactionType,
    TransactionUpdate,
)
from ledger.repositories.base import DuplicateRecordError, LedgerStore, StoreError
from ledger.schemas.ledger import CompanyDetailResponse, CompanyWithStatus, DashboardResponse
from ledger.services.balance import (
    CompanyTotals,
    balance_status,
    outstanding_companies,
    portfolio_totals,
    recent_transactions,
    recompute_company_totals,
)
from ledger.services.validation import validate_company, validate_settings, validate_transaction

logger = logging.getLogger(__name__)

# Fields whose change requires the company totals to be recomputed
TOTALS_FIELDS = ("amount", "type", "company_id", "date")
# Optional fields an update may clear by sending null
NULLABLE_FIELDS = ("payment_method", "paid_by", "reference_number")


def with_status(company: Company) -> CompanyWithStatus:
    return CompanyWithStatus(
        **company.model_dump(),
        status=balance_status(company.remaining_amount)
    )


def newest_first(transactions: List[Transaction]) -> List[Transaction]:
    return sorted(transactions, key=lambda t: (t.created_at, t.id), reverse=True)


class LedgerService:
    """Ledger operations for one store (one user, or the local ledger)."""

    def __init__(self, store: LedgerStore, default_settings: Optional[UserSettings] = None):
        self.store = store
        self.default_settings = default_settings or UserSettings()

    def _storage_error(self, action: str, exc: StoreError) -> StorageError:
        logger.error("Failed to %s: %s", action, exc)
        return StorageError(exc)

    # ===== COMPANIES =====

    async def list_companies(self) -> List[Company]:
        companies = await self.store.list_companies()
        return sorted(companies, key=lambda c: c.name.lower())

    async def get_company(self, company_id: str) -> Optional[Company]:
        return await self.store.get_company(company_id)

    async def create_company(self, data: CompanyCreate) -> Result:
        try:
            existing = await self.store.list_companies()
            checked = validate_company(data, [c.name for c in existing])
            if not isinstance(checked, Ok):
                return checked

            company = Company(**checked.value.model_dump(), owner_id=self.store.owner_id)
            await self.store.add_company(company)
        except DuplicateRecordError:
            return ValidationError("name", "Company with this name already exists", "already_exists")
        except StoreError as exc:
            return self._storage_error("create company", exc)

        logger.info("Created company %s (%s)", company.id, company.name)
        return Ok(company)

    async def update_company(self, company_id: str, data: CompanyUpdate) -> Result:
        """
        Update name, phone or address.

        Renaming does not touch company_name on existing transactions.
        """
        try:
            company = await self.store.get_company(company_id)
            if company is None:
                return NotFound("company", company_id)

            changes = data.model_dump(exclude_unset=True)
            merged = CompanyCreate(
                name=changes["name"] if changes.get("name") is not None else company.name,
                phone=changes["phone"] if "phone" in changes else company.phone,
                address=changes["address"] if "address" in changes else company.address
            )

            others = [c.name for c in await self.store.list_companies() if c.id != company_id]
            checked = validate_company(merged, others)
            if not isinstance(checked, Ok):
                return checked

            await self.store.update_company(company_id, checked.value.model_dump())
            updated = await self.store.get_company(company_id)
        except DuplicateRecordError:
            return ValidationError("name", "Company with this name already exists", "already_exists")
        except StoreError as exc:
            return self._storage_error("update company", exc)

        if updated is None:
            return NotFound("company", company_id)
        return Ok(updated)

    async def delete_company(self, company_id: str) -> Result:
        """Delete a company and all of its transactions."""
        try:
            async with self.store.atomic():
                removed = await self.store.delete_company(company_id)
        except StoreError as exc:
            return self._storage_error("delete company", exc)

        if removed is None:
            return NotFound("company", company_id)

        logger.info("Deleted company %s with %d transactions", company_id, removed)
        return Ok(removed)

    async def company_detail(
        self,
        company_id: str,
        type_filter: Optional[TransactionType] = None
    ) -> Optional[CompanyDetailResponse]:
        company = await self.store.get_company(company_id)
        if company is None:
            return None

        transactions = await self.store.list_transactions(company_id)
        if type_filter is not None:
            transactions = [t for t in transactions if t.type == type_filter]

        return CompanyDetailResponse(
            company=with_status(company),
            transactions=newest_first(transactions)
        )

    # ===== TRANSACTIONS =====

    async def list_transactions(self, filters: Optional[TransactionFilter] = None) -> List[Transaction]:
        transactions = await self.store.list_transactions(filters.company_id if filters else None)
        if filters is not None:
            transactions = [t for t in transactions if filters.matches(t)]
        return newest_first(transactions)

    async def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return await self.store.get_transaction(transaction_id)

    async def write_transaction(self, data: TransactionCreate, company: Company) -> Transaction:
        """
        Persist a validated transaction.

        company_name is copied from the company as it is right now.
        """
        transaction = Transaction(
            owner_id=self.store.owner_id,
            company_id=company.id,
            company_name=company.name,
            type=data.type,
            description=data.description,
            amount=data.amount,
            date=data.date,
            payment_method=data.payment_method,
            paid_by=data.paid_by,
            reference_number=data.reference_number
        )
        await self.store.add_transaction(transaction)
        return transaction

    async def recompute_and_save(self, company_id: str) -> Optional[CompanyTotals]:
        """
        Recompute a company's totals from its stored transactions and persist them.

        Returns None if the company no longer exists.
        """
        transactions = await self.store.list_transactions(company_id)
        totals = recompute_company_totals(company_id, transactions)
        found = await self.store.update_company(company_id, totals.model_dump())
        if not found:
            return None
        return totals

    async def add_transaction(self, data: TransactionCreate) -> Result:
        try:
            company = await self.store.get_company(data.company_id)
            if company is None:
                return NotFound("company", data.company_id)

            checked = validate_transaction(data, company)
            if not isinstance(checked, Ok):
                return checked

            async with self.store.atomic():
                transaction = await self.write_transaction(checked.value, company)
                await self.recompute_and_save(company.id)
        except StoreError as exc:
            return self._storage_error("add transaction", exc)

        logger.info(
            "Recorded %s of %s for company %s",
            transaction.type.value, transaction.amount, company.id
        )
        return Ok(transaction)

    async def update_transaction(self, transaction_id: str, data: TransactionUpdate) -> Result:
        """
        Replace fields of an existing transaction.

        Moving a transaction to another company recomputes both companies and
        snapshots the new company's name. The payment cap is checked against
        the target company's balance without this transaction's own effect.
        """
        try:
            current = await self.store.get_transaction(transaction_id)
            if current is None:
                return NotFound("transaction", transaction_id)

            changes = {
                key: value
                for key, value in data.model_dump(exclude_unset=True).items()
                if value is not None or key in NULLABLE_FIELDS
            }
            target_id = changes.get("company_id", current.company_id)
            company = await self.store.get_company(target_id)
            if company is None:
                return NotFound("company", target_id)

            merged = TransactionCreate(**{
                **current.model_dump(include=set(TransactionCreate.model_fields)),
                **changes
            })
            checked = validate_transaction(
                merged,
                company,
                available_balance=self._balance_without(current, company)
            )
            if not isinstance(checked, Ok):
                return checked

            fields = checked.value.model_dump()
            if company.id != current.company_id:
                fields["company_name"] = company.name

            needs_recompute = any(fields[key] != getattr(current, key) for key in TOTALS_FIELDS)

            async with self.store.atomic():
                await self.store.update_transaction(transaction_id, fields)
                if needs_recompute:
                    await self.recompute_and_save(current.company_id)
                    if company.id != current.company_id:
                        await self.recompute_and_save(company.id)

            updated = await self.store.get_transaction(transaction_id)
        except StoreError as exc:
            return self._storage_error("update transaction", exc)

        if updated is None:
            return NotFound("transaction", transaction_id)
        return Ok(updated)

    @staticmethod
    def _balance_without(transaction: Transaction, company: Company) -> Decimal:
        """The company's remaining amount as if this transaction did not exist."""
        if transaction.company_id != company.id:
            return company.remaining_amount
        if transaction.type == TransactionType.PAYMENT:
            return company.remaining_amount + transaction.amount
        return company.remaining_amount - transaction.amount

    async def delete_transaction(self, transaction_id: str) -> Result:
        """Delete a transaction; its company stays and is recomputed."""
        try:
            current = await self.store.get_transaction(transaction_id)
            if current is None:
                return NotFound("transaction", transaction_id)

            async with self.store.atomic():
                await self.store.delete_transaction(transaction_id)
                await self.recompute_and_save(current.company_id)
        except StoreError as exc:
            return self._storage_error("delete transaction", exc)

        logger.info("Deleted transaction %s of company %s", transaction_id, current.company_id)
        return Ok(current)

    # ===== SETTINGS =====

    async def get_settings(self) -> UserSettings:
        stored = await self.store.get_settings()
        if stored is not None:
            return stored
        return self.default_settings.model_copy(update={"owner_id": self.store.owner_id})

    async def save_settings(self, data: UserSettingsUpdate) -> Result:
        checked = validate_settings(data)
        if not isinstance(checked, Ok):
            return checked

        settings = UserSettings(
            user1_name=checked.value.user1_name,
            user2_name=checked.value.user2_name,
            owner_id=self.store.owner_id
        )
        try:
            await self.store.save_settings(settings)
        except StoreError as exc:
            return self._storage_error("save settings", exc)
        return Ok(settings)

    # ===== DASHBOARD =====

    async def dashboard(self, recent_limit: int = 5) -> DashboardResponse:
        companies = await self.list_companies()
        transactions = await self.store.list_transactions()
        return DashboardResponse(
            totals=portfolio_totals(companies),
            companies=[with_status(c) for c in companies],
            outstanding_companies=[with_status(c) for c in outstanding_companies(companies)],
            recent_transactions=recent_transactions(transactions, recent_limit)
        )
