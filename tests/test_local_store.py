import datetime as dt
import json
from decimal import Decimal

import pytest

from ledger.models.company import Company
from ledger.models.settings import UserSettings
from ledger.models.transaction import Transaction, TransactionType
from ledger.repositories.base import StoreError
from ledger.repositories.local_store import LocalLedgerStore


def make_transaction(company, amount="10"):
    return Transaction(
        company_id=company.id,
        company_name=company.name,
        type=TransactionType.PURCHASE,
        amount=Decimal(amount),
        date=dt.date(2024, 1, 1)
    )


def test_empty_store_reads_as_empty(local_store):
    assert local_store.list_companies() == []
    assert local_store.list_transactions() == []
    assert local_store.get_settings() is None


def test_records_persist_across_instances(local_store, store_path):
    company = Company(name="Acme")
    local_store.add_company(company)
    local_store.add_transaction(make_transaction(company, "12.5"))

    reopened = LocalLedgerStore(store_path)

    assert reopened.get_company(company.id).name == "Acme"
    assert reopened.list_transactions(company.id)[0].amount == Decimal("12.50")


def test_document_layout(local_store, store_path):
    company = Company(name="Acme")
    local_store.add_company(company)
    local_store.save_settings(UserSettings(user1_name="A", user2_name="B"))

    document = json.loads(store_path.read_text())

    assert set(document) == {"ledger_companies", "ledger_transactions", "ledger_settings"}
    assert document["ledger_companies"][0]["total_bought"] == "0.00"
    assert document["ledger_settings"]["user1_name"] == "A"


def test_delete_company_cascades(local_store):
    acme = Company(name="Acme")
    bolt = Company(name="Bolt")
    local_store.add_company(acme)
    local_store.add_company(bolt)
    local_store.add_transaction(make_transaction(acme))
    local_store.add_transaction(make_transaction(acme))
    local_store.add_transaction(make_transaction(bolt))

    removed = local_store.delete_company(acme.id)

    assert removed == 2
    assert [t.company_id for t in local_store.list_transactions()] == [bolt.id]
    assert local_store.delete_company(acme.id) is None


def test_transaction_flushes_once(local_store, store_path):
    company = Company(name="Acme")

    with local_store.transaction():
        local_store.add_company(company)
        local_store.add_transaction(make_transaction(company))
        # Reads inside the block see buffered writes
        assert local_store.get_company(company.id) is not None
        assert not store_path.exists()

    assert len(LocalLedgerStore(store_path).list_transactions()) == 1


def test_transaction_rolls_back_on_error(local_store):
    company = Company(name="Acme")
    local_store.add_company(company)

    with pytest.raises(RuntimeError):
        with local_store.transaction():
            local_store.add_transaction(make_transaction(company))
            local_store.update_company(company.id, {"total_bought": Decimal("10")})
            raise RuntimeError("boom")

    assert local_store.list_transactions() == []
    assert local_store.get_company(company.id).total_bought == Decimal("0.00")


def test_update_missing_records(local_store):
    assert local_store.update_company("nope", {"name": "x"}) is False
    assert local_store.update_transaction("nope", {"amount": Decimal("1")}) is False
    assert local_store.delete_transaction("nope") is False


def test_corrupt_file_raises_store_error(store_path):
    store_path.write_text("{not json")

    with pytest.raises(StoreError):
        LocalLedgerStore(store_path).list_companies()


def test_clear_all(local_store, store_path):
    local_store.add_company(Company(name="Acme"))

    local_store.clear_all()

    assert not store_path.exists()
    assert local_store.list_companies() == []


def test_non_object_root_raises_store_error(store_path):
    store_path.write_text("[]")

    with pytest.raises(StoreError):
        LocalLedgerStore(store_path).list_transactions()
