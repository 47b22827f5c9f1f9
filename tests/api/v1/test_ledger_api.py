"""
Ledger endpoints against a temp JSON ledger (local backend, no login).
"""
import pytest


@pytest.fixture
def company_id(test_client):
    response = test_client.post(
        "/api/v1/companies",
        json={"name": "Acme Supplies", "phone": "555 123 4567", "address": "1 Main St"}
    )
    assert response.status_code == 201
    return response.json()["id"]


def add_transaction(client, company_id, type_, amount, date="2024-03-01", **extra):
    return client.post(
        "/api/v1/transactions",
        json={"company_id": company_id, "type": type_, "amount": amount, "date": date, **extra}
    )


def test_root(test_client):
    response = test_client.get("/")

    assert response.status_code == 200
    assert response.json()["storage"] == "local"


def test_create_and_list_companies(test_client, company_id):
    test_client.post("/api/v1/companies", json={"name": "bolt traders"})

    response = test_client.get("/api/v1/companies")

    assert response.status_code == 200
    assert [c["name"] for c in response.json()] == ["Acme Supplies", "bolt traders"]
    assert response.json()[0]["phone"] == "5551234567"
    assert response.json()[0]["remaining_amount"] == "0.00"


def test_create_company_validation_errors(test_client, company_id):
    missing = test_client.post("/api/v1/companies", json={"name": "  "})
    bad_phone = test_client.post("/api/v1/companies", json={"name": "X", "phone": "123"})
    duplicate = test_client.post("/api/v1/companies", json={"name": "acme supplies"})

    assert missing.status_code == 422
    assert missing.json()["detail"] == {"field": "name", "message": "Company name is required", "code": "required"}
    assert bad_phone.status_code == 422
    assert bad_phone.json()["detail"]["code"] == "invalid_phone"
    assert duplicate.status_code == 409


def test_transaction_flow_updates_balance(test_client, company_id):
    purchase = add_transaction(test_client, company_id, "purchase", 1000)
    payment = add_transaction(test_client, company_id, "payment", "250.5", "2024-03-05", paid_by="User 1")

    assert purchase.status_code == 201
    assert payment.status_code == 201
    assert payment.json()["amount"] == "250.50"

    detail = test_client.get(f"/api/v1/companies/{company_id}").json()
    assert detail["company"]["total_bought"] == "1000.00"
    assert detail["company"]["total_paid"] == "250.50"
    assert detail["company"]["remaining_amount"] == "749.50"
    assert detail["company"]["status"] == "you_owe"
    assert len(detail["transactions"]) == 2


def test_overpayment_rejected(test_client, company_id):
    add_transaction(test_client, company_id, "purchase", 100)

    response = add_transaction(test_client, company_id, "payment", 100.01)

    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "exceeds_balance"
    assert len(test_client.get("/api/v1/transactions").json()) == 1


def test_transaction_for_unknown_company(test_client):
    response = add_transaction(test_client, "missing", "purchase", 10)

    assert response.status_code == 404
    assert response.json()["detail"] == "Company not found"


def test_company_detail_type_filter(test_client, company_id):
    add_transaction(test_client, company_id, "purchase", 100)
    add_transaction(test_client, company_id, "payment", 40)

    response = test_client.get(f"/api/v1/companies/{company_id}", params={"type": "payment"})

    assert [t["type"] for t in response.json()["transactions"]] == ["payment"]


def test_update_and_delete_transaction(test_client, company_id):
    created = add_transaction(test_client, company_id, "purchase", 100).json()

    updated = test_client.put(f"/api/v1/transactions/{created['id']}", json={"amount": 300})
    assert updated.status_code == 200
    assert test_client.get(f"/api/v1/companies/{company_id}").json()["company"]["total_bought"] == "300.00"

    deleted = test_client.delete(f"/api/v1/transactions/{created['id']}")
    assert deleted.status_code == 200
    assert test_client.get(f"/api/v1/transactions/{created['id']}").status_code == 404
    assert test_client.get(f"/api/v1/companies/{company_id}").json()["company"]["status"] == "settled"


def test_rename_company(test_client, company_id):
    add_transaction(test_client, company_id, "purchase", 10)

    response = test_client.patch(f"/api/v1/companies/{company_id}", json={"name": "Acme Holdings"})

    assert response.status_code == 200
    assert response.json()["name"] == "Acme Holdings"
    assert test_client.get("/api/v1/transactions").json()[0]["company_name"] == "Acme Supplies"


def test_delete_company_cascades(test_client, company_id):
    add_transaction(test_client, company_id, "purchase", 10)
    add_transaction(test_client, company_id, "purchase", 20)

    response = test_client.delete(f"/api/v1/companies/{company_id}")

    assert response.json() == {"success": True, "deleted_transactions": 2}
    assert test_client.get("/api/v1/transactions").json() == []
    assert test_client.delete(f"/api/v1/companies/{company_id}").status_code == 404


def test_list_transactions_with_filters(test_client, company_id):
    add_transaction(test_client, company_id, "purchase", 10, "2024-01-10", description="Cement bags")
    add_transaction(test_client, company_id, "purchase", 20, "2024-02-10")

    by_search = test_client.get("/api/v1/transactions", params={"search": "cement"}).json()
    by_date = test_client.get("/api/v1/transactions", params={"start_date": "2024-02-01"}).json()

    assert [t["description"] for t in by_search] == ["Cement bags"]
    assert [t["amount"] for t in by_date] == ["20.00"]


def test_company_export(test_client, company_id):
    add_transaction(test_client, company_id, "purchase", 1000)
    add_transaction(test_client, company_id, "payment", 200, payment_method="cash")

    response = test_client.get(f"/api/v1/companies/{company_id}/export")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="Acme Supplies-transactions-' in response.headers["content-disposition"]
    lines = response.text.splitlines()
    assert len(lines) == 3
    assert lines[0].startswith('"Date","Type"')
    assert any(",1000.00," in line for line in lines[1:])


def test_export_all_transactions(test_client, company_id):
    add_transaction(test_client, company_id, "purchase", 5)

    response = test_client.get("/api/v1/transactions/export")

    assert response.status_code == 200
    assert 'filename="all-transactions-' in response.headers["content-disposition"]
    assert len(response.text.splitlines()) == 2


def test_settings(test_client):
    assert test_client.get("/api/v1/settings").json()["user1_name"] == "User 1"

    saved = test_client.put("/api/v1/settings", json={"user1_name": "Asha", "user2_name": "Ravi"})
    same = test_client.put("/api/v1/settings", json={"user1_name": "Asha", "user2_name": "ASHA"})

    assert saved.status_code == 200
    assert same.status_code == 422
    assert test_client.get("/api/v1/settings").json()["user2_name"] == "Ravi"


def test_dashboard(test_client, company_id):
    other = test_client.post("/api/v1/companies", json={"name": "Bolt"}).json()["id"]
    add_transaction(test_client, company_id, "purchase", 500)
    add_transaction(test_client, company_id, "payment", 200)
    add_transaction(test_client, other, "purchase", 50)

    response = test_client.get("/api/v1/dashboard")

    data = response.json()
    assert data["totals"]["total_outstanding"] == "350.00"
    assert data["totals"]["total_bought_all"] == "550.00"
    assert data["totals"]["company_count"] == 2
    assert [c["name"] for c in data["outstanding_companies"]] == ["Acme Supplies", "Bolt"]
    assert len(data["recent_transactions"]) == 3


def test_bill_summary_and_export(test_client):
    bills = [
        {
            "company": "Acme",
            "bill_description": "March",
            "total_amount": 100,
            "paid_amount": 40,
            "payment_date": "2024-03-02",
            "reference_number": "INV-1"
        },
        {
            "company": "Acme",
            "bill_description": "April",
            "total_amount": 50,
            "paid_amount": 50,
            "payment_date": "2024-04-02",
            "payment_method": "upi",
            "reference_number": "INV-2"
        },
    ]

    summary = test_client.post("/api/v1/bills/summary", json=bills)
    export = test_client.post("/api/v1/bills/export", json=bills, params={"company": "Acme"})
    invalid = test_client.post("/api/v1/bills/summary", json=[{**bills[0], "paid_amount": 500}])

    assert summary.status_code == 200
    assert summary.json()["totals"]["total_outstanding"] == "60.00"
    assert summary.json()["companies"][0]["total_bills"] == 2
    assert 'filename="payments-Acme-' in export.headers["content-disposition"]
    assert len(export.text.splitlines()) == 3
    assert invalid.status_code == 422
    assert invalid.json()["detail"]["index"] == 0


def test_oversized_amount_is_a_field_error(test_client, company_id):
    response = add_transaction(test_client, company_id, "purchase", "1e30")

    assert response.status_code == 422
    assert test_client.get("/api/v1/transactions").json() == []


def test_unreadable_ledger_file_returns_503(test_client, store_path):
    store_path.write_text("{not json")

    companies = test_client.get("/api/v1/companies")
    dashboard = test_client.get("/api/v1/dashboard")

    assert companies.status_code == 503
    assert companies.json()["detail"] == "Failed to save changes. Please try again."
    assert dashboard.status_code == 503
