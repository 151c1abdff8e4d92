"""Integration tests for API endpoints"""

import uuid
import pytest
from unittest.mock import patch
from fastapi.testclient import TestClient
from sqlalchemy.exc import SQLAlchemyError


@pytest.fixture
def sale_payload():
    """R$ 120,00 - R$ 20,00 discount in 3 installments from 2024-01-10"""
    return {
        "client_name": "João Silva",
        "products": "Pomada modeladora + shampoo",
        "subtotal_cents": 12000,
        "discount_cents": 2000,
        "number_of_installments": 3,
        "first_due_date": "2024-01-10",
        "sale_date": "2023-12-10",
    }


@pytest.fixture
def created_sale(client: TestClient, sale_payload):
    response = client.post("/v1/credit-sales", json=sale_payload)
    assert response.status_code == 201
    return response.json()


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient, created_sale):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "barber_credit_sales_total" in response.text


def test_request_id_is_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"

    generated = client.get("/health")
    assert generated.headers["X-Request-ID"]


def test_create_credit_sale(created_sale):
    """Test POST /v1/credit-sales builds the schedule"""
    assert created_sale["total_cents"] == 10000
    assert created_sale["status"] == "active"
    assert created_sale["total_paid_cents"] == 0
    assert created_sale["remaining_cents"] == 10000
    assert created_sale["next_due_date"] == "2024-01-10"

    installments = created_sale["installments"]
    assert [inst["amount_cents"] for inst in installments] == [3333, 3333, 3334]
    assert [inst["due_date"] for inst in installments] == ["2024-01-10", "2024-02-10", "2024-03-10"]
    assert all(inst["status"] == "pending" for inst in installments)


def test_create_credit_sale_defaults_first_due_date(client: TestClient, sale_payload):
    """Without first_due_date the schedule starts one month after the sale"""
    del sale_payload["first_due_date"]
    sale_payload["sale_date"] = "2024-01-31"

    response = client.post("/v1/credit-sales", json=sale_payload)

    assert response.status_code == 201
    assert response.json()["first_due_date"] == "2024-02-29"


@pytest.mark.parametrize(
    "changes",
    [
        {"number_of_installments": 0},
        {"number_of_installments": 25},
        {"subtotal_cents": 2000, "discount_cents": 2000},
        {"subtotal_cents": 10, "discount_cents": 0, "number_of_installments": 12},
        {"client_name": "   "},
    ],
)
def test_create_credit_sale_rejects_invalid_input(client: TestClient, sale_payload, changes):
    sale_payload.update(changes)

    response = client.post("/v1/credit-sales", json=sale_payload)

    assert response.status_code == 422
    assert client.get("/v1/credit-sales").json()["count"] == 0


def test_create_credit_sale_missing_fields(client: TestClient):
    response = client.post("/v1/credit-sales", json={"client_name": "João"})
    assert response.status_code == 422


def test_list_refreshes_overdue_status(client: TestClient, created_sale):
    """Test GET /v1/credit-sales applies overdue transitions for today (2024-02-15)"""
    response = client.get("/v1/credit-sales")

    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 1
    assert data["overdue_count"] == 1
    assert data["remaining_cents"] == 10000

    sale = data["credit_sales"][0]
    assert sale["status"] == "overdue"
    assert [inst["status"] for inst in sale["installments"]] == ["overdue", "overdue", "pending"]


def test_list_filters_by_status(client: TestClient, created_sale):
    assert client.get("/v1/credit-sales", params={"status": "overdue"}).json()["count"] == 1
    assert client.get("/v1/credit-sales", params={"status": "paid"}).json()["count"] == 0
    assert client.get("/v1/credit-sales", params={"status": "bogus"}).status_code == 422


def test_refresh_endpoint_is_idempotent(client: TestClient, created_sale):
    """Test POST /v1/credit-sales/refresh"""
    first = client.post("/v1/credit-sales/refresh").json()

    assert first["today"] == "2024-02-15"
    assert len(first["overdue_installment_ids"]) == 2
    assert first["sale_status_changes"] == [
        {"credit_sale_id": created_sale["id"], "previous_status": "active", "status": "overdue"}
    ]

    second = client.post("/v1/credit-sales/refresh").json()
    assert second["overdue_installment_ids"] == []
    assert second["sale_status_changes"] == []


def test_get_credit_sale(client: TestClient, created_sale):
    response = client.get(f"/v1/credit-sales/{created_sale['id']}")

    assert response.status_code == 200
    assert response.json()["id"] == created_sale["id"]
    assert response.json()["status"] == "overdue"


def test_get_credit_sale_not_found(client: TestClient):
    assert client.get(f"/v1/credit-sales/{uuid.uuid4()}").status_code == 404
    assert client.get("/v1/credit-sales/not-a-uuid").status_code == 400


def test_pay_installment(client: TestClient, created_sale):
    """Test POST /v1/installments/{id}/payments"""
    first = created_sale["installments"][0]

    response = client.post(
        f"/v1/installments/{first['id']}/payments",
        json={"payment_method": "pix", "paid_date": "2024-02-14", "amount_cents": 3333},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["installment"]["status"] == "paid"
    assert data["installment"]["paid_date"] == "2024-02-14"
    assert data["installment"]["payment_method"] == "pix"
    assert data["credit_sale"]["total_paid_cents"] == 3333
    assert data["credit_sale"]["remaining_cents"] == 6667
    assert data["credit_sale"]["next_due_date"] == "2024-02-10"


def test_pay_installment_reports_other_past_due_installments(client: TestClient, sale_payload):
    """Paying the last installment leaves the sale overdue while earlier ones are past due"""
    sale_payload["first_due_date"] = "2023-12-10"
    sale = client.post("/v1/credit-sales", json=sale_payload).json()

    response = client.post(
        f"/v1/installments/{sale['installments'][2]['id']}/payments",
        json={"payment_method": "pix"},
    )

    assert response.status_code == 200
    credit_sale = response.json()["credit_sale"]
    assert credit_sale["status"] == "overdue"
    assert [inst["status"] for inst in credit_sale["installments"]] == ["overdue", "overdue", "paid"]

    # The transitions were stored with the payment, so a refresh has nothing left to do
    refreshed = client.post("/v1/credit-sales/refresh").json()
    assert refreshed["overdue_installment_ids"] == []
    assert refreshed["sale_status_changes"] == []


def test_pay_installment_defaults_to_today(client: TestClient, created_sale):
    inst_id = created_sale["installments"][2]["id"]

    response = client.post(f"/v1/installments/{inst_id}/payments", json={"payment_method": "cash"})

    assert response.status_code == 200
    assert response.json()["installment"]["paid_date"] == "2024-02-15"


def test_pay_installment_twice_conflicts(client: TestClient, created_sale):
    inst_id = created_sale["installments"][0]["id"]
    url = f"/v1/installments/{inst_id}/payments"

    assert client.post(url, json={"payment_method": "pix", "paid_date": "2024-02-14"}).status_code == 200
    duplicate = client.post(url, json={"payment_method": "cash", "paid_date": "2024-02-15"})

    assert duplicate.status_code == 409
    sale = client.get(f"/v1/credit-sales/{created_sale['id']}").json()
    assert sale["installments"][0]["payment_method"] == "pix"
    assert sale["installments"][0]["paid_date"] == "2024-02-14"
    assert sale["total_paid_cents"] == 3333


@pytest.mark.parametrize(
    "body",
    [
        {"payment_method": "store_credit"},
        {"payment_method": "bitcoin"},
        {"payment_method": "pix", "amount_cents": 1000},
    ],
)
def test_pay_installment_rejects_invalid_payment(client: TestClient, created_sale, body):
    inst_id = created_sale["installments"][0]["id"]

    response = client.post(f"/v1/installments/{inst_id}/payments", json=body)

    assert response.status_code == 422
    sale = client.get(f"/v1/credit-sales/{created_sale['id']}").json()
    assert sale["total_paid_cents"] == 0


def test_pay_unknown_installment(client: TestClient):
    assert client.post(f"/v1/installments/{uuid.uuid4()}/payments", json={"payment_method": "pix"}).status_code == 404
    assert client.post("/v1/installments/123/payments", json={"payment_method": "pix"}).status_code == 400


def test_paying_everything_settles_the_sale(client: TestClient, created_sale):
    for inst in created_sale["installments"]:
        response = client.post(f"/v1/installments/{inst['id']}/payments", json={"payment_method": "debit_card"})
        assert response.status_code == 200

    sale = client.get(f"/v1/credit-sales/{created_sale['id']}").json()
    assert sale["status"] == "paid"
    assert sale["remaining_cents"] == 0
    assert sale["next_due_date"] is None


def test_payment_writes_tagged_transaction(client: TestClient, created_sale):
    inst_id = created_sale["installments"][1]["id"]
    client.post(f"/v1/installments/{inst_id}/payments", json={"payment_method": "pix", "paid_date": "2024-02-12"})

    transactions = client.get("/v1/transactions").json()

    assert len(transactions) == 1
    assert transactions[0]["origin"] == "installment_payment"
    assert transactions[0]["credit_sale_id"] == created_sale["id"]
    assert transactions[0]["installment_number"] == 2
    assert transactions[0]["value_cents"] == 3333


def test_receivables_summary(client: TestClient, created_sale):
    inst_id = created_sale["installments"][0]["id"]
    client.post(f"/v1/installments/{inst_id}/payments", json={"payment_method": "pix"})

    response = client.get("/v1/credit-sales/summary")

    assert response.status_code == 200
    summary = response.json()
    assert summary["sale_count"] == 1
    assert summary["overdue_sale_count"] == 1
    assert summary["total_sold_cents"] == 10000
    assert summary["total_received_cents"] == 3333
    assert summary["total_outstanding_cents"] == 6667
    assert summary["overdue_outstanding_cents"] == 3333
    assert summary["overdue_installment_count"] == 1
    assert summary["pending_installment_count"] == 1
    assert summary["due_soon_cents"] == 0


def test_delete_credit_sale(client: TestClient, created_sale):
    url = f"/v1/credit-sales/{created_sale['id']}"

    assert client.delete(url).status_code == 204
    assert client.get(url).status_code == 404
    assert client.delete(url).status_code == 404

    inst_id = created_sale["installments"][0]["id"]
    assert client.post(f"/v1/installments/{inst_id}/payments", json={"payment_method": "pix"}).status_code == 404


def test_transactions_crud(client: TestClient):
    response = client.post(
        "/v1/transactions",
        json={
            "date": "2024-02-10",
            "client_name": "Carlos",
            "description": "Corte + barba",
            "payment_method": "credit_card",
            "subtotal_cents": 6000,
            "discount_cents": 1000,
        },
    )

    assert response.status_code == 201
    assert response.json()["value_cents"] == 5000
    assert response.json()["origin"] == "sale"
    assert response.json()["type"] == "service"

    assert len(client.get("/v1/transactions", params={"start_date": "2024-02-10"}).json()) == 1
    assert client.get("/v1/transactions", params={"start_date": "2024-02-11", "end_date": "2024-02-28"}).json() == []
    assert client.get("/v1/transactions", params={"start_date": "2024-02-11", "end_date": "2024-02-01"}).status_code == 422


def test_expenses_crud(client: TestClient):
    response = client.post(
        "/v1/expenses",
        json={"date": "2024-02-15", "amount_cents": 1000, "description": "Lâminas", "category": "supplies"},
    )
    assert response.status_code == 201
    expense_id = response.json()["id"]

    assert [e["id"] for e in client.get("/v1/expenses").json()] == [expense_id]
    assert client.post("/v1/expenses", json={"date": "2024-02-15", "amount_cents": 0, "description": "x"}).status_code == 422

    assert client.delete(f"/v1/expenses/{expense_id}").status_code == 204
    assert client.delete(f"/v1/expenses/{expense_id}").status_code == 404
    assert client.get("/v1/expenses").json() == []


def test_ledger_combines_all_sources(client: TestClient, created_sale):
    """Test GET /v1/ledger for the current month (2024-02-01 .. 2024-02-15)"""
    inst_id = created_sale["installments"][0]["id"]
    client.post(f"/v1/installments/{inst_id}/payments", json={"payment_method": "pix", "paid_date": "2024-02-15"})
    client.post(
        "/v1/transactions",
        json={
            "date": "2024-02-10",
            "client_name": "Carlos",
            "description": "Corte",
            "payment_method": "cash",
            "subtotal_cents": 5000,
        },
    )
    client.post("/v1/expenses", json={"date": "2024-02-15", "amount_cents": 1000, "description": "Lâminas"})
    client.post("/v1/expenses", json={"date": "2024-01-31", "amount_cents": 9999, "description": "Aluguel"})

    response = client.get("/v1/ledger")

    assert response.status_code == 200
    data = response.json()
    assert data["start_date"] == "2024-02-01"
    assert data["end_date"] == "2024-02-15"

    # The tagged installment transaction is not counted a second time
    assert [(item["date"], item["type"], item["source"]) for item in data["items"]] == [
        ("2024-02-15", "expense", "expense"),
        ("2024-02-15", "revenue", "installment"),
        ("2024-02-10", "revenue", "transaction"),
    ]
    totals = data["totals"]
    assert totals["total_revenue_cents"] == 8333
    assert totals["total_expenses_cents"] == 1000
    assert totals["net_profit_cents"] == 7333
    assert totals["net_profit"] == "73.33"
    assert [day["net_cents"] for day in data["daily"]] == [2333, 5000]


def test_ledger_explicit_range_and_all(client: TestClient):
    client.post("/v1/expenses", json={"date": "2024-01-31", "amount_cents": 9999, "description": "Aluguel"})

    january = client.get("/v1/ledger", params={"start_date": "2024-01-01", "end_date": "2024-01-31"}).json()
    everything = client.get("/v1/ledger", params={"period": "all"}).json()

    assert january["totals"]["net_profit_cents"] == -9999
    assert everything["start_date"] is None
    assert everything["totals"]["total_expenses_cents"] == 9999
    assert client.get("/v1/ledger").json()["items"] == []


def test_ledger_rejects_bad_parameters(client: TestClient):
    assert client.get("/v1/ledger", params={"period": "fortnight"}).status_code == 422
    assert client.get("/v1/ledger", params={"start_date": "2024-03-01", "end_date": "2024-02-01"}).status_code == 422


@patch("barber_ledger.api.v1.expenses.ExpenseRepository.delete_expense")
def test_delete_expense_database_error(mock_delete, client: TestClient):
    """Test DELETE /v1/expenses/{id} rolls back and hides database errors"""
    created = client.post("/v1/expenses", json={"date": "2024-02-15", "amount_cents": 1000, "description": "Lâminas"})
    mock_delete.side_effect = SQLAlchemyError("database is locked")

    response = client.delete(f"/v1/expenses/{created.json()['id']}")

    assert response.status_code == 500
    assert response.json()["detail"] == "Internal server error"
    assert len(client.get("/v1/expenses").json()) == 1
