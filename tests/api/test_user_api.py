import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models.product import Product
from app.models.user import User
from tests.conftest import create_product

pytestmark = pytest.mark.api

def test_user_stats_requires_auth(client: TestClient):
    response = client.get("/api/v1/user/stats")
    assert response.status_code == 401

def test_user_stats(client: TestClient, db_session: Session, seller: User, test_product: Product,
                    buyer_token_headers: dict, seller_token_headers: dict, admin_token_headers: dict):
    create_product(db_session, seller=seller, status="draft")
    order = client.post(
        "/api/v1/marketplace/orders", json={"products": [{"id": test_product.id, "quantity": 2}]}, headers=buyer_token_headers
    ).json()["data"]
    client.patch(f"/api/v1/orders/{order['id']}/status", json={"status": "completed"}, headers=admin_token_headers)

    response = client.get("/api/v1/user/stats", params={"period": "bogus"}, headers=seller_token_headers)
    assert response.status_code == 200
    stats = response.json()["data"]
    assert stats["total_sales"] == "100.00"
    assert stats["order_count"] == 1
    assert stats["commission"] == "5.00"
    assert stats["net_earnings"] == "95.00"
    assert stats["average_order_value"] == "100.00"
    assert stats["product_count"] == 1
    assert stats["products_count"] == 2
    assert stats["order_frequency"] == 1.0

def test_user_commissions_are_scoped_to_seller(client: TestClient, db_session: Session, test_product: Product,
                                               buyer: User, buyer_token_headers: dict, admin_token_headers: dict):
    order = client.post(
        "/api/v1/marketplace/orders", json={"products": [{"id": test_product.id}]}, headers=buyer_token_headers
    ).json()["data"]
    client.patch(f"/api/v1/orders/{order['id']}/status", json={"status": "completed"}, headers=admin_token_headers)

    response = client.get("/api/v1/user/commissions", headers=buyer_token_headers)
    assert response.status_code == 200
    assert response.json()["data"] == []

    response = client.get("/api/v1/user/commissions", params={"status": "paid"}, headers=buyer_token_headers)
    assert response.status_code == 400
