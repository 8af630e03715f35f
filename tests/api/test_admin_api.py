import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.models.product import Product
from app.models.user import User
from tests.conftest import create_product, create_user

pytestmark = pytest.mark.api

def complete_sale(client: TestClient, product_id: int, buyer_headers: dict, admin_headers: dict, quantity: int = 1) -> int:
    order = client.post(
        "/api/v1/marketplace/orders", json={"products": [{"id": product_id, "quantity": quantity}]}, headers=buyer_headers
    ).json()["data"]
    client.patch(f"/api/v1/orders/{order['id']}/status", json={"status": "completed"}, headers=admin_headers)
    return order["id"]

@pytest.mark.parametrize("path", ["/api/v1/admin/stats", "/api/v1/admin/users", "/api/v1/admin/commissions"])
def test_admin_endpoints_reject_non_admins(client: TestClient, seller_token_headers: dict, path: str):
    assert client.get(path).status_code == 401
    response = client.get(path, headers=seller_token_headers)
    assert response.status_code == 403
    assert response.json()["error"] == "poleplace_not_authorized"

def test_platform_stats_empty(client: TestClient, admin_token_headers: dict):
    response = client.get("/api/v1/admin/stats", params={"period": "all"}, headers=admin_token_headers)
    assert response.status_code == 200
    stats = response.json()["data"]
    assert stats["total_orders"] == 0
    assert stats["active_sellers"] == 0
    assert stats["total_products"] == 0
    assert float(stats["total_sales"]) == 0
    assert float(stats["total_commission"]) == 0

def test_platform_stats(client: TestClient, test_product: Product, buyer_token_headers: dict, admin_token_headers: dict):
    complete_sale(client, test_product.id, buyer_token_headers, admin_token_headers, quantity=2)
    stats = client.get("/api/v1/admin/stats", headers=admin_token_headers).json()["data"]
    assert stats["total_sales"] == "100.00"
    assert stats["total_orders"] == 1
    assert stats["total_commission"] == "5.00"
    assert stats["active_sellers"] == 1
    assert stats["total_products"] == 1

def test_admin_users_lists_sellers_with_sales(client: TestClient, db_session: Session, seller: User, test_product: Product,
                                              buyer_token_headers: dict, admin_token_headers: dict):
    create_product(db_session, seller=create_user(db_session))
    complete_sale(client, test_product.id, buyer_token_headers, admin_token_headers)

    sellers = client.get("/api/v1/admin/users", headers=admin_token_headers).json()["data"]
    assert len(sellers) == 1
    assert sellers[0]["id"] == seller.id
    assert sellers[0]["name"] == "Seller A"
    assert sellers[0]["total_sales"] == "50.00"

def test_admin_user_detail(client: TestClient, seller: User, test_product: Product, buyer_token_headers: dict, admin_token_headers: dict):
    order_id = complete_sale(client, test_product.id, buyer_token_headers, admin_token_headers)

    response = client.get(f"/api/v1/admin/users/{seller.id}", params={"period": "all"}, headers=admin_token_headers)
    assert response.status_code == 200
    detail = response.json()["data"]
    assert detail["email"] == seller.email
    assert detail["stats"]["order_count"] == 1
    assert [p["id"] for p in detail["products"]] == [test_product.id]
    assert [o["id"] for o in detail["orders"]] == [order_id]

    response = client.get("/api/v1/admin/users/424242", headers=admin_token_headers)
    assert response.status_code == 404
    assert response.json()["error"] == "poleplace_invalid_user"

def test_admin_commissions_filters(client: TestClient, db_session: Session, seller: User, test_product: Product,
                                   buyer_token_headers: dict, admin_token_headers: dict):
    first = complete_sale(client, test_product.id, buyer_token_headers, admin_token_headers)
    second = complete_sale(client, test_product.id, buyer_token_headers, admin_token_headers)

    commissions = client.get("/api/v1/admin/commissions", headers=admin_token_headers).json()["data"]
    assert {c["order_id"] for c in commissions} == {first, second}

    filtered = client.get("/api/v1/admin/commissions", params={"order_id": first}, headers=admin_token_headers).json()["data"]
    assert [c["order_id"] for c in filtered] == [first]

    paged = client.get("/api/v1/admin/commissions", params={"per_page": 1, "order": "asc", "orderby": "id"}, headers=admin_token_headers)
    assert [c["order_id"] for c in paged.json()["data"]] == [first]
