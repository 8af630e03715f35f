import pytest
from sqlalchemy.orm import Session
from decimal import Decimal

from app.crud import crud_attribute, crud_product
from app.models.product import Product
from app.models.user import User
from tests.conftest import create_product

pytestmark = pytest.mark.crud

def test_create_product(db_session: Session, seller: User):
    db_product = crud_product.create_product(db=db_session, obj_in={
        "name": "Portable Stage Pole",
        "slug": "portable-stage-pole",
        "regular_price": Decimal("899.00"),
        "price": Decimal("899.00"),
        "seller_id": seller.id,
    })
    assert db_product is not None
    assert db_product.id is not None
    assert db_product.status == "published" # column default
    assert db_product.price == Decimal("899.00")
    assert db_product.on_sale is False

def test_get_product_with_status(db_session: Session, test_product: Product):
    assert crud_product.get_product(db_session, test_product.id).id == test_product.id
    assert crud_product.get_product(db_session, test_product.id, status="published") is not None
    assert crud_product.get_product(db_session, test_product.id, status="draft") is None
    assert crud_product.get_product(db_session, 99999) is None

def test_update_product_partial(db_session: Session, test_product: Product):
    updated = crud_product.update_product(db=db_session, db_obj=test_product, update_data={"description": "Brass finish"})
    assert updated.description == "Brass finish"
    assert updated.name == "Chrome Spinning Pole"

def test_get_products_by_seller_and_count(db_session: Session, seller: User, buyer: User):
    create_product(db_session, seller=seller)
    create_product(db_session, seller=seller, status="private")
    create_product(db_session, seller=buyer)

    assert len(crud_product.get_products_by_seller(db_session, seller_id=seller.id)) == 2
    assert len(crud_product.get_products_by_seller(db_session, seller_id=seller.id, limit=1)) == 1
    assert crud_product.count_products(db_session, seller_id=seller.id) == 2
    assert crud_product.count_products(db_session, seller_id=seller.id, status="published") == 1
    assert crud_product.count_products(db_session) == 3

def test_search_products_sorting_and_unknown_orderby(db_session: Session, seller: User):
    create_product(db_session, seller=seller, name="Beta Pole", price="20.00")
    create_product(db_session, seller=seller, name="Alpha Pole", price="30.00")

    by_name, total = crud_product.search_products(db_session, orderby="name", order="asc")
    assert total == 2
    assert [p.name for p in by_name] == ["Alpha Pole", "Beta Pole"]

    by_price, _ = crud_product.search_products(db_session, orderby="price", order="desc")
    assert [p.name for p in by_price] == ["Alpha Pole", "Beta Pole"]

    fallback, _ = crud_product.search_products(db_session, orderby="DROP TABLE", order="desc")
    assert len(fallback) == 2

def test_search_products_by_category(db_session: Session, seller: User):
    category = crud_attribute.create_category(db_session, name="Pole Shoes")
    shoes = create_product(db_session, seller=seller, name="Platform Heels")
    shoes.categories = [category]
    db_session.commit()
    create_product(db_session, seller=seller, name="X-Pole")

    products, total = crud_product.search_products(db_session, category="pole-shoes")
    assert total == 1
    assert products[0].id == shoes.id

def test_hard_delete_product(db_session: Session, test_product: Product):
    product_id = test_product.id
    deleted = crud_product.hard_delete_product(db_session, product_id=product_id)
    assert deleted is not None
    assert crud_product.get_product(db_session, product_id) is None
    assert crud_product.hard_delete_product(db_session, product_id=product_id) is None
