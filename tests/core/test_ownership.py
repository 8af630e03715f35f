import pytest
from sqlalchemy.orm import Session

from app.core.errors import AuthorizationError
from app.core.ownership import (
    filter_products,
    filter_orders,
    visible_order_ids,
    ensure_can_modify_product,
    ensure_can_view_order,
    ensure_can_modify_order_line,
)
from app.core.principal import Principal
from app.crud import crud_order, crud_product
from app.models.user import User
from tests.conftest import create_product, create_user

pytestmark = pytest.mark.core


def test_non_admin_sees_only_own_products(db_session: Session, seller: User, buyer: User, admin: User):
    mine = create_product(db_session, seller=seller)
    create_product(db_session, seller=buyer)
    create_product(db_session, seller=None, status="draft")

    visible = filter_products(crud_product.query_products(db_session), Principal(user_id=seller.id)).all()
    assert [p.id for p in visible] == [mine.id]
    assert all(p.seller_id == seller.id for p in visible)

    everything = filter_products(crud_product.query_products(db_session), Principal.from_user(admin)).all()
    assert len(everything) == 3


def test_orders_visible_as_buyer_or_line_seller(db_session: Session, context, seller: User, buyer: User, admin: User):
    stranger = create_user(db_session)
    product = create_product(db_session, seller=seller)
    stranger_product = create_product(db_session, seller=stranger)
    bought = context.orders.create(db_session, Principal.from_user(buyer), {"line_items": [{"product_id": product.id}]})
    unrelated = context.orders.create(db_session, Principal.from_user(buyer), {"line_items": [{"product_id": stranger_product.id}]})

    as_seller = filter_orders(crud_order.query_orders(db_session), Principal(user_id=seller.id)).all()
    assert [o.id for o in as_seller] == [bought.id]

    as_buyer = filter_orders(crud_order.query_orders(db_session), Principal(user_id=buyer.id)).all()
    assert {o.id for o in as_buyer} == {bought.id, unrelated.id}

    as_admin = filter_orders(crud_order.query_orders(db_session), Principal.from_user(admin)).all()
    assert len(as_admin) == 2

    assert visible_order_ids(db_session, Principal(user_id=seller.id)) == {bought.id}
    assert visible_order_ids(db_session, Principal(user_id=stranger.id)) == {unrelated.id}


def test_empty_visible_set_matches_nothing(db_session: Session, context, seller: User, buyer: User):
    nobody = create_user(db_session)
    product = create_product(db_session, seller=seller)
    context.orders.create(db_session, Principal.from_user(buyer), {"line_items": [{"product_id": product.id}]})

    ids = visible_order_ids(db_session, Principal(user_id=nobody.id))
    assert ids == set()
    assert crud_order.get_orders_by_ids(db_session, order_ids=ids) == []
    assert filter_orders(crud_order.query_orders(db_session), Principal(user_id=nobody.id)).all() == []


def test_product_mutation_rules(db_session: Session, seller: User, buyer: User, admin: User):
    product = create_product(db_session, seller=seller)
    ensure_can_modify_product(Principal(user_id=seller.id), product)
    ensure_can_modify_product(Principal.from_user(admin), product)
    with pytest.raises(AuthorizationError):
        ensure_can_modify_product(Principal(user_id=buyer.id), product)

    unowned = create_product(db_session, seller=None)
    with pytest.raises(AuthorizationError):
        ensure_can_modify_product(Principal(user_id=seller.id), unowned)


def test_order_view_and_line_rules(db_session: Session, context, seller: User, buyer: User, admin: User):
    stranger = create_user(db_session)
    product = create_product(db_session, seller=seller)
    order = context.orders.create(db_session, Principal.from_user(buyer), {"line_items": [{"product_id": product.id}]})

    ensure_can_view_order(Principal(user_id=buyer.id), order)
    ensure_can_view_order(Principal(user_id=seller.id), order)
    ensure_can_view_order(Principal.from_user(admin), order)
    with pytest.raises(AuthorizationError):
        ensure_can_view_order(Principal(user_id=stranger.id), order)

    line = order.items[0]
    ensure_can_modify_order_line(Principal(user_id=seller.id), line)
    ensure_can_modify_order_line(Principal.from_user(admin), line)
    with pytest.raises(AuthorizationError):
        ensure_can_modify_order_line(Principal(user_id=buyer.id), line)


def test_order_line_falls_back_to_product_seller(db_session: Session, context, seller: User, buyer: User):
    product = create_product(db_session, seller=seller)
    order = context.orders.create(db_session, Principal.from_user(buyer), {"line_items": [{"product_id": product.id}]})
    line = order.items[0]
    line.seller_id = None
    db_session.commit()

    ensure_can_modify_order_line(Principal(user_id=seller.id), line)
    with pytest.raises(AuthorizationError):
        ensure_can_modify_order_line(Principal(user_id=buyer.id), line)
