import pytest
import uuid
from decimal import Decimal
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from fastapi.testclient import TestClient

from app.main import create_app
from app.db import base # noqa: F401
from app.db.base_class import Base
from app.db.init_db import seed_attribute_taxonomies
from app.db.session import get_db
from app.core.context import AppContext
from app.core.principal import Principal
from app.core.security import create_access_token
from app.crud import crud_product, crud_user
from app.models.product import Product
from app.models.user import User
from app.schemas.user import UserCreate

# Use a separate SQLite database for testing
TEST_SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base.metadata.create_all(bind=engine)

# No startup seeding: the app would otherwise install into the configured database
app = create_app(seed=False)

def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db

@pytest.fixture(scope="session")
def test_engine():
    Base.metadata.create_all(bind=engine)
    yield engine

@pytest.fixture(scope="function")
def db_session(test_engine):
    """
    Provides a database session for each test function.
    Tables are dropped and recreated first so every test starts empty.
    """
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture(scope="function")
def client(db_session: Session):
    # The TestClient uses the app with the overridden get_db dependency
    with TestClient(app) as c:
        yield c

@pytest.fixture(scope="function")
def context() -> AppContext:
    """The services the test app serves requests with."""
    return app.state.context

@pytest.fixture(scope="function")
def taxonomies(db_session: Session):
    seed_attribute_taxonomies(db_session)

def create_user(db: Session, *, is_superuser: bool = False, name: str = None, is_active: bool = True) -> User:
    suffix = uuid.uuid4().hex[:6]
    return crud_user.create_user(db, obj_in=UserCreate(
        email=f"user_{suffix}@example.com",
        display_name=name or f"User {suffix}",
        is_superuser=is_superuser,
        is_active=is_active,
    ))

def auth_headers(user: User) -> dict:
    token = create_access_token(data={"sub": user.id})
    return {"Authorization": f"Bearer {token}"}

def create_product(
    db: Session, *, seller: User = None, price: str = "50.00", status: str = "published", name: str = None, **columns
) -> Product:
    name = name or f"Pole {uuid.uuid4().hex[:6]}"
    values = {
        "name": name,
        "slug": name.lower().replace(" ", "-"),
        "status": status,
        "regular_price": Decimal(price),
        "price": Decimal(price),
        "seller_id": seller.id if seller is not None else None,
    }
    values.update(columns)
    return crud_product.create_product(db, obj_in=values)

@pytest.fixture(scope="function")
def seller(db_session: Session) -> User:
    return create_user(db_session, name="Seller A")

@pytest.fixture(scope="function")
def buyer(db_session: Session) -> User:
    return create_user(db_session, name="Buyer B")

@pytest.fixture(scope="function")
def admin(db_session: Session) -> User:
    return create_user(db_session, is_superuser=True, name="Admin")

@pytest.fixture(scope="function")
def seller_principal(seller: User) -> Principal:
    return Principal.from_user(seller)

@pytest.fixture(scope="function")
def buyer_principal(buyer: User) -> Principal:
    return Principal.from_user(buyer)

@pytest.fixture(scope="function")
def admin_principal(admin: User) -> Principal:
    return Principal.from_user(admin)

@pytest.fixture(scope="function")
def seller_token_headers(seller: User) -> dict:
    return auth_headers(seller)

@pytest.fixture(scope="function")
def buyer_token_headers(buyer: User) -> dict:
    return auth_headers(buyer)

@pytest.fixture(scope="function")
def admin_token_headers(admin: User) -> dict:
    return auth_headers(admin)

@pytest.fixture(scope="function")
def test_product(db_session: Session, seller: User) -> Product:
    return create_product(db_session, seller=seller, price="50.00", name="Chrome Spinning Pole")
