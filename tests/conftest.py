import os

# Settings are read at import time; give the test run its own database and secret
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-bookkeeping-api")

import pytest
from datetime import datetime, timedelta, UTC
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from jose import jwt

from bookkeeping.database import get_db
from bookkeeping.models.base import Base
from bookkeeping.config import settings
# Import all model classes to ensure they're registered with SQLAlchemy
from bookkeeping.models.user import User
from bookkeeping.models.business import Business
from bookkeeping.models.business_member import BusinessMember
from bookkeeping.models.transaction import Transaction
from bookkeeping.models.report import Report
from bookkeeping.models.goal import Goal
from bookkeeping.models.document import Document
from bookkeeping.models.task import Task
from bookkeeping.models.role import BusinessRole, Role, SubscriptionTier
# Import FastAPI app AFTER model imports
from bookkeeping.main import app

# Test database (SQLite in-memory for speed)
# Use StaticPool to ensure all connections share the same in-memory database
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

CLIENT_ID = "client-1"
OTHER_CLIENT_ID = "client-2"
ACCOUNTANT_ID = "accountant-1"
ADMIN_ID = "admin-1"


@pytest.fixture(scope="function")
def db_session():
    """Create fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """FastAPI test client with test database"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def create_test_token(
    user_id: str = "test-user-123", expired: bool = False, email: str | None = None
) -> str:
    """
    Generate valid JWT token for testing.

    Args:
        user_id: User ID to embed in 'sub' claim
        expired: If True, create expired token
        email: Optional email claim

    Returns:
        Encoded JWT token
    """
    if expired:
        exp = datetime.now(UTC) - timedelta(minutes=5)
    else:
        exp = datetime.now(UTC) + timedelta(minutes=15)

    payload = {"sub": user_id, "exp": exp, "iat": datetime.now(UTC)}
    if email:
        payload["email"] = email

    token = jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")
    return token


def headers_for(user_id: str, business_id: int | None = None) -> dict:
    """Authorization headers for a user, optionally selecting a business"""
    headers = {"Authorization": f"Bearer {create_test_token(user_id=user_id)}"}
    if business_id is not None:
        headers["X-Business-Id"] = str(business_id)
    return headers


def make_user(db, user_id: str, role: Role = Role.CLIENT, is_active: bool = True) -> User:
    user = User(id=user_id, email=f"{user_id}@example.com", role=role, is_active=is_active)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_business(
    db, owner_id: str, name: str = "Test Business", tier: SubscriptionTier | None = None
) -> Business:
    business = Business(name=name, owner_id=owner_id, subscription_tier=tier)
    db.add(business)
    db.flush()
    db.add(BusinessMember(business_id=business.id, user_id=owner_id, role=BusinessRole.OWNER))
    db.commit()
    db.refresh(business)
    return business


def add_member(db, business_id: int, user_id: str) -> BusinessMember:
    membership = BusinessMember(business_id=business_id, user_id=user_id, role=BusinessRole.MEMBER)
    db.add(membership)
    db.commit()
    return membership


@pytest.fixture
def mock_jwt_token():
    """Generate valid JWT token"""
    return create_test_token()


@pytest.fixture
def auth_headers(mock_jwt_token):
    """Authorization headers for authenticated requests"""
    return {"Authorization": f"Bearer {mock_jwt_token}"}


@pytest.fixture
def users(db_session):
    """Two clients, an accountant and an admin"""
    return {
        "client": make_user(db_session, CLIENT_ID, Role.CLIENT),
        "other_client": make_user(db_session, OTHER_CLIENT_ID, Role.CLIENT),
        "accountant": make_user(db_session, ACCOUNTANT_ID, Role.ACCOUNTANT),
        "admin": make_user(db_session, ADMIN_ID, Role.ADMIN),
    }


@pytest.fixture
def business(db_session, users):
    """Business on the basic plan owned by the client, with the accountant as member"""
    business = make_business(db_session, CLIENT_ID, "Alice's Bakery", SubscriptionTier.BASIC)
    add_member(db_session, business.id, ACCOUNTANT_ID)
    return business


@pytest.fixture
def other_business(db_session, users):
    """Business on the free plan owned by the other client"""
    return make_business(db_session, OTHER_CLIENT_ID, "Bob's Garage")


@pytest.fixture
def client_headers(business):
    return headers_for(CLIENT_ID, business.id)


@pytest.fixture
def accountant_headers(business):
    return headers_for(ACCOUNTANT_ID, business.id)


@pytest.fixture
def admin_headers(business):
    return headers_for(ADMIN_ID, business.id)


@pytest.fixture
def other_client_headers(other_business):
    return headers_for(OTHER_CLIENT_ID, other_business.id)
