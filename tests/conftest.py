"""Pytest fixtures for testing"""

import pytest
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Generator
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from storefront_gateway.api.dependencies import get_session_verifier
from storefront_gateway.api.main import create_app
from storefront_gateway.infrastructure.auth.session import SessionVerifier
from storefront_gateway.infrastructure.database.models import Base, Profile, Transaction, User
from storefront_gateway.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_JWT_SECRET = "test-jwt-secret"
ADMIN_ID = "11111111-1111-1111-1111-111111111111"
CUSTOMER_ID = "22222222-2222-2222-2222-222222222222"


def make_token(user_id: str, email: str = "user@example.com", secret: str = TEST_JWT_SECRET, expires_in: int = 3600) -> str:
    """Access token shaped like the auth provider's"""
    claims = {
        "sub": user_id,
        "email": email,
        "aud": "authenticated",
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    return jwt.encode(claims, secret, algorithm="HS256")


def auth_headers(user_id: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database and test JWT secret"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_verifier] = lambda: SessionVerifier(secret=TEST_JWT_SECRET)
    return TestClient(app)


@pytest.fixture
def create_user(db: Session) -> Callable[..., User]:
    """Factory for users, with a profile when a role is given"""

    def _create(user_id: str, email: str, role: str | None = None) -> User:
        user = User(id=user_id, email=email)
        db.add(user)
        if role is not None:
            db.add(Profile(id=user_id, role=role))
        db.commit()
        return user

    return _create


@pytest.fixture
def admin_headers(create_user) -> Dict[str, str]:
    create_user(ADMIN_ID, "admin@example.com", role="admin")
    return auth_headers(ADMIN_ID)


@pytest.fixture
def customer_headers(create_user) -> Dict[str, str]:
    create_user(CUSTOMER_ID, "customer@example.com", role="customer")
    return auth_headers(CUSTOMER_ID)


@pytest.fixture
def add_transaction(db: Session) -> Callable[..., Transaction]:
    """Factory for transactions owned by the admin user by default"""

    def _add(
        amount,
        type: str,
        status: str = "completed",
        category: str | None = None,
        created_at: datetime | None = None,
        user_uid: str = ADMIN_ID,
    ) -> Transaction:
        transaction = Transaction(
            user_uid=user_uid,
            amount=amount,
            type=type,
            status=status,
            category=category,
            created_at=created_at or datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc),
        )
        db.add(transaction)
        db.commit()
        return transaction

    return _add


@pytest.fixture
def headers_for() -> Callable[[str], Dict[str, str]]:
    """Bearer headers for an arbitrary user id"""
    return auth_headers


@pytest.fixture
def customer_id() -> str:
    return CUSTOMER_ID
