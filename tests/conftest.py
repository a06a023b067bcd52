import os

# settings are read at import time; configure before importing the app
os.environ.setdefault("ENCODE_KEY", "test-session-secret-do-not-use-in-production")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from typing import Callable, Dict, Generator

from main import app
from app.core.jwt_utils import create_access_token
from app.db.session import get_db, init_db


# Well-known development keys, never funded
PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
OTHER_PRIVATE_KEY = "0x8da4ef21b864d2cc526dbdb2a120bd2874c36c9d0a1fb7f8c63d7f7a8b41de8f"


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test"""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session_factory(engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory) -> Generator[Session, None, None]:
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(session_factory) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application"""

    def override_get_db() -> Generator:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def wallet():
    return Account.from_key(PRIVATE_KEY)


@pytest.fixture
def other_wallet():
    return Account.from_key(OTHER_PRIVATE_KEY)


@pytest.fixture
def sign() -> Callable[[object, str], str]:
    """personal_sign a text message, returning the 0x-prefixed 65-byte signature"""

    def _sign(account, text: str) -> str:
        signed = account.sign_message(encode_defunct(text=text))
        return "0x" + bytes(signed.signature).hex()

    return _sign


@pytest.fixture
def auth_headers() -> Callable[[str], Dict[str, str]]:
    """Bearer header for a fresh session of the given wallet address"""

    def _headers(wallet_address: str) -> Dict[str, str]:
        token, _ = create_access_token(wallet_address)
        return {"Authorization": f"Bearer {token}"}

    return _headers
