"""
Pytest configuration and fixtures for tests.

This file is automatically loaded by pytest and provides shared fixtures
and configuration for all tests.
"""

import os
import sys

# Seed the environment before config is imported anywhere
os.environ.setdefault("RUNTIME_ENVIRONMENT", "TEST")
os.environ.setdefault("RAZORPAY_KEY_ID", "rzp_test_key")
os.environ.setdefault("API_BASE_URL", "http://api.test/api")
os.environ.setdefault("CLIENT_LOCALE", "en_IN")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

# Add parent directory to Python path so tests can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
import pytest_asyncio
from fakeredis import FakeAsyncRedis

from models.product import CategoryRefDTO, ProductDTO
from models.user import UserDTO
from services.session import SessionContext
from services.storage import LocalStorage


# ============================================================================
# Redis / Storage Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def redis_client():
    """Create fake Redis client for testing (no real Redis server needed)."""
    client = FakeAsyncRedis(decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
def storage(redis_client):
    return LocalStorage(redis_client, namespace="test")


@pytest.fixture
def session(storage):
    """Anonymous session."""
    return SessionContext(storage)


@pytest.fixture
def customer():
    return UserDTO(id=7, email="asha@example.com", name="Asha", phone="9876543210")


@pytest_asyncio.fixture
async def logged_in_session(session, customer):
    await session.establish("test-token-abc", customer)
    return session


# ============================================================================
# Catalog Fixtures
# ============================================================================

@pytest.fixture
def make_product():
    """Factory for products; stock=None means unlimited."""

    def _make(product_id: int = 1, price: float = 1000.0, stock: int | None = 10, name: str | None = None):
        return ProductDTO(
            id=product_id,
            name=name or f"Pashmina #{product_id}",
            price=price,
            description="Hand-woven",
            image=f"/images/{product_id}.jpg",
            category=CategoryRefDTO(name="Shawls"),
            colors=["Red", "Blue"],
            sizes=["S", "M", "L"],
            stock=stock,
        )

    return _make
