"""
tests/conftest.py -- Shared test fixtures for ParcelTrack integration tests.

This module provides:
  - _make_test_stores(): creates isolated in-memory stores loaded with DEMO_DATA
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - api_client: TestClient plus customer and admin tokens

Design: the stores use the plain "sqlite://" URL, which core.database maps to
a single shared connection (StaticPool). TestClient runs sync route handlers
in a thread pool, and every worker thread has to see the same tables.

DEBUG and BCRYPT_ROUNDS must be set before any auth module import so
get_settings() generates a SECRET_KEY instead of raising ValueError, and
seed hashing stays fast.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass

# CRITICAL: set before any auth/core import (get_settings() is lru_cached).
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from api.seed import DEMO_DATA, seed_stores
from auth.store import UserStore
from auth.tokens import create_access_token
from shipments.store import ShipmentStore

CUSTOMER_EMAIL = "demo@parceltrack.example"
ADMIN_EMAIL = "admin@parceltrack.example"


@dataclass
class ApiContext:
    client: TestClient
    user_store: UserStore
    shipment_store: ShipmentStore
    customer_token: str
    customer_id: int
    admin_token: str
    admin_id: int


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores() -> tuple[UserStore, ShipmentStore]:
    """Create fresh in-memory stores loaded with the demo dataset."""
    user_store = UserStore(db_url="sqlite://")
    shipment_store = ShipmentStore(db_url="sqlite://")
    seed_stores(user_store, shipment_store, DEMO_DATA)
    return user_store, shipment_store


def _patch_lifespan(user_store: UserStore, shipment_store: ShipmentStore):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.shipment_store = shipment_store
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    store = UserStore(db_url="sqlite://")
    yield store
    store.close()


@pytest.fixture
def shipment_store() -> Generator[ShipmentStore, None, None]:
    store = ShipmentStore(db_url="sqlite://")
    yield store
    store.close()


@pytest.fixture(scope="module")
def api_client() -> Generator[ApiContext, None, None]:
    """Yield an ApiContext for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so
    tests hit real route handlers but use isolated, pre-seeded stores. One
    set of stores per test module: tests that mutate state create their own
    accounts and shipments rather than relying on ordering.
    """
    user_store, shipment_store = _make_test_stores()

    customer = user_store.get_by_email(CUSTOMER_EMAIL)
    admin = user_store.get_by_email(ADMIN_EMAIL)
    customer_token = create_access_token(customer.id, customer.email, customer.role, expire_seconds=3600)
    admin_token = create_access_token(admin.id, admin.email, admin.role, expire_seconds=3600)

    app.router.lifespan_context = _patch_lifespan(user_store, shipment_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield ApiContext(
            client=client,
            user_store=user_store,
            shipment_store=shipment_store,
            customer_token=customer_token,
            customer_id=customer.id,
            admin_token=admin_token,
            admin_id=admin.id,
        )

    shipment_store.close()
    user_store.close()
