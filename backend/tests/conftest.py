"""
Pytest configuration and shared fixtures for the Surat Jalan test suite.
"""
import itertools
import os
from datetime import date
from typing import Callable, Generator

# Point the app at SQLite before any suratjalan module builds its engine
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from suratjalan import models  # noqa: F401
from suratjalan.database import Base, build_engine, get_db
from suratjalan.models.purchase_order import PurchaseOrder
from suratjalan.schemas.delivery_note import DeliveryNoteCreate, DeliveryNoteResponse
from suratjalan.services.delivery_note_cache import DeliveryNoteCache
from suratjalan.services.purchase_order_service import compute_total_value
from suratjalan.services.reconciliation_service import ReconciliationService
from suratjalan.services.store_gateway import StoreGateway


@pytest.fixture
def engine():
    """Fresh in-memory database per test."""
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


@pytest.fixture
def db(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def gateway(session_factory) -> StoreGateway:
    return StoreGateway(session_factory)


@pytest.fixture
def reconciliation(gateway) -> ReconciliationService:
    return ReconciliationService(gateway)


@pytest.fixture
def note_cache(gateway, reconciliation) -> DeliveryNoteCache:
    return DeliveryNoteCache(
        gateway,
        reconciliation,
        reconcile_on_every_change=True,
        debounce_seconds=0.05,
    )


@pytest.fixture
def make_po(db) -> Callable[..., PurchaseOrder]:
    """Create a purchase order row with nothing shipped yet."""

    def _make_po(po_number: str, total_tonnage: float = 100.0, **overrides) -> PurchaseOrder:
        values = dict(
            po_number=po_number,
            po_date=date(2025, 5, 1),
            buyer_name="PT Sinar Laut",
            buyer_address="Jl. Pelabuhan 12, Surabaya",
            product_type="CPO",
            total_tonnage=total_tonnage,
            price_per_ton=12_000_000,
            total_value=compute_total_value(total_tonnage, 12_000_000),
            shipped_tonnage=0,
            remaining_tonnage=total_tonnage,
            status="Active",
        )
        values.update(overrides)
        po = PurchaseOrder(**values)
        db.add(po)
        db.commit()
        db.refresh(po)
        return po

    return _make_po


@pytest.fixture
def make_note(gateway) -> Callable[..., DeliveryNoteResponse]:
    """Insert a delivery note straight through the gateway (no cache, no reconciliation)."""
    counter = itertools.count(1)

    def _make_note(po_number=None, net_weight=None, status=None, **overrides) -> DeliveryNoteResponse:
        number = next(counter)
        values = dict(
            date=date(2025, 6, 2),
            vehicle_plate=f"L {1000 + number} AB",
            driver_name="Slamet",
            delivery_note_number=f"SJ-{number:05d}",
            destination="Gresik",
            po_number=po_number,
            net_weight=net_weight,
        )
        values.update(overrides)
        note = gateway.insert_delivery_note(DeliveryNoteCreate(**values))
        if status is not None:
            note = gateway.patch_delivery_note(note.id, {"status": status})
        return note

    return _make_note


@pytest.fixture
def po_row(session_factory) -> Callable[[str], PurchaseOrder]:
    """Read a PO fresh from the database."""

    def _po_row(po_number: str) -> PurchaseOrder:
        session = session_factory()
        try:
            return session.query(PurchaseOrder).filter(PurchaseOrder.po_number == po_number).one()
        finally:
            session.close()

    return _po_row


@pytest.fixture
def headers() -> Callable[[str], dict]:
    def _headers(role: str, user_id: str = None) -> dict:
        result = {"X-User-Role": role}
        if user_id:
            result["X-User-Id"] = user_id
        return result

    return _headers


@pytest.fixture
def client(session_factory, note_cache):
    """FastAPI test client wired to the in-memory database."""
    from fastapi.testclient import TestClient

    from suratjalan.dependencies import get_note_cache, get_reconciliation_service
    from suratjalan.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    async def override_get_note_cache():
        await note_cache.ensure_loaded()
        return note_cache

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_note_cache] = override_get_note_cache
    app.dependency_overrides[get_reconciliation_service] = lambda: note_cache.reconciliation

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
