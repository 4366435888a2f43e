from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.orm import Session

from depot.app.api.deps import get_audit_notifier, get_db
from depot.app.db.base import Base
from depot.app.db.models.models_v1 import Employee, Warehouse, Product, StockEntry
from depot.app.db.session import make_engine, make_session_factory
from depot.services.audit import AuditEvent


class RecordingAuditNotifier:
    def __init__(self):
        self.events: list[AuditEvent] = []

    def record(self, event: AuditEvent) -> None:
        self.events.append(event)


@pytest.fixture(scope="function")
def engine():
    """
    Base SQLite en mémoire, neuve pour chaque test.

    Même modèle que la prod (Base.metadata), FK actives.
    """
    eng = make_engine("sqlite://")
    Base.metadata.create_all(bind=eng)
    try:
        yield eng
    finally:
        Base.metadata.drop_all(bind=eng)
        eng.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture(scope="function")
def db_session(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


# ---------- Builders ----------
@pytest.fixture
def employee(db_session) -> Employee:
    emp = Employee(name="TEST-EMP")
    db_session.add(emp)
    db_session.commit()
    return emp


@pytest.fixture
def make_warehouse(db_session, employee):
    def _make(capacity=None, name="TEST-WH") -> Warehouse:
        wh = Warehouse(
            name=name,
            employee_id=employee.id,
            capacity=None if capacity is None else Decimal(str(capacity)),
        )
        db_session.add(wh)
        db_session.commit()
        return wh

    return _make


@pytest.fixture
def make_product(db_session):
    def _make(name: str, size=None) -> Product:
        p = Product(name=name, size=None if size is None else Decimal(str(size)))
        db_session.add(p)
        db_session.commit()
        return p

    return _make


@pytest.fixture
def put_stock(db_session):
    def _put(warehouse_id: int, product_id: int, quantity: int) -> StockEntry:
        entry = StockEntry(warehouse_id=warehouse_id, product_id=product_id, quantity=quantity)
        db_session.add(entry)
        db_session.commit()
        return entry

    return _put


@pytest.fixture
def stock_of(session_factory):
    """Lit le stock dans une session fraîche (pas de cache d'identité)."""

    def _read(warehouse_id: int, product_id: int) -> int | None:
        with session_factory() as s:
            return s.execute(
                select(StockEntry.quantity)
                .where(StockEntry.warehouse_id == warehouse_id)
                .where(StockEntry.product_id == product_id)
            ).scalar_one_or_none()

    return _read


# ---------- API ----------
@pytest.fixture
def audit_recorder() -> RecordingAuditNotifier:
    return RecordingAuditNotifier()


@pytest.fixture
def client(session_factory, audit_recorder):
    from depot.app.main import app

    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_audit_notifier] = lambda: audit_recorder
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
