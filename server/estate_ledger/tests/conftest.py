from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from estate_ledger.auth import get_current_user
from estate_ledger.config import BillingConfig
from estate_ledger.db import Base, get_db, get_session_factory
from estate_ledger.main import app
from estate_ledger.models import Resident, User
from estate_ledger.routers.billing import get_billing_config
from estate_ledger.seed_chart_of_accounts import seed_chart_of_accounts


@pytest.fixture(autouse=True)
def override_auth(request):
    if request.node.get_closest_marker("real_auth"):
        yield
        return

    app.dependency_overrides[get_current_user] = lambda: User(
        id=1,
        email="admin@estate.local",
        full_name="Test Admin",
        role="admin",
        is_active=True,
    )
    yield
    app.dependency_overrides.pop(get_current_user, None)


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def chart(db):
    seed_chart_of_accounts(db)
    db.commit()


@pytest.fixture()
def make_resident(db):
    def factory(
        unit_number: str,
        service_charge_minor: int | None = 50000,
        start_date: date | None = date(2023, 1, 1),
        account_status: str = "active",
    ) -> int:
        resident = Resident(
            unit_number=unit_number,
            name=f"Resident {unit_number}",
            account_status=account_status,
            service_charge_minor=service_charge_minor,
            start_date=start_date,
        )
        db.add(resident)
        db.commit()
        return resident.id

    return factory


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_billing_config] = lambda: BillingConfig()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.pop(get_db, None)
    app.dependency_overrides.pop(get_session_factory, None)
    app.dependency_overrides.pop(get_billing_config, None)
