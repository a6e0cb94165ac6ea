from datetime import date

import pytest
from fastapi.testclient import TestClient

from estate_ledger.billing.generator import generate_due_bills
from estate_ledger.config import BillingConfig
from estate_ledger.errors import (
    DuplicateUnitNumberError,
    InvalidResidentError,
    ResidentAlreadyBilledError,
    ResidentNotFoundError,
)
from estate_ledger.models import Resident
from estate_ledger.residents.service import (
    create_resident,
    get_resident,
    list_residents,
    set_account_status,
    update_resident,
)


def test_create_resident_registers_billing_data(db):
    resident = create_resident(
        db, " C4 ", name="Ada Obi", service_charge_minor=50000, start_date=date(2024, 3, 1)
    )
    db.commit()

    stored = get_resident(db, resident.id)
    assert stored.unit_number == "C4"
    assert stored.account_status == "active"
    assert (stored.service_charge_minor, stored.start_date) == (50000, date(2024, 3, 1))


def test_duplicate_unit_is_rejected(db):
    create_resident(db, "C4")
    with pytest.raises(DuplicateUnitNumberError):
        create_resident(db, "C4")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"service_charge_minor": -1},
        {"service_charge_minor": 10.5},
        {"account_status": "suspended"},
    ],
)
def test_invalid_registration_is_rejected(db, kwargs):
    with pytest.raises(InvalidResidentError):
        create_resident(db, "C4", **kwargs)
    assert db.query(Resident).count() == 0


def test_list_residents_filters_by_status(db):
    create_resident(db, "B2")
    create_resident(db, "A1", account_status="delinquent")
    create_resident(db, "C3")
    db.commit()

    assert [resident.unit_number for resident in list_residents(db)] == ["A1", "B2", "C3"]
    assert [resident.unit_number for resident in list_residents(db, account_status="active")] == ["B2", "C3"]


def test_missing_resident_raises(db):
    with pytest.raises(ResidentNotFoundError):
        get_resident(db, 404)


def test_status_change_controls_billing(db, session_factory, chart):
    resident = create_resident(db, "D1", service_charge_minor=50000, start_date=date(2023, 1, 1))
    set_account_status(db, resident.id, "inactive")
    db.commit()

    skipped = generate_due_bills(session_factory, BillingConfig(), date(2024, 6, 1))
    assert skipped.details[0].reason == "inactive"

    set_account_status(db, resident.id, "active")
    db.commit()
    billed = generate_due_bills(session_factory, BillingConfig(), date(2024, 6, 1))
    assert billed.bills_generated == 1


def test_start_date_is_fixed_once_billed(db, session_factory, chart):
    resident = create_resident(db, "E1", service_charge_minor=50000, start_date=date(2023, 1, 1))
    update_resident(db, resident.id, start_date=date(2023, 2, 1))
    db.commit()

    generate_due_bills(session_factory, BillingConfig(), date(2024, 6, 1))

    with pytest.raises(ResidentAlreadyBilledError):
        update_resident(db, resident.id, start_date=date(2023, 6, 1))
    updated = update_resident(db, resident.id, service_charge_minor=65000, name="New Owner")
    assert (updated.service_charge_minor, updated.name) == (65000, "New Owner")
    assert updated.start_date == date(2023, 2, 1)


def test_resident_endpoints(client: TestClient):
    created = client.post(
        "/api/admin/residents",
        json={"unit_number": "F6", "name": "Resident F6", "service_charge": "750.00", "start_date": "2024-01-01"},
    )
    assert created.status_code == 201
    body = created.json()
    assert body["service_charge"] == "750.00"
    assert body["account_status"] == "active"

    duplicate = client.post("/api/admin/residents", json={"unit_number": "F6"})
    assert duplicate.status_code == 409

    patched = client.patch(f"/api/admin/residents/{body['id']}", json={"service_charge": "800.00"})
    assert patched.status_code == 200
    assert patched.json()["service_charge"] == "800.00"
    assert patched.json()["start_date"] == "2024-01-01"

    status_change = client.patch(f"/api/admin/residents/{body['id']}/status", json={"account_status": "delinquent"})
    assert status_change.json()["account_status"] == "delinquent"

    assert client.get("/api/admin/residents", params={"status": "active"}).json() == []
    assert client.get(f"/api/admin/residents/{body['id']}").json()["unit_number"] == "F6"
    assert client.get("/api/admin/residents/999").status_code == 404
