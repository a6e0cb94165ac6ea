import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from estate_ledger.errors import (
    DuplicateUnitNumberError,
    InvalidResidentError,
    ResidentAlreadyBilledError,
    ResidentNotFoundError,
)
from estate_ledger.models import Bill, Resident

logger = logging.getLogger(__name__)

RESIDENT_STATUSES = ("active", "inactive", "delinquent")


def _normalize_unit(unit_number: str) -> str:
    unit_number = (unit_number or "").strip()
    if not unit_number:
        raise InvalidResidentError("Unit number is required.")
    return unit_number


def _validate_status(account_status: str) -> str:
    if account_status not in RESIDENT_STATUSES:
        raise InvalidResidentError(
            f"Invalid account status '{account_status}'. Expected one of: {', '.join(RESIDENT_STATUSES)}."
        )
    return account_status


def _validate_charge(service_charge_minor: Optional[int]) -> Optional[int]:
    if service_charge_minor is None:
        return None
    if not isinstance(service_charge_minor, int) or isinstance(service_charge_minor, bool):
        raise InvalidResidentError("Service charge must be whole minor currency units.")
    if service_charge_minor < 0:
        raise InvalidResidentError("Service charge cannot be negative.")
    return service_charge_minor


def _ensure_unit_available(db: Session, unit_number: str, resident_id: Optional[int] = None) -> None:
    query = db.query(Resident.id).filter(Resident.unit_number == unit_number)
    if resident_id is not None:
        query = query.filter(Resident.id != resident_id)
    if query.first() is not None:
        raise DuplicateUnitNumberError(f"Unit '{unit_number}' is already registered.")


def resident_has_bills(db: Session, resident_id: int) -> bool:
    return db.query(Bill.id).filter(Bill.resident_id == resident_id).first() is not None


def create_resident(
    db: Session,
    unit_number: str,
    *,
    name: Optional[str] = None,
    service_charge_minor: Optional[int] = None,
    start_date: Optional[date] = None,
    account_status: str = "active",
    user_id: Optional[int] = None,
) -> Resident:
    unit_number = _normalize_unit(unit_number)
    _ensure_unit_available(db, unit_number)
    resident = Resident(
        unit_number=unit_number,
        name=name.strip() if name else None,
        account_status=_validate_status(account_status),
        service_charge_minor=_validate_charge(service_charge_minor),
        start_date=start_date,
        user_id=user_id,
    )
    db.add(resident)
    db.flush()
    logger.info("Registered resident %s for unit %s", resident.id, resident.unit_number)
    return resident


def get_resident(db: Session, resident_id: int) -> Resident:
    resident = db.query(Resident).filter(Resident.id == resident_id).first()
    if resident is None:
        raise ResidentNotFoundError(f"Resident {resident_id} not found.")
    return resident


def list_residents(db: Session, *, account_status: Optional[str] = None) -> list[Resident]:
    query = db.query(Resident)
    if account_status is not None:
        query = query.filter(Resident.account_status == _validate_status(account_status))
    return query.order_by(Resident.unit_number.asc()).all()


def update_resident(
    db: Session,
    resident_id: int,
    *,
    unit_number: Optional[str] = None,
    name: Optional[str] = None,
    service_charge_minor: Optional[int] = None,
    start_date: Optional[date] = None,
) -> Resident:
    """Change registration details; ``None`` leaves a field as it is.

    Once a resident has been billed the next cycle starts where the last
    bill ended, so the start date is fixed from then on.
    """
    resident = get_resident(db, resident_id)
    if unit_number is not None:
        unit_number = _normalize_unit(unit_number)
        _ensure_unit_available(db, unit_number, resident.id)
        resident.unit_number = unit_number
    if name is not None:
        resident.name = name.strip()
    if service_charge_minor is not None:
        resident.service_charge_minor = _validate_charge(service_charge_minor)
    if start_date is not None and start_date != resident.start_date:
        if resident_has_bills(db, resident.id):
            raise ResidentAlreadyBilledError(
                f"Unit '{resident.unit_number}' has already been billed; its start date cannot change."
            )
        resident.start_date = start_date
    db.flush()
    return resident


def set_account_status(db: Session, resident_id: int, account_status: str) -> Resident:
    resident = get_resident(db, resident_id)
    resident.account_status = _validate_status(account_status)
    db.flush()
    logger.info("Unit %s account status set to %s", resident.unit_number, resident.account_status)
    return resident
