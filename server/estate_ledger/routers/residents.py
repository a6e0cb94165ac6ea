from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from estate_ledger.auth import require_admin
from estate_ledger.db import get_db
from estate_ledger.models import Resident
from estate_ledger.residents import schemas
from estate_ledger.residents import service as residents_service
from estate_ledger.utils import from_minor_units, to_minor_units

router = APIRouter(prefix="/api/admin/residents", tags=["residents"], dependencies=[Depends(require_admin)])


def _resident_response(resident: Resident) -> schemas.ResidentResponse:
    return schemas.ResidentResponse(
        id=resident.id,
        unit_number=resident.unit_number,
        name=resident.name,
        account_status=resident.account_status,
        service_charge=(
            from_minor_units(resident.service_charge_minor) if resident.service_charge_minor is not None else None
        ),
        start_date=resident.start_date,
        created_at=resident.created_at,
    )


@router.get("", response_model=List[schemas.ResidentResponse])
def list_residents(
    account_status: Optional[schemas.AccountStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
):
    residents = residents_service.list_residents(db, account_status=account_status)
    return [_resident_response(resident) for resident in residents]


@router.post("", response_model=schemas.ResidentResponse, status_code=status.HTTP_201_CREATED)
def create_resident(payload: schemas.ResidentCreate, db: Session = Depends(get_db)):
    resident = residents_service.create_resident(
        db,
        payload.unit_number,
        name=payload.name,
        service_charge_minor=to_minor_units(payload.service_charge) if payload.service_charge is not None else None,
        start_date=payload.start_date,
        account_status=payload.account_status,
    )
    db.commit()
    db.refresh(resident)
    return _resident_response(resident)


@router.get("/{resident_id}", response_model=schemas.ResidentResponse)
def get_resident(resident_id: int, db: Session = Depends(get_db)):
    return _resident_response(residents_service.get_resident(db, resident_id))


@router.patch("/{resident_id}", response_model=schemas.ResidentResponse)
def update_resident(resident_id: int, payload: schemas.ResidentUpdate, db: Session = Depends(get_db)):
    data = payload.model_dump(exclude_unset=True)
    service_charge = data.get("service_charge")
    resident = residents_service.update_resident(
        db,
        resident_id,
        unit_number=data.get("unit_number"),
        name=data.get("name"),
        service_charge_minor=to_minor_units(service_charge) if service_charge is not None else None,
        start_date=data.get("start_date"),
    )
    db.commit()
    db.refresh(resident)
    return _resident_response(resident)


@router.patch("/{resident_id}/status", response_model=schemas.ResidentResponse)
def update_resident_status(resident_id: int, payload: schemas.ResidentStatusUpdate, db: Session = Depends(get_db)):
    resident = residents_service.set_account_status(db, resident_id, payload.account_status)
    db.commit()
    db.refresh(resident)
    return _resident_response(resident)
