from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session, selectinload

from estate_ledger.accounting import schemas
from estate_ledger.accounting.posting import JournalLineInput, post_journal_entry
from estate_ledger.auth import require_accountant
from estate_ledger.db import get_db
from estate_ledger.errors import JournalEntryNotFoundError
from estate_ledger.models import JournalEntry, JournalLine
from estate_ledger.utils import from_minor_units, to_minor_units

router = APIRouter(
    prefix="/api/accountant/journal-entries",
    tags=["journal-entries"],
    dependencies=[Depends(require_accountant)],
)


def _to_line_input(line: schemas.JournalLineCreate) -> JournalLineInput:
    amount = to_minor_units(line.amount)
    if line.direction == "DEBIT":
        return JournalLineInput(account_number=line.account_number, debit=amount, description=line.description)
    return JournalLineInput(account_number=line.account_number, credit=amount, description=line.description)


def _to_response(entry: JournalEntry) -> schemas.JournalEntryResponse:
    lines: list[schemas.JournalLineResponse] = []
    for line in entry.lines:
        direction = "DEBIT" if line.debit_minor > 0 else "CREDIT"
        lines.append(
            schemas.JournalLineResponse(
                id=line.id,
                line_number=line.line_number,
                account_id=line.account_id,
                account_number=line.account.account_number,
                direction=direction,
                amount=from_minor_units(line.debit_minor or line.credit_minor),
                description=line.description,
            )
        )
    return schemas.JournalEntryResponse(
        id=entry.id,
        entry_number=entry.entry_number,
        date=entry.entry_date,
        description=entry.description,
        reference_type=entry.reference_type,
        reference_id=entry.reference_id,
        total_debit=from_minor_units(entry.total_debit_minor),
        total_credit=from_minor_units(entry.total_credit_minor),
        posted_at=entry.posted_at,
        lines=lines,
    )


def _load_entry(db: Session, entry_id: int) -> JournalEntry:
    entry = (
        db.query(JournalEntry)
        .options(selectinload(JournalEntry.lines).selectinload(JournalLine.account))
        .filter(JournalEntry.id == entry_id)
        .first()
    )
    if entry is None:
        raise JournalEntryNotFoundError(f"Journal entry {entry_id} not found.")
    return entry


@router.post("", response_model=schemas.JournalEntryResponse, status_code=status.HTTP_201_CREATED)
def create_journal_entry(payload: schemas.JournalEntryCreate, db: Session = Depends(get_db)):
    entry = post_journal_entry(
        db,
        entry_date=payload.date,
        description=payload.description,
        lines=[_to_line_input(line) for line in payload.lines],
        reference_type=payload.reference_type or "manual",
        reference_id=payload.reference_id,
    )
    db.commit()
    return _to_response(_load_entry(db, entry.id))


@router.get("", response_model=list[schemas.JournalEntryResponse])
def list_journal_entries(
    limit: int = Query(50, ge=1, le=200),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    reference_id: Optional[str] = Query(None, alias="referenceId"),
    db: Session = Depends(get_db),
):
    query = (
        db.query(JournalEntry)
        .options(selectinload(JournalEntry.lines).selectinload(JournalLine.account))
        .order_by(JournalEntry.entry_date.desc(), JournalEntry.id.desc())
    )
    if start_date:
        query = query.filter(JournalEntry.entry_date >= start_date)
    if end_date:
        query = query.filter(JournalEntry.entry_date <= end_date)
    if reference_id:
        query = query.filter(JournalEntry.reference_id == reference_id)
    return [_to_response(entry) for entry in query.limit(limit).all()]


@router.get("/{entry_id}", response_model=schemas.JournalEntryResponse)
def get_journal_entry(entry_id: int, db: Session = Depends(get_db)):
    return _to_response(_load_entry(db, entry_id))
