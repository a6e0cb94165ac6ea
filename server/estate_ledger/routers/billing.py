from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session, sessionmaker

from estate_ledger.auth import require_admin
from estate_ledger.billing import schemas
from estate_ledger.billing.generator import BillingCycleGenerator
from estate_ledger.billing.payments import mark_overdue_bills, record_bill_payment
from estate_ledger.config import BillingConfig, get_billing_max_workers
from estate_ledger.db import get_db, get_session_factory
from estate_ledger.errors import BillNotFoundError
from estate_ledger.models import Bill
from estate_ledger.utils import from_minor_units, to_minor_units

router = APIRouter(prefix="/api/admin", tags=["billing"], dependencies=[Depends(require_admin)])


def get_billing_config() -> BillingConfig:
    return BillingConfig.from_env()


def _bill_response(bill: Bill) -> schemas.BillResponse:
    return schemas.BillResponse(
        id=bill.id,
        bill_number=bill.bill_number,
        resident_id=bill.resident_id,
        billing_type=bill.billing_type,
        description=bill.description,
        period_start=bill.period_start,
        period_end=bill.period_end,
        amount=from_minor_units(bill.amount_minor),
        due_date=bill.due_date,
        status=bill.status,
        payment_status=bill.payment_status,
        total_paid=from_minor_units(bill.total_paid_minor),
        balance=from_minor_units(bill.balance_minor),
        journal_entry_id=bill.journal_entry_id,
        created_at=bill.created_at,
    )


@router.post("/billing/generate-service-charges", response_model=schemas.BillingRunResponse)
def generate_service_charges(
    session_factory: sessionmaker = Depends(get_session_factory),
    config: BillingConfig = Depends(get_billing_config),
):
    generator = BillingCycleGenerator(session_factory, config)
    result = generator.generate_due_bills(max_workers=get_billing_max_workers())
    return schemas.BillingRunResponse(
        as_of=result.as_of,
        success=result.success,
        failed=result.failed,
        skipped=result.skipped,
        bills_generated=result.bills_generated,
        message=result.message,
        details=[
            schemas.SubjectResultResponse(
                subject_id=detail.subject_id,
                unit_number=detail.unit_number,
                status=detail.status,
                reason=detail.reason,
                bill_ids=detail.bill_ids,
            )
            for detail in result.details
        ],
    )


@router.post("/billing/mark-overdue", response_model=schemas.OverdueRunResponse)
def mark_overdue(as_of: Optional[date] = Query(None, alias="asOf"), db: Session = Depends(get_db)):
    as_of = as_of or date.today()
    count = mark_overdue_bills(db, as_of)
    db.commit()
    return schemas.OverdueRunResponse(as_of=as_of, marked_overdue=count)


@router.get("/bills", response_model=list[schemas.BillResponse])
def list_bills(resident_id: Optional[int] = Query(None, alias="residentId"), db: Session = Depends(get_db)):
    query = db.query(Bill).order_by(Bill.resident_id.asc(), Bill.period_start.asc())
    if resident_id is not None:
        query = query.filter(Bill.resident_id == resident_id)
    return [_bill_response(bill) for bill in query.all()]


@router.post("/bills/{bill_id}/payments", response_model=schemas.BillResponse, status_code=status.HTTP_201_CREATED)
def create_bill_payment(
    bill_id: int,
    payload: schemas.BillPaymentCreate,
    db: Session = Depends(get_db),
    config: BillingConfig = Depends(get_billing_config),
):
    record_bill_payment(
        db,
        bill_id,
        to_minor_units(payload.amount),
        payload.payment_date,
        cash_account_number=payload.cash_account_number,
        receivable_account_number=config.receivable_account_number,
        reference=payload.reference,
    )
    db.commit()
    bill = db.query(Bill).filter(Bill.id == bill_id).first()
    if bill is None:
        raise BillNotFoundError(f"Bill {bill_id} not found.")
    return _bill_response(bill)
