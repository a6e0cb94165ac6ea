from datetime import date, timedelta

from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session

from estate_ledger.models import Bill, Resident

BILLING_CYCLE_MONTHS = 12


def period_end_for(period_start: date) -> date:
    """End (exclusive) of the 12-month cycle starting on ``period_start``."""
    return period_start + relativedelta(months=BILLING_CYCLE_MONTHS)


def due_date_for(period_end: date, grace_days: int) -> date:
    return period_end + timedelta(days=grace_days)


def next_period_start(db: Session, resident: Resident) -> date:
    """The last persisted bill's end, or the resident's start date for a first bill."""
    last_bill = (
        db.query(Bill)
        .filter(Bill.resident_id == resident.id)
        .order_by(Bill.period_end.desc())
        .first()
    )
    if last_bill is not None:
        return last_bill.period_end
    return resident.start_date
