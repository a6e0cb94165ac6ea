"""Automated service charge billing.

A run walks every resident and raises one bill per completed 12-month
cycle that has not been billed yet. Each resident is processed in its own
session and transaction, so a bill and its journal entry are committed
together and a failure for one resident never touches another.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from estate_ledger.accounts.classification import AccountClassification
from estate_ledger.accounting.posting import build_service_charge_lines, post_journal_entry
from estate_ledger.billing.periods import due_date_for, next_period_start, period_end_for
from estate_ledger.config import BillingConfig
from estate_ledger.errors import (
    DuplicateBillingPeriodError,
    LedgerError,
    MissingRequiredAccountError,
    ResidentNotFoundError,
)
from estate_ledger.models import Account, Bill, Resident
from estate_ledger.utils import from_minor_units

logger = logging.getLogger(__name__)

STATUS_SUCCESS = "success"
STATUS_SKIPPED = "skipped"
STATUS_FAILED = "failed"

REASON_INACTIVE = "inactive"
REASON_MISSING_DATA = "missing billing data"
REASON_CANCELLED = "cancelled"

# Constraint names as reported by SQLite and PostgreSQL for a bill that already
# exists for the same resident and period.
DUPLICATE_PERIOD_MARKERS = (
    "uq_bill_resident_period_start",
    "bills.resident_id, bills.period_start",
    "bills.bill_number",
    "bills_bill_number_key",
)


@dataclass
class SubjectResult:
    subject_id: int
    unit_number: Optional[str]
    status: str
    reason: Optional[str] = None
    bill_ids: list[int] = field(default_factory=list)


@dataclass
class BillingRunResult:
    as_of: date
    details: list[SubjectResult]

    def _count(self, status: str) -> int:
        return sum(1 for detail in self.details if detail.status == status)

    @property
    def success(self) -> int:
        return self._count(STATUS_SUCCESS)

    @property
    def failed(self) -> int:
        return self._count(STATUS_FAILED)

    @property
    def skipped(self) -> int:
        return self._count(STATUS_SKIPPED)

    @property
    def bills_generated(self) -> int:
        return sum(len(detail.bill_ids) for detail in self.details)

    @property
    def message(self) -> str:
        return (
            f"Generated {self.bills_generated} bill(s) for {self.success} resident(s). "
            f"{self.failed} failed, {self.skipped} skipped."
        )


def resolve_billing_accounts(db: Session, config: BillingConfig) -> tuple[Account, Account]:
    receivable = _required_account(
        db, config.receivable_account_number, AccountClassification.ASSET, "Accounts Receivable"
    )
    fund = _required_account(
        db, config.fund_account_number, AccountClassification.LIABILITY, "Estate Management Fund"
    )
    return receivable, fund


def _required_account(
    db: Session, account_number: str, classification: AccountClassification, label: str
) -> Account:
    account = db.query(Account).filter(Account.account_number == account_number).first()
    if account is None:
        raise MissingRequiredAccountError(
            f"{label} account ({account_number}) not found. Please create it in the chart of accounts."
        )
    if account.account_type != classification.value:
        raise MissingRequiredAccountError(
            f"{label} account ({account_number}) must be a {classification.value} account, "
            f"found {account.account_type}."
        )
    if not account.is_active:
        raise MissingRequiredAccountError(f"{label} account ({account_number}) is inactive.")
    return account


def is_duplicate_period(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    return any(marker in message for marker in DUPLICATE_PERIOD_MARKERS)


def create_service_charge_bill(
    db: Session,
    resident: Resident,
    period_start: date,
    receivable: Account,
    fund: Account,
    config: BillingConfig,
    entry_date: date,
) -> Bill:
    """Post the AR / fund entry for one cycle and create the bill pointing at it.

    The entry is dated on the run date, so a catch-up run never backdates
    postings into earlier periods.
    """
    period_end = period_end_for(period_start)
    amount = resident.service_charge_minor
    bill_number = f"SC-{resident.id:05d}-{period_start:%Y%m%d}"

    entry = post_journal_entry(
        db,
        entry_date=entry_date,
        description=f"Service Charge Bill - {resident.unit_number} ({bill_number})",
        lines=build_service_charge_lines(
            receivable_account_number=receivable.account_number,
            fund_account_number=fund.account_number,
            amount=amount,
            unit_number=resident.unit_number,
        ),
        reference_type="bill",
        reference_id=bill_number,
    )

    bill = Bill(
        bill_number=bill_number,
        resident_id=resident.id,
        billing_type=config.billing_type,
        description=(
            f"Service Charge for {resident.unit_number} - Period: "
            f"{period_start.isoformat()} to {period_end.isoformat()}"
        ),
        period_start=period_start,
        period_end=period_end,
        amount_minor=amount,
        due_date=due_date_for(period_end, config.grace_days),
        status="pending",
        payment_status="unpaid",
        total_paid_minor=0,
        balance_minor=amount,
        journal_entry_id=entry.id,
    )
    db.add(bill)
    db.flush()
    logger.info(
        "Created bill %s for unit %s: %s to %s, amount %s",
        bill.bill_number,
        resident.unit_number,
        period_start,
        period_end,
        from_minor_units(amount),
    )
    return bill


def bill_resident(db: Session, resident_id: int, as_of: date, config: BillingConfig) -> SubjectResult:
    """Raise every bill due for one resident inside the caller's transaction."""
    resident = db.query(Resident).filter(Resident.id == resident_id).with_for_update().first()
    if resident is None:
        raise ResidentNotFoundError(f"Resident {resident_id} not found.")

    if resident.account_status != "active":
        logger.debug("Skipping unit %s: account status %s", resident.unit_number, resident.account_status)
        return SubjectResult(resident.id, resident.unit_number, STATUS_SKIPPED, REASON_INACTIVE)
    if not resident.service_charge_minor or resident.start_date is None:
        logger.debug("Skipping unit %s: no service charge or start date", resident.unit_number)
        return SubjectResult(resident.id, resident.unit_number, STATUS_SKIPPED, REASON_MISSING_DATA)

    receivable, fund = resolve_billing_accounts(db, config)

    result = SubjectResult(resident.id, resident.unit_number, STATUS_SUCCESS)
    period_start = next_period_start(db, resident)
    while period_end_for(period_start) <= as_of:
        bill = create_service_charge_bill(db, resident, period_start, receivable, fund, config, as_of)
        result.bill_ids.append(bill.id)
        period_start = bill.period_end
    return result


class BillingCycleGenerator:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        config: BillingConfig,
        *,
        max_attempts: int = 3,
    ):
        self.session_factory = session_factory
        self.config = config
        self.max_attempts = max_attempts

    def generate_due_bills(
        self,
        as_of: Optional[date] = None,
        *,
        max_workers: int = 1,
        cancel_event: Optional[threading.Event] = None,
    ) -> BillingRunResult:
        as_of = as_of or date.today()
        with self.session_factory() as db:
            rows = db.query(Resident.id, Resident.unit_number).order_by(Resident.id).all()
        subjects = [(row.id, row.unit_number) for row in rows]

        def run(subject: tuple[int, str]) -> SubjectResult:
            return self._run_subject(subject[0], subject[1], as_of, cancel_event)

        if max_workers > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                details = list(executor.map(run, subjects))
        else:
            details = [run(subject) for subject in subjects]

        result = BillingRunResult(as_of=as_of, details=details)
        logger.info(
            "Billing run as of %s: %s success, %s failed, %s skipped, %s bill(s) generated",
            as_of,
            result.success,
            result.failed,
            result.skipped,
            result.bills_generated,
        )
        return result

    def _run_subject(
        self,
        subject_id: int,
        unit_number: str,
        as_of: date,
        cancel_event: Optional[threading.Event],
    ) -> SubjectResult:
        if cancel_event is not None and cancel_event.is_set():
            return SubjectResult(subject_id, unit_number, STATUS_SKIPPED, REASON_CANCELLED)

        conflict: Optional[DuplicateBillingPeriodError] = None
        for attempt in range(1, self.max_attempts + 1):
            with self.session_factory() as db:
                try:
                    result = bill_resident(db, subject_id, as_of, self.config)
                    db.commit()
                    return result
                except IntegrityError as exc:
                    db.rollback()
                    if not is_duplicate_period(exc):
                        logger.exception("Integrity error billing unit %s", unit_number)
                        return SubjectResult(subject_id, unit_number, STATUS_FAILED, f"Database error: {exc.orig}")
                    # Another writer committed this period first; retrying re-reads the latest bill.
                    conflict = DuplicateBillingPeriodError(f"Billing period already exists: {exc.orig}")
                    logger.warning("Conflict billing unit %s (attempt %s): %s", unit_number, attempt, exc.orig)
                except LedgerError as exc:
                    db.rollback()
                    logger.warning("Billing failed for unit %s: %s", unit_number, exc)
                    return SubjectResult(subject_id, unit_number, STATUS_FAILED, str(exc))
                except SQLAlchemyError as exc:
                    db.rollback()
                    logger.exception("Database error billing unit %s", unit_number)
                    return SubjectResult(subject_id, unit_number, STATUS_FAILED, f"Database error: {exc}")
                except Exception as exc:
                    db.rollback()
                    logger.exception("Unexpected error billing unit %s", unit_number)
                    return SubjectResult(subject_id, unit_number, STATUS_FAILED, str(exc) or type(exc).__name__)
        return SubjectResult(subject_id, unit_number, STATUS_FAILED, str(conflict))


def generate_due_bills(
    session_factory: Callable[[], Session],
    config: BillingConfig,
    as_of: Optional[date] = None,
    *,
    max_workers: int = 1,
    cancel_event: Optional[threading.Event] = None,
) -> BillingRunResult:
    generator = BillingCycleGenerator(session_factory, config)
    return generator.generate_due_bills(as_of, max_workers=max_workers, cancel_event=cancel_event)
