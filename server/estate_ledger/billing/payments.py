import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from estate_ledger.accounting.posting import build_payment_lines, post_journal_entry
from estate_ledger.errors import BillNotFoundError, InvalidPaymentError
from estate_ledger.models import Bill, BillPayment

logger = logging.getLogger(__name__)


def record_bill_payment(
    db: Session,
    bill_id: int,
    amount: int,
    payment_date: date,
    *,
    cash_account_number: str,
    receivable_account_number: str,
    reference: Optional[str] = None,
) -> BillPayment:
    """Apply a payment to a bill: debit cash, credit receivables, update the bill."""
    bill = db.query(Bill).filter(Bill.id == bill_id).with_for_update().first()
    if bill is None:
        raise BillNotFoundError(f"Bill {bill_id} not found.")
    if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
        raise InvalidPaymentError("Payment amount must be a positive number of minor units.")
    if amount > bill.balance_minor:
        raise InvalidPaymentError(
            f"Payment of {amount} exceeds the outstanding balance of {bill.balance_minor} on bill {bill.bill_number}."
        )

    entry = post_journal_entry(
        db,
        entry_date=payment_date,
        description=f"Payment received - {bill.bill_number}",
        lines=build_payment_lines(
            cash_account_number=cash_account_number,
            receivable_account_number=receivable_account_number,
            amount=amount,
            description=f"Payment for {bill.bill_number}",
        ),
        reference_type="bill_payment",
        reference_id=bill.bill_number,
    )
    payment = BillPayment(
        bill_id=bill.id,
        amount_minor=amount,
        payment_date=payment_date,
        reference=reference,
        journal_entry_id=entry.id,
    )
    db.add(payment)

    bill.total_paid_minor += amount
    bill.balance_minor -= amount
    if bill.balance_minor == 0:
        bill.status = "paid"
        bill.payment_status = "full_payment"
    else:
        bill.status = "partial"
        bill.payment_status = "partial_payment"
    db.flush()
    logger.info("Recorded payment of %s on bill %s; balance now %s", amount, bill.bill_number, bill.balance_minor)
    return payment


def mark_overdue_bills(db: Session, as_of: date) -> int:
    """Flag unpaid bills whose due date has passed. Never touches the ledger."""
    bills = (
        db.query(Bill)
        .filter(Bill.status.in_(("pending", "partial")), Bill.due_date < as_of)
        .all()
    )
    for bill in bills:
        bill.status = "overdue"
    db.flush()
    if bills:
        logger.info("Marked %s bill(s) overdue as of %s", len(bills), as_of)
    return len(bills)
