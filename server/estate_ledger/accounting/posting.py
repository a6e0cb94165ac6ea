import logging
import uuid
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from estate_ledger.errors import (
    InactiveAccountError,
    InvalidLineError,
    UnbalancedEntryError,
    UnknownAccountError,
)
from estate_ledger.models import Account, JournalEntry, JournalLine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JournalLineInput:
    account_number: str
    debit: int = 0
    credit: int = 0
    description: str | None = None


def _is_amount(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_line(line: JournalLineInput, position: int) -> None:
    if not _is_amount(line.debit) or not _is_amount(line.credit):
        raise InvalidLineError(f"Line {position}: amounts must be whole minor currency units.")
    if line.debit < 0 or line.credit < 0:
        raise InvalidLineError(f"Line {position}: amounts cannot be negative.")
    if (line.debit > 0) == (line.credit > 0):
        raise InvalidLineError(f"Line {position}: exactly one of debit or credit must be greater than zero.")


def ensure_balanced(lines: List[JournalLineInput]) -> None:
    total_debits = sum(line.debit for line in lines)
    total_credits = sum(line.credit for line in lines)
    if total_debits != total_credits:
        raise UnbalancedEntryError(
            f"Journal entry is unbalanced: debits={total_debits} credits={total_credits}"
        )


def _resolve_accounts(db: Session, account_numbers: set[str]) -> dict[str, Account]:
    accounts = db.query(Account).filter(Account.account_number.in_(account_numbers)).all()
    by_number = {account.account_number: account for account in accounts}
    missing = sorted(account_numbers - by_number.keys())
    if missing:
        raise UnknownAccountError(f"Unknown account(s): {', '.join(missing)}.")
    inactive = sorted(number for number, account in by_number.items() if not account.is_active)
    if inactive:
        raise InactiveAccountError(f"Inactive account(s) cannot receive postings: {', '.join(inactive)}.")
    return by_number


def next_entry_number(entry_date: date) -> str:
    """Readable, date-prefixed number that needs no read of existing entries.

    The suffix is random so concurrent writers never compute the same number.
    """
    return f"JE-{entry_date:%Y%m%d}-{uuid.uuid4().hex[:8].upper()}"


def post_journal_entry(
    db: Session,
    *,
    entry_date: date,
    description: str,
    lines: Iterable[JournalLineInput],
    reference_type: Optional[str] = None,
    reference_id: Optional[str] = None,
) -> JournalEntry:
    """Validate and append a balanced entry to the ledger.

    Every check runs before anything is added to the session, so a rejected
    entry leaves no trace. The entry and its lines are flushed together in
    the caller's transaction; committing is the caller's job.
    """
    lines = list(lines)
    if len(lines) < 2:
        raise UnbalancedEntryError("Journal entry must have at least 2 lines (double-entry accounting).")

    accounts = _resolve_accounts(db, {line.account_number for line in lines})
    for position, line in enumerate(lines, start=1):
        validate_line(line, position)
    ensure_balanced(lines)

    total = sum(line.debit for line in lines)
    entry = JournalEntry(
        entry_number=next_entry_number(entry_date),
        entry_date=entry_date,
        description=description,
        reference_type=reference_type,
        reference_id=reference_id,
        total_debit_minor=total,
        total_credit_minor=total,
    )
    entry.lines = [
        JournalLine(
            line_number=position,
            account_id=accounts[line.account_number].id,
            description=line.description,
            debit_minor=line.debit,
            credit_minor=line.credit,
        )
        for position, line in enumerate(lines, start=1)
    ]
    db.add(entry)
    db.flush()
    logger.info(
        "Posted journal entry %s dated %s: %s line(s), %s minor units",
        entry.entry_number,
        entry_date,
        len(lines),
        total,
    )
    return entry


def build_service_charge_lines(
    *,
    receivable_account_number: str,
    fund_account_number: str,
    amount: int,
    unit_number: str,
) -> List[JournalLineInput]:
    lines = [
        JournalLineInput(account_number=receivable_account_number, debit=amount, description=f"AR - {unit_number}"),
        JournalLineInput(
            account_number=fund_account_number,
            credit=amount,
            description=f"Estate Management Fund - {unit_number}",
        ),
    ]
    ensure_balanced(lines)
    return lines


def build_payment_lines(
    *,
    cash_account_number: str,
    receivable_account_number: str,
    amount: int,
    description: str | None = None,
) -> List[JournalLineInput]:
    lines = [
        JournalLineInput(account_number=cash_account_number, debit=amount, description=description),
        JournalLineInput(account_number=receivable_account_number, credit=amount, description=description),
    ]
    ensure_balanced(lines)
    return lines
