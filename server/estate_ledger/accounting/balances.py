from dataclasses import dataclass
from datetime import date

from sqlalchemy import func
from sqlalchemy.orm import Session

from estate_ledger.accounts.classification import signed_balance
from estate_ledger.accounts.service import get_account
from estate_ledger.models import Account, JournalEntry, JournalLine


@dataclass(frozen=True)
class AccountBalance:
    account_id: int
    normal_balance: str
    total_debits: int
    total_credits: int

    @property
    def balance(self) -> int:
        return signed_balance(self.normal_balance, self.total_debits, self.total_credits)

    @property
    def net_debit(self) -> int:
        return self.total_debits - self.total_credits


def _line_totals_as_of(db: Session, as_of: date):
    return (
        db.query(
            Account.id.label("account_id"),
            Account.normal_balance.label("normal_balance"),
            func.coalesce(func.sum(JournalLine.debit_minor), 0).label("debits"),
            func.coalesce(func.sum(JournalLine.credit_minor), 0).label("credits"),
        )
        .join(JournalLine, JournalLine.account_id == Account.id)
        .join(JournalEntry, JournalEntry.id == JournalLine.journal_entry_id)
        .filter(JournalEntry.entry_date <= as_of)
    )


def balance_as_of(db: Session, account_number: str, as_of: date) -> int:
    """Signed balance of one account, counting entries dated on or before ``as_of``."""
    account = get_account(db, account_number)
    row = (
        _line_totals_as_of(db, as_of)
        .filter(Account.id == account.id)
        .group_by(Account.id, Account.normal_balance)
        .first()
    )
    if row is None:
        return 0
    return signed_balance(account.normal_balance, int(row.debits), int(row.credits))


def all_balances_as_of(db: Session, as_of: date) -> dict[int, AccountBalance]:
    """Balances of every account with activity, from one grouped aggregate query."""
    rows = _line_totals_as_of(db, as_of).group_by(Account.id, Account.normal_balance).all()
    return {
        row.account_id: AccountBalance(
            account_id=row.account_id,
            normal_balance=row.normal_balance,
            total_debits=int(row.debits),
            total_credits=int(row.credits),
        )
        for row in rows
    }
