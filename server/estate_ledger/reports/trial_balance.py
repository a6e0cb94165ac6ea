from dataclasses import dataclass
from datetime import date

from sqlalchemy.orm import Session

from estate_ledger.accounting.balances import all_balances_as_of
from estate_ledger.models import Account


@dataclass(frozen=True)
class TrialBalanceRow:
    account_id: int
    account_number: str
    account_name: str
    account_type: str
    normal_balance: str
    debit_balance: int
    credit_balance: int


@dataclass(frozen=True)
class TrialBalance:
    as_of: date
    accounts: list[TrialBalanceRow]
    total_debits: int
    total_credits: int

    @property
    def balanced(self) -> bool:
        return self.total_debits == self.total_credits


def trial_balance(db: Session, as_of: date) -> TrialBalance:
    """Net position of every active or referenced account as of ``as_of``.

    A positive net (debits over credits) lands in the debit column and a
    negative one in the credit column, so contra balances show on the side
    they actually sit on.
    """
    balances = all_balances_as_of(db, as_of)
    accounts = db.query(Account).order_by(Account.account_number.asc()).all()

    rows: list[TrialBalanceRow] = []
    for account in accounts:
        balance = balances.get(account.id)
        if balance is None and not account.is_active:
            continue
        net = balance.net_debit if balance is not None else 0
        rows.append(
            TrialBalanceRow(
                account_id=account.id,
                account_number=account.account_number,
                account_name=account.name,
                account_type=account.account_type,
                normal_balance=account.normal_balance,
                debit_balance=net if net > 0 else 0,
                credit_balance=-net if net < 0 else 0,
            )
        )

    return TrialBalance(
        as_of=as_of,
        accounts=rows,
        total_debits=sum(row.debit_balance for row in rows),
        total_credits=sum(row.credit_balance for row in rows),
    )
