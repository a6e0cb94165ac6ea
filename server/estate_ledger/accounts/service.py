import logging
from typing import Optional

from sqlalchemy.orm import Session

from estate_ledger.accounts.classification import AccountClassification
from estate_ledger.errors import AccountInUseError, AccountNotFoundError, DuplicateAccountNumberError
from estate_ledger.models import Account, JournalLine

logger = logging.getLogger(__name__)


def _normalize_number(account_number: str) -> str:
    return (account_number or "").strip()


def create_account(
    db: Session,
    account_number: str,
    name: str,
    classification: str | AccountClassification,
    *,
    category: Optional[str] = None,
    description: Optional[str] = None,
    is_system_account: bool = False,
) -> Account:
    account_type = AccountClassification.parse(classification)
    account_number = _normalize_number(account_number)
    existing = db.query(Account.id).filter(Account.account_number == account_number).first()
    if existing is not None:
        raise DuplicateAccountNumberError(f"Account number '{account_number}' already exists.")

    account = Account(
        account_number=account_number,
        name=name.strip(),
        account_type=account_type.value,
        normal_balance=account_type.normal_side.value,
        category=category,
        description=description,
        is_active=True,
        is_system_account=is_system_account,
    )
    db.add(account)
    db.flush()
    logger.info("Created %s account %s (%s)", account.account_type, account.account_number, account.name)
    return account


def get_account(db: Session, account_number: str) -> Account:
    account = db.query(Account).filter(Account.account_number == _normalize_number(account_number)).first()
    if account is None:
        raise AccountNotFoundError(f"Account '{account_number}' not found.")
    return account


def account_has_history(db: Session, account_id: int) -> bool:
    return db.query(JournalLine.id).filter(JournalLine.account_id == account_id).first() is not None


def list_accounts(
    db: Session,
    *,
    classification: Optional[str] = None,
    active: Optional[bool] = None,
) -> list[Account]:
    query = db.query(Account)
    if classification:
        query = query.filter(Account.account_type == AccountClassification.parse(classification).value)
    if active is not None:
        query = query.filter(Account.is_active.is_(active))
    return query.order_by(Account.account_number.asc()).all()


def list_active_accounts(db: Session) -> list[Account]:
    return list_accounts(db, active=True)


def update_account(
    db: Session,
    account_number: str,
    *,
    name: Optional[str] = None,
    classification: Optional[str] = None,
    category: Optional[str] = None,
    description: Optional[str] = None,
) -> Account:
    account = get_account(db, account_number)
    if classification is not None:
        account_type = AccountClassification.parse(classification)
        if account_type.value != account.account_type:
            if account_has_history(db, account.id):
                raise AccountInUseError(
                    f"Account '{account.account_number}' has posted entries; its type cannot change."
                )
            account.account_type = account_type.value
            account.normal_balance = account_type.normal_side.value
    if name is not None:
        account.name = name.strip()
    if category is not None:
        account.category = category
    if description is not None:
        account.description = description
    db.flush()
    return account


def deactivate_account(db: Session, account_number: str) -> Account:
    """Refuse new postings to the account.

    The account stays visible to reporting: the trial balance lists every
    account with ledger history whether or not it is active.
    """
    account = get_account(db, account_number)
    account.is_active = False
    db.flush()
    logger.info("Deactivated account %s", account.account_number)
    return account


def reactivate_account(db: Session, account_number: str) -> Account:
    account = get_account(db, account_number)
    account.is_active = True
    db.flush()
    return account


def delete_account(db: Session, account_number: str) -> None:
    account = get_account(db, account_number)
    if account.is_system_account:
        raise AccountInUseError(f"Account '{account.account_number}' is a system account and cannot be deleted.")
    if account_has_history(db, account.id):
        raise AccountInUseError(
            f"Account '{account.account_number}' has posted entries; deactivate it instead."
        )
    db.delete(account)
    db.flush()
