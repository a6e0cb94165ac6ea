from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from estate_ledger.accounting.balances import balance_as_of
from estate_ledger.accounting.schemas import AccountBalanceResponse
from estate_ledger.accounts import schemas
from estate_ledger.accounts import service as accounts_service
from estate_ledger.auth import require_accountant
from estate_ledger.db import get_db
from estate_ledger.utils import from_minor_units

router = APIRouter(prefix="/api/accountant/accounts", tags=["accounts"], dependencies=[Depends(require_accountant)])


@router.get("", response_model=List[schemas.AccountResponse])
def list_accounts(
    type: Optional[schemas.AccountType] = None,
    active: Optional[bool] = None,
    db: Session = Depends(get_db),
):
    accounts = accounts_service.list_accounts(db, classification=type, active=active)
    return [schemas.AccountResponse.model_validate(account) for account in accounts]


@router.post("", response_model=schemas.AccountResponse, status_code=status.HTTP_201_CREATED)
def create_account(payload: schemas.AccountCreate, db: Session = Depends(get_db)):
    account = accounts_service.create_account(
        db,
        payload.account_number,
        payload.name,
        payload.type,
        category=payload.category,
        description=payload.description,
        is_system_account=payload.is_system_account,
    )
    db.commit()
    db.refresh(account)
    return schemas.AccountResponse.model_validate(account)


@router.get("/{account_number}", response_model=schemas.AccountResponse)
def get_account(account_number: str, db: Session = Depends(get_db)):
    return schemas.AccountResponse.model_validate(accounts_service.get_account(db, account_number))


@router.patch("/{account_number}", response_model=schemas.AccountResponse)
def update_account(account_number: str, payload: schemas.AccountUpdate, db: Session = Depends(get_db)):
    data = payload.model_dump(exclude_unset=True)
    account = accounts_service.update_account(
        db,
        account_number,
        name=data.get("name"),
        classification=data.get("type"),
        category=data.get("category"),
        description=data.get("description"),
    )
    db.commit()
    db.refresh(account)
    return schemas.AccountResponse.model_validate(account)


@router.post("/{account_number}/deactivate", response_model=schemas.AccountResponse)
def deactivate_account(account_number: str, db: Session = Depends(get_db)):
    account = accounts_service.deactivate_account(db, account_number)
    db.commit()
    db.refresh(account)
    return schemas.AccountResponse.model_validate(account)


@router.post("/{account_number}/reactivate", response_model=schemas.AccountResponse)
def reactivate_account(account_number: str, db: Session = Depends(get_db)):
    account = accounts_service.reactivate_account(db, account_number)
    db.commit()
    db.refresh(account)
    return schemas.AccountResponse.model_validate(account)


@router.delete("/{account_number}", response_model=dict)
def delete_account(account_number: str, db: Session = Depends(get_db)):
    accounts_service.delete_account(db, account_number)
    db.commit()
    return {"status": "ok"}


@router.get("/{account_number}/balance", response_model=AccountBalanceResponse)
def get_account_balance(
    account_number: str,
    as_of: Optional[date] = Query(None, alias="asOf"),
    db: Session = Depends(get_db),
):
    as_of = as_of or date.today()
    account = accounts_service.get_account(db, account_number)
    return AccountBalanceResponse(
        account_number=account.account_number,
        account_name=account.name,
        normal_balance=account.normal_balance,
        as_of=as_of,
        balance=from_minor_units(balance_as_of(db, account_number, as_of)),
    )
