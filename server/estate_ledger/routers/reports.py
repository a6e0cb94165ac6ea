from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from estate_ledger.auth import require_accountant
from estate_ledger.db import get_db
from estate_ledger.reports import schemas
from estate_ledger.reports.trial_balance import trial_balance
from estate_ledger.utils import from_minor_units

router = APIRouter(prefix="/api/accountant/reports", tags=["reports"], dependencies=[Depends(require_accountant)])


@router.get("/trial-balance", response_model=schemas.TrialBalanceResponse)
def get_trial_balance(as_of: Optional[date] = Query(None, alias="asOf"), db: Session = Depends(get_db)):
    report = trial_balance(db, as_of or date.today())
    return schemas.TrialBalanceResponse(
        as_of=report.as_of,
        accounts=[
            schemas.TrialBalanceAccount(
                account_id=row.account_id,
                account_number=row.account_number,
                account_name=row.account_name,
                account_type=row.account_type,
                normal_balance=row.normal_balance,
                debit_balance=from_minor_units(row.debit_balance),
                credit_balance=from_minor_units(row.credit_balance),
            )
            for row in report.accounts
        ],
        total_debits=from_minor_units(report.total_debits),
        total_credits=from_minor_units(report.total_credits),
        balanced=report.balanced,
    )
