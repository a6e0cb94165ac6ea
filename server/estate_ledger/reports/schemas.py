from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class TrialBalanceAccount(BaseModel):
    account_id: int
    account_number: str
    account_name: str
    account_type: str
    normal_balance: str
    debit_balance: Decimal
    credit_balance: Decimal

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TrialBalanceResponse(BaseModel):
    as_of: date
    accounts: list[TrialBalanceAccount]
    total_debits: Decimal
    total_credits: Decimal
    balanced: bool

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
