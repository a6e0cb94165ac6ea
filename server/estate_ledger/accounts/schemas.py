from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


AccountType = Literal["asset", "liability", "equity", "revenue", "expense"]


class AccountCreate(BaseModel):
    account_number: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=200)
    type: AccountType
    category: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    is_system_account: bool = False


class AccountUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=200)
    type: Optional[AccountType] = None
    category: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None


class AccountResponse(BaseModel):
    id: int
    account_number: str
    name: str
    type: str = Field(validation_alias="account_type")
    normal_balance: str
    category: Optional[str] = None
    description: Optional[str] = None
    is_active: bool
    is_system_account: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
