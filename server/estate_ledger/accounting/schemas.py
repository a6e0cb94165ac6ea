from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field


JournalDirection = Literal["DEBIT", "CREDIT"]


class JournalLineCreate(BaseModel):
    account_number: str
    direction: JournalDirection
    amount: Decimal = Field(..., gt=Decimal("0"), decimal_places=2)
    description: Optional[str] = None


class JournalEntryCreate(BaseModel):
    date: date
    description: str = Field(..., min_length=1, max_length=255)
    reference_type: Optional[str] = Field(None, max_length=50)
    reference_id: Optional[str] = Field(None, max_length=100)
    lines: list[JournalLineCreate]


class JournalLineResponse(BaseModel):
    id: int
    line_number: int
    account_id: int
    account_number: str
    direction: JournalDirection
    amount: Decimal
    description: Optional[str] = None


class JournalEntryResponse(BaseModel):
    id: int
    entry_number: str
    date: date
    description: str
    reference_type: Optional[str] = None
    reference_id: Optional[str] = None
    total_debit: Decimal
    total_credit: Decimal
    posted_at: datetime
    lines: list[JournalLineResponse]


class AccountBalanceResponse(BaseModel):
    account_number: str
    account_name: str
    normal_balance: str
    as_of: date
    balance: Decimal
