from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SubjectResultResponse(CamelModel):
    subject_id: int
    unit_number: Optional[str] = None
    status: str
    reason: Optional[str] = None
    bill_ids: list[int] = []


class BillingRunResponse(CamelModel):
    as_of: date
    success: int
    failed: int
    skipped: int
    bills_generated: int
    message: str
    details: list[SubjectResultResponse]


class BillPaymentCreate(BaseModel):
    amount: Decimal = Field(..., gt=Decimal("0"), decimal_places=2)
    payment_date: date
    cash_account_number: str = "1000"
    reference: Optional[str] = Field(None, max_length=100)


class BillResponse(BaseModel):
    id: int
    bill_number: str
    resident_id: int
    billing_type: str
    description: str
    period_start: date
    period_end: date
    amount: Decimal
    due_date: date
    status: str
    payment_status: str
    total_paid: Decimal
    balance: Decimal
    journal_entry_id: int
    created_at: datetime


class OverdueRunResponse(BaseModel):
    as_of: date
    marked_overdue: int
