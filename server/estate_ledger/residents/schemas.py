from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field


AccountStatus = Literal["active", "inactive", "delinquent"]


class ResidentCreate(BaseModel):
    unit_number: str = Field(..., min_length=1, max_length=50)
    name: Optional[str] = Field(None, max_length=200)
    service_charge: Optional[Decimal] = Field(None, ge=Decimal("0"), decimal_places=2)
    start_date: Optional[date] = None
    account_status: AccountStatus = "active"


class ResidentUpdate(BaseModel):
    unit_number: Optional[str] = Field(None, min_length=1, max_length=50)
    name: Optional[str] = Field(None, max_length=200)
    service_charge: Optional[Decimal] = Field(None, ge=Decimal("0"), decimal_places=2)
    start_date: Optional[date] = None


class ResidentStatusUpdate(BaseModel):
    account_status: AccountStatus


class ResidentResponse(BaseModel):
    id: int
    unit_number: str
    name: Optional[str] = None
    account_status: str
    service_charge: Optional[Decimal] = None
    start_date: Optional[date] = None
    created_at: datetime
