from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    event,
)
from sqlalchemy.orm import object_session, relationship

from .db import Base
from .errors import ImmutableLedgerError


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String(255), unique=True, nullable=False)
    full_name = Column(String(200), nullable=True)
    role = Column(String(50), nullable=False, default="resident")
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Account(Base):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    account_number = Column(String(50), nullable=False, unique=True)
    name = Column(String(200), nullable=False)
    account_type = Column(String(20), nullable=False)
    normal_balance = Column(String(10), nullable=False)
    category = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    is_system_account = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class JournalEntry(Base):
    __tablename__ = "journal_entries"

    id = Column(Integer, primary_key=True)
    entry_number = Column(String(30), nullable=False, unique=True)
    entry_date = Column(Date, nullable=False, index=True)
    description = Column(String(255), nullable=False)
    reference_type = Column(String(50), nullable=True)
    reference_id = Column(String(100), nullable=True, index=True)
    total_debit_minor = Column(BigInteger, nullable=False)
    total_credit_minor = Column(BigInteger, nullable=False)
    posted_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    lines = relationship(
        "JournalLine",
        back_populates="journal_entry",
        cascade="all, delete-orphan",
        order_by="JournalLine.line_number",
    )


class JournalLine(Base):
    __tablename__ = "journal_lines"

    id = Column(Integer, primary_key=True)
    journal_entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    line_number = Column(Integer, nullable=False)
    description = Column(String(255), nullable=True)
    debit_minor = Column(BigInteger, nullable=False, default=0)
    credit_minor = Column(BigInteger, nullable=False, default=0)

    journal_entry = relationship("JournalEntry", back_populates="lines")
    account = relationship("Account")

    __table_args__ = (
        CheckConstraint(
            "(debit_minor > 0 AND credit_minor = 0) OR (credit_minor > 0 AND debit_minor = 0)",
            name="ck_journal_line_one_side",
        ),
    )


class Resident(Base):
    __tablename__ = "residents"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    unit_number = Column(String(50), nullable=False, unique=True)
    name = Column(String(200), nullable=True)
    account_status = Column(String(20), nullable=False, default="active")
    service_charge_minor = Column(BigInteger, nullable=True)
    start_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    bills = relationship("Bill", back_populates="resident", order_by="Bill.period_start")


class Bill(Base):
    __tablename__ = "bills"

    id = Column(Integer, primary_key=True)
    bill_number = Column(String(50), nullable=False, unique=True)
    resident_id = Column(Integer, ForeignKey("residents.id"), nullable=False, index=True)
    billing_type = Column(String(100), nullable=False, default="Estate Maintenance")
    description = Column(Text, nullable=False)
    period_start = Column(Date, nullable=False)
    period_end = Column(Date, nullable=False)
    amount_minor = Column(BigInteger, nullable=False)
    due_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    payment_status = Column(String(20), nullable=False, default="unpaid")
    total_paid_minor = Column(BigInteger, nullable=False, default=0)
    balance_minor = Column(BigInteger, nullable=False)
    journal_entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    resident = relationship("Resident", back_populates="bills")
    journal_entry = relationship("JournalEntry")
    payments = relationship("BillPayment", back_populates="bill", order_by="BillPayment.id")

    __table_args__ = (
        UniqueConstraint("resident_id", "period_start", name="uq_bill_resident_period_start"),
    )


class BillPayment(Base):
    __tablename__ = "bill_payments"

    id = Column(Integer, primary_key=True)
    bill_id = Column(Integer, ForeignKey("bills.id"), nullable=False, index=True)
    amount_minor = Column(BigInteger, nullable=False)
    payment_date = Column(Date, nullable=False)
    reference = Column(String(100), nullable=True)
    journal_entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    bill = relationship("Bill", back_populates="payments")
    journal_entry = relationship("JournalEntry")


# The ledger is append-only: corrections are posted as new offsetting entries.

@event.listens_for(JournalEntry, "before_update")
@event.listens_for(JournalLine, "before_update")
def _prevent_ledger_update(mapper, connection, target):
    session = object_session(target)
    if session is not None and not session.is_modified(target, include_collections=False):
        return
    raise ImmutableLedgerError(f"{type(target).__name__} {target.id} is posted and cannot be modified.")


@event.listens_for(JournalEntry, "before_delete")
@event.listens_for(JournalLine, "before_delete")
def _prevent_ledger_delete(mapper, connection, target):
    raise ImmutableLedgerError(f"{type(target).__name__} {target.id} is posted and cannot be deleted.")
