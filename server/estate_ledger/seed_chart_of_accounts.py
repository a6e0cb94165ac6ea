from sqlalchemy.orm import Session

from .accounts.service import create_account
from .db import SessionLocal
from .models import Account

# (number, name, type, category, system account)
DEFAULT_ACCOUNTS = [
    ("1000", "Cash and Bank", "asset", "Cash and Bank", True),
    ("1100", "Accounts Receivable", "asset", "Receivables", True),
    ("1200", "Prepaid Expenses", "asset", "Prepayments", False),
    ("2100", "Accounts Payable", "liability", "Payables", True),
    ("2200", "Estate Management Fund", "liability", "Funds Held", True),
    ("3000", "Accumulated Fund", "equity", "Reserves", False),
    ("4000", "Service Charge Income", "revenue", "Levies", False),
    ("4100", "Other Income", "revenue", "Other", False),
    ("5000", "Security Expenses", "expense", "Operations", False),
    ("5100", "Utilities", "expense", "Utilities", False),
    ("5200", "Repairs and Maintenance", "expense", "Operations", False),
]


def seed_chart_of_accounts(db: Session) -> tuple[int, int]:
    """Create any default account that is missing. Returns (inserted, existing)."""
    inserted = 0
    existing = 0
    known = {number for (number,) in db.query(Account.account_number).all()}
    for number, name, account_type, category, is_system in DEFAULT_ACCOUNTS:
        if number in known:
            existing += 1
            continue
        create_account(db, number, name, account_type, category=category, is_system_account=is_system)
        inserted += 1
    return inserted, existing


def main() -> None:
    db: Session = SessionLocal()
    try:
        inserted, existing = seed_chart_of_accounts(db)
        db.commit()
        print(f"Chart of Accounts seed complete: inserted={inserted}, existing={existing}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
