import logging
import os
from dataclasses import dataclass

DEFAULT_DATABASE_URL = "sqlite:///./estate_ledger.db"
DEFAULT_RECEIVABLE_ACCOUNT = "1100"
DEFAULT_FUND_ACCOUNT = "2200"
DEFAULT_GRACE_DAYS = 7


def get_database_url() -> str:
    return os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)


def get_secret_key() -> str:
    return os.getenv("SECRET_KEY", "estate-ledger-dev-secret")


def get_billing_max_workers() -> int:
    return max(1, int(os.getenv("BILLING_MAX_WORKERS", "1")))


def configure_logging() -> None:
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@dataclass(frozen=True)
class BillingConfig:
    """Accounts and terms used when service charge bills are raised.

    Passed explicitly into every billing run so a run never depends on
    ambient state.
    """

    receivable_account_number: str = DEFAULT_RECEIVABLE_ACCOUNT
    fund_account_number: str = DEFAULT_FUND_ACCOUNT
    grace_days: int = DEFAULT_GRACE_DAYS
    billing_type: str = "Estate Maintenance"

    @classmethod
    def from_env(cls) -> "BillingConfig":
        return cls(
            receivable_account_number=os.getenv("BILLING_AR_ACCOUNT", DEFAULT_RECEIVABLE_ACCOUNT),
            fund_account_number=os.getenv("BILLING_FUND_ACCOUNT", DEFAULT_FUND_ACCOUNT),
            grace_days=int(os.getenv("BILLING_GRACE_DAYS", str(DEFAULT_GRACE_DAYS))),
        )
