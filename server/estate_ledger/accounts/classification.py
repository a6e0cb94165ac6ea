from enum import Enum

from estate_ledger.errors import InvalidClassificationError


class NormalSide(str, Enum):
    DEBIT = "debit"
    CREDIT = "credit"


class AccountClassification(str, Enum):
    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"

    @property
    def normal_side(self) -> NormalSide:
        if self in (AccountClassification.ASSET, AccountClassification.EXPENSE):
            return NormalSide.DEBIT
        return NormalSide.CREDIT

    @classmethod
    def parse(cls, value: "str | AccountClassification") -> "AccountClassification":
        if isinstance(value, cls):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            allowed = ", ".join(item.value for item in cls)
            raise InvalidClassificationError(
                f"Invalid account type '{value}'. Expected one of: {allowed}."
            ) from None


def signed_balance(normal_side: "str | NormalSide", debit: int, credit: int) -> int:
    """Balance by normal side: debit-normal accounts grow on debit, others on credit."""
    if NormalSide(normal_side) is NormalSide.DEBIT:
        return debit - credit
    return credit - debit
