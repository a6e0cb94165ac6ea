from datetime import date
from decimal import Decimal

import pytest

from estate_ledger.accounting.balances import all_balances_as_of
from estate_ledger.accounting.posting import (
    JournalLineInput,
    build_payment_lines,
    build_service_charge_lines,
    ensure_balanced,
    next_entry_number,
    post_journal_entry,
)
from estate_ledger.accounts.service import deactivate_account
from estate_ledger.errors import (
    ImmutableLedgerError,
    InactiveAccountError,
    InvalidLineError,
    UnbalancedEntryError,
    UnknownAccountError,
)
from estate_ledger.models import JournalEntry, JournalLine


def _post(db, lines, entry_date=date(2025, 1, 15), **kwargs):
    return post_journal_entry(db, entry_date=entry_date, description="Test entry", lines=lines, **kwargs)


def test_balanced_lines_pass():
    ensure_balanced(
        [
            JournalLineInput(account_number="1000", debit=1000),
            JournalLineInput(account_number="4000", credit=1000),
        ]
    )


def test_unbalanced_lines_raise():
    with pytest.raises(UnbalancedEntryError):
        ensure_balanced(
            [
                JournalLineInput(account_number="1000", debit=1000),
                JournalLineInput(account_number="4000", credit=900),
            ]
        )


def test_service_charge_and_payment_lines_balance():
    charge = build_service_charge_lines(
        receivable_account_number="1100", fund_account_number="2200", amount=50000, unit_number="A1"
    )
    assert [(line.account_number, line.debit, line.credit) for line in charge] == [
        ("1100", 50000, 0),
        ("2200", 0, 50000),
    ]

    payment = build_payment_lines(cash_account_number="1000", receivable_account_number="1100", amount=20000)
    assert sum(line.debit for line in payment) == sum(line.credit for line in payment) == 20000


def test_post_persists_entry_with_lines_and_number(db, chart):
    entry = _post(
        db,
        [
            JournalLineInput(account_number="1000", debit=25000, description="Gate levy"),
            JournalLineInput(account_number="4100", credit=25000),
        ],
        reference_type="manual",
        reference_id="RCPT-1",
    )
    db.commit()

    stored = db.query(JournalEntry).filter(JournalEntry.id == entry.id).one()
    assert stored.entry_number.startswith("JE-20250115-")
    assert stored.total_debit_minor == stored.total_credit_minor == 25000
    assert stored.reference_id == "RCPT-1"
    assert [(line.line_number, line.debit_minor, line.credit_minor) for line in stored.lines] == [
        (1, 25000, 0),
        (2, 0, 25000),
    ]


def test_entry_numbers_are_unique_and_carry_the_entry_date(db, chart):
    lines = [
        JournalLineInput(account_number="1000", debit=100),
        JournalLineInput(account_number="4100", credit=100),
    ]
    first = _post(db, lines)
    second = _post(db, lines)
    other_day = _post(db, lines, entry_date=date(2025, 1, 16))

    assert first.entry_number.startswith("JE-20250115-")
    assert second.entry_number.startswith("JE-20250115-")
    assert other_day.entry_number.startswith("JE-20250116-")
    assert len({first.entry_number, second.entry_number, other_day.entry_number}) == 3


def test_entry_numbers_generated_for_one_date_do_not_collide():
    numbers = {next_entry_number(date(2025, 1, 15)) for _ in range(200)}

    assert len(numbers) == 200
    assert all(number.startswith("JE-20250115-") and len(number) <= 30 for number in numbers)


def test_entry_with_many_lines_balances(db, chart):
    entry = _post(
        db,
        [
            JournalLineInput(account_number="5000", debit=30000),
            JournalLineInput(account_number="5100", debit=12050),
            JournalLineInput(account_number="1000", credit=42050),
        ],
    )
    assert entry.total_debit_minor == 42050
    assert len(entry.lines) == 3


def test_failed_post_leaves_ledger_unchanged(db, chart):
    _post(
        db,
        [
            JournalLineInput(account_number="1000", debit=5000),
            JournalLineInput(account_number="4100", credit=5000),
        ],
    )
    db.commit()
    entries_before = db.query(JournalEntry).count()
    lines_before = db.query(JournalLine).count()
    balances_before = all_balances_as_of(db, date(2030, 1, 1))

    with pytest.raises(UnbalancedEntryError):
        _post(
            db,
            [
                JournalLineInput(account_number="1000", debit=5000),
                JournalLineInput(account_number="4100", credit=4999),
            ],
        )
    db.commit()

    assert db.query(JournalEntry).count() == entries_before
    assert db.query(JournalLine).count() == lines_before
    assert all_balances_as_of(db, date(2030, 1, 1)) == balances_before


def test_single_line_entry_is_rejected(db, chart):
    with pytest.raises(UnbalancedEntryError, match="at least 2 lines"):
        _post(db, [JournalLineInput(account_number="1000", debit=100)])


def test_unknown_account_is_rejected(db, chart):
    with pytest.raises(UnknownAccountError, match="9999"):
        _post(
            db,
            [
                JournalLineInput(account_number="1000", debit=100),
                JournalLineInput(account_number="9999", credit=100),
            ],
        )


def test_account_check_runs_before_balance_check(db, chart):
    with pytest.raises(UnknownAccountError):
        _post(
            db,
            [
                JournalLineInput(account_number="9999", debit=100),
                JournalLineInput(account_number="1000", credit=1),
            ],
        )


def test_inactive_account_is_rejected(db, chart):
    deactivate_account(db, "4100")
    db.commit()

    with pytest.raises(InactiveAccountError):
        _post(
            db,
            [
                JournalLineInput(account_number="1000", debit=100),
                JournalLineInput(account_number="4100", credit=100),
            ],
        )
    assert db.query(JournalEntry).count() == 0


@pytest.mark.parametrize(
    "bad_line",
    [
        JournalLineInput(account_number="4100", debit=100, credit=100),
        JournalLineInput(account_number="4100"),
        JournalLineInput(account_number="4100", credit=-100),
        JournalLineInput(account_number="4100", credit=Decimal("1.00")),
        JournalLineInput(account_number="4100", credit=1.5),
        JournalLineInput(account_number="4100", credit=True),
    ],
)
def test_invalid_lines_are_rejected(db, chart, bad_line):
    with pytest.raises(InvalidLineError):
        _post(db, [JournalLineInput(account_number="1000", debit=100), bad_line])
    assert db.query(JournalEntry).count() == 0


def test_posted_entries_cannot_be_modified(db, chart):
    entry = _post(
        db,
        [
            JournalLineInput(account_number="1000", debit=100),
            JournalLineInput(account_number="4100", credit=100),
        ],
    )
    db.commit()

    entry.description = "Edited"
    with pytest.raises(ImmutableLedgerError):
        db.flush()
    db.rollback()

    line = db.query(JournalLine).first()
    line.debit_minor = 200
    with pytest.raises(ImmutableLedgerError):
        db.flush()
    db.rollback()


def test_posted_entries_cannot_be_deleted(db, chart):
    entry = _post(
        db,
        [
            JournalLineInput(account_number="1000", debit=100),
            JournalLineInput(account_number="4100", credit=100),
        ],
    )
    db.commit()

    db.delete(entry)
    with pytest.raises(ImmutableLedgerError):
        db.flush()
    db.rollback()
    assert db.query(JournalEntry).count() == 1
