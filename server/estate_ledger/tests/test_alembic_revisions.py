from pathlib import Path

from estate_ledger.db import Base

VERSIONS_DIR = Path(__file__).resolve().parents[2] / "alembic" / "versions"


def test_alembic_revision_ids_fit_version_table_limit():
    """Postgres alembic_version.version_num is varchar(32) in this project."""
    too_long: list[tuple[str, str, int]] = []

    for migration_file in VERSIONS_DIR.glob("*.py"):
        text = migration_file.read_text(encoding="utf-8")
        marker = 'revision = "'
        idx = text.find(marker)
        if idx == -1:
            continue
        start = idx + len(marker)
        end = text.find('"', start)
        revision = text[start:end]
        if len(revision) > 32:
            too_long.append((migration_file.name, revision, len(revision)))

    assert not too_long, (
        "Alembic revision IDs must be <= 32 chars to fit alembic_version.version_num. "
        f"Found: {too_long}"
    )


def test_migrations_create_every_model_table():
    text = "\n".join(path.read_text(encoding="utf-8") for path in VERSIONS_DIR.glob("*.py"))
    missing = [name for name in Base.metadata.tables if f'op.create_table(\n        "{name}"' not in text]
    assert not missing, f"Tables without a migration: {missing}"
