"""Tests for database engine setup and initialization."""

from pathlib import Path

from sqlalchemy import inspect, select, text

from domainctl.infrastructure.database.engine import (
    IMMEDIATE_OPTION,
    create_db_engine,
    init_database,
)
from domainctl.infrastructure.database.migrations import current_revision, head_revision
from domainctl.infrastructure.database.schema import registry_state


def _init(root: Path, **kwargs: object):
    kwargs.setdefault("admin", "admin")
    kwargs.setdefault("created", "2026-01-01T00:00:00.000000+00:00")
    return init_database(root, **kwargs)  # type: ignore[arg-type]


class TestCreateDbEngine:
    def test_wal_mode_enabled(self, tmp_path: Path) -> None:
        engine = create_db_engine(tmp_path / "test.db")
        with engine.connect() as conn:
            assert conn.execute(text("PRAGMA journal_mode")).scalar() == "wal"

    def test_foreign_keys_enabled(self, tmp_path: Path) -> None:
        engine = create_db_engine(tmp_path / "test.db")
        with engine.connect() as conn:
            assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1

    def test_immediate_transaction_commits(self, tmp_path: Path) -> None:
        engine = create_db_engine(tmp_path / "test.db")
        with engine.connect() as conn:
            conn.execution_options(**{IMMEDIATE_OPTION: True})
            with conn.begin():
                conn.execute(text("CREATE TABLE t (x INTEGER)"))
                conn.execute(text("INSERT INTO t VALUES (1)"))
        with engine.connect() as conn:
            assert conn.execute(text("SELECT count(*) FROM t")).scalar() == 1

    def test_rollback_discards_writes(self, tmp_path: Path) -> None:
        engine = create_db_engine(tmp_path / "test.db")
        with engine.begin() as conn:
            conn.execute(text("CREATE TABLE t (x INTEGER)"))
        with engine.connect() as conn:
            with conn.begin() as txn:
                conn.execute(text("INSERT INTO t VALUES (1)"))
                txn.rollback()
        with engine.connect() as conn:
            assert conn.execute(text("SELECT count(*) FROM t")).scalar() == 0


class TestInitDatabase:
    def test_creates_state_directory(self, tmp_path: Path) -> None:
        _init(tmp_path)
        assert (tmp_path / ".domainctl").is_dir()
        assert (tmp_path / ".domainctl" / "backups").is_dir()
        assert (tmp_path / ".domainctl" / "registry.db").exists()

    def test_creates_all_tables(self, tmp_path: Path) -> None:
        engine = _init(tmp_path)
        table_names = set(inspect(engine).get_table_names())
        assert {
            "registry_state",
            "domains",
            "subdomains",
            "registration_events",
            "withdrawals",
            "fee_changes",
            "alembic_version",
        } <= table_names

    def test_fresh_db_stamped_at_head(self, tmp_path: Path) -> None:
        engine = _init(tmp_path)
        db_path = tmp_path / ".domainctl" / "registry.db"
        assert current_revision(engine) == head_revision(db_path)

    def test_seeds_state_row(self, tmp_path: Path) -> None:
        engine = _init(tmp_path, admin="0xadmin", initial_fee=7)
        with engine.connect() as conn:
            row = conn.execute(select(registry_state)).one()
        assert row.admin == "0xadmin"
        assert row.registration_fee == 7
        assert row.balance == 0

    def test_idempotent_keeps_first_admin(self, tmp_path: Path) -> None:
        """A second init never re-seeds or re-assigns the administrator."""
        _init(tmp_path, admin="first")
        engine = _init(tmp_path, admin="second", initial_fee=99)
        with engine.connect() as conn:
            rows = conn.execute(select(registry_state)).fetchall()
        assert len(rows) == 1
        assert rows[0].admin == "first"
        assert rows[0].registration_fee == 0
