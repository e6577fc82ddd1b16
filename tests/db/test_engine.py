"""Tests for registry engine pool selection and accessors."""

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.pool import QueuePool, StaticPool

from lease_kernel.db.engine import (
    SQLITE_BUSY_TIMEOUT,
    build_engine,
    engine_options,
    get_engine,
    get_session_factory,
)

POOL_ARGS = dict(
    pool_size=3,
    max_overflow=1,
    pool_pre_ping=True,
    pool_timeout=5,
    pool_recycle=60,
)


class TestEngineOptions:

    def test_memory_sqlite_shares_one_connection(self):
        options = engine_options(make_url("sqlite+pysqlite:///:memory:"), **POOL_ARGS)
        assert options["poolclass"] is StaticPool
        assert options["connect_args"] == {"check_same_thread": False}
        assert "pool_size" not in options

    def test_bare_sqlite_url_is_in_memory(self):
        assert engine_options(make_url("sqlite://"), **POOL_ARGS)["poolclass"] is StaticPool

    def test_file_sqlite_uses_queue_pool(self, tmp_path):
        url = make_url(f"sqlite:///{tmp_path / 'leases.db'}")
        options = engine_options(url, **POOL_ARGS)
        assert options["poolclass"] is QueuePool
        assert options["pool_size"] == 3
        assert options["pool_recycle"] == 60
        assert options["connect_args"] == {"timeout": SQLITE_BUSY_TIMEOUT}

    def test_server_backend_uses_queue_pool(self):
        url = make_url("postgresql+psycopg2://u:p@localhost/leases")
        assert engine_options(url, **POOL_ARGS)["poolclass"] is QueuePool
        assert "connect_args" not in engine_options(url, **POOL_ARGS)


class TestAccessors:

    def test_engine_available_after_init(self, db_engine):
        assert get_engine() is db_engine

    def test_factory_bound_to_engine(self, db_engine):
        assert get_session_factory().kw["bind"] is db_engine


class TestSqliteWriteSerialization:

    def test_transactions_begin_immediate(self, tmp_path):
        engine = build_engine(f"sqlite:///{tmp_path / 'registry.db'}")
        statements = []

        @event.listens_for(engine, "before_cursor_execute")
        def _record(conn, cursor, statement, parameters, context, executemany):
            statements.append(statement)

        with engine.begin() as conn:
            conn.exec_driver_sql("SELECT 1")
        engine.dispose()

        assert statements.index("BEGIN IMMEDIATE") < statements.index("SELECT 1")
