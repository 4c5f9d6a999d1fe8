"""Database engine construction."""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool


def _enable_sqlite_savepoints(engine: Engine) -> None:
    """Let SQLAlchemy emit BEGIN itself so SAVEPOINTs nest inside the session transaction.

    pysqlite only opens a transaction before DML, so a SAVEPOINT issued first
    would start (and its RELEASE would commit) a transaction of its own.
    """

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN")


def create_db_engine(database_url: str) -> Engine:
    """Create an engine (SQLite uses StaticPool for simplicity in dev/test)."""
    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        _enable_sqlite_savepoints(engine)
        return engine
    return create_engine(database_url, pool_pre_ping=True)


__all__ = ["create_db_engine"]
