"""Relational storage handle shared by the engine's services.

A ``Database`` is created once per process (or per test) and passed to every
service explicitly. Each unit of work acquires its own session through
``session_scope()``, which commits on success, rolls back on any error and
always releases the connection.
"""

from contextlib import contextmanager
from typing import Any, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from cafe_backoffice.config import Settings, get_settings
from cafe_backoffice.db.tables import Base
from cafe_backoffice.exceptions import StorageFailureError
from cafe_backoffice.utils.logging import get_logger

logger = get_logger(__name__)


class Database:
    """Engine and session factory for one database URL."""

    def __init__(
        self,
        url: str,
        echo: bool = False,
        pool_size: int = 10,
        max_overflow: int = 5,
    ) -> None:
        self.url = url
        self.echo = echo
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "Database":
        """Build a handle from application settings."""
        settings = settings or get_settings()
        return cls(
            settings.database_url,
            echo=settings.database_echo,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    def connect(self) -> None:
        """Create the engine and session factory."""
        if self.engine is not None:
            return

        engine_kwargs: dict[str, Any] = {"echo": self.echo, "pool_pre_ping": True}
        if self.is_sqlite:
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in self.url or self.url.rstrip("/").endswith("sqlite:"):
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs["pool_size"] = self.pool_size
            engine_kwargs["max_overflow"] = self.max_overflow

        self.engine = create_engine(self.url, **engine_kwargs)
        if self.is_sqlite:
            _install_sqlite_listeners(self.engine)

        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        logger.info("database_connected", dialect=self.engine.dialect.name)

    def disconnect(self) -> None:
        """Dispose of the engine and its pooled connections."""
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None
            self._session_factory = None
            logger.info("database_disconnected")

    def create_tables(self) -> None:
        """Create every table that does not exist yet."""
        self.connect()
        Base.metadata.create_all(self.engine)
        logger.info("tables_created", tables=len(Base.metadata.tables))

    def drop_tables(self) -> None:
        """Drop every table. Use with care, primarily for tests and resets."""
        self.connect()
        Base.metadata.drop_all(self.engine)
        logger.info("tables_dropped")

    def session(self) -> Session:
        """Open a new, unmanaged session."""
        self.connect()
        return self._session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope around a unit of work.

        Commits on normal exit. On any exception the transaction is rolled
        back; store errors are re-raised as ``StorageFailureError`` and every
        other exception propagates unchanged.
        """
        session = self.session()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.warning("transaction_rolled_back", error=str(e))
            raise StorageFailureError(f"Storage operation failed: {e}") from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


def _install_sqlite_listeners(engine: Engine) -> None:
    """Make pysqlite honour SAVEPOINTs and foreign keys."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):  # noqa: ANN001
        # Hand transaction control to SQLAlchemy so nested SAVEPOINTs work
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):  # noqa: ANN001
        conn.exec_driver_sql("BEGIN")
