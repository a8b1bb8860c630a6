"""SQLAlchemy engine, session scope and transactional retry for the store.

The ledger treats the database the way it would a document store: records are
addressed by opaque string ids, counters are only ever changed through
single-statement atomic increments, and references between records are not
enforced by the storage layer. Because the engine does support transactions,
each service operation runs both of its phases (write the entry, adjust the
counters) in one transaction via :meth:`Database.run_in_transaction`.
"""

from contextlib import contextmanager
from functools import lru_cache
from pathlib import Path
from typing import Callable, Iterator, Optional, TypeVar

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    wait_fixed,
    retry_if_exception_type
)

from ..models.base import Base
# Registers every table on Base.metadata
from ..models import product, supplier, stock_in, stock_out  # noqa: F401
from ..utils.config import get_config
from ..utils.logger import get_error_logger

T = TypeVar("T")


class Database:
    """Owns the engine and hands out sessions."""

    def __init__(self, url: Optional[str] = None, echo: Optional[bool] = None):
        """
        Initialize the database.

        Args:
            url: SQLAlchemy URL, defaults to ``DATABASE_URL`` from settings
            echo: Log SQL statements, defaults to ``store.echo`` from config
        """
        self.config = get_config()
        self.logger = get_error_logger()
        self.url = url or self.config.env.database_url

        self.engine = self._create_engine(
            self.url,
            echo=self.config.store.echo if echo is None else echo
        )
        self.session_factory = sessionmaker(
            bind=self.engine,
            autoflush=False,
            expire_on_commit=False
        )

    def _create_engine(self, url: str, echo: bool) -> Engine:
        if url.startswith("sqlite"):
            if url in ("sqlite://", "sqlite:///:memory:"):
                # One shared connection, otherwise every session sees an empty database
                return create_engine(
                    url,
                    echo=echo,
                    connect_args={"check_same_thread": False},
                    poolclass=StaticPool
                )

            db_file = url.replace("sqlite:///", "", 1)
            Path(db_file).parent.mkdir(parents=True, exist_ok=True)
            return create_engine(url, echo=echo, connect_args={"check_same_thread": False})

        return create_engine(
            url,
            echo=echo,
            pool_pre_ping=self.config.store.pool_pre_ping
        )

    def create_all(self) -> None:
        """Create all tables that do not exist yet."""
        Base.metadata.create_all(self.engine)

    def drop_all(self) -> None:
        Base.metadata.drop_all(self.engine)

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Provide a transactional scope: commit on success, rollback on error."""
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def run_in_transaction(self, work: Callable[[Session], T]) -> T:
        """
        Run ``work`` in its own transaction, retrying transient store errors.

        Only ``OperationalError`` (lost connection, lock timeout, deadlock) is
        retried; each attempt starts a fresh session so nothing from a failed
        attempt is committed. Application errors propagate immediately.

        Args:
            work: Callable receiving the session

        Returns:
            Whatever ``work`` returns
        """
        store = self.config.store

        @retry(
            stop=stop_after_attempt(max(store.max_retries, 1)),
            wait=wait_exponential(multiplier=store.retry_delay) if store.exponential_backoff else wait_fixed(store.retry_delay),
            retry=retry_if_exception_type(OperationalError),
            reraise=True
        )
        def _attempt() -> T:
            try:
                with self.session_scope() as session:
                    return work(session)
            except OperationalError as e:
                self.logger.error(f"Store operation failed: {str(e)}")
                raise

        return _attempt()

    def close(self) -> None:
        self.engine.dispose()


@lru_cache()
def get_database() -> Database:
    """Get the cached application database."""
    return Database()
