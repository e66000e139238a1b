import contextlib
import os
import logging
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from core.exceptions import StoreError
from database.models import Base

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///data/messages.db"


def is_in_memory_sqlite(url: str) -> bool:
    """In-memory databases share one connection; only single-threaded tests may use them."""
    return url in ("sqlite://", "sqlite:///:memory:")


def build_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine; SQLite connections are shared across worker threads."""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if is_in_memory_sqlite(url):
            # A single connection keeps the in-memory database alive
            kwargs["poolclass"] = StaticPool
        else:
            db_path = make_url(url).database
            if db_path and os.path.dirname(db_path):
                os.makedirs(os.path.dirname(db_path), exist_ok=True)
        return create_engine(url, echo=echo, **kwargs)
    return create_engine(url, echo=echo, pool_pre_ping=True)


class Store:
    """
    Persisted store handle.

    Constructed once at process start and injected into every component.
    Each operation runs in its own short unit of work obtained from
    session_scope(), so no state is cached across invocations.
    """

    def __init__(self, url: str = DEFAULT_DATABASE_URL, echo: bool = False, engine: Optional[Engine] = None):
        self.url = url
        self.engine = engine or build_engine(url, echo=echo)
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        self._closed = False

    def create_all(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    @contextlib.contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Provide a transactional scope around a series of operations.

        Commits on success and rolls back on any exception. SQLAlchemy
        failures surface as StoreError; domain errors pass through unchanged.
        """
        if self._closed:
            raise StoreError("Store is closed")
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Store operation failed: {e}")
            raise StoreError(str(e)) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self) -> None:
        if not self._closed:
            self.engine.dispose()
            self._closed = True
            logger.info("Store closed")
