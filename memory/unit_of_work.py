"""
Explicit transaction boundary for multi-row writes.

Usage:
    with UnitOfWork(SessionLocal) as uow:
        uow.session.add(thread)
        uow.session.add(message)
        uow.commit()

Leaving the block without commit(), or with an exception, rolls back
every statement issued inside it.
"""

import logging
from types import TracebackType
from typing import Optional

from sqlalchemy.orm import Session, sessionmaker

logger = logging.getLogger(__name__)


class UnitOfWork:
    """All-or-nothing wrapper around one SQLAlchemy session."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory
        self._session: Optional[Session] = None
        self._committed = False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise RuntimeError("UnitOfWork used outside of its 'with' block")
        return self._session

    def __enter__(self) -> "UnitOfWork":
        self._session = self._session_factory()
        self._session.begin()
        self._committed = False
        return self

    def commit(self) -> None:
        self.session.commit()
        self._committed = True

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        session = self.session
        try:
            if exc_type is not None or not self._committed:
                if exc_type is not None:
                    logger.debug(f"Rolling back unit of work after {exc_type.__name__}")
                session.rollback()
        finally:
            session.close()
            self._session = None
