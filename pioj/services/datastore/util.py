"""Helpers for database connections and transactions."""

import logging
import math
from contextlib import contextmanager
from datetime import datetime
from typing import Generator, Optional

from pytz import UTC
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session

from ..deadline import Deadline, check
from ..exceptions import DuplicateKeyError, InfrastructureError
from .models import Base

logger = logging.getLogger(__name__)


def now() -> int:
    """Get the current epoch/unix time."""
    return epoch(datetime.now(tz=UTC))


def epoch(t: datetime) -> int:
    """Convert a :class:`.datetime` to UNIX time."""
    return int(round(t.timestamp()))


def from_epoch(t: int) -> datetime:
    """Get a :class:`datetime` from an UNIX timestamp."""
    return datetime.fromtimestamp(t, tz=UTC)

def get_engine(database_uri: str, timeout: float = 5) -> Engine:
    """
    Get a new :class:`.Engine`.

    ``timeout`` bounds how long a connection attempt (or, for SQLite, a wait
    on a locked database) may take.
    """
    backend = make_url(database_uri).get_backend_name()
    if backend == 'sqlite':
        connect_args = {'timeout': timeout, 'check_same_thread': False}
        return create_engine(database_uri, connect_args=connect_args)
    connect_args = {}
    if backend in ('postgresql', 'mysql', 'mariadb'):
        # Drivers for these take whole seconds.
        connect_args['connect_timeout'] = max(math.ceil(timeout), 1)
    return create_engine(database_uri, connect_args=connect_args,
                         pool_timeout=timeout, pool_pre_ping=True)


def get_sessionmaker(engine: Engine, timeout: float = 5) -> sessionmaker:
    """
    Get a session factory bound to ``engine``.

    ``timeout`` is the longest any statement in a transaction may run.
    """
    return sessionmaker(bind=engine, expire_on_commit=False,
                        info={'timeout': timeout})


def _limit_statements(session: Session, seconds: float) -> None:
    """Bound the time each statement of the transaction may take."""
    millis = max(int(seconds * 1000), 1)
    dialect = session.get_bind().dialect.name
    if dialect == 'sqlite':
        session.execute(text(f'PRAGMA busy_timeout = {millis}'))
    elif dialect == 'postgresql':
        session.execute(text(f'SET LOCAL statement_timeout = {millis}'))
    elif dialect == 'mysql':
        session.execute(text(f'SET SESSION max_execution_time = {millis}'))


@contextmanager
def transaction(sessions: sessionmaker,
                deadline: Optional[Deadline] = None) \
        -> Generator[Session, None, None]:
    """
    Context manager for database transaction.

    Statements run in the transaction are limited to the session timeout,
    or to the time left before ``deadline`` if that is shorter.

    Commits when the block exits normally. Database errors are translated
    to the service's error kinds: a constraint violation becomes
    :class:`DuplicateKeyError`, anything else :class:`InfrastructureError`.
    Other exceptions raised in the block propagate unchanged, and the
    transaction is rolled back.
    """
    check(deadline)
    session = sessions()
    try:
        timeout = session.info.get('timeout')
        if deadline is not None:
            timeout = deadline.remaining if timeout is None \
                else min(timeout, deadline.remaining)
        if timeout is not None:
            _limit_statements(session, timeout)
        yield session
        session.commit()
    except IntegrityError as e:
        logger.debug('Constraint violated, rolling back: %s', e.orig)
        session.rollback()
        raise DuplicateKeyError(str(e.orig)) from e
    except SQLAlchemyError as e:
        logger.error('Transaction failed, rolling back: %s', str(e))
        session.rollback()
        raise InfrastructureError(f'Database unavailable: {e}') from e
    finally:
        session.close()


def create_all(engine: Engine) -> None:
    """Create all tables in the database."""
    try:
        Base.metadata.create_all(engine)
    except SQLAlchemyError as e:
        raise InfrastructureError(f'Could not create tables: {e}') from e


def drop_all(engine: Engine) -> None:
    """Drop all tables in the database."""
    Base.metadata.drop_all(engine)
