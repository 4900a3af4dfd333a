"""Persistence for :class:`.User`."""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session

from ...domain import User
from ..deadline import Deadline
from ..exceptions import NotFoundError
from .models import DBUser
from .util import transaction, now, epoch, from_epoch

logger = logging.getLogger(__name__)


def _to_domain(db_user: DBUser) -> User:
    return User(
        user_id=str(db_user.user_id),
        username=db_user.username,
        email=db_user.email,
        credential=db_user.password_enc,
        joined=from_epoch(db_user.joined_date)
    )


class UserRepository(object):
    """Creates, updates, and loads users."""

    def __init__(self, sessions: sessionmaker) -> None:
        self._sessions = sessions

    def create(self, user: User, deadline: Optional[Deadline] = None) -> str:
        """
        Insert a new user.

        The insert relies on the unique index on ``username``; a conflicting
        user is detected by the database, not by a prior lookup.

        Parameters
        ----------
        user : :class:`User`
            If ``joined`` is not set, the time of insertion is used.
        deadline : :class:`Deadline`

        Returns
        -------
        str
            The user ID assigned by the database.

        Raises
        ------
        :class:`DuplicateKeyError`
            Raised if a user with the same username already exists.
        :class:`InfrastructureError`
            Raised if the database is unavailable.

        """
        with transaction(self._sessions, deadline) as session:
            db_user = DBUser(
                username=user.username,
                email=user.email,
                password_enc=user.credential,
                joined_date=epoch(user.joined) if user.joined else now()
            )
            session.add(db_user)
            session.flush()
            user_id = str(db_user.user_id)
        logger.debug('Created user %s with ID %s', user.username, user_id)
        return user_id

    def update(self, user: User, deadline: Optional[Deadline] = None) -> None:
        """
        Replace the e-mail address and credential of an existing user.

        Raises
        ------
        :class:`NotFoundError`
            Raised if there is no user with ``user.user_id``.
        :class:`InfrastructureError`
            Raised if the database is unavailable.

        """
        with transaction(self._sessions, deadline) as session:
            db_user = self._load(session, user.user_id)
            db_user.email = user.email
            db_user.password_enc = user.credential
        logger.debug('Updated user %s', user.user_id)

    def find_by_username(self, username: str,
                         deadline: Optional[Deadline] = None) -> User:
        """Load a user by username; raises :class:`NotFoundError`."""
        with transaction(self._sessions, deadline) as session:
            db_user = session.scalar(
                select(DBUser).where(DBUser.username == username)
            )
            if db_user is None:
                raise NotFoundError('No such user')
            return _to_domain(db_user)

    def find_by_id(self, user_id: str,
                   deadline: Optional[Deadline] = None) -> User:
        """Load a user by ID; raises :class:`NotFoundError`."""
        with transaction(self._sessions, deadline) as session:
            return _to_domain(self._load(session, user_id))

    @staticmethod
    def _load(session: Session, user_id: Optional[str]) -> DBUser:
        try:
            db_user = session.get(DBUser, int(user_id))    # type: ignore
        except (TypeError, ValueError):
            db_user = None
        if db_user is None:
            raise NotFoundError(f'No user with ID {user_id}')
        return db_user
