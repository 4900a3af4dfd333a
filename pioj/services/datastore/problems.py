"""
Persistence and ID allocation for :class:`.Problem`.

Public IDs are allocated by reading the current maximum and inserting the
next value. Two writers can read the same maximum; the unique index on
``problems.id`` turns the second insert into a conflict, and the allocation
is retried with a fresh maximum. Retries are bounded, and running out of
attempts is reported as an infrastructure failure.
"""

import logging
import uuid
from typing import Optional

from retry.api import retry_call
from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from ...domain import Problem
from ..deadline import Deadline
from ..exceptions import DuplicateKeyError, InfrastructureError, \
    NotFoundError
from .models import DBProblem
from .util import transaction

logger = logging.getLogger(__name__)


class ProblemRepository(object):
    """Allocates sequential public IDs and stores problems."""

    def __init__(self, sessions: sessionmaker, attempts: int = 5) -> None:
        """
        Parameters
        ----------
        sessions : :class:`sessionmaker`
        attempts : int
            How many times to try allocating an ID before giving up.

        """
        self._sessions = sessions
        self._attempts = attempts

    def next_id(self, deadline: Optional[Deadline] = None) -> int:
        """Get the ID after the highest one in use, or 1 if there are none."""
        with transaction(self._sessions, deadline) as session:
            last: Optional[int] = session.scalar(
                select(DBProblem.id).order_by(DBProblem.id.desc()).limit(1)
            )
        return 1 if last is None else last + 1

    def create(self, problem: Problem,
               deadline: Optional[Deadline] = None) -> Problem:
        """
        Store a new problem, assigning its public and internal IDs.

        Any IDs already set on ``problem`` are ignored.

        Returns
        -------
        :class:`Problem`
            The stored problem.

        Raises
        ------
        :class:`InfrastructureError`
            Raised if the database is unavailable, or if no free ID could be
            allocated within the configured number of attempts.

        """
        try:
            return retry_call(self._insert, fargs=[problem, deadline],
                              exceptions=DuplicateKeyError,
                              tries=self._attempts, logger=logger)
        except DuplicateKeyError as e:
            logger.error('Gave up allocating a problem ID after %i attempts',
                         self._attempts)
            raise InfrastructureError('Could not allocate a problem ID') \
                from e

    def _insert(self, problem: Problem,
                deadline: Optional[Deadline] = None) -> Problem:
        stored = problem._replace(id=self.next_id(deadline),
                                  problem_id=uuid.uuid4().hex)
        with transaction(self._sessions, deadline) as session:
            session.add(DBProblem(problem_id=stored.problem_id, id=stored.id,
                                  content=stored.content))
        logger.debug('Created problem %i (%s)', stored.id, stored.problem_id)
        return stored

    def find_by_id(self, id: int,
                   deadline: Optional[Deadline] = None) -> Problem:
        """Load a problem by its public ID; raises :class:`NotFoundError`."""
        with transaction(self._sessions, deadline) as session:
            db_problem = session.scalar(
                select(DBProblem).where(DBProblem.id == id)
            )
            if db_problem is None:
                raise NotFoundError(f'No problem with ID {id}')
            return Problem(content=db_problem.content, id=db_problem.id,
                           problem_id=db_problem.problem_id)
