"""Controllers for creating and retrieving problems."""

import logging
from http import HTTPStatus
from typing import Any, Optional

from .. import domain
from ..services import exceptions
from ..services.datastore import ProblemRepository
from ..services.deadline import Deadline
from . import ResponseData

logger = logging.getLogger(__name__)

RESERVED = ('_id', 'id')
"""Fields assigned by the service; ignored if a client sends them."""


def create_problem(problems: ProblemRepository, payload: Any,
                   deadline: Optional[Deadline] = None) -> ResponseData:
    """
    Store a new problem, and assign it the next public ID.

    Parameters
    ----------
    problems : :class:`ProblemRepository`
    payload : dict
        The problem document. Its contents are not interpreted.
    deadline : :class:`Deadline`

    Returns
    -------
    dict
        The stored problem, including ``id``.
    int
        Status code.
    dict
        Headers to add to the response.

    """
    if not isinstance(payload, dict):
        raise exceptions.ValidationError('Problem must be a JSON object')
    content = {k: v for k, v in payload.items() if k not in RESERVED}
    problem = problems.create(domain.Problem(content=content), deadline)
    logger.info('Created problem %i', problem.id)
    return domain.problem_to_dict(problem), HTTPStatus.OK, {}


def get_problem(problems: ProblemRepository, payload: Any,
                deadline: Optional[Deadline] = None) -> ResponseData:
    """Retrieve a problem by the ``id`` in the request payload."""
    if not isinstance(payload, dict):
        raise exceptions.ValidationError('Request must be a JSON object')
    problem_id = payload.get('id')
    # bool is an int, but not an ID.
    if not isinstance(problem_id, int) or isinstance(problem_id, bool):
        raise exceptions.ValidationError('id must be an integer')
    problem = problems.find_by_id(problem_id, deadline)
    return domain.problem_to_dict(problem), HTTPStatus.OK, {}
