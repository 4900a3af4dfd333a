"""Core domain classes for the pioj identity and sequencing core."""

from typing import Any, Dict, NamedTuple, Optional
from datetime import datetime


class User(NamedTuple):
    """A registered user."""

    username: str
    """Unique, case-sensitive login name."""

    email: str = ''
    """The address the user verified at registration."""

    credential: Optional[str] = None
    """
    Encoded password hash, including algorithm parameters and salt.

    Only :mod:`pioj.services.passwords` interprets this value. It must never
    leave the service; see :func:`public`.
    """

    user_id: Optional[str] = None
    """Identity assigned by the datastore."""

    joined: Optional[datetime] = None
    """When the user was created."""


class Problem(NamedTuple):
    """A problem record, as far as sequencing is concerned."""

    content: Dict[str, Any]
    """Problem statement, limits, etc. Opaque to this service."""

    id: Optional[int] = None
    """Sequential public identifier, starting at 1."""

    problem_id: Optional[str] = None
    """Internal storage identity."""


def public(user: User) -> Dict[str, Any]:
    """Representation of a :class:`User` that is safe to send to a client."""
    return {
        'user_id': user.user_id,
        'username': user.username,
        'email': user.email,
        'joined': user.joined.isoformat() if user.joined else None
    }


def problem_to_dict(problem: Problem) -> Dict[str, Any]:
    """Representation of a :class:`Problem` for clients."""
    data = dict(problem.content)
    data.update({'_id': problem.problem_id, 'id': problem.id})
    return data
