"""Per-request deadlines for calls to external stores."""

import time
from typing import NamedTuple, Optional

from .exceptions import InfrastructureError


class Deadline(NamedTuple):
    """An absolute point in (monotonic) time after which store calls fail."""

    expires: float

    @classmethod
    def after(cls, seconds: float) -> 'Deadline':
        """Create a deadline ``seconds`` from now."""
        return cls(time.monotonic() + seconds)

    @property
    def remaining(self) -> float:
        """Seconds left before the deadline; negative once it has passed."""
        return self.expires - time.monotonic()

    @property
    def expired(self) -> bool:
        return self.remaining <= 0


def check(deadline: Optional[Deadline]) -> None:
    """
    Fail fast if ``deadline`` has passed.

    Called immediately before each round trip to a store. The stores also
    bound the round trip itself by the time left before the deadline.

    Raises
    ------
    :class:`InfrastructureError`
        Raised if the deadline has already passed.

    """
    if deadline is not None and deadline.expired:
        raise InfrastructureError('Deadline exceeded')
