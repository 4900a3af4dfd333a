"""Error kinds raised by services and workflows."""


class ValidationError(RuntimeError):
    """Input is malformed or missing. The client's fault; never retried."""


class UnauthorizedError(RuntimeError):
    """Credential or verification code was not accepted."""


class NotFoundError(RuntimeError):
    """The requested entity does not exist."""


class DuplicateKeyError(RuntimeError):
    """A write violated a uniqueness constraint enforced by the store."""


class InfrastructureError(RuntimeError):
    """A store could not be reached, or did not answer in time."""
