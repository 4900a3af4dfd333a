"""
Internal service API for the verification code store.

A verification code is issued for a subject (an e-mail address), delivered
out of band, and submitted back with the registration. Codes live in Redis
under ``pioj:verification:<subject>`` and expire on their own; a successful
validation deletes the code so that it cannot be replayed.
"""

import logging
import secrets
import string
from concurrent import futures
from functools import partial
from typing import Any, Callable, Optional, TypeVar

import redis
from flask import Flask, current_app

from .deadline import Deadline, check
from .exceptions import InfrastructureError, ValidationError

logger = logging.getLogger(__name__)

KEY_PREFIX = 'pioj:verification:'

T = TypeVar('T')


def _generate_code(length: int) -> str:
    return ''.join(secrets.choice(string.digits) for _ in range(length))


class VerificationStore(object):
    """
    Issues and consumes one-time verification codes.

    The Redis client is thread safe and connections are attached at the time
    a command is executed, so a single instance is shared by all requests.

    Each command is bounded by the socket timeout of the client. When a
    deadline is given, the caller stops waiting once it passes even if the
    command is still in flight.
    """

    def __init__(self, client: Any, duration: int = 300,
                 code_length: int = 6, workers: int = 8) -> None:
        """
        Parameters
        ----------
        client : :class:`redis.Redis`
            Or anything with the same interface.
        duration : int
            Lifetime of a code, in seconds.
        code_length : int
            Number of digits in a code.
        workers : int
            Maximum number of commands in flight for callers with a
            deadline.

        """
        self.r = client
        self._duration = duration
        self._code_length = code_length
        self._executor = futures.ThreadPoolExecutor(
            max_workers=workers,
            thread_name_prefix='pioj-verification'
        )

    @property
    def duration(self) -> int:
        """Lifetime of a code, in seconds."""
        return self._duration

    @staticmethod
    def _key(subject: str) -> str:
        return f'{KEY_PREFIX}{subject}'

    def _call(self, deadline: Optional[Deadline], func: Callable[[], T]) -> T:
        """Run ``func`` against the store, giving up at ``deadline``."""
        check(deadline)
        if deadline is None:
            return func()
        future = self._executor.submit(func)
        try:
            return future.result(timeout=max(deadline.remaining, 0))
        except futures.TimeoutError as e:
            future.cancel()
            logger.error('Verification store did not answer in time')
            raise InfrastructureError('Deadline exceeded') from e

    def issue(self, subject: str,
              deadline: Optional[Deadline] = None) -> str:
        """
        Issue a new code for ``subject``, replacing any active code.

        Parameters
        ----------
        subject : str
            Usually an e-mail address.
        deadline : :class:`Deadline`

        Returns
        -------
        str
            The code, to be transmitted to the subject out of band.

        Raises
        ------
        :class:`ValidationError`
            Raised if the subject is empty.
        :class:`InfrastructureError`
            Raised if the code could not be stored.

        """
        if not subject:
            raise ValidationError('A verification subject is required')
        code = _generate_code(self._code_length)
        try:
            self._call(deadline, partial(self.r.set, self._key(subject), code,
                                         ex=self._duration))
        except redis.exceptions.RedisError as e:
            logger.error('Could not store verification code: %s', e)
            raise InfrastructureError(f'Failed to store code: {e}') from e
        logger.debug('Issued verification code for %s', subject)
        return code

    def consume(self, subject: str, code: str,
                deadline: Optional[Deadline] = None) -> bool:
        """
        Validate a code, and delete it if it matches.

        A mismatch leaves the active code in place. If the code is changed or
        consumed by someone else while it is being checked, the validation
        fails.

        Parameters
        ----------
        subject : str
        code : str
        deadline : :class:`Deadline`

        Returns
        -------
        bool
            True if the code was active for the subject and is now consumed.

        Raises
        ------
        :class:`InfrastructureError`
            Raised if the store could not be reached.

        """
        if not subject or not code:
            return False
        try:
            consumed = self._call(deadline, partial(self._consume, subject,
                                                    code, deadline))
        except redis.exceptions.WatchError:
            logger.debug('Code for %s changed during validation', subject)
            return False
        except redis.exceptions.RedisError as e:
            logger.error('Could not validate verification code: %s', e)
            raise InfrastructureError(f'Failed to validate code: {e}') from e
        if consumed:
            logger.debug('Consumed verification code for %s', subject)
        return consumed

    def _consume(self, subject: str, code: str,
                 deadline: Optional[Deadline]) -> bool:
        key = self._key(subject)
        with self.r.pipeline() as pipe:
            pipe.watch(key)
            stored = pipe.get(key)
            if stored is None:
                logger.debug('No active code for %s', subject)
                return False
            if isinstance(stored, bytes):
                stored = stored.decode('utf-8')
            if not secrets.compare_digest(stored.encode('utf-8'),
                                          code.encode('utf-8')):
                logger.debug('Code mismatch for %s', subject)
                return False
            check(deadline)
            pipe.multi()
            pipe.delete(key)
            pipe.execute()
        return True


def init_app(app: Flask) -> None:
    """Set default configuration parameters for an application instance."""
    app.config.setdefault('REDIS_HOST', 'localhost')
    app.config.setdefault('REDIS_PORT', '6379')
    app.config.setdefault('REDIS_DATABASE', '0')
    app.config.setdefault('REDIS_TOKEN', None)
    app.config.setdefault('REDIS_FAKE', False)
    app.config.setdefault('REDIS_TIMEOUT', '2')
    app.config.setdefault('VERIFICATION_DURATION', '300')
    app.config.setdefault('VERIFICATION_CODE_LENGTH', '6')


def _get_redis(config: Any) -> Any:
    if config.get('REDIS_FAKE'):
        import fakeredis
        logger.warning('Using FakeRedis; verification codes are in memory')
        return fakeredis.FakeStrictRedis(decode_responses=True)

    host = config.get('REDIS_HOST', 'localhost')
    port = int(config.get('REDIS_PORT', '6379'))
    timeout = float(config.get('REDIS_TIMEOUT', '2'))
    logger.debug('New Redis connection at %s, port %s', host, port)
    return redis.StrictRedis(host=host, port=port,
                             db=int(config.get('REDIS_DATABASE', '0')),
                             password=config.get('REDIS_TOKEN'),
                             socket_timeout=timeout,
                             socket_connect_timeout=timeout,
                             decode_responses=True)


def get_verification_store(app: Optional[Flask] = None) -> VerificationStore:
    """Get a new :class:`VerificationStore` configured for ``app``."""
    config = (app or current_app).config
    return VerificationStore(
        _get_redis(config),
        duration=int(config.get('VERIFICATION_DURATION', '300')),
        code_length=int(config.get('VERIFICATION_CODE_LENGTH', '6'))
    )


def current_store() -> VerificationStore:
    """Get/create the :class:`VerificationStore` for the current app."""
    if 'pioj.verification' not in current_app.extensions:
        current_app.extensions['pioj.verification'] = get_verification_store()
    store: VerificationStore = current_app.extensions['pioj.verification']
    return store
