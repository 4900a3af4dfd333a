"""
Salted password hashing.

Credentials are encoded as ``pbkdf2_sha256$<iterations>$<salt>$<digest>``,
with the salt and digest base64-encoded. The parameters stored with a
credential are the ones used to check it, so the iteration count can be
raised without invalidating existing users.
"""

import hashlib
import hmac
import logging
import secrets
from base64 import b64encode, b64decode

from ..domain import User
from .exceptions import ValidationError

logger = logging.getLogger(__name__)

ALGORITHM = 'pbkdf2_sha256'
ITERATIONS = 260000
SALT_BYTES = 16


def _hash_salt_and_password(salt: bytes, password: str,
                            iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac('sha256', password.encode('utf-8'), salt,
                               iterations)


def hash_password(password: str, iterations: int = ITERATIONS) -> str:
    """Generate a secure hash of a password, with a fresh salt."""
    salt = secrets.token_bytes(SALT_BYTES)
    hashed = _hash_salt_and_password(salt, password, iterations)
    return '$'.join([ALGORITHM, str(iterations),
                     b64encode(salt).decode('ascii'),
                     b64encode(hashed).decode('ascii')])


def check_password(password: str, encrypted: str) -> bool:
    """Check a password against an encoded hash."""
    try:
        algorithm, iterations, salt, enc_hashed = encrypted.split('$')
        if algorithm != ALGORITHM:
            logger.error('Unknown password storage algorithm: %s', algorithm)
            return False
        pass_hashed = _hash_salt_and_password(b64decode(salt), password,
                                              int(iterations))
        return hmac.compare_digest(pass_hashed, b64decode(enc_hashed))
    except (ValueError, OverflowError):    # Includes base64 errors.
        logger.error('Malformed password hash')
        return False


def set_password(user: User, password: str,
                 iterations: int = ITERATIONS) -> User:
    """
    Set the password of a :class:`User`, replacing any prior credential.

    Parameters
    ----------
    user : :class:`User`
    password : str
        Plaintext password. Any unicode text is allowed.
    iterations : int
        PBKDF2 work factor.

    Returns
    -------
    :class:`User`
        A copy of ``user`` with the new credential.

    Raises
    ------
    :class:`ValidationError`
        Raised if the password is empty.

    """
    if not password:
        raise ValidationError('Password must not be empty')
    return user._replace(credential=hash_password(password, iterations))


def verify_password(user: User, password: str) -> bool:
    """Determine whether ``password`` matches the credential of ``user``."""
    if not user.credential:
        return False
    return check_password(password, user.credential)
