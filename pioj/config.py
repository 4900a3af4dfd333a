"""Flask configuration."""

import os

LOGLEVEL = os.environ.get('LOGLEVEL', 'INFO')

#################### Document store ####################
DATABASE_URI = os.environ.get('DATABASE_URI', 'sqlite:///pioj.db')
"""SQLAlchemy database URI for users and problems."""

DATABASE_TIMEOUT = os.environ.get('DATABASE_TIMEOUT', '5')
"""Seconds to wait for a database connection, and the longest a statement
may run (or wait on a lock, on SQLite)."""

CREATE_DB = bool(int(os.environ.get('CREATE_DB', 0)))
"""Create tables at startup."""

ID_ALLOCATION_ATTEMPTS = os.environ.get('ID_ALLOCATION_ATTEMPTS', '5')
"""How many times to retry a problem ID that another writer took first."""

#################### Verification codes ####################
REDIS_HOST = os.environ.get('REDIS_HOST', 'localhost')
REDIS_PORT = os.environ.get('REDIS_PORT', '6379')
REDIS_DATABASE = os.environ.get('REDIS_DATABASE', '0')
REDIS_TOKEN = os.environ.get('REDIS_TOKEN', None)
"""This is the token used in the AUTH procedure."""

REDIS_TIMEOUT = os.environ.get('REDIS_TIMEOUT', '2')
"""Socket timeout, in seconds, for each Redis command."""

REDIS_FAKE = bool(int(os.environ.get('REDIS_FAKE', 0)))
"""Use the FakeRedis library instead of a redis service.

Useful for testing and development."""

VERIFICATION_DURATION = os.environ.get('VERIFICATION_DURATION', '300')
"""Lifetime of a verification code, in seconds."""

VERIFICATION_CODE_LENGTH = os.environ.get('VERIFICATION_CODE_LENGTH', '6')

#################### Mail ####################
MAIL_SERVER = os.environ.get('MAIL_SERVER', '')
"""SMTP host for sending verification codes. Empty disables delivery."""

MAIL_PORT = os.environ.get('MAIL_PORT', '25')
MAIL_SENDER = os.environ.get('MAIL_SENDER', 'noreply@localhost')
MAIL_TIMEOUT = os.environ.get('MAIL_TIMEOUT', '10')

#################### Requests ####################
REQUEST_TIMEOUT = os.environ.get('REQUEST_TIMEOUT', '10')
"""Deadline, in seconds, for the store calls made by one request."""

PASSWORD_HASH_ITERATIONS = os.environ.get('PASSWORD_HASH_ITERATIONS',
                                          '260000')
