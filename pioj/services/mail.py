"""Delivers verification codes by e-mail."""

import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from flask import Flask, current_app

from .exceptions import InfrastructureError

logger = logging.getLogger(__name__)

SUBJECT = 'Your pioj verification code'
BODY = """Hello,

Your verification code is {code}. It expires in {minutes} minutes.

If you did not request this code, you can ignore this message.
"""


class MailSession(object):
    """
    Sends messages through an SMTP service.

    A new connection is opened for each message. If no host is configured,
    messages are dropped; this is the case in development and in tests.
    """

    def __init__(self, host: str = '', port: int = 0,
                 sender: str = 'noreply@localhost',
                 timeout: float = 10) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self._host)

    def _new_connection(self) -> smtplib.SMTP:
        return smtplib.SMTP(host=self._host, port=self._port,
                            timeout=self._timeout)

    def send_message(self, message: EmailMessage) -> None:
        """Send a message, if delivery is enabled."""
        if not self.enabled:
            logger.debug('Mail delivery disabled; dropping message to %s',
                         message['To'])
            return
        message['From'] = self._sender
        try:
            with self._new_connection() as conn:
                conn.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error('Could not send mail to %s: %s', message['To'], e)
            raise InfrastructureError(f'Failed to send mail: {e}') from e

    def send_code(self, address: str, code: str, duration: int) -> None:
        """Send a verification code to ``address``."""
        message = EmailMessage()
        message['To'] = address
        message['Subject'] = SUBJECT
        message.set_content(BODY.format(code=code,
                                        minutes=max(duration // 60, 1)))
        self.send_message(message)


def init_app(app: Flask) -> None:
    """Set default configuration parameters for an application instance."""
    app.config.setdefault('MAIL_SERVER', '')
    app.config.setdefault('MAIL_PORT', '25')
    app.config.setdefault('MAIL_SENDER', 'noreply@localhost')
    app.config.setdefault('MAIL_TIMEOUT', '10')


def get_mail_session(app: Optional[Flask] = None) -> MailSession:
    """Get a new :class:`MailSession` configured for ``app``."""
    config = (app or current_app).config
    return MailSession(host=config.get('MAIL_SERVER', ''),
                       port=int(config.get('MAIL_PORT', '25')),
                       sender=config.get('MAIL_SENDER', 'noreply@localhost'),
                       timeout=float(config.get('MAIL_TIMEOUT', '10')))


def current_session() -> MailSession:
    """Get/create the :class:`MailSession` for the current app."""
    if 'pioj.mail' not in current_app.extensions:
        current_app.extensions['pioj.mail'] = get_mail_session()
    session: MailSession = current_app.extensions['pioj.mail']
    return session
