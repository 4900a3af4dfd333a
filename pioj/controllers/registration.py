"""
Controllers for e-mail verification and registration.

A new user first requests a verification code for their e-mail address. The
code is stored in the verification store and sent to the address. The user
then submits the code together with the username and password they want;
the code is consumed, and the user is created. A code can be used once.
"""

import logging
from datetime import datetime
from http import HTTPStatus
from typing import Optional

from pytz import UTC
from werkzeug.datastructures import MultiDict
from wtforms import Form, PasswordField, StringField
from wtforms.validators import DataRequired, Email, Length

from .. import domain
from ..services import exceptions, passwords
from ..services.datastore import UserRepository
from ..services.deadline import Deadline
from ..services.mail import MailSession
from ..services.verification import VerificationStore
from . import ResponseData
from .util import describe_errors

logger = logging.getLogger(__name__)


class VerificationForm(Form):
    """Request for a verification code."""

    email = StringField('E-mail', validators=[DataRequired(), Email(),
                                              Length(max=255)])


class RegistrationForm(Form):
    """User registration form."""

    username = StringField('Username',
                           validators=[DataRequired(), Length(max=255)])
    email = StringField('E-mail', validators=[Length(max=255)])
    password = PasswordField('Password', validators=[DataRequired()])
    verification = StringField('Verification code')


def request_verification(codes: VerificationStore, mail: MailSession,
                         params: MultiDict,
                         deadline: Optional[Deadline] = None) -> ResponseData:
    """
    Issue a verification code, and send it to the requested address.

    The code itself is not part of the response.

    Parameters
    ----------
    codes : :class:`VerificationStore`
    mail : :class:`MailSession`
    params : :class:`MultiDict`
        Should include ``email``.
    deadline : :class:`Deadline`

    Returns
    -------
    dict
        Additional data to add to the response.
    int
        Status code.
    dict
        Headers to add to the response.

    Raises
    ------
    :class:`exceptions.ValidationError`
        Raised if the address is missing or malformed.
    :class:`exceptions.InfrastructureError`
        Raised if the code could not be stored or sent.

    """
    form = VerificationForm(params)
    if not form.validate():
        logger.debug('Verification request not valid')
        raise exceptions.ValidationError(describe_errors(form))

    code = codes.issue(form.email.data, deadline)
    mail.send_code(form.email.data, code, codes.duration)
    return {'email': form.email.data}, HTTPStatus.OK, {}


def register(codes: VerificationStore, users: UserRepository,
             params: MultiDict, deadline: Optional[Deadline] = None,
             iterations: int = passwords.ITERATIONS) -> ResponseData:
    """
    Register a new user with a verified e-mail address.

    Parameters
    ----------
    codes : :class:`VerificationStore`
    users : :class:`UserRepository`
    params : :class:`MultiDict`
        Should include ``username``, ``email``, ``password`` and
        ``verification``.
    deadline : :class:`Deadline`
    iterations : int
        Work factor for the password hash.

    Returns
    -------
    dict
        Includes the public representation of the new user.
    int
        Status code.
    dict
        Headers to add to the response.

    Raises
    ------
    :class:`exceptions.ValidationError`
        Raised if the username or password is missing.
    :class:`exceptions.UnauthorizedError`
        Raised if the verification code was not accepted, for whatever
        reason.
    :class:`exceptions.DuplicateKeyError`
        Raised if the username is taken.
    :class:`exceptions.InfrastructureError`
        Raised if a store is unavailable.

    """
    form = RegistrationForm(params)
    if not form.validate():
        logger.debug('Registration form not valid')
        raise exceptions.ValidationError(describe_errors(form))

    if not codes.consume(form.email.data, form.verification.data, deadline):
        logger.debug('Registration of %s not verified', form.username.data)
        raise exceptions.UnauthorizedError('Not verified')

    user = passwords.set_password(
        domain.User(username=form.username.data, email=form.email.data,
                    joined=datetime.now(tz=UTC).replace(microsecond=0)),
        form.password.data,
        iterations
    )
    try:
        user_id = users.create(user, deadline)
    except exceptions.DuplicateKeyError:
        logger.info('Username %s is already registered', user.username)
        raise
    logger.info('Registered user %s', user_id)
    user = user._replace(user_id=user_id)
    return {'user': domain.public(user)}, HTTPStatus.OK, {}
