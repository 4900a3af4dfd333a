"""Controllers for logging in with a username and password."""

import logging
from http import HTTPStatus
from typing import Optional

from werkzeug.datastructures import MultiDict
from wtforms import Form, PasswordField, StringField
from wtforms.validators import DataRequired

from .. import domain
from ..services import exceptions, passwords
from ..services.datastore import UserRepository
from ..services.deadline import Deadline
from . import ResponseData
from .util import describe_errors

logger = logging.getLogger(__name__)


class LoginForm(Form):
    """Log in form."""

    username = StringField('Username', validators=[DataRequired()])
    password = PasswordField('Password', validators=[DataRequired()])


def login(users: UserRepository, params: MultiDict,
          deadline: Optional[Deadline] = None) -> ResponseData:
    """
    Authenticate a user with the credentials provided.

    An unknown username and a wrong password are reported the same way.

    Parameters
    ----------
    users : :class:`UserRepository`
    params : :class:`MultiDict`
        Should include ``username`` and ``password``.
    deadline : :class:`Deadline`

    Returns
    -------
    dict
        Includes the public representation of the authenticated user.
    int
        Status code.
    dict
        Headers to add to the response.

    Raises
    ------
    :class:`exceptions.ValidationError`
    :class:`exceptions.UnauthorizedError`
    :class:`exceptions.InfrastructureError`

    """
    form = LoginForm(params)
    if not form.validate():
        logger.debug('Login form not valid')
        raise exceptions.ValidationError(describe_errors(form))

    try:
        user = users.find_by_username(form.username.data, deadline)
    except exceptions.NotFoundError as e:
        logger.debug('No such user: %s', form.username.data)
        raise exceptions.UnauthorizedError('Invalid username or password') \
            from e
    if not passwords.verify_password(user, form.password.data):
        logger.debug('Wrong password for %s', form.username.data)
        raise exceptions.UnauthorizedError('Invalid username or password')

    logger.debug('Authenticated user %s', user.user_id)
    return {'user': domain.public(user)}, HTTPStatus.OK, {}
