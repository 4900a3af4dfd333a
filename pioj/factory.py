"""Application factory for the pioj service."""

import logging
from http import HTTPStatus
from typing import Callable

from flask import Flask, Response, jsonify
from werkzeug.exceptions import HTTPException, BadRequest, NotFound, \
    MethodNotAllowed, InternalServerError

from . import app_logging
from .routes import blueprint
from .services import datastore, mail, verification
from .services.exceptions import ValidationError, UnauthorizedError, \
    NotFoundError, DuplicateKeyError, InfrastructureError

logger = logging.getLogger(__name__)


def create_web_app() -> Flask:
    """Initialize and configure the pioj application."""
    app = Flask('pioj')
    app.config.from_pyfile('config.py')
    app_logging.setup_logger(app.config['LOGLEVEL'])

    datastore.init_app(app)
    verification.init_app(app)
    mail.init_app(app)

    app.register_blueprint(blueprint)

    if app.config['CREATE_DB']:
        with app.app_context():
            datastore.create_all(datastore.current_engine())

    register_error_handlers(app)
    return app


def register_error_handlers(app: Flask) -> None:
    """Register error handlers for the Flask app."""
    app.errorhandler(BadRequest)(jsonify_exception)
    app.errorhandler(NotFound)(jsonify_exception)
    app.errorhandler(MethodNotAllowed)(jsonify_exception)
    app.errorhandler(InternalServerError)(jsonify_exception)

    app.errorhandler(ValidationError)(
        jsonify_error(HTTPStatus.BAD_REQUEST)
    )
    app.errorhandler(UnauthorizedError)(
        jsonify_error(HTTPStatus.UNAUTHORIZED)
    )
    app.errorhandler(NotFoundError)(
        jsonify_error(HTTPStatus.NOT_FOUND)
    )
    app.errorhandler(DuplicateKeyError)(
        jsonify_error(HTTPStatus.CONFLICT, 'Already exists')
    )
    # Storage failures get their own status so that they can be told apart
    # from user errors and from other server errors.
    app.errorhandler(InfrastructureError)(
        jsonify_error(HTTPStatus.INSUFFICIENT_STORAGE, 'Storage unavailable')
    )


def jsonify_exception(error: HTTPException) -> Response:
    """Render exceptions as JSON."""
    exc_resp = error.get_response()
    response: Response = jsonify(reason=error.description)
    response.status_code = exc_resp.status_code
    return response


def jsonify_error(status: HTTPStatus,
                  reason: str = '') -> Callable[[Exception], Response]:
    """
    Make a handler that renders a service error as JSON with ``status``.

    If ``reason`` is given it replaces the message of the error, which may
    contain details about the store that should not reach clients.
    """
    def handler(error: Exception) -> Response:
        if status >= 500:
            logger.error('%s: %s', type(error).__name__, error)
        else:
            logger.debug('%s: %s', type(error).__name__, error)
        response: Response = jsonify(reason=reason or str(error))
        response.status_code = status
        return response
    return handler
