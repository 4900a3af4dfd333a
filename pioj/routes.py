"""Provides the JSON API of the service."""

from typing import Any

from flask import Blueprint, Response, current_app, jsonify, make_response, \
    request
from werkzeug.datastructures import MultiDict
from werkzeug.exceptions import BadRequest

from .controllers import authentication, problems, registration
from .controllers import ResponseData
from .services import datastore, mail, verification
from .services.deadline import Deadline

blueprint = Blueprint('api', __name__, url_prefix='/api')


def _deadline() -> Deadline:
    return Deadline.after(float(current_app.config['REQUEST_TIMEOUT']))


def _json() -> Any:
    payload = request.get_json(force=True, silent=True)
    if payload is None:
        raise BadRequest('Request body must be JSON')
    return payload


def _params() -> MultiDict:
    """Get string-valued fields from a JSON object body, as form data."""
    payload = _json()
    if not isinstance(payload, dict):
        raise BadRequest('Request body must be a JSON object')
    return MultiDict([(key, value) for key, value in payload.items()
                      if isinstance(value, str)])


def _respond(response_data: ResponseData) -> Response:
    data, code, headers = response_data
    response: Response = make_response(jsonify(data), code, headers)
    return response


@blueprint.route('/problem/create', methods=['POST'])
def create_problem() -> Response:
    """Create a problem with the next public ID."""
    return _respond(problems.create_problem(datastore.current_problems(),
                                            _json(), _deadline()))


@blueprint.route('/problem/get', methods=['POST'])
def get_problem() -> Response:
    """Get a problem by public ID."""
    return _respond(problems.get_problem(datastore.current_problems(),
                                         _json(), _deadline()))


@blueprint.route('/user/email', methods=['GET'])
def request_verification() -> Response:
    """Send a verification code to the address in the ``email`` param."""
    return _respond(registration.request_verification(
        verification.current_store(),
        mail.current_session(),
        request.args,
        _deadline()
    ))


@blueprint.route('/user/create', methods=['POST'])
def register() -> Response:
    """Register a new user with a verification code."""
    iterations = int(current_app.config['PASSWORD_HASH_ITERATIONS'])
    return _respond(registration.register(verification.current_store(),
                                          datastore.current_users(),
                                          _params(), _deadline(),
                                          iterations=iterations))


@blueprint.route('/user/login', methods=['POST'])
def login() -> Response:
    """Log in with a username and password."""
    return _respond(authentication.login(datastore.current_users(),
                                         _params(), _deadline()))
