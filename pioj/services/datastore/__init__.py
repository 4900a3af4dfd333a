"""Database integration for users and problems."""

from flask import Flask, current_app
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from . import models, util
from .problems import ProblemRepository
from .users import UserRepository

create_all = util.create_all
drop_all = util.drop_all


def init_app(app: Flask) -> None:
    """Set default configuration parameters for an application instance."""
    app.config.setdefault('DATABASE_URI', 'sqlite:///pioj.db')
    app.config.setdefault('DATABASE_TIMEOUT', '5')
    app.config.setdefault('ID_ALLOCATION_ATTEMPTS', '5')
    app.config.setdefault('CREATE_DB', False)


def current_engine() -> Engine:
    """Get/create the :class:`.Engine` for the current application."""
    extensions = current_app.extensions
    if 'pioj.engine' not in extensions:
        config = current_app.config
        extensions['pioj.engine'] = util.get_engine(
            config.get('DATABASE_URI', 'sqlite:///pioj.db'),
            float(config.get('DATABASE_TIMEOUT', '5'))
        )
    engine: Engine = extensions['pioj.engine']
    return engine


def _sessions() -> sessionmaker:
    timeout = float(current_app.config.get('DATABASE_TIMEOUT', '5'))
    return util.get_sessionmaker(current_engine(), timeout)


def current_users() -> UserRepository:
    """Get/create the :class:`UserRepository` for the current application."""
    extensions = current_app.extensions
    if 'pioj.users' not in extensions:
        sessions = _sessions()
        extensions['pioj.users'] = UserRepository(sessions)
    users: UserRepository = extensions['pioj.users']
    return users


def current_problems() -> ProblemRepository:
    """Get/create the :class:`ProblemRepository` for the current app."""
    extensions = current_app.extensions
    if 'pioj.problems' not in extensions:
        sessions = _sessions()
        attempts = int(current_app.config.get('ID_ALLOCATION_ATTEMPTS', '5'))
        extensions['pioj.problems'] = ProblemRepository(sessions,
                                                        attempts=attempts)
    problems: ProblemRepository = extensions['pioj.problems']
    return problems
