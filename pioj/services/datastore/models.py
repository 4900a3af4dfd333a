"""Database models for users and problems."""

from sqlalchemy import JSON, Column, Integer, String, text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class DBUser(Base):  # type: ignore
    """
    Registered users.

    The unique index on ``username`` is what keeps usernames unique; nothing
    in the service checks before inserting. Usernames are case-sensitive, so
    on MySQL the column needs a binary collation.
    """

    __tablename__ = 'users'

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True)
    email = Column(String(255), nullable=False, server_default=text("''"))
    password_enc = Column(String(255))
    joined_date = Column(Integer, nullable=False, server_default=text("'0'"))


class DBProblem(Base):  # type: ignore
    """Problems, with their sequential public ID."""

    __tablename__ = 'problems'

    problem_id = Column(String(32), primary_key=True)
    id = Column(Integer, nullable=False, unique=True)
    content = Column(JSON, nullable=False)
