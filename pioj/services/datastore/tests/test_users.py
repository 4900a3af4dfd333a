"""Tests for :mod:`pioj.services.datastore.users`."""

import sqlite3
import time
from datetime import datetime
from unittest import TestCase

from pytz import UTC
from sqlalchemy import func, select

from ....domain import User
from ...deadline import Deadline
from ...exceptions import DuplicateKeyError, InfrastructureError, \
    NotFoundError
from ..models import DBUser
from ..users import UserRepository
from .util import temporary_db, unreachable_db


class TestCreateUser(TestCase):
    """Users are created with a unique username."""

    def setUp(self):
        self._db = temporary_db()
        self.sessions = self._db.__enter__()
        self.users = UserRepository(self.sessions)

    def tearDown(self):
        self._db.__exit__(None, None, None)

    def _count(self, username):
        with self.sessions() as session:
            return session.scalar(
                select(func.count()).select_from(DBUser)
                .where(DBUser.username == username)
            )

    def test_create(self):
        """The new user can be found by username and by ID."""
        user = User(username='alice', email='a@b.com', credential='foo')
        user_id = self.users.create(user)

        found = self.users.find_by_username('alice')
        self.assertEqual(found.user_id, user_id)
        self.assertEqual(found.email, 'a@b.com')
        self.assertEqual(found.credential, 'foo')
        self.assertIsInstance(found.joined, datetime)
        self.assertEqual(self.users.find_by_id(user_id), found)

    def test_create_with_join_time(self):
        """A join time set on the user is stored as given."""
        joined = datetime(2024, 3, 1, 12, 30, tzinfo=UTC)
        user_id = self.users.create(User(username='alice', joined=joined))
        self.assertEqual(self.users.find_by_id(user_id).joined, joined)

    def test_duplicate_username(self):
        """A second user with the same username is rejected."""
        self.users.create(User(username='alice', credential='foo'))
        with self.assertRaises(DuplicateKeyError):
            self.users.create(User(username='alice', credential='bar'))
        self.assertEqual(self._count('alice'), 1)
        self.assertEqual(self.users.find_by_username('alice').credential,
                         'foo')

    def test_usernames_are_case_sensitive(self):
        """Usernames that differ only in case are different users."""
        first = self.users.create(User(username='alice', credential='foo'))
        second = self.users.create(User(username='Alice', credential='bar'))
        self.assertNotEqual(first, second)
        self.assertEqual(self.users.find_by_username('Alice').user_id, second)

    def test_update(self):
        """The e-mail address and credential can be replaced."""
        user_id = self.users.create(User(username='alice', credential='foo'))
        user = self.users.find_by_id(user_id)
        self.users.update(user._replace(email='c@d.com', credential='bar'))
        updated = self.users.find_by_id(user_id)
        self.assertEqual(updated.email, 'c@d.com')
        self.assertEqual(updated.credential, 'bar')
        self.assertEqual(updated.username, 'alice')

    def test_update_unknown_user(self):
        """Updating a user that does not exist fails."""
        with self.assertRaises(NotFoundError):
            self.users.update(User(username='bob', user_id='42'))
        with self.assertRaises(NotFoundError):
            self.users.update(User(username='bob'))

    def test_not_found(self):
        """Looking up a missing user fails."""
        with self.assertRaises(NotFoundError):
            self.users.find_by_username('nobody')
        with self.assertRaises(NotFoundError):
            self.users.find_by_id('42')
        with self.assertRaises(NotFoundError):
            self.users.find_by_id('foo')

    def test_deadline_passed(self):
        """Nothing is written once the deadline has passed."""
        deadline = Deadline(time.monotonic() - 1)
        with self.assertRaises(InfrastructureError):
            self.users.create(User(username='alice'), deadline)
        self.assertEqual(self._count('alice'), 0)

    def test_database_locked_past_deadline(self):
        """A write waiting on a lock gives up at the deadline."""
        path = self.sessions.kw['bind'].url.database
        locker = sqlite3.connect(path, isolation_level=None)
        locker.execute('BEGIN EXCLUSIVE')
        try:
            start = time.monotonic()
            with self.assertRaises(InfrastructureError):
                self.users.create(User(username='alice'),
                                  Deadline.after(0.2))
            self.assertLess(time.monotonic() - start, 2)
        finally:
            locker.rollback()
            locker.close()
        self.assertEqual(self._count('alice'), 0)


class TestDatabaseUnavailable(TestCase):
    """Database outages are reported as infrastructure errors."""

    def setUp(self):
        self.users = UserRepository(unreachable_db())

    def test_create(self):
        with self.assertRaises(InfrastructureError):
            self.users.create(User(username='alice'))

    def test_find(self):
        with self.assertRaises(InfrastructureError):
            self.users.find_by_username('alice')
        with self.assertRaises(InfrastructureError):
            self.users.find_by_id('1')
