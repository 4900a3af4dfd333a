"""Tests for :mod:`pioj.services.datastore.util`."""

from unittest import TestCase, mock

from ...deadline import Deadline
from .. import util


class TestGetEngine(TestCase):
    """Connections are bounded by the configured timeout."""

    @mock.patch(f'{util.__name__}.create_engine')
    def test_postgresql(self, mock_create_engine):
        """The driver gets a connect timeout, in whole seconds."""
        util.get_engine('postgresql://pioj@db.local/pioj', 0.5)
        _, kwargs = mock_create_engine.call_args
        self.assertEqual(kwargs['connect_args'], {'connect_timeout': 1})
        self.assertEqual(kwargs['pool_timeout'], 0.5)

    @mock.patch(f'{util.__name__}.create_engine')
    def test_mysql(self, mock_create_engine):
        util.get_engine('mysql://pioj@db.local/pioj', 7.2)
        _, kwargs = mock_create_engine.call_args
        self.assertEqual(kwargs['connect_args'], {'connect_timeout': 8})

    @mock.patch(f'{util.__name__}.create_engine')
    def test_sqlite(self, mock_create_engine):
        """SQLite waits on locks for at most the timeout."""
        util.get_engine('sqlite:///pioj.db', 3)
        _, kwargs = mock_create_engine.call_args
        self.assertEqual(kwargs['connect_args']['timeout'], 3)


class TestTransaction(TestCase):
    """Statements are limited by the session timeout and the deadline."""

    def _sessions(self, dialect, timeout=5):
        sessions = mock.MagicMock()
        session = sessions.return_value
        session.info = {'timeout': timeout}
        session.get_bind.return_value.dialect.name = dialect
        return sessions, session

    def _statement(self, session):
        return str(session.execute.call_args_list[0][0][0])

    def test_session_timeout(self):
        """Without a deadline, the session timeout applies."""
        sessions, session = self._sessions('postgresql')
        with util.transaction(sessions):
            pass
        self.assertEqual(self._statement(session),
                         'SET LOCAL statement_timeout = 5000')
        self.assertEqual(session.commit.call_count, 1)

    def test_deadline_is_shorter(self):
        """The time left before the deadline applies if it is shorter."""
        sessions, session = self._sessions('postgresql')
        with util.transaction(sessions, Deadline.after(0.5)):
            pass
        statement = self._statement(session)
        self.assertTrue(statement.startswith('SET LOCAL statement_timeout'))
        self.assertLessEqual(int(statement.split(' = ')[1]), 500)

    def test_sqlite(self):
        sessions, session = self._sessions('sqlite', 2)
        with util.transaction(sessions):
            pass
        self.assertEqual(self._statement(session),
                         'PRAGMA busy_timeout = 2000')

    def test_mysql(self):
        sessions, session = self._sessions('mysql', 2)
        with util.transaction(sessions):
            pass
        self.assertEqual(self._statement(session),
                         'SET SESSION max_execution_time = 2000')
