"""Tests for :mod:`pioj.services.datastore.problems`."""

import threading
from unittest import TestCase, mock

from ....domain import Problem
from ...exceptions import DuplicateKeyError, InfrastructureError, \
    NotFoundError
from ..problems import ProblemRepository
from .util import temporary_db, unreachable_db


class TestCreateProblem(TestCase):
    """Problems get sequential public IDs."""

    def setUp(self):
        self._db = temporary_db()
        self.sessions = self._db.__enter__()
        self.problems = ProblemRepository(self.sessions)

    def tearDown(self):
        self._db.__exit__(None, None, None)

    def test_first_id(self):
        """The first problem gets ID 1."""
        self.assertEqual(self.problems.next_id(), 1)
        problem = self.problems.create(Problem(content={'title': 'A'}))
        self.assertEqual(problem.id, 1)
        self.assertTrue(problem.problem_id)
        self.assertEqual(self.problems.next_id(), 2)

    def test_sequence(self):
        """Each problem gets the ID after the highest one in use."""
        ids = [self.problems.create(Problem(content={'n': n})).id
               for n in range(3)]
        self.assertEqual(ids, [1, 2, 3])
        internal = {self.problems.find_by_id(i).problem_id for i in ids}
        self.assertEqual(len(internal), 3)

    def test_ids_on_input_are_ignored(self):
        """The caller cannot choose the IDs."""
        problem = self.problems.create(
            Problem(content={'title': 'A'}, id=99, problem_id='foo')
        )
        self.assertEqual(problem.id, 1)
        self.assertNotEqual(problem.problem_id, 'foo')

    def test_find_by_id(self):
        """A stored problem can be loaded by its public ID."""
        content = {'title': 'A', 'limits': {'time': 1000}, 'tags': ['dp']}
        created = self.problems.create(Problem(content=content))
        found = self.problems.find_by_id(created.id)
        self.assertEqual(found, created)
        self.assertEqual(found.content, content)

    def test_not_found(self):
        """Looking up a missing problem fails."""
        with self.assertRaises(NotFoundError):
            self.problems.find_by_id(1)

    def test_conflict_is_retried(self):
        """If the ID was taken in the meantime, another one is allocated."""
        self.problems.create(Problem(content={'title': 'A'}))
        with mock.patch.object(self.problems, 'next_id') as mock_next_id:
            mock_next_id.side_effect = [1, 2]
            problem = self.problems.create(Problem(content={'title': 'B'}))
        self.assertEqual(problem.id, 2)
        self.assertEqual(mock_next_id.call_count, 2)
        self.assertEqual(self.problems.find_by_id(1).content, {'title': 'A'})

    def test_attempts_exhausted(self):
        """Allocation gives up after the configured number of attempts."""
        problems = ProblemRepository(self.sessions, attempts=3)
        problems.create(Problem(content={'title': 'A'}))
        with mock.patch.object(problems, 'next_id') as mock_next_id:
            mock_next_id.return_value = 1
            with self.assertRaises(InfrastructureError) as ctx:
                problems.create(Problem(content={'title': 'B'}))
        self.assertIsInstance(ctx.exception.__cause__, DuplicateKeyError)
        self.assertEqual(mock_next_id.call_count, 3)
        self.assertEqual(problems.next_id(), 2)

    def test_concurrent_creation(self):
        """Concurrent writers never share an ID, and leave no gaps."""
        problems = ProblemRepository(self.sessions, attempts=20)
        results, errors = [], []

        def create(n):
            try:
                results.append(problems.create(Problem(content={'n': n})))
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=create, args=(n,))
                   for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(errors, [])
        self.assertEqual(sorted(p.id for p in results), [1, 2, 3, 4])


class TestDatabaseUnavailable(TestCase):
    """Database outages are reported as infrastructure errors."""

    def setUp(self):
        self.problems = ProblemRepository(unreachable_db())

    def test_create(self):
        with self.assertRaises(InfrastructureError):
            self.problems.create(Problem(content={'title': 'A'}))

    def test_find(self):
        with self.assertRaises(InfrastructureError):
            self.problems.find_by_id(1)
