"""Testing helpers."""

import shutil
import tempfile
from contextlib import contextmanager

from .. import util


@contextmanager
def temporary_db(create: bool = True):
    """Provide a throwaway SQLite database, as a session factory."""
    db_path = tempfile.mkdtemp()
    engine = util.get_engine(f'sqlite:///{db_path}/test.db')
    if create:
        util.create_all(engine)
    try:
        yield util.get_sessionmaker(engine)
    finally:
        util.drop_all(engine)
        engine.dispose()
        shutil.rmtree(db_path)


def unreachable_db():
    """Get a session factory for a database that cannot be opened."""
    engine = util.get_engine('sqlite:////nonexistent/pioj/test.db', 0.1)
    return util.get_sessionmaker(engine, 0.1)
