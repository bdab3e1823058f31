from contextlib import contextmanager
from flask import current_app
from pagebuilder.extensions import db

@contextmanager
def transactional(session=None):
    """
    Commit the session when the block exits cleanly, roll it back and
    re-raise otherwise. Repositories only flush; this is where page writes
    become visible.
    """
    session = session or db.session
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        current_app.logger.debug("Transaction rolled back", exc_info=True)
        raise
