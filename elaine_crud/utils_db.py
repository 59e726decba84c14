import logging
from contextlib import contextmanager

from flask import abort
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger("elaine_crud.db")


def get_or_404(session, model, ident):
    """Load ``model`` by primary key or abort with 404.

    Uses Session.get instead of the legacy Query.get_or_404.
    """
    obj = session.get(model, ident)
    if obj is None:
        abort(404)
    return obj


@contextmanager
def transactional(session):
    """Commit the changes made inside the block, roll back on any error.

    Usage:
        with transactional(db.session):
            db.session.add(record)
    """
    try:
        yield session
        session.commit()
    except SQLAlchemyError as exc:
        logger.warning("Transaction rolled back: %s", exc)
        session.rollback()
        raise
    except Exception:
        session.rollback()
        raise
