from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event, inspect
from sqlalchemy.exc import SQLAlchemyError
from contextlib import contextmanager
import logging

# Retrieve main logger
logger = logging.getLogger("main")

db = SQLAlchemy()


@contextmanager
def transaction(action):
    """
    Commit the session when the block succeeds, roll it back otherwise.

    Rolling back expires every loaded instance, so the next read re-syncs
    with the database instead of trusting the half-applied local state.
    Any SQLAlchemyError is re-raised as a PersistenceException.
    """
    from exceptions import PersistenceException

    try:
        yield db.session
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise PersistenceException(f"{action} failed: {e}") from e
    except Exception:
        db.session.rollback()
        raise


def init_db(app):
    # Register models before create_all
    import models  # noqa: F401

    with app.app_context():
        # Ensure foreign keys and timeout are set when connection is opened
        @event.listens_for(db.engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            import sqlite3
            if not isinstance(dbapi_connection, sqlite3.Connection):
                return

            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON;")
            cursor.execute("PRAGMA busy_timeout=30000;")
            cursor.close()

        inspector = inspect(db.engine)
        if not inspector.has_table("person"):
            logger.info("Initializing database tables...")
        db.create_all()
