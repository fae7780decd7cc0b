import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import get_settings
from .errors import StorageUnavailable
from .log import log_event


def make_engine(url: str):
    connect_args = {}
    if url.startswith("sqlite"):
        # FastAPI may hand the session to a different worker thread
        connect_args["check_same_thread"] = False
    return create_engine(url, connect_args=connect_args, pool_pre_ping=True)


engine = make_engine(get_settings().DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db(bind=None):
    # models must be imported so their tables are registered on Base.metadata
    from . import models  # noqa: F401

    with storage_errors():
        Base.metadata.create_all(bind=bind or engine)


def get_db():
    """
    Get a database session.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def storage_errors(db=None):
    """
    Translate driver connectivity failures into StorageUnavailable.
    The session, if given, is rolled back first.
    """
    try:
        yield
    except OperationalError as exc:
        if db is not None:
            db.rollback()
        log_event("storage_unavailable", level=logging.ERROR, error=str(exc.orig))
        raise StorageUnavailable(str(exc.orig)) from exc
