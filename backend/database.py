from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from backend.core.config import Settings

Base = declarative_base()


def build_engine(settings: Settings) -> Engine:
    connect_args = {}
    if settings.database_url.startswith('sqlite'):
        # Worker threads share the engine; give writers time to wait out a held lock.
        connect_args = {'check_same_thread': False, 'timeout': 30}

    return create_engine(settings.database_url, connect_args=connect_args)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )


def ensure_schema(engine: Engine) -> None:
    # Registers the tables on Base.metadata before creating them.
    from backend.models import availability, booking  # noqa: F401

    Base.metadata.create_all(bind=engine)


@contextmanager
def session_scope(session_factory: sessionmaker) -> Iterator[Session]:
    """Yield a session bound to one transaction.

    The transaction commits when the block exits normally and rolls back on any
    exception; the session is closed on every exit path.
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except BaseException:
        session.rollback()
        raise
    finally:
        session.close()
