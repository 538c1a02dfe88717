# danceup/db.py
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from . import config

Base = declarative_base()

engine = None
SessionLocal = None


# ── Engine setup ─────────────────────────────────
def configure(database_url: str = None):
    """(Re)bind the engine and session factory to a database URL."""
    global engine, SessionLocal
    url = database_url or config.DATABASE_URL

    kwargs = {"pool_pre_ping": True, "future": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # one shared connection, otherwise every checkout is a fresh empty db
            kwargs["poolclass"] = StaticPool

    engine = create_engine(url, **kwargs)
    SessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        future=True,
    )
    return engine


def init_db():
    """Create tables if missing."""
    from . import models  # noqa: F401  (registers tables on Base)
    if engine is None:
        configure()
    Base.metadata.create_all(bind=engine)


# ── Context managers ─────────────────────────────
@contextmanager
def get_session():
    """Provide a transactional scope around a series of operations."""
    if SessionLocal is None:
        configure()
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
