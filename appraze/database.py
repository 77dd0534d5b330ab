"""
Engine and session wiring for the record store.

The session handed out by `get_db` is only ever driven through
`RecordStore`, which commits per call. Nothing here opens a transaction that
spans several store calls.
"""
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base
from appraze.core.config import settings


def create_db_engine(url: str, **kwargs):
    """
    Build an engine for `url`. SQLite connections are shared with the
    server's worker threads, so thread checks are switched off there;
    PostgreSQL connections are pinged before reuse. SQLite enforces foreign
    keys (and their ON DELETE actions) only when asked to, per connection.
    """
    if not url.startswith("sqlite"):
        kwargs.setdefault("pool_pre_ping", True)
        return create_engine(url, **kwargs)

    kwargs.setdefault("connect_args", {"check_same_thread": False})
    engine = create_engine(url, **kwargs)

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


engine = create_db_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Request-scoped session; closed once the response is sent."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create any missing tables. Runs from the application lifespan."""
    import appraze.models  # noqa: F401  populates Base.metadata
    Base.metadata.create_all(bind=bind or engine)
