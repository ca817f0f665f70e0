from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

# Base class for all models
Base = declarative_base()


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create engine with appropriate settings.

    check_same_thread=False needed for SQLite with FastAPI, since sync
    endpoints run in a thread pool.
    """
    return create_engine(
        database_url,
        connect_args={"check_same_thread": False} if database_url.startswith("sqlite") else {},
        echo=echo
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    """Session factory for database operations"""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request):
    """
    Dependency that provides database session to route handlers.
    Ensures session is properly closed after request.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def init_db(engine: Engine):
    """
    Initialize database schema.
    Creates all tables defined in models.
    Call this on application startup.
    """
    # Register models on Base.metadata before create_all
    from hostelmart import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
