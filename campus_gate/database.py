# campus_gate/database.py
"""
Database connection, session management, and table creation.
Uses SQLAlchemy with PostgreSQL in production (SQLite works for local runs and tests).
All models are auto-imported here so create_tables() creates every table in one call.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from campus_gate.config import settings


def build_engine(url: str):
    """Create an engine with pool settings suited to the backend behind `url`."""
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},  # sessions cross worker threads
            echo=False,
        )
    return create_engine(
        url,
        pool_pre_ping=True,          # Auto-reconnect if DB connection drops
        pool_size=10,
        max_overflow=20,
        echo=False,                  # Set True to log all SQL queries (debug only)
    )


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency — yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind=None):
    """
    Creates all DB tables on startup. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    from campus_gate.models.campus import Campus               # noqa
    from campus_gate.models.gate import Gate                   # noqa
    from campus_gate.models.student import Student             # noqa
    from campus_gate.models.schedule import ScheduleEntry      # noqa
    from campus_gate.models.visitor import Visitor             # noqa
    from campus_gate.models.access_log import AccessLog        # noqa
    from campus_gate.models.violation import Violation         # noqa
    from campus_gate.models.alert import Alert                 # noqa

    Base.metadata.create_all(bind=bind or engine)
