"""
Database configuration and session management for Price Bot.

Uses SQLAlchemy ORM; every collection (shops, goods, prices, receipts) is a
table keyed by an opaque string id.
"""

import os
import uuid
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from contextlib import contextmanager

from pricebot.config import settings

# Create database directory if it doesn't exist
db_dir = os.path.dirname(settings.DATABASE_URL.replace("sqlite:///", ""))
if db_dir and not os.path.exists(db_dir):
    os.makedirs(db_dir, exist_ok=True)

# Create SQLAlchemy engine
connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    connect_args["check_same_thread"] = False

engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DATABASE_ECHO,
    connect_args=connect_args,
)

# Base class for declarative models
Base = declarative_base()

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def new_id() -> str:
    """Generate an opaque document identifier."""
    return uuid.uuid4().hex


def init_db():
    """
    Initialize database by creating all tables.
    """
    # Import models to ensure they're registered
    from pricebot.models import shop, good, price, receipt

    Base.metadata.create_all(bind=engine)


def get_db() -> Session:
    """
    Dependency for getting database session.
    Use in FastAPI route dependencies.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_context():
    """
    Context manager for database session.
    Use for non-FastAPI contexts (the chat bot).
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
