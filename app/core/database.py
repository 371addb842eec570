"""
Database engine and session management using SQLAlchemy.
Defaults to a local SQLite file; point DATABASE_URL at PostgreSQL for production.
"""

from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import DeclarativeBase, sessionmaker, Session
from typing import Generator

from app.core.config import get_settings

settings = get_settings()

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    connect_args["check_same_thread"] = False  # Sessions are used from FastAPI's threadpool

engine = create_engine(
    settings.DATABASE_URL,
    connect_args=connect_args,
    echo=settings.DEBUG,
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Declarative base for all SQLAlchemy models."""
    pass


def get_db() -> Generator[Session, None, None]:
    """
    Dependency that provides a database session.
    Ensures proper cleanup after each request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None) -> None:
    """Create all database tables from model metadata. Safe to call repeatedly."""
    # Register models on the metadata before create_all
    from app.models import sale  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def count_sales(db: Session) -> int:
    """Number of rows currently in the sales table."""
    from app.models.sale import Sale

    return db.execute(select(func.count()).select_from(Sale)).scalar_one()
