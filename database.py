"""
SQLAlchemy database connection and session management.

This module provides:
- Database engine configuration (any SQLAlchemy URL, SQLite by default)
- Session factory for the services and the lock reclaimer
- Connection utilities

Usage:
     from database import get_session_context

     with get_session_context() as db:
          UnitService.lock_unit(db, unit_id=42, user_id="agent-7")
     """
import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from config import config

logger = logging.getLogger(__name__)

DATABASE_URL = config.DATABASE_URL


def _engine_options(url: str) -> dict:
     """Pool settings for server databases; SQLite manages its own."""
     if url.startswith("sqlite"):
          return {"connect_args": {"check_same_thread": False}}
     return {
          "pool_size": 5,
          "max_overflow": 10,
          "pool_timeout": 30,
          "pool_recycle": 1800,  # Recycle connections after 30 minutes
     }


# Create SQLAlchemy engine
engine = create_engine(
     DATABASE_URL,
     echo=config.SQL_ECHO,  # Log SQL if SQL_ECHO=true
     **_engine_options(DATABASE_URL),
)

# Session factory
SessionLocal = sessionmaker(
     bind=engine,
     autocommit=False,
     autoflush=False,
     expire_on_commit=False,
)


def get_session() -> Generator[Session, None, None]:
     """
     Generator that provides a database session and commits on success.

     Yields:
          Session: SQLAlchemy database session
     """
     session = SessionLocal()
     try:
          yield session
          session.commit()
     except Exception:
          session.rollback()
          raise
     finally:
          session.close()


@contextmanager
def get_session_context() -> Generator[Session, None, None]:
     """
     Context manager for database sessions.

     Usage:
          with get_session_context() as db:
               unit = UnitService.get_unit(db, 42)

     Yields:
          Session: SQLAlchemy database session
     """
     session = SessionLocal()
     try:
          yield session
          session.commit()
     except Exception:
          session.rollback()
          raise
     finally:
          session.close()


def init_db() -> None:
     """
     Initialize database tables.

     Creates all tables defined in the models if they don't exist.
     For production, use Alembic migrations instead.
     """
     from models import Base
     Base.metadata.create_all(bind=engine)


def check_connection() -> bool:
     """
     Test database connectivity.

     Returns:
          bool: True if connection successful, False otherwise
     """
     try:
          with engine.connect() as conn:
               conn.execute(text("SELECT 1"))
          return True
     except SQLAlchemyError as e:
          logger.error(f"Database connection failed: {e}")
          return False
