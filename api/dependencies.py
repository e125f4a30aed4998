"""
Dependency injection utilities for FastAPI.

This module provides the per-request database session, record store and
upload service.
"""

import logging
from typing import Generator
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from fastapi import Depends

from api.config import settings
from services.record_store import RecordStore, SqlAlchemyRecordStore
from services.upload_service import RecordUploadService

logger = logging.getLogger(__name__)


def build_engine(database_url: str, echo: bool = False):
    """
    Create a SQLAlchemy engine for the given URL.
    
    SQLite gets a thread-agnostic connection; server databases get a
    sized connection pool.
    """
    if database_url.startswith('sqlite'):
        return create_engine(
            database_url,
            connect_args={'check_same_thread': False},
            echo=echo
        )
    
    return create_engine(
        database_url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=settings.DB_POOL_PRE_PING,
        echo=echo
    )


# Create database engine
engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    Get database session dependency.
    
    Yields database session and ensures it's closed after use.
    
    Usage:
        @app.get("/endpoint")
        def endpoint(db: Session = Depends(get_db)):
            # Use db session
            pass
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_record_store(db: Session = Depends(get_db)) -> RecordStore:
    """Record store bound to the request's session."""
    return SqlAlchemyRecordStore(db)


def get_upload_service(store: RecordStore = Depends(get_record_store)) -> RecordUploadService:
    """Upload service wired to the request's record store."""
    return RecordUploadService(store)
