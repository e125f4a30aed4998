"""
Record Store - Persistence boundary for contact records.

The services depend only on the RecordStore interface; the concrete
store is handed to them by the caller.
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterable, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.models.schema import FormRecord
from services.exceptions import RecordStoreError

logger = logging.getLogger(__name__)


class RecordStore(ABC):
    """Save/find interface over the record collection."""
    
    @abstractmethod
    def save(self, record: FormRecord) -> FormRecord:
        """Persist one record and return it with its identifier assigned."""
    
    @abstractmethod
    def save_many(self, records: Iterable[FormRecord]) -> List[FormRecord]:
        """Persist several records and return them with identifiers assigned."""
    
    @abstractmethod
    def find_by_first_name_and_email(self, first_name: str, email: str) -> List[FormRecord]:
        """Return every record whose first name and email match exactly."""


class SqlAlchemyRecordStore(RecordStore):
    """
    RecordStore backed by a SQLAlchemy session.
    
    Each save commits immediately. Database errors roll the session back
    and surface as RecordStoreError.
    """
    
    def __init__(self, session: Session):
        """
        Initialize the store.
        
        Args:
            session: SQLAlchemy session owned by the caller
        """
        self.session = session
    
    def save(self, record: FormRecord) -> FormRecord:
        try:
            self.session.add(record)
            self.session.commit()
            self.session.refresh(record)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to save record: {e}")
            raise RecordStoreError(f"Failed to save record: {e}") from e
        
        logger.debug(f"Saved record {record.id}")
        return record
    
    def save_many(self, records: Iterable[FormRecord]) -> List[FormRecord]:
        records = list(records)
        if not records:
            return []
        
        try:
            self.session.add_all(records)
            self.session.commit()
            for record in records:
                self.session.refresh(record)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to save {len(records)} records: {e}")
            raise RecordStoreError(f"Failed to save records: {e}") from e
        
        logger.debug(f"Saved {len(records)} records")
        return records
    
    def find_by_first_name_and_email(self, first_name: str, email: str) -> List[FormRecord]:
        try:
            return self.session.query(FormRecord)\
                .filter(FormRecord.first_name == first_name, FormRecord.email == email)\
                .all()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Record lookup failed: {e}")
            raise RecordStoreError(f"Record lookup failed: {e}") from e
