"""
Upload Service - Framework-agnostic record intake workflow.

Used by the API and the CLI alike. Files and rows are handled strictly
in input order; records already saved stay saved when a later file fails.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from backend.models.schema import FormRecord
from services.exceptions import EmptyFileError
from services.record_store import RecordStore
from services.spreadsheet_service import SpreadsheetParser

logger = logging.getLogger(__name__)


@dataclass
class SpreadsheetUpload:
    """One uploaded spreadsheet: its original name and raw bytes."""
    
    filename: Optional[str]
    content: bytes
    
    @property
    def is_empty(self) -> bool:
        return not self.content


class RecordUploadService:
    """
    Orchestrates spreadsheet parsing and record persistence.
    """
    
    def __init__(self, store: RecordStore, parser: Optional[SpreadsheetParser] = None):
        """
        Initialize upload service.
        
        Args:
            store: Record store that receives every save
            parser: Spreadsheet parser (default: SpreadsheetParser())
        """
        self.store = store
        self.parser = parser or SpreadsheetParser()
    
    def handle_bulk_upload(self, files: Iterable[SpreadsheetUpload]) -> int:
        """
        Parse each spreadsheet and save its records one by one.
        
        Args:
            files: Uploaded spreadsheets, processed in the given order
        
        Returns:
            Number of records saved
        
        Raises:
            EmptyFileError: If a file has no content; later files are not processed
            SpreadsheetParseError: If a file cannot be parsed
            RecordStoreError: If a save fails
        """
        saved = 0
        
        for upload in files:
            if upload.is_empty:
                logger.warning(f"Rejecting empty upload: {upload.filename}")
                raise EmptyFileError(upload.filename)
            
            records = self.parser.parse(upload.content, filename=upload.filename)
            for record in records:
                self.store.save(record)
                saved += 1
            
            logger.info(f"Saved {len(records)} records from {upload.filename}")
        
        logger.info(f"Bulk upload complete: {saved} records saved")
        return saved
    
    def save_record(self, record: FormRecord) -> FormRecord:
        """Persist a single caller-supplied record unchanged."""
        saved = self.store.save(record)
        logger.info(f"Saved submitted record {saved.id}")
        return saved
    
    def retrieve_records(self, name: str, email: str) -> List[FormRecord]:
        """
        Find records by exact, case-sensitive first name and email.
        
        Returns an empty list when nothing matches.
        """
        records = self.store.find_by_first_name_and_email(name, email)
        logger.info(f"Lookup for {name!r} <{email}> returned {len(records)} records")
        return records
