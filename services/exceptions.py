"""
Exceptions raised by the record intake services.

The HTTP and CLI layers catch these at their boundary and report the
message text; none of them is retried.
"""

from typing import Optional


class RecordIntakeError(Exception):
    """Base class for record intake failures."""


class EmptyFileError(RecordIntakeError):
    """An uploaded spreadsheet has no content."""
    
    def __init__(self, filename: Optional[str] = None):
        self.filename = filename
        super().__init__("File is empty")


class SpreadsheetParseError(RecordIntakeError):
    """A spreadsheet could not be read or converted to records."""
    
    def __init__(self, cause: str, filename: Optional[str] = None):
        self.filename = filename
        super().__init__(f"Error parsing Excel file: {cause}")


class RecordStoreError(RecordIntakeError):
    """The record store rejected a write or read."""
