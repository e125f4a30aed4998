"""
Spreadsheet Service - Convert uploaded workbooks into contact records.

Columns are mapped by position, never by header name. The first row of
the first worksheet is always treated as a header and skipped.
"""

import io
import logging
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import BinaryIO, Dict, List, Optional, Union

import openpyxl
from openpyxl.cell.cell import Cell
from openpyxl.worksheet.formula import ArrayFormula

from backend.models.schema import FormRecord
from services.exceptions import SpreadsheetParseError

logger = logging.getLogger(__name__)

# Column index -> FormRecord attribute
COLUMN_FIELDS = (
    'first_name',
    'last_name',
    'phone_number',
    'email',
    'additional_fields',
)

HEADER_ROWS = 1

_DATE_TYPES = (datetime, date, time, timedelta)


class CellKind(str, Enum):
    """Closed set of cell kinds the parser distinguishes."""
    
    TEXT = 'text'
    NUMERIC = 'numeric'
    BOOLEAN = 'boolean'
    FORMULA = 'formula'
    OTHER = 'other'


def classify_cell(cell: Optional[Cell]) -> CellKind:
    """
    Determine the kind of a worksheet cell.
    
    openpyxl stores date-formatted numbers with data_type 'd'; they are
    still numeric cells in the workbook and classify as NUMERIC.
    """
    if cell is None or cell.value is None:
        return CellKind.OTHER
    
    data_type = cell.data_type
    if data_type == 'f':
        return CellKind.FORMULA
    if data_type == 'b':
        return CellKind.BOOLEAN
    if data_type in ('n', 'd'):
        return CellKind.NUMERIC
    if data_type in ('s', 'inlineStr'):
        return CellKind.TEXT
    # Error cells ('e') and anything openpyxl adds later
    return CellKind.OTHER


def _formula_text(value) -> str:
    if isinstance(value, ArrayFormula):
        formula = value.text or ''
    elif isinstance(value, str):
        formula = value
    else:
        raise SpreadsheetParseError(f"unsupported formula type {type(value).__name__}")
    return formula[1:] if formula.startswith('=') else formula


def cell_value_as_string(cell: Optional[Cell]) -> str:
    """
    Render a cell's content as the string stored on a record.
    
    Args:
        cell: openpyxl cell, or None when the row has no cell at that column
    
    Returns:
        Text verbatim, dates via str(), other numbers as float decimal text,
        booleans as "true"/"false", formulas as source text without the
        leading "=", and "" for everything else.
    """
    kind = classify_cell(cell)
    
    if kind is CellKind.TEXT:
        return str(cell.value)
    
    if kind is CellKind.NUMERIC:
        if cell.is_date or isinstance(cell.value, _DATE_TYPES):
            return str(cell.value)
        return str(float(cell.value))
    
    if kind is CellKind.BOOLEAN:
        return 'true' if cell.value else 'false'
    
    if kind is CellKind.FORMULA:
        return _formula_text(cell.value)
    
    return ''


def _cells_by_row(worksheet) -> Dict[int, Dict[int, Cell]]:
    """
    Group the cells stored in the sheet by row number.
    
    Reads the worksheet's cell mapping directly: iter_rows() would create
    cells for every gap in the used range and hide which rows are absent.
    Rows that only carry row-level formatting have no cells but are
    still present in the sheet.
    """
    rows = {row_idx: {} for row_idx in worksheet.row_dimensions.keys()}
    for (row_idx, col_idx), cell in worksheet._cells.items():
        rows.setdefault(row_idx, {})[col_idx] = cell
    return rows


class SpreadsheetParser:
    """
    Parse .xlsx workbooks into unsaved FormRecord instances.
    
    Only the first worksheet is read. One record is produced per row
    present in the sheet after the header, in sheet order; rows absent
    from the sheet data produce nothing.
    """
    
    def parse(self, source: Union[bytes, BinaryIO], filename: Optional[str] = None) -> List[FormRecord]:
        """
        Parse a workbook into records.
        
        Args:
            source: Workbook bytes or a readable binary stream
            filename: Original filename, used for logging and error context
        
        Returns:
            Records in row order
        
        Raises:
            SpreadsheetParseError: If the workbook cannot be read or converted
        """
        label = filename or '<stream>'
        logger.info(f"Parsing spreadsheet: {label}")
        
        try:
            stream = io.BytesIO(source) if isinstance(source, (bytes, bytearray)) else source
            workbook = openpyxl.load_workbook(stream, data_only=False)
            try:
                records = self._parse_sheet(workbook.worksheets[0])
            finally:
                workbook.close()
        except SpreadsheetParseError as e:
            logger.error(f"Failed to parse spreadsheet {label}: {e}")
            e.filename = filename
            raise
        except Exception as e:
            logger.error(f"Failed to parse spreadsheet {label}: {e}")
            raise SpreadsheetParseError(str(e) or type(e).__name__, filename=filename) from e
        
        logger.info(f"Parsed {len(records)} records from {label}")
        return records
    
    def _parse_sheet(self, worksheet) -> List[FormRecord]:
        records = []
        rows = _cells_by_row(worksheet)
        
        for row_idx in sorted(rows):
            if row_idx <= HEADER_ROWS:
                continue
            
            row = rows[row_idx]
            values = {
                field: cell_value_as_string(row.get(index + 1))
                for index, field in enumerate(COLUMN_FIELDS)
            }
            records.append(FormRecord(**values))
            logger.debug(f"Row {row_idx}: {values['first_name']!r} <{values['email']}>")
        
        return records
