"""
Pytest configuration and fixtures for record intake tests.
"""

import io
import os
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from dotenv import load_dotenv
import openpyxl

from backend.models.schema import Base

# Load environment
load_dotenv()

# Test database URL (in-memory unless overridden)
TEST_DATABASE_URL = os.getenv('TEST_DATABASE_URL', 'sqlite://')


@pytest.fixture(scope='function')
def engine():
    """Create test database engine with a fresh schema."""
    eng = create_engine(
        TEST_DATABASE_URL,
        connect_args={'check_same_thread': False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture(scope='function')
def session(engine):
    """Create a new database session for a test."""
    Session = sessionmaker(bind=engine)
    sess = Session()
    
    yield sess
    
    sess.close()


@pytest.fixture
def make_workbook():
    """
    Build .xlsx bytes from rows.
    
    Each row is a list of cell values; None leaves the cell empty.
    Extra sheets can be passed as {title: rows}.
    """
    def _make(rows, extra_sheets=None):
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = 'Contacts'
        for row_idx, row in enumerate(rows, 1):
            for col_idx, value in enumerate(row, 1):
                if value is not None:
                    ws.cell(row=row_idx, column=col_idx, value=value)
        
        for title, sheet_rows in (extra_sheets or {}).items():
            extra = wb.create_sheet(title)
            for row in sheet_rows:
                extra.append(row)
        
        buffer = io.BytesIO()
        wb.save(buffer)
        return buffer.getvalue()
    
    return _make


@pytest.fixture
def header_row():
    """Header row as users typically provide it."""
    return ['First Name', 'Last Name', 'Phone', 'Email', 'Notes']


@pytest.fixture
def two_contacts_workbook(make_workbook, header_row):
    """Header plus two data rows."""
    return make_workbook([
        header_row,
        ['Jo', 'Lee', '555', 'j@x.com', 'vip'],
        ['Ann', 'Fox', '666', 'a@x.com', ''],
    ])
