"""
Tests for the bulk upload and single-record workflow.
"""

import pytest

from backend.models.schema import FormRecord
from services.exceptions import EmptyFileError, RecordStoreError, SpreadsheetParseError
from services.record_store import RecordStore, SqlAlchemyRecordStore
from services.upload_service import RecordUploadService, SpreadsheetUpload


class RecordingStore(RecordStore):
    """In-memory store that records every call in order."""
    
    def __init__(self, fail_on_save=None):
        self.saved = []
        self.fail_on_save = fail_on_save
        self._next_id = 0
    
    def save(self, record):
        if self.fail_on_save is not None and len(self.saved) == self.fail_on_save:
            raise RecordStoreError("store unavailable")
        self._next_id += 1
        record.id = f"id-{self._next_id}"
        self.saved.append(record)
        return record
    
    def save_many(self, records):
        return [self.save(r) for r in records]
    
    def find_by_first_name_and_email(self, first_name, email):
        return [r for r in self.saved if r.first_name == first_name and r.email == email]


@pytest.fixture
def store():
    return RecordingStore()


@pytest.fixture
def service(store):
    return RecordUploadService(store)


class TestBulkUpload:
    """Test multi-file bulk upload ordering and failure behaviour."""
    
    def test_saves_rows_in_order(self, service, store, two_contacts_workbook):
        saved = service.handle_bulk_upload([SpreadsheetUpload('a.xlsx', two_contacts_workbook)])
        
        assert saved == 2
        assert [r.first_name for r in store.saved] == ['Jo', 'Ann']
        assert [r.id for r in store.saved] == ['id-1', 'id-2']
    
    def test_files_processed_in_input_order(self, service, store, make_workbook, header_row):
        first = make_workbook([header_row, ['A1', '', '', 'a@x.com', '']])
        second = make_workbook([header_row, ['B1', '', '', 'b@x.com', ''], ['B2', '', '', 'b@x.com', '']])
        
        saved = service.handle_bulk_upload([
            SpreadsheetUpload('first.xlsx', first),
            SpreadsheetUpload('second.xlsx', second),
        ])
        
        assert saved == 3
        assert [r.first_name for r in store.saved] == ['A1', 'B1', 'B2']
    
    def test_empty_file_aborts_batch(self, service, store, two_contacts_workbook):
        with pytest.raises(EmptyFileError) as exc_info:
            service.handle_bulk_upload([
                SpreadsheetUpload('ok.xlsx', two_contacts_workbook),
                SpreadsheetUpload('empty.xlsx', b''),
                SpreadsheetUpload('never.xlsx', two_contacts_workbook),
            ])
        
        assert str(exc_info.value) == "File is empty"
        assert exc_info.value.filename == 'empty.xlsx'
        # First file stays persisted, third is never reached
        assert len(store.saved) == 2
    
    def test_empty_first_file_saves_nothing(self, service, store, two_contacts_workbook):
        with pytest.raises(EmptyFileError):
            service.handle_bulk_upload([
                SpreadsheetUpload('empty.xlsx', b''),
                SpreadsheetUpload('ok.xlsx', two_contacts_workbook),
            ])
        
        assert store.saved == []
    
    def test_parse_failure_keeps_earlier_files(self, service, store, two_contacts_workbook):
        with pytest.raises(SpreadsheetParseError):
            service.handle_bulk_upload([
                SpreadsheetUpload('ok.xlsx', two_contacts_workbook),
                SpreadsheetUpload('broken.xlsx', b'not a spreadsheet'),
            ])
        
        assert [r.first_name for r in store.saved] == ['Jo', 'Ann']
    
    def test_store_failure_mid_file_propagates(self, two_contacts_workbook):
        store = RecordingStore(fail_on_save=1)
        service = RecordUploadService(store)
        
        with pytest.raises(RecordStoreError):
            service.handle_bulk_upload([SpreadsheetUpload('a.xlsx', two_contacts_workbook)])
        
        assert [r.first_name for r in store.saved] == ['Jo']
    
    def test_no_files(self, service, store):
        assert service.handle_bulk_upload([]) == 0
        assert store.saved == []


class TestSingleRecord:
    """Test direct submission and lookup."""
    
    def test_save_record_unchanged(self, service, store):
        record = FormRecord(
            first_name='Jo', last_name='Lee', phone_number='555',
            email='j@x.com', additional_fields='vip'
        )
        
        saved = service.save_record(record)
        
        assert saved is record
        assert saved.id == 'id-1'
        assert store.saved == [record]
        assert saved.to_dict() == {
            'id': 'id-1', 'first_name': 'Jo', 'last_name': 'Lee',
            'phone_number': '555', 'email': 'j@x.com', 'additional_fields': 'vip'
        }
    
    def test_retrieve_exact_match_only(self, service):
        for first_name, email in [('Alice', 'a@x.com'), ('Alice', 'a@x.com'),
                                  ('alice', 'a@x.com'), ('Alice', 'A@X.COM')]:
            service.save_record(FormRecord(first_name=first_name, email=email))
        
        assert len(service.retrieve_records('Alice', 'a@x.com')) == 2
        assert service.retrieve_records('ALICE', 'a@x.com') == []
    
    def test_retrieve_no_match_empty(self, service):
        assert service.retrieve_records('Nobody', 'n@x.com') == []


class TestWithDatabase:
    """End-to-end through the SQLAlchemy store."""
    
    def test_bulk_upload_then_lookup(self, session, two_contacts_workbook):
        service = RecordUploadService(SqlAlchemyRecordStore(session))
        
        service.handle_bulk_upload([SpreadsheetUpload('contacts.xlsx', two_contacts_workbook)])
        found = service.retrieve_records('Jo', 'j@x.com')
        
        assert len(found) == 1
        assert found[0].last_name == 'Lee'
        assert found[0].additional_fields == 'vip'
        assert session.query(FormRecord).count() == 2
