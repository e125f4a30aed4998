"""
Record router - Spreadsheet bulk upload, single submission and lookup.

Every endpoint catches failures itself and reduces them to a status code;
records saved before a failure are not rolled back.
Handlers are plain functions so the blocking database calls run in the
threadpool.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import PlainTextResponse, RedirectResponse, Response

from api.config import settings
from api.dependencies import get_upload_service
from api.schemas.record_schema import RecordResponse
from backend.models.schema import FormRecord
from services.upload_service import RecordUploadService, SpreadsheetUpload

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(tags=['records'])


@router.post('/bulk-upload', status_code=status.HTTP_302_FOUND)
def bulk_upload(
    files: List[UploadFile] = File(..., description="Spreadsheets (.xlsx) to import"),
    service: RecordUploadService = Depends(get_upload_service)
):
    """
    Import contact records from one or more spreadsheets.
    
    Each file's first worksheet is read; row 1 is a header, columns A-E map
    to first name, last name, phone number, email and additional fields.
    
    **Returns:**
    - 302 redirect to `/` once every file is saved
    - 500 with `Failed to upload files: <message>` on the first failure
    """
    logger.info(f"Bulk upload request with {len(files)} files")
    
    try:
        uploads = []
        for upload in files:
            uploads.append(SpreadsheetUpload(filename=upload.filename, content=upload.file.read()))
        
        service.handle_bulk_upload(uploads)
        
    except Exception as e:
        logger.error(f"Bulk upload failed: {e}", exc_info=True)
        return PlainTextResponse(
            f"Failed to upload files: {e}",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )
    
    return RedirectResponse(url=settings.HOME_REDIRECT_PATH, status_code=status.HTTP_302_FOUND)


@router.post('/upload-data', status_code=status.HTTP_302_FOUND)
def upload_data(
    first_name: str = Form("", alias="firstName"),
    last_name: str = Form("", alias="lastName"),
    phone_number: str = Form("", alias="phoneNumber"),
    email: str = Form("", alias="email"),
    additional_fields: str = Form("", alias="additionalFields"),
    service: RecordUploadService = Depends(get_upload_service)
):
    """
    Save a single contact record from form fields.
    
    Redirects to `/` on success and to the error view on failure.
    """
    record = FormRecord(
        first_name=first_name,
        last_name=last_name,
        phone_number=phone_number,
        email=email,
        additional_fields=additional_fields
    )
    
    try:
        service.save_record(record)
    except Exception as e:
        logger.error(f"Single submission failed: {e}", exc_info=True)
        return RedirectResponse(url=settings.ERROR_REDIRECT_PATH, status_code=status.HTTP_302_FOUND)
    
    return RedirectResponse(url=settings.HOME_REDIRECT_PATH, status_code=status.HTTP_302_FOUND)


@router.get('/retrieve', response_model=List[RecordResponse])
def retrieve_data(
    name: str = Query(..., description="First name, matched exactly"),
    email: str = Query(..., description="Email, matched exactly"),
    service: RecordUploadService = Depends(get_upload_service)
):
    """
    Look up records by first name and email.
    
    **Example:**
    ```bash
    curl "http://localhost:8000/retrieve?name=Jo&email=j@x.com"
    ```
    
    **Returns:**
    - 200 with the matching records
    - 404 with an empty body when nothing matches
    - 500 with an empty body on lookup failure
    """
    try:
        records = service.retrieve_records(name, email)
    except Exception as e:
        logger.error(f"Lookup failed: {e}", exc_info=True)
        return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    
    if not records:
        return Response(status_code=status.HTTP_404_NOT_FOUND)
    
    return [RecordResponse.model_validate(record) for record in records]
