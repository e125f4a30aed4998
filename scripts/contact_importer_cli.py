#!/usr/bin/env python3
"""
Contact Record Import CLI - Dual Mode

This script can operate in two modes:
1. Direct mode (default): Direct database access using services
2. API mode: Makes HTTP requests to the FastAPI backend

Usage:
    # Direct mode (uses services directly)
    python scripts/contact_importer_cli.py import --file contacts.xlsx --file more.xlsx
    
    # API mode (uses FastAPI backend)
    python scripts/contact_importer_cli.py --api-url http://localhost:8000 import --file contacts.xlsx
    
    # Single record and lookup
    python scripts/contact_importer_cli.py submit --first-name Jo --email j@x.com
    python scripts/contact_importer_cli.py lookup --name Jo --email j@x.com
"""

import os
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import json
import logging
from typing import Optional, Tuple

import click
from dotenv import load_dotenv
import requests

# For direct mode
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from api.schemas.record_schema import RecordResponse
from backend.models.schema import Base, FormRecord
from services.record_store import SqlAlchemyRecordStore
from services.upload_service import RecordUploadService, SpreadsheetUpload

# Load environment variables
load_dotenv()

# Configure logging
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FILE = os.getenv('LOG_FILE', 'cli.log')

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(LOG_FILE),
        logging.StreamHandler(sys.stderr)
    ]
)

logger = logging.getLogger('contact_importer_cli')

# Configuration
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///./form_records.db')

XLSX_MIME_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
REQUEST_TIMEOUT = 60


@click.group()
@click.option('--api-url', envvar='API_URL', help='FastAPI backend URL (enables API mode)')
@click.option('--database-url', envvar='DATABASE_URL', default=DATABASE_URL, show_default=True,
              help='Database URL for direct mode')
@click.pass_context
def cli(ctx, api_url: Optional[str], database_url: str):
    """Contact Record Import CLI - Dual Mode Support"""
    ctx.ensure_object(dict)
    ctx.obj['api_url'] = api_url.rstrip('/') if api_url else None
    ctx.obj['database_url'] = database_url
    ctx.obj['mode'] = 'api' if api_url else 'direct'


@cli.command('import')
@click.option('--file', '-f', 'files', required=True, multiple=True, type=click.Path(exists=True),
              help='Spreadsheet to import (repeatable)')
@click.pass_context
def import_cmd(ctx, files: Tuple[str, ...]):
    """Bulk import records from spreadsheets."""
    if ctx.obj['api_url']:
        import_via_api(ctx.obj['api_url'], files)
    else:
        import_direct(ctx.obj['database_url'], files)


@cli.command('submit')
@click.option('--first-name', default='', help='First name')
@click.option('--last-name', default='', help='Last name')
@click.option('--phone-number', default='', help='Phone number')
@click.option('--email', default='', help='Email address')
@click.option('--additional-fields', default='', help='Free-text additional information')
@click.pass_context
def submit_cmd(ctx, first_name: str, last_name: str, phone_number: str,
               email: str, additional_fields: str):
    """Submit a single record."""
    fields = {
        'first_name': first_name,
        'last_name': last_name,
        'phone_number': phone_number,
        'email': email,
        'additional_fields': additional_fields,
    }
    
    if ctx.obj['api_url']:
        submit_via_api(ctx.obj['api_url'], fields)
    else:
        submit_direct(ctx.obj['database_url'], fields)


@cli.command('lookup')
@click.option('--name', '-n', required=True, help='First name (exact match)')
@click.option('--email', '-e', required=True, help='Email (exact match)')
@click.pass_context
def lookup_cmd(ctx, name: str, email: str):
    """Find records by first name and email."""
    if ctx.obj['api_url']:
        lookup_via_api(ctx.obj['api_url'], name, email)
    else:
        lookup_direct(ctx.obj['database_url'], name, email)


# ============================================================================
# Direct Mode Implementation (Uses Services Directly)
# ============================================================================

def _open_service(database_url: str):
    engine = create_engine(database_url)
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine)()
    return engine, session, RecordUploadService(SqlAlchemyRecordStore(session))


def _print_records(records):
    click.echo(json.dumps(records, indent=2))


def import_direct(database_url: str, files: Tuple[str, ...]):
    """Import spreadsheets using direct database access."""
    engine, session, service = _open_service(database_url)
    
    try:
        uploads = [
            SpreadsheetUpload(filename=Path(path).name, content=Path(path).read_bytes())
            for path in files
        ]
        saved = service.handle_bulk_upload(uploads)
        click.echo(f"✓ Imported {saved} records from {len(files)} files")
    except Exception as e:
        logger.error(f"Import failed: {e}", exc_info=True)
        click.echo(f"✗ Import failed: {e}", err=True)
        sys.exit(1)
    finally:
        session.close()
        engine.dispose()


def submit_direct(database_url: str, fields: dict):
    """Save one record using direct database access."""
    engine, session, service = _open_service(database_url)
    
    try:
        record = service.save_record(FormRecord(**fields))
        click.echo(f"✓ Saved record {record.id}")
    except Exception as e:
        logger.error(f"Submit failed: {e}", exc_info=True)
        click.echo(f"✗ Submit failed: {e}", err=True)
        sys.exit(1)
    finally:
        session.close()
        engine.dispose()


def lookup_direct(database_url: str, name: str, email: str):
    """Look up records using direct database access."""
    engine, session, service = _open_service(database_url)
    
    try:
        records = service.retrieve_records(name, email)
        payload = [RecordResponse.model_validate(r).model_dump(by_alias=True) for r in records]
    except Exception as e:
        logger.error(f"Lookup failed: {e}", exc_info=True)
        click.echo(f"✗ Lookup failed: {e}", err=True)
        sys.exit(1)
    finally:
        session.close()
        engine.dispose()
    
    if not payload:
        click.echo("No matching records", err=True)
        sys.exit(1)
    
    _print_records(payload)


# ============================================================================
# API Mode Implementation (Uses FastAPI Backend)
# ============================================================================

def import_via_api(api_url: str, files: Tuple[str, ...]):
    """Upload spreadsheets to the FastAPI backend."""
    click.echo(f"📤 Uploading {len(files)} files to {api_url}...")
    
    handles = [open(path, 'rb') for path in files]
    try:
        multipart = [
            ('files', (Path(path).name, handle, XLSX_MIME_TYPE))
            for path, handle in zip(files, handles)
        ]
        response = requests.post(
            f"{api_url}/bulk-upload",
            files=multipart,
            allow_redirects=False,
            timeout=REQUEST_TIMEOUT
        )
    except requests.RequestException as e:
        logger.error(f"Upload request failed: {e}", exc_info=True)
        click.echo(f"✗ Import failed: {e}", err=True)
        sys.exit(1)
    finally:
        for handle in handles:
            handle.close()
    
    if response.status_code != 302:
        click.echo(f"✗ Import failed: {response.text}", err=True)
        sys.exit(1)
    
    click.echo("✓ Upload accepted")


def submit_via_api(api_url: str, fields: dict):
    """Submit one record to the FastAPI backend."""
    form = {
        'firstName': fields['first_name'],
        'lastName': fields['last_name'],
        'phoneNumber': fields['phone_number'],
        'email': fields['email'],
        'additionalFields': fields['additional_fields'],
    }
    
    try:
        response = requests.post(
            f"{api_url}/upload-data",
            data=form,
            allow_redirects=False,
            timeout=REQUEST_TIMEOUT
        )
    except requests.RequestException as e:
        logger.error(f"Submit request failed: {e}", exc_info=True)
        click.echo(f"✗ Submit failed: {e}", err=True)
        sys.exit(1)
    
    if response.status_code != 302 or response.headers.get('location') != '/':
        click.echo(f"✗ Submit failed: redirected to {response.headers.get('location')}", err=True)
        sys.exit(1)
    
    click.echo("✓ Record submitted")


def lookup_via_api(api_url: str, name: str, email: str):
    """Look up records through the FastAPI backend."""
    try:
        response = requests.get(
            f"{api_url}/retrieve",
            params={'name': name, 'email': email},
            timeout=REQUEST_TIMEOUT
        )
    except requests.RequestException as e:
        logger.error(f"Lookup request failed: {e}", exc_info=True)
        click.echo(f"✗ Lookup failed: {e}", err=True)
        sys.exit(1)
    
    if response.status_code == 404:
        click.echo("No matching records", err=True)
        sys.exit(1)
    
    if response.status_code != 200:
        click.echo(f"✗ Lookup failed: HTTP {response.status_code}", err=True)
        sys.exit(1)
    
    _print_records(response.json())


if __name__ == '__main__':
    cli()
