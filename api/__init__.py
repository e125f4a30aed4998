"""
FastAPI application for contact record intake.

This package contains the REST API for submitting, bulk uploading and
retrieving contact records.
"""

__version__ = "1.0.0"
