"""
Pydantic schemas for request/response validation.

This package contains all Pydantic models used for API request validation
and response serialization.
"""

from api.schemas.common import ErrorResponse, HealthCheckResponse
from api.schemas.record_schema import RecordResponse

__all__ = [
    # Common
    'ErrorResponse',
    'HealthCheckResponse',
    
    # Record
    'RecordResponse',
]
