"""
Record-related Pydantic schemas.

JSON field names follow the camelCase attribute names clients submit.
"""

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class RecordResponse(BaseModel):
    """A stored contact record."""
    
    id: str = Field(..., description="Store-assigned record identifier")
    first_name: str = Field("", description="First name")
    last_name: str = Field("", description="Last name")
    phone_number: str = Field("", description="Phone number")
    email: str = Field("", description="Email address")
    additional_fields: str = Field("", description="Free-text additional information")
    
    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "id": "3f2b9c0e8d4a4f6b9a1c2d3e4f5a6b7c",
                "firstName": "Jo",
                "lastName": "Lee",
                "phoneNumber": "555",
                "email": "j@x.com",
                "additionalFields": "vip"
            }
        }
