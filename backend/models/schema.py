"""
SQLAlchemy models for the contact record intake system.

This module defines the persisted record layout using SQLAlchemy ORM.
"""

import uuid

from sqlalchemy import Column, String, Text, TIMESTAMP, Index, text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def generate_record_id() -> str:
    """Generate an opaque store-assigned record identifier."""
    return uuid.uuid4().hex


class FormRecord(Base):
    """Represents one submitted contact entry."""
    
    __tablename__ = 'form_records'
    __table_args__ = (
        Index('idx_form_records_first_name_email', 'first_name', 'email'),
        {'comment': 'Contact entries submitted individually or via spreadsheet upload'}
    )
    
    id = Column(
        String(32),
        primary_key=True,
        default=generate_record_id,
        nullable=False,
        comment='Opaque identifier assigned on first save'
    )
    first_name = Column(
        String(255),
        nullable=False,
        default='',
        comment='First name (lookup key)'
    )
    last_name = Column(
        String(255),
        nullable=False,
        default='',
        comment='Last name'
    )
    phone_number = Column(
        String(64),
        nullable=False,
        default='',
        comment='Phone number as submitted, no normalization'
    )
    email = Column(
        String(320),
        nullable=False,
        default='',
        comment='Email address (lookup key, case-sensitive)'
    )
    additional_fields = Column(
        Text,
        nullable=False,
        default='',
        comment='Free-text additional information'
    )
    created_at = Column(
        TIMESTAMP,
        server_default=text('CURRENT_TIMESTAMP'),
        nullable=False,
        comment='Timestamp of first save'
    )
    
    def to_dict(self) -> dict:
        """Return the record's submitted fields as a plain dictionary."""
        return {
            'id': self.id,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'phone_number': self.phone_number,
            'email': self.email,
            'additional_fields': self.additional_fields,
        }
    
    def __repr__(self):
        return f"<FormRecord(id={self.id}, first_name='{self.first_name}', email='{self.email}')>"
