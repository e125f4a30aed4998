"""Models package for the contact record intake system."""
from backend.models.schema import Base, FormRecord

__all__ = ['Base', 'FormRecord']
