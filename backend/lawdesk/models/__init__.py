"""
SQLAlchemy models
"""
from lawdesk.core.database import Base
from lawdesk.models.law import LAW_TEXT_MAX_LENGTH, Law, LawCategory  # noqa: F401

__all__ = [
    "Base",
    "LAW_TEXT_MAX_LENGTH",
    "Law",
    "LawCategory",
]
