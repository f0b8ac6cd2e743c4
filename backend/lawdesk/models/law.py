"""
SQLAlchemy model for laws
"""
from enum import Enum

from sqlalchemy import Column, DateTime, Index, Integer, String, func

from lawdesk.core.database import Base

LAW_TEXT_MAX_LENGTH = 500


class LawCategory(str, Enum):
    """Jurisdictions a law can be filed under"""
    IRAQ = "Iraq"
    KURDISTAN = "Kurdistan"

    @classmethod
    def values(cls):
        return [category.value for category in cls]


class Law(Base):
    """
    A legal text entry tagged with a category

    Rows are only ever inserted; creation_date is filled in by the database.
    """
    __tablename__ = "laws"

    id = Column(Integer, primary_key=True, autoincrement=True)

    law_text = Column(String(LAW_TEXT_MAX_LENGTH), nullable=False)
    category = Column(String(50), nullable=False)

    creation_date = Column(DateTime, server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("idx_laws_category", "category"),
        Index("idx_laws_creation_date", "creation_date"),
    )

    def __repr__(self):
        return f"<Law(id={self.id}, category='{self.category}', creation_date={self.creation_date})>"
