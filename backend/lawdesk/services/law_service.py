"""
Service for persisting laws
"""
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lawdesk.core.errors import PersistenceError
from lawdesk.core.logging_config import LoggingConfig
from lawdesk.core.metrics import law_persistence_errors_total, laws_created_total
from lawdesk.models.law import Law
from lawdesk.services.law_validator import ValidatedLaw

logger = LoggingConfig.get_logger(__name__)


def _store_error_detail(exc: SQLAlchemyError) -> str:
    """Driver error text without SQLAlchemy's statement and background-link suffix"""
    orig = getattr(exc, "orig", None)
    if orig is not None:
        return str(orig)
    return str(exc)


class LawService:
    """Service for inserting laws"""

    def __init__(self, db: Session):
        self.db = db

    def create_law(self, validated: ValidatedLaw) -> Law:
        """
        Insert one law row

        Values are sent as bound parameters; creation_date is set by the
        database. Submitting the same values twice inserts two rows.

        Args:
            validated: Output of validate_law

        Returns:
            The inserted Law, refreshed so creation_date is populated

        Raises:
            PersistenceError: if the database could not store the row
        """
        law = Law(
            law_text=validated.law_text,
            category=validated.category.value,
        )

        try:
            self.db.add(law)
            self.db.commit()
            self.db.refresh(law)
        except SQLAlchemyError as e:
            self.db.rollback()
            detail = _store_error_detail(e)
            law_persistence_errors_total.labels(error_type=type(e).__name__).inc()
            logger.error(
                f"Failed to insert law: {detail}",
                exc_info=True,
                extra={"category": validated.category.value, "error_type": type(e).__name__}
            )
            raise PersistenceError(detail) from e

        laws_created_total.labels(category=law.category).inc()
        logger.info(
            f"Created law {law.id}",
            extra={"law_id": law.id, "category": law.category}
        )
        return law
