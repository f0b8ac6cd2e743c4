"""
Validation and sanitization of submitted law form values
"""
import re
from dataclasses import dataclass
from typing import Optional

from lawdesk.core.errors import ValidationError
from lawdesk.core.logging_config import LoggingConfig
from lawdesk.models.law import LAW_TEXT_MAX_LENGTH, LawCategory

logger = LoggingConfig.get_logger(__name__)

LAW_TEXT_ERROR = (
    f"Law text is required and must be less than {LAW_TEXT_MAX_LENGTH} characters."
)
CATEGORY_ERROR = "Please select a valid category."

# Markup tags only: "<" must be followed by a non-space so "a < b" survives
_TAG_RE = re.compile(r"<[^<>\s][^<>]*>")


@dataclass(frozen=True)
class ValidatedLaw:
    """Form values that passed validation and sanitization"""
    law_text: str
    category: LawCategory


def sanitize_text(value: str) -> str:
    """Strip markup tags and NUL characters, then surrounding whitespace"""
    return _TAG_RE.sub("", value).replace("\x00", "").strip()


def validate_law(law_text: Optional[str], category: Optional[str]) -> ValidatedLaw:
    """
    Validate raw form values and return the normalized pair

    Both checks always run. When both fail, the category message is the one
    raised because it is checked last.

    Raises:
        ValidationError: with the message of the last failed check
    """
    law_text = (law_text or "").strip()
    category = (category or "").strip()

    error_message = None

    if not law_text or len(law_text) > LAW_TEXT_MAX_LENGTH:
        error_message = LAW_TEXT_ERROR

    if not category or category not in LawCategory.values():
        error_message = CATEGORY_ERROR

    if error_message:
        logger.debug(
            "Law submission rejected",
            extra={"reason": error_message, "law_text_length": len(law_text)}
        )
        raise ValidationError(error_message)

    sanitized_text = sanitize_text(law_text)
    if not sanitized_text:
        # Nothing but markup was submitted
        raise ValidationError(LAW_TEXT_ERROR)

    return ValidatedLaw(
        law_text=sanitized_text,
        category=LawCategory(category),
    )
