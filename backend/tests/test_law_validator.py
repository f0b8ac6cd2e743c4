"""
Unit tests for law form validation
"""
import pytest

from lawdesk.core.errors import ValidationError
from lawdesk.models.law import LawCategory
from lawdesk.services.law_validator import (CATEGORY_ERROR, LAW_TEXT_ERROR,
                                            ValidatedLaw, sanitize_text,
                                            validate_law)


def test_valid_input_is_normalized():
    result = validate_law("  Theft is prohibited.  ", " Iraq ")
    assert result == ValidatedLaw(law_text="Theft is prohibited.", category=LawCategory.IRAQ)


def test_kurdistan_is_accepted():
    assert validate_law("Text", "Kurdistan").category is LawCategory.KURDISTAN


@pytest.mark.parametrize("law_text", ["", "   ", "\n\t", None])
def test_empty_law_text_fails(law_text):
    with pytest.raises(ValidationError) as exc_info:
        validate_law(law_text, "Iraq")
    assert exc_info.value.message == LAW_TEXT_ERROR
    assert str(exc_info.value) == "Law text is required and must be less than 500 characters."


def test_law_text_length_boundary():
    assert len(validate_law("x" * 500, "Iraq").law_text) == 500
    with pytest.raises(ValidationError) as exc_info:
        validate_law("x" * 501, "Iraq")
    assert exc_info.value.message == LAW_TEXT_ERROR


def test_length_is_measured_after_trimming():
    assert validate_law("  " + "x" * 500 + "  ", "Iraq").law_text == "x" * 500


def test_length_counts_characters_not_bytes():
    # 500 two-byte characters
    text = "ق" * 500
    assert validate_law(text, "Kurdistan").law_text == text


@pytest.mark.parametrize("category", ["", "  ", "Mars", "iraq", "KURDISTAN", None])
def test_invalid_category_fails(category):
    with pytest.raises(ValidationError) as exc_info:
        validate_law("Theft is prohibited.", category)
    assert exc_info.value.message == CATEGORY_ERROR
    assert exc_info.value.message == "Please select a valid category."


def test_category_error_wins_when_both_fail():
    with pytest.raises(ValidationError) as exc_info:
        validate_law("", "Mars")
    assert exc_info.value.message == CATEGORY_ERROR


def test_markup_is_stripped():
    result = validate_law("<b>Theft</b> is prohibited.<script>x()</script>", "Iraq")
    assert result.law_text == "Theft is prohibited.x()"


def test_markup_only_text_fails():
    with pytest.raises(ValidationError) as exc_info:
        validate_law("<p></p>", "Iraq")
    assert exc_info.value.message == LAW_TEXT_ERROR


def test_sanitize_keeps_comparisons_and_quotes():
    assert sanitize_text('Fines < 5 dinars and "fees" > 2') == 'Fines < 5 dinars and "fees" > 2'
    assert sanitize_text("a\x00b") == "ab"
