"""
ChatGuard Backend — Input Validator Unit Tests
================================================

What:  Tests for the ordered message checks and normalization.

What we test:
    ✅ Non-string messages (number, null, bool, array, object, missing) → INVALID_TYPE
    ✅ Empty and whitespace-only strings → EMPTY
    ✅ Trimmed length over the limit → TOO_LONG (boundary at 500)
    ✅ Normalization: trim, collapse whitespace, length bound
    ✅ Check order: type before emptiness before length
    ✅ Whitespace class: BOM and NBSP trimmed, U+001C..U+001F and U+0085 kept
"""

import pytest

from chatguard.services.error_mapper import ErrorKind
from chatguard.services.validator import (
    InputValidator,
    Invalid,
    Valid,
    normalize_message,
    validate,
)


class TestTypeCheck:
    """The type check runs first and rejects every non-string."""

    @pytest.mark.parametrize(
        "body",
        [
            {"message": 42},
            {"message": 4.2},
            {"message": None},
            {"message": True},
            {"message": ["hello"]},
            {"message": {"text": "hello"}},
            {},
            {"msg": "hello"},
        ],
    )
    def test_non_string_message_rejected(self, body):
        outcome = validate(body)
        assert outcome == Invalid(ErrorKind.INVALID_TYPE, "message must be a string")

    @pytest.mark.parametrize("body", [None, [], ["message"], "hello", 7])
    def test_non_object_body_rejected(self, body):
        """Bodies that are not JSON objects have no message field."""
        outcome = validate(body)
        assert isinstance(outcome, Invalid)
        assert outcome.kind is ErrorKind.INVALID_TYPE


class TestEmptyCheck:

    @pytest.mark.parametrize("message", ["", " ", "   ", "\t\n", "  "])
    def test_blank_message_rejected(self, message):
        outcome = validate({"message": message})
        assert outcome == Invalid(ErrorKind.EMPTY, "Message cannot be empty")


class TestLengthCheck:

    def test_501_chars_rejected(self):
        outcome = validate({"message": "a" * 501})
        assert outcome == Invalid(ErrorKind.TOO_LONG, "Message too long (max 500 chars)")

    def test_exactly_500_chars_accepted(self):
        outcome = validate({"message": "a" * 500})
        assert outcome == Valid("a" * 500)

    def test_length_measured_after_trimming(self):
        """Surrounding whitespace does not count toward the limit."""
        outcome = validate({"message": "   " + "a" * 500 + "   "})
        assert isinstance(outcome, Valid)

    def test_interior_whitespace_counts_before_collapse(self):
        """The limit applies to the trimmed text, before runs are collapsed."""
        message = "a" + " " * 500 + "b"
        outcome = validate({"message": message})
        assert isinstance(outcome, Invalid)
        assert outcome.kind is ErrorKind.TOO_LONG

    def test_custom_limit_reported_in_detail(self):
        validator = InputValidator(max_length=10)
        outcome = validator.validate({"message": "x" * 11})
        assert outcome == Invalid(ErrorKind.TOO_LONG, "Message too long (max 10 chars)")


class TestNormalization:

    def test_trims_and_collapses(self):
        outcome = validate({"message": "  Hello   there  "})
        assert outcome == Valid("Hello there")

    def test_collapses_mixed_whitespace(self):
        outcome = validate({"message": "one\t\ttwo\n\nthree \r\n four"})
        assert outcome == Valid("one two three four")

    @pytest.mark.parametrize(
        "message",
        ["hi", "  spaced   out  text ", "a\tb\nc", "x" * 500, " y " * 160],
    )
    def test_normalized_output_properties(self, message):
        outcome = validate({"message": message})
        assert isinstance(outcome, Valid)
        normalized = outcome.message
        assert normalized == normalized.strip()
        assert "  " not in normalized
        assert "\t" not in normalized and "\n" not in normalized
        assert len(normalized) <= 500

    def test_normalize_message_truncates(self):
        assert normalize_message("abcdef", max_length=3) == "abc"

    def test_extra_fields_ignored(self):
        outcome = validate({"message": "hello", "user": "someone", "stream": True})
        assert outcome == Valid("hello")


BOM = chr(0xFEFF)
NBSP = chr(0xA0)
IDEOGRAPHIC_SPACE = chr(0x3000)
FILE_SEPARATOR = chr(0x1C)
UNIT_SEPARATOR = chr(0x1F)
NEXT_LINE = chr(0x85)


class TestWhitespaceClass:
    """Whitespace follows what browser clients treat as whitespace."""

    @pytest.mark.parametrize(
        "message",
        [BOM, NBSP, IDEOGRAPHIC_SPACE, " " + BOM + "\t", NBSP * 3],
    )
    def test_unicode_blank_is_empty(self, message):
        outcome = validate({"message": message})
        assert outcome == Invalid(ErrorKind.EMPTY, "Message cannot be empty")

    @pytest.mark.parametrize("char", [FILE_SEPARATOR, UNIT_SEPARATOR, NEXT_LINE])
    def test_separator_controls_are_content(self, char):
        assert validate({"message": char}) == Valid(char)

    def test_separator_controls_not_collapsed(self):
        message = "a" + FILE_SEPARATOR + FILE_SEPARATOR + "b"
        assert validate({"message": message}) == Valid(message)

    def test_bom_and_nbsp_collapsed(self):
        message = BOM + "Hello" + NBSP + NBSP + " there" + IDEOGRAPHIC_SPACE
        assert validate({"message": message}) == Valid("Hello there")

    def test_bom_padding_not_counted_toward_length(self):
        outcome = validate({"message": BOM + "a" * 500 + BOM})
        assert outcome == Valid("a" * 500)
