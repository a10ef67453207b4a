"""
Pattern operators: regular expressions and fixed formats.

`matches` accepts a bare pattern or the `/pattern/` delimiter form and
searches anywhere in the value; anchor the pattern to match the whole string.
Format checks (email, url, uuid, alpha, case, Persian script) take no value.
"""

from __future__ import annotations

import re
from abc import abstractmethod
from functools import lru_cache
from typing import Any

from pydantic import AnyUrl, TypeAdapter, ValidationError

from .base import (
    BaseOperator,
    NegatedOperator,
    OperatorCategory,
    OperatorContext,
    OperatorMetadata,
    is_string,
    negated_metadata,
)

EMAIL_RE = re.compile(r"^[\w.%+-]+@[a-z0-9.-]+\.[a-z]{2,}$", re.IGNORECASE | re.ASCII)
UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
ALPHA_RE = re.compile(r"^[a-z]+$", re.IGNORECASE | re.ASCII)
ALPHA_NUMERIC_RE = re.compile(r"^[a-z0-9]+$", re.IGNORECASE | re.ASCII)

# Persian letters, short vowels, ZWNJ and alef forms
FA_ALPHABET = "ابپتثجچحخدذرزژسشصضطظعغفقکگلمنوهی"
FA_SHORT_VOWELS = "َُِ"
FA_OTHERS = "‌آاً"
FA_ALPHA_TEXT = FA_ALPHABET + FA_SHORT_VOWELS + FA_OTHERS

PERSIAN_ALPHA_RE = re.compile(f"^[{FA_ALPHA_TEXT}]+$")
PERSIAN_ALPHA_NUMERIC_RE = re.compile(r"^[\u0600-\u06FF\s0-9]+$")
_PERSIAN_IGNORED_RE = re.compile(r"[\"'\-+؟\s.]")

_URL_ADAPTER: TypeAdapter[AnyUrl] = TypeAdapter(AnyUrl)


def strip_delimiters(pattern: str) -> str:
    """Turn `/pattern/` into `pattern`; other strings pass through."""
    if len(pattern) >= 2 and pattern.startswith("/") and pattern.endswith("/"):
        return pattern[1:-1]
    return pattern


@lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    """
    Compile a user-supplied pattern.

    Raises:
        re.error: If the pattern is not a valid regular expression
    """
    return re.compile(strip_delimiters(pattern))


def is_valid_url(value: str) -> bool:
    try:
        _URL_ADAPTER.validate_python(value)
    except ValidationError:
        return False
    return True


def is_persian_alpha(value: str) -> bool:
    """Persian letters only, ignoring quotes, dashes, plus, ؟, dots and whitespace."""
    text = _PERSIAN_IGNORED_RE.sub("", value)
    return PERSIAN_ALPHA_RE.match(text) is not None


# =============================================================================
# Regular Expressions
# =============================================================================


class _RegexOperator(BaseOperator):
    def is_valid_field_type(self, value: Any) -> bool:
        return is_string(value)

    def is_valid_constraint_type(self, value: Any) -> bool:
        return is_string(value)

    def validate_value(self, context: OperatorContext) -> str | None:
        pattern = context.constraint_value
        if not is_string(pattern):
            return None
        if not pattern:
            return "Pattern cannot be empty"
        try:
            compile_pattern(pattern)
        except re.error as e:
            return f"Invalid regular expression: {e}"
        return None

    def _search(self, context: OperatorContext) -> bool | None:
        """Search result, or None when the inputs cannot be matched at all."""
        text, pattern = context.field_value, context.constraint_value
        if not is_string(text) or not is_string(pattern) or not pattern:
            return None
        try:
            regex = compile_pattern(pattern)
        except re.error:
            return None
        return regex.search(text) is not None


class MatchesOperator(_RegexOperator):
    metadata = OperatorMetadata(
        name="matches",
        display_name="Matches Pattern",
        category=OperatorCategory.PATTERN,
        description="Checks if the field value matches the regular expression pattern",
        accepted_field_types=("string",),
        expected_value_type="string",
        requires_value=True,
        is_negatable=True,
        example='{"field": "username", "operator": "matches", "value": "^[a-z0-9_]+$"}',
    )

    def check(self, context: OperatorContext) -> bool:
        return self._search(context) is True


class NotMatchesOperator(_RegexOperator):
    """A pattern that cannot be compiled fails here as well."""

    metadata = OperatorMetadata(
        name="not-matches",
        display_name="Not Matches Pattern",
        category=OperatorCategory.PATTERN,
        description="Checks if the field value does not match the regular expression pattern",
        accepted_field_types=("string",),
        expected_value_type="string",
        requires_value=True,
        is_negatable=True,
        example='{"field": "username", "operator": "not-matches", "value": "^admin"}',
    )

    def check(self, context: OperatorContext) -> bool:
        return self._search(context) is False


# =============================================================================
# Fixed Formats
# =============================================================================


class _FormatOperator(BaseOperator):
    """String field, no value; subclasses implement `matches_format`."""

    def is_valid_field_type(self, value: Any) -> bool:
        return is_string(value)

    @abstractmethod
    def matches_format(self, value: str) -> bool:
        """Whether a string field has the format."""
        ...

    def check(self, context: OperatorContext) -> bool:
        value = context.field_value
        return is_string(value) and self.matches_format(value)


def _format_metadata(
    name: str,
    display: str,
    description: str,
    field: str,
    category: OperatorCategory = OperatorCategory.PATTERN,
) -> OperatorMetadata:
    return OperatorMetadata(
        name=name,
        display_name=display,
        category=category,
        description=description,
        accepted_field_types=("string",),
        expected_value_type="void",
        requires_value=False,
        is_negatable=False,
        example=f'{{"field": "{field}", "operator": "{name}"}}',
    )


def _negated_format(
    positive: type[BaseOperator], name: str, display: str, description: str, field: str
) -> OperatorMetadata:
    return negated_metadata(
        positive,
        name,
        display,
        description,
        f'{{"field": "{field}", "operator": "{name}"}}',
    )


class EmailOperator(_FormatOperator):
    metadata = _format_metadata(
        "email", "Is Email", "Checks if the field value is a valid email address", "contactEmail"
    )

    def matches_format(self, value: str) -> bool:
        return EMAIL_RE.match(value) is not None


class NotEmailOperator(NegatedOperator):
    positive = EmailOperator
    metadata = _negated_format(
        EmailOperator,
        "not-email",
        "Is Not Email",
        "Checks if the field value is not a valid email address",
        "username",
    )


class UrlOperator(_FormatOperator):
    metadata = _format_metadata("url", "Is URL", "Checks if the field value is a valid URL", "website")

    def matches_format(self, value: str) -> bool:
        return is_valid_url(value)


class NotUrlOperator(NegatedOperator):
    positive = UrlOperator
    metadata = _negated_format(
        UrlOperator, "not-url", "Is Not URL", "Checks if the field value is not a valid URL", "reference"
    )


class UuidOperator(_FormatOperator):
    metadata = _format_metadata("uuid", "Is UUID", "Checks if the field value is a valid UUID", "id")

    def matches_format(self, value: str) -> bool:
        return UUID_RE.match(value) is not None


class NotUuidOperator(NegatedOperator):
    positive = UuidOperator
    metadata = _negated_format(
        UuidOperator, "not-uuid", "Is Not UUID", "Checks if the field value is not a valid UUID", "code"
    )


class AlphaOperator(_FormatOperator):
    metadata = _format_metadata(
        "alpha",
        "Is Alpha",
        "Checks if the field value contains only alphabetic characters",
        "firstName",
    )

    def matches_format(self, value: str) -> bool:
        return ALPHA_RE.match(value) is not None


class NotAlphaOperator(NegatedOperator):
    positive = AlphaOperator
    metadata = _negated_format(
        AlphaOperator,
        "not-alpha",
        "Is Not Alpha",
        "Checks if the field value contains non-alphabetic characters",
        "password",
    )


class AlphaNumericOperator(_FormatOperator):
    metadata = _format_metadata(
        "alpha-numeric",
        "Is AlphaNumeric",
        "Checks if the field value contains only alphanumeric characters",
        "username",
    )

    def matches_format(self, value: str) -> bool:
        return ALPHA_NUMERIC_RE.match(value) is not None


class NotAlphaNumericOperator(NegatedOperator):
    positive = AlphaNumericOperator
    metadata = _negated_format(
        AlphaNumericOperator,
        "not-alpha-numeric",
        "Is Not AlphaNumeric",
        "Checks if the field value contains non-alphanumeric characters",
        "specialCode",
    )


class LowerCaseOperator(_FormatOperator):
    metadata = _format_metadata(
        "lower-case", "Is Lower Case", "Checks if the field value is in lower case", "code"
    )

    def matches_format(self, value: str) -> bool:
        return value == value.lower() and re.search(r"[a-z]", value) is not None


class NotLowerCaseOperator(NegatedOperator):
    positive = LowerCaseOperator
    metadata = _negated_format(
        LowerCaseOperator,
        "not-lower-case",
        "Is Not Lower Case",
        "Checks if the field value is not in lower case",
        "title",
    )


class UpperCaseOperator(_FormatOperator):
    metadata = _format_metadata(
        "upper-case", "Is Upper Case", "Checks if the field value is in upper case", "constant"
    )

    def matches_format(self, value: str) -> bool:
        return value == value.upper() and re.search(r"[A-Z]", value) is not None


class NotUpperCaseOperator(NegatedOperator):
    positive = UpperCaseOperator
    metadata = _negated_format(
        UpperCaseOperator,
        "not-upper-case",
        "Is Not Upper Case",
        "Checks if the field value is not in upper case",
        "description",
    )


# =============================================================================
# Persian Script
# =============================================================================


class PersianAlphaOperator(_FormatOperator):
    metadata = _format_metadata(
        "persian-alpha",
        "Is Persian Alpha",
        "Checks if the field value contains only Persian alphabetic characters",
        "persianName",
        category=OperatorCategory.PERSIAN,
    )

    def matches_format(self, value: str) -> bool:
        return is_persian_alpha(value)


class NotPersianAlphaOperator(NegatedOperator):
    positive = PersianAlphaOperator
    metadata = _negated_format(
        PersianAlphaOperator,
        "not-persian-alpha",
        "Is Not Persian Alpha",
        "Checks if the field value contains non-Persian characters",
        "englishName",
    )


class PersianAlphaNumericOperator(_FormatOperator):
    metadata = _format_metadata(
        "persian-alpha-numeric",
        "Is Persian AlphaNumeric",
        "Checks if the field value contains only Persian alphanumeric characters",
        "persianCode",
        category=OperatorCategory.PERSIAN,
    )

    def matches_format(self, value: str) -> bool:
        return PERSIAN_ALPHA_NUMERIC_RE.match(value) is not None


class NotPersianAlphaNumericOperator(NegatedOperator):
    positive = PersianAlphaNumericOperator
    metadata = _negated_format(
        PersianAlphaNumericOperator,
        "not-persian-alpha-numeric",
        "Is Not Persian AlphaNumeric",
        "Checks if the field value contains non-Persian alphanumeric characters",
        "mixedCode",
    )


PATTERN_OPERATORS: list[type[BaseOperator]] = [
    MatchesOperator,
    NotMatchesOperator,
    EmailOperator,
    NotEmailOperator,
    UrlOperator,
    NotUrlOperator,
    UuidOperator,
    NotUuidOperator,
    AlphaOperator,
    NotAlphaOperator,
    AlphaNumericOperator,
    NotAlphaNumericOperator,
    LowerCaseOperator,
    NotLowerCaseOperator,
    UpperCaseOperator,
    NotUpperCaseOperator,
    PersianAlphaOperator,
    NotPersianAlphaOperator,
    PersianAlphaNumericOperator,
    NotPersianAlphaNumericOperator,
]
