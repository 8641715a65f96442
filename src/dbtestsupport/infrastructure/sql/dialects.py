"""
SQL dialect conventions used when inlining parameter values.

Two families are supported:
- SQLite: double-quoted identifiers, @name / :name / $name / ? / ?NNN placeholders
- SQL Server: bracketed identifiers, @name and ODBC ? placeholders

A dialect only knows how to spell literals and how placeholders look; it
never talks to a database.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum


class DialectName(str, Enum):
    """Supported log dialects."""

    SQLITE = "sqlite"
    SQLSERVER = "sqlserver"


@dataclass(frozen=True)
class Dialect:
    """
    Literal and placeholder conventions of one engine family.

    Attributes:
        name: Dialect identifier
        placeholder_sigils: Characters that introduce a named placeholder
        numbered_positional: Whether ``?NNN`` placeholders are recognised
        true_literal / false_literal: Boolean spelling
        null_literal: Null keyword
        datetime_separator: Character between date and time parts
        fixed_fraction_digits: Always print this many fraction digits
            (0 means print microseconds only when non-zero)
        binary_prefix / binary_suffix: Wrapping for hex blobs
    """

    name: DialectName
    placeholder_sigils: str
    numbered_positional: bool
    true_literal: str
    false_literal: str
    null_literal: str = "NULL"
    datetime_separator: str = " "
    fixed_fraction_digits: int = 0
    binary_prefix: str = "X'"
    binary_suffix: str = "'"

    def quote_string(self, text: str) -> str:
        return "'" + text.replace("'", "''") + "'"

    def format_bool(self, value: bool) -> str:
        return self.true_literal if value else self.false_literal

    def format_binary(self, hex_digits: str) -> str:
        if self.name is DialectName.SQLSERVER:
            hex_digits = hex_digits.upper()
        return f"{self.binary_prefix}{hex_digits}{self.binary_suffix}"

    def _fraction(self, microsecond: int) -> str:
        if self.fixed_fraction_digits:
            # microseconds carry 6 digits; pad out to the fixed width
            digits = f"{microsecond:06d}".ljust(self.fixed_fraction_digits, "0")
            return "." + digits[: self.fixed_fraction_digits]
        if microsecond:
            return "." + f"{microsecond:06d}".rstrip("0")
        return ""

    def _clock(self, value: datetime | time) -> str:
        return value.strftime("%H:%M:%S") + self._fraction(value.microsecond)

    def format_datetime(self, value: datetime) -> str:
        text = value.strftime("%Y-%m-%d") + self.datetime_separator + self._clock(value)
        offset = value.utcoffset()
        if offset is not None:
            text += _format_offset(offset.total_seconds())
        return self.quote_string(text)

    def format_date(self, value: date) -> str:
        return self.quote_string(value.strftime("%Y-%m-%d"))

    def format_time(self, value: time) -> str:
        return self.quote_string(self._clock(value))


def _format_offset(total_seconds: float) -> str:
    sign = "-" if total_seconds < 0 else "+"
    minutes = int(abs(total_seconds)) // 60
    return f"{sign}{minutes // 60:02d}:{minutes % 60:02d}"


SQLITE = Dialect(
    name=DialectName.SQLITE,
    placeholder_sigils="@:$",
    numbered_positional=True,
    true_literal="1",
    false_literal="0",
)

SQLSERVER = Dialect(
    name=DialectName.SQLSERVER,
    placeholder_sigils="@",
    numbered_positional=False,
    true_literal="CAST(1 AS bit)",
    false_literal="CAST(0 AS bit)",
    datetime_separator="T",
    fixed_fraction_digits=7,
    binary_prefix="0x",
    binary_suffix="",
)

DIALECTS: dict[DialectName, Dialect] = {
    DialectName.SQLITE: SQLITE,
    DialectName.SQLSERVER: SQLSERVER,
}

# String literals are removed before looking for bracketed identifiers so
# LIKE patterns such as '[a-z]%' do not count.
_STRING_LITERAL = re.compile(r"'(?:[^']|'')*'")
_BRACKET_IDENTIFIER = re.compile(r"\[[A-Za-z_][^\]\n]*\]")


def get_dialect(dialect: Dialect | DialectName | str) -> Dialect:
    """
    Resolve a dialect by object or name.

    Raises:
        ValueError: If the name is not a supported dialect
    """
    if isinstance(dialect, Dialect):
        return dialect
    if isinstance(dialect, DialectName):
        return DIALECTS[dialect]
    try:
        return DIALECTS[DialectName(str(dialect).strip().lower())]
    except ValueError:
        supported = ", ".join(d.value for d in DialectName)
        raise ValueError(
            f"Unknown SQL dialect {dialect!r} (supported: {supported})"
        ) from None


def detect_dialect(template: str) -> Dialect:
    """Pick SQL Server when the template uses bracketed identifiers, else SQLite."""
    stripped = _STRING_LITERAL.sub("''", template)
    if _BRACKET_IDENTIFIER.search(stripped):
        return SQLSERVER
    return SQLITE
