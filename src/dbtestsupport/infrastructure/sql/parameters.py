"""
Parameter declarations found in captured command logs.

A declaration looks like one of:

    id = '1' (Type = Int32)
    @p1 = 'New Book' (Type = String, Size = 4000)
    @p2 = NULL (Type = DateTime)
    @p0 = 'New Book' (Nullable = false) (Size = 4000)
    @__id_0='1' (DbType = Int32)            # inline "[Parameters=[...]]" form

The set of type tags is enumerated explicitly below. Each tag maps to a
literal kind, and the dialect decides how that kind is spelled.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum

from dbtestsupport.domain.errors import ParameterFormatError
from dbtestsupport.infrastructure.sql.dialects import Dialect

DEFAULT_TYPE_TAG = "String"


class LiteralKind(Enum):
    """How a parameter value is rendered."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    DATETIME_OFFSET = "datetime_offset"
    DATE = "date"
    TIME = "time"
    BINARY = "binary"


TYPE_TAGS: dict[str, LiteralKind] = {
    # Text
    "String": LiteralKind.STRING,
    "AnsiString": LiteralKind.STRING,
    "StringFixedLength": LiteralKind.STRING,
    "AnsiStringFixedLength": LiteralKind.STRING,
    "Xml": LiteralKind.STRING,
    "Guid": LiteralKind.STRING,
    # Numbers
    "Byte": LiteralKind.NUMBER,
    "SByte": LiteralKind.NUMBER,
    "Int16": LiteralKind.NUMBER,
    "Int32": LiteralKind.NUMBER,
    "Int64": LiteralKind.NUMBER,
    "UInt16": LiteralKind.NUMBER,
    "UInt32": LiteralKind.NUMBER,
    "UInt64": LiteralKind.NUMBER,
    "Decimal": LiteralKind.NUMBER,
    "Double": LiteralKind.NUMBER,
    "Single": LiteralKind.NUMBER,
    "Currency": LiteralKind.NUMBER,
    "VarNumeric": LiteralKind.NUMBER,
    # Other
    "Boolean": LiteralKind.BOOLEAN,
    "DateTime": LiteralKind.DATETIME,
    "DateTime2": LiteralKind.DATETIME,
    "DateTimeOffset": LiteralKind.DATETIME_OFFSET,
    "Date": LiteralKind.DATE,
    "Time": LiteralKind.TIME,
    "Binary": LiteralKind.BINARY,
}

_TYPE_FACETS = ("Type", "DbType")

_DECLARATION = re.compile(
    r"""^\s*
    (?P<name>[@:$]?[A-Za-z_]\w*)
    \s*=\s*
    (?P<value>'.*'|NULL|[^\s(']+)
    \s*
    (?P<facets>(?:\s*\([^()]*\))*)
    \s*$""",
    re.VERBOSE | re.IGNORECASE,
)

_FACET_GROUP = re.compile(r"\(([^()]*)\)")
_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")
_DATETIME = re.compile(
    r"""^(?P<date>\d{4}-\d{2}-\d{2})
    (?:[T ](?P<hour>\d{2}):(?P<minute>\d{2})(?::(?P<second>\d{2}))?(?:\.(?P<fraction>\d+))?)?
    \s*(?P<offset>Z|[+-]\d{2}:?\d{2})?$""",
    re.VERBOSE,
)
_TIME = re.compile(
    r"^(?P<hour>\d{2}):(?P<minute>\d{2})(?::(?P<second>\d{2}))?(?:\.(?P<fraction>\d+))?$"
)
_HEX = re.compile(r"^(?:0[xX])?(?P<digits>[0-9A-Fa-f]*)$")
_TRUE = ("true", "1")
_FALSE = ("false", "0")


@dataclass(frozen=True)
class ParameterDeclaration:
    """
    One declared parameter.

    Attributes:
        name: Placeholder name without its sigil ("id" for "@id")
        raw_name: Name exactly as it appeared in the log
        value: Value text with surrounding quotes removed; None for NULL
        type_tag: Declared type tag (String when none was given)
        facets: Other facets such as Size or Nullable, kept verbatim
    """

    name: str
    raw_name: str
    value: str | None
    type_tag: str = DEFAULT_TYPE_TAG
    facets: dict[str, str] = field(default_factory=dict)

    @property
    def kind(self) -> LiteralKind:
        try:
            return TYPE_TAGS[self.type_tag]
        except KeyError:
            raise ParameterFormatError(
                self.raw_name, self.type_tag, self.value or "NULL", "unsupported type tag"
            ) from None

    def to_literal(self, dialect: Dialect) -> str:
        """
        Render the value as literal SQL text for the dialect.

        Raises:
            ParameterFormatError: Unknown tag or value not valid for the tag
        """
        kind = self.kind
        if self.value is None:
            return dialect.null_literal

        value = self.value
        if kind is LiteralKind.STRING:
            return dialect.quote_string(value)
        if kind is LiteralKind.NUMBER:
            text = value.strip()
            if not _NUMBER.match(text):
                raise self._error("not a number")
            return text
        if kind is LiteralKind.BOOLEAN:
            lowered = value.strip().lower()
            if lowered in _TRUE:
                return dialect.format_bool(True)
            if lowered in _FALSE:
                return dialect.format_bool(False)
            raise self._error("not a boolean")
        if kind in (LiteralKind.DATETIME, LiteralKind.DATETIME_OFFSET):
            return dialect.format_datetime(self._parse_datetime())
        if kind is LiteralKind.DATE:
            return dialect.format_date(self._parse_datetime().date())
        if kind is LiteralKind.TIME:
            return dialect.format_time(self._parse_time())
        # LiteralKind.BINARY
        match = _HEX.match(value.strip())
        if not match or len(match.group("digits")) % 2:
            raise self._error("not a hex byte string")
        return dialect.format_binary(match.group("digits"))

    def _error(self, reason: str) -> ParameterFormatError:
        return ParameterFormatError(self.raw_name, self.type_tag, self.value or "", reason)

    def _parse_datetime(self) -> datetime:
        match = _DATETIME.match((self.value or "").strip())
        if not match:
            raise self._error("not an ISO 8601 date/time")
        try:
            day = date.fromisoformat(match.group("date"))
            parsed = datetime(
                day.year,
                day.month,
                day.day,
                int(match.group("hour") or 0),
                int(match.group("minute") or 0),
                int(match.group("second") or 0),
                _microseconds(match.group("fraction")),
                tzinfo=_parse_offset(match.group("offset")),
            )
        except ValueError as e:
            raise self._error(str(e)) from e
        return parsed

    def _parse_time(self) -> time:
        match = _TIME.match((self.value or "").strip())
        if not match:
            raise self._error("not a time of day")
        try:
            return time(
                int(match.group("hour")),
                int(match.group("minute")),
                int(match.group("second") or 0),
                _microseconds(match.group("fraction")),
            )
        except ValueError as e:
            raise self._error(str(e)) from e


def _microseconds(fraction: str | None) -> int:
    # .NET logs 7 fraction digits; Python keeps 6
    if not fraction:
        return 0
    return int(fraction[:6].ljust(6, "0"))


def _parse_offset(offset: str | None) -> timezone | None:
    if not offset:
        return None
    if offset == "Z":
        return timezone.utc
    sign = -1 if offset[0] == "-" else 1
    digits = offset[1:].replace(":", "")
    delta = timedelta(hours=int(digits[:2]), minutes=int(digits[2:]))
    return timezone(sign * delta)


def _parse_facets(text: str | None) -> dict[str, str]:
    facets: dict[str, str] = {}
    if not text:
        return facets
    for group in _FACET_GROUP.findall(text):
        for part in group.split(","):
            key, sep, value = part.partition("=")
            if sep:
                facets[key.strip()] = value.strip()
    return facets


def parse_declaration(text: str) -> ParameterDeclaration | None:
    """
    Parse one declaration.

    Returns:
        The declaration, or None when the text is not a declaration
    """
    match = _DECLARATION.match(text)
    if not match:
        return None

    raw_name = match.group("name")
    raw_value = match.group("value")
    facets = _parse_facets(match.group("facets"))

    type_tag = DEFAULT_TYPE_TAG
    for key in _TYPE_FACETS:
        if key in facets:
            type_tag = facets.pop(key)
            break

    if raw_value.upper() == "NULL":
        value = None
    elif raw_value.startswith("'"):
        value = raw_value[1:-1]
    else:
        value = raw_value

    return ParameterDeclaration(
        name=raw_name.lstrip("@:$"),
        raw_name=raw_name,
        value=value,
        type_tag=type_tag,
        facets=facets,
    )


def _inline_block(preamble: str) -> str | None:
    """Text between 'Parameters=[' and its matching ']', honouring quotes."""
    marker = "Parameters=["
    start = preamble.find(marker)
    if start < 0:
        return None
    depth = 1
    in_quote = False
    index = start + len(marker)
    for position in range(index, len(preamble)):
        char = preamble[position]
        if char == "'":
            in_quote = not in_quote
        elif not in_quote and char == "[":
            depth += 1
        elif not in_quote and char == "]":
            depth -= 1
            if depth == 0:
                return preamble[index:position]
    return None


def _split_top_level(block: str) -> list[str]:
    items: list[str] = []
    current: list[str] = []
    in_quote = False
    depth = 0
    for char in block:
        if char == "'":
            in_quote = not in_quote
        elif not in_quote and char == "(":
            depth += 1
        elif not in_quote and char == ")":
            depth -= 1
        elif not in_quote and depth == 0 and char == ",":
            items.append("".join(current))
            current = []
            continue
        current.append(char)
    if "".join(current).strip():
        items.append("".join(current))
    return items


def parse_inline_parameters(preamble: str) -> list[ParameterDeclaration]:
    """Declarations from an inline ``[Parameters=[...]]`` preamble section."""
    block = _inline_block(preamble)
    if not block:
        return []
    declarations = []
    for item in _split_top_level(block):
        declaration = parse_declaration(item)
        if declaration is not None:
            declarations.append(declaration)
    return declarations
