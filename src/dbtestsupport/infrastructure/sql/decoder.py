"""
Decode captured command logs into literal SQL.

A captured message has this shape:

    Executed DbCommand (1ms) [CommandType='Text', CommandTimeout='30']
    id = '1' (Type = Int32)

    SELECT "b"."BookId", "b"."Title"
    FROM "Books" AS "b"
    WHERE "b"."BookId" = @id

The first line is execution metadata and is discarded (apart from an inline
``Parameters=[...]`` list, which is read). Declaration lines follow, then a
blank line, then the statement template. Each placeholder in the template is
replaced by the literal form of its value.

Architecture Note:
    - Pure: no I/O, no shared mutable state
    - Safe to call repeatedly and concurrently on independent records
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable

from dbtestsupport.domain.errors import ParameterFormatError, UnresolvedPlaceholderError
from dbtestsupport.domain.log_record import DecodedStatement, LogRecord
from dbtestsupport.infrastructure.sql.dialects import (
    Dialect,
    DialectName,
    detect_dialect,
    get_dialect,
)
from dbtestsupport.infrastructure.sql.parameters import (
    ParameterDeclaration,
    parse_declaration,
    parse_inline_parameters,
)

# Tokens copied through untouched: string literals, quoted identifiers,
# comments and @@system variables.
_PASSTHROUGH = (
    r"(?P<skip>'(?:[^']|'')*'"
    r'|"(?:[^"]|"")*"'
    r"|\[[^\]\n]*\]"
    r"|--[^\n]*"
    r"|/\*.*?\*/"
    r"|@@\w+)"
)


@lru_cache(maxsize=None)
def _token_pattern(placeholder_sigils: str, numbered_positional: bool) -> re.Pattern[str]:
    sigils = re.escape(placeholder_sigils)
    positional = r"\?(?P<index>\d+)?" if numbered_positional else r"\?"
    return re.compile(
        _PASSTHROUGH
        + rf"|(?<![\w{sigils}])(?P<named>[{sigils}](?P<name>[A-Za-z_]\w*))"
        + rf"|(?P<positional>{positional})",
        re.DOTALL,
    )


def _split_message(message: str) -> tuple[str, list[str], list[str]]:
    """
    Split into preamble, declaration lines and template lines.

    Raises:
        ParameterFormatError: A line inside the declaration block that does
            not parse as a declaration
    """
    lines = message.splitlines()
    if not lines:
        return "", [], []

    preamble, body = lines[0], lines[1:]
    index = 0
    while index < len(body) and parse_declaration(body[index]) is not None:
        index += 1
    declaration_lines = body[:index]
    if declaration_lines and index < len(body) and body[index].strip():
        text = body[index].strip()
        raise ParameterFormatError(
            text.partition("=")[0].strip() or text, "", text, "not a parameter declaration"
        )
    while index < len(body) and not body[index].strip():
        index += 1
    return preamble, declaration_lines, body[index:]


def _trimmed(lines: Iterable[str]) -> tuple[str, ...]:
    stripped = [line.strip() for line in lines]
    while stripped and not stripped[0]:
        stripped.pop(0)
    while stripped and not stripped[-1]:
        stripped.pop()
    return tuple(stripped)


class SqlDecoder:
    """
    Turns a captured LogRecord into a DecodedStatement.

    Args:
        dialect: Dialect object or name ("sqlite" / "sqlserver"). None picks
            the dialect per record from its identifier quoting.
    """

    def __init__(self, dialect: Dialect | DialectName | str | None = None) -> None:
        self._dialect = get_dialect(dialect) if dialect is not None else None

    @property
    def dialect(self) -> Dialect | None:
        return self._dialect

    def decode(self, record: LogRecord | str) -> DecodedStatement:
        """
        Decode one record.

        Raises:
            UnresolvedPlaceholderError: Template token with no declaration
            ParameterFormatError: Declaration value not valid for its type tag
        """
        message = record.raw_message if isinstance(record, LogRecord) else record
        preamble, declaration_lines, template_lines = _split_message(message)

        declarations: list[ParameterDeclaration] = parse_inline_parameters(preamble)
        for line in declaration_lines:
            declaration = parse_declaration(line)
            if declaration is not None:
                declarations.append(declaration)

        if not declarations:
            return DecodedStatement(_trimmed(template_lines))

        template = "\n".join(template_lines)
        dialect = self._dialect or detect_dialect(template)
        resolved = _substitute(template, declarations, dialect)
        return DecodedStatement(_trimmed(resolved.split("\n")))

    def decode_all(self, records: Iterable[LogRecord | str]) -> list[DecodedStatement]:
        return [self.decode(record) for record in records]


def _substitute(
    template: str, declarations: list[ParameterDeclaration], dialect: Dialect
) -> str:
    by_name = {declaration.name: declaration for declaration in declarations}
    literals: dict[int, str] = {}
    next_positional = 0

    def literal_for(declaration: ParameterDeclaration) -> str:
        key = id(declaration)
        if key not in literals:
            literals[key] = declaration.to_literal(dialect)
        return literals[key]

    def replace(match: re.Match[str]) -> str:
        nonlocal next_positional
        if match.group("skip") is not None:
            return match.group("skip")

        if match.group("named") is not None:
            declaration = by_name.get(match.group("name"))
            if declaration is None:
                raise UnresolvedPlaceholderError(match.group("named"))
            return literal_for(declaration)

        token = match.group("positional")
        index_text = match.groupdict().get("index")
        if index_text is not None:
            position = int(index_text) - 1
        else:
            position = next_positional
            next_positional += 1
        if not 0 <= position < len(declarations):
            raise UnresolvedPlaceholderError(
                token if index_text is not None else f"?{position + 1}"
            )
        return literal_for(declarations[position])

    pattern = _token_pattern(dialect.placeholder_sigils, dialect.numbered_positional)
    return pattern.sub(replace, template)


def decode_message(
    record: LogRecord | str, dialect: Dialect | DialectName | str | None = None
) -> DecodedStatement:
    """Convenience wrapper: ``SqlDecoder(dialect).decode(record)``."""
    return SqlDecoder(dialect).decode(record)
