"""
SQL log decoding package.

Provides:
- Dialect conventions (SQLite quoted identifiers, SQL Server brackets)
- Parameter declaration parsing and literal formatting
- SqlDecoder: captured log message -> literal statement
"""

from dbtestsupport.infrastructure.sql.dialects import (
    Dialect,
    DialectName,
    SQLITE,
    SQLSERVER,
    detect_dialect,
    get_dialect,
)
from dbtestsupport.infrastructure.sql.parameters import (
    LiteralKind,
    ParameterDeclaration,
    TYPE_TAGS,
    parse_declaration,
    parse_inline_parameters,
)
from dbtestsupport.infrastructure.sql.decoder import SqlDecoder, decode_message

__all__ = [
    "Dialect",
    "DialectName",
    "SQLITE",
    "SQLSERVER",
    "detect_dialect",
    "get_dialect",
    "LiteralKind",
    "ParameterDeclaration",
    "TYPE_TAGS",
    "parse_declaration",
    "parse_inline_parameters",
    "SqlDecoder",
    "decode_message",
]
