"""
Tests for SqlDecoder.

Messages follow the captured command-log shape: metadata line, parameter
declarations, blank line, statement template.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from dbtestsupport import (
    DecodedStatement,
    DialectName,
    LogRecord,
    ParameterFormatError,
    SqlDecoder,
    UnresolvedPlaceholderError,
    decode_message,
)

PREAMBLE = "Executed DbCommand (1ms) [CommandType='Text', CommandTimeout='30']"


def message(*declarations: str, template: str) -> str:
    return "\n".join([PREAMBLE, *declarations, "", template])


class TestNamedParameters:
    """Named placeholders in SQLite logs."""

    def test_numeric_value_is_unquoted(self, decoder):
        record = LogRecord(
            message(
                "id = '1' (Type = Int32)",
                template="SELECT x.Id\nFROM X AS x\nWHERE x.Id = @id",
            )
        )
        decoded = decoder.decode(record)
        assert decoded[-1].endswith("WHERE x.Id = 1")

    def test_string_value_is_quoted(self, decoder):
        decoded = decoder.decode(
            message(
                "title = 'New Book' (Type = String)",
                template='SELECT * FROM "Books" AS "b"\nWHERE "b"."Title" = @title',
            )
        )
        assert decoded[-1] == "WHERE \"b\".\"Title\" = 'New Book'"

    def test_embedded_quote_is_doubled(self, decoder):
        decoded = decoder.decode(
            message("title = 'It's Here' (Type = String)", template="SELECT @title")
        )
        assert decoded.text == "SELECT 'It''s Here'"

    def test_missing_declaration_names_placeholder(self, decoder):
        with pytest.raises(UnresolvedPlaceholderError) as exc_info:
            decoder.decode(
                message("id = '1' (Type = Int32)", template="WHERE a = @id AND b = @other")
            )
        assert exc_info.value.placeholder == "@other"
        assert "@other" in str(exc_info.value)

    def test_colon_and_dollar_sigils(self, decoder):
        decoded = decoder.decode(
            message(
                "a = '1' (Type = Int32)",
                "b = '2' (Type = Int64)",
                template="WHERE x = :a OR y = $b",
            )
        )
        assert decoded.text == "WHERE x = 1 OR y = 2"

    def test_sigil_on_declaration_name(self, decoder):
        decoded = decoder.decode(
            message("@p0 = 'Jon' (Type = String, Size = 4000)", template="VALUES (@p0)")
        )
        assert decoded.text == "VALUES ('Jon')"

    def test_repeated_placeholder(self, decoder):
        decoded = decoder.decode(
            message("id = '7' (Type = Int32)", template="WHERE a = @id OR b = @id")
        )
        assert decoded.text == "WHERE a = 7 OR b = 7"

    def test_longer_name_is_not_prefix_matched(self, decoder):
        decoded = decoder.decode(
            message(
                "p1 = '1' (Type = Int32)",
                "p10 = '10' (Type = Int32)",
                template="VALUES (@p1, @p10)",
            )
        )
        assert decoded.text == "VALUES (1, 10)"

    def test_unused_declaration_is_ignored(self, decoder):
        decoded = decoder.decode(
            message("unused = 'x' (Type = String)", template="SELECT 1")
        )
        assert decoded.text == "SELECT 1"

    def test_null_value(self, decoder):
        decoded = decoder.decode(
            message("p0 = NULL (Type = String)", template="VALUES (@p0)")
        )
        assert decoded.text == "VALUES (NULL)"


class TestPassthrough:
    """Text that looks like a placeholder but is not one."""

    def test_string_literal_untouched(self, decoder):
        decoded = decoder.decode(
            message(
                "id = '1' (Type = Int32)",
                template="WHERE a = @id AND b = '@id' AND c = 'it''s @id'",
            )
        )
        assert decoded.text == "WHERE a = 1 AND b = '@id' AND c = 'it''s @id'"

    def test_quoted_identifier_untouched(self, decoder):
        decoded = decoder.decode(
            message("id = '1' (Type = Int32)", template='SELECT "@id" FROM t WHERE a = @id')
        )
        assert decoded.text == 'SELECT "@id" FROM t WHERE a = 1'

    def test_comments_untouched(self, decoder):
        decoded = decoder.decode(
            message(
                "id = '1' (Type = Int32)",
                template="-- lookup @id\nSELECT 1 /* @id */ WHERE a = @id",
            )
        )
        assert decoded.statement_lines == (
            "-- lookup @id",
            "SELECT 1 /* @id */ WHERE a = 1",
        )

    def test_system_variable_untouched(self):
        decoded = SqlDecoder("sqlserver").decode(
            message("id = '1' (Type = Int32)", template="SELECT @@ROWCOUNT WHERE [a] = @id")
        )
        assert decoded.text == "SELECT @@ROWCOUNT WHERE [a] = 1"


class TestPositionalParameters:

    def test_question_marks_bind_in_order(self, decoder):
        decoded = decoder.decode(
            message(
                "p0 = '5' (Type = Int32)",
                "p1 = 'abc' (Type = String)",
                template="SELECT * FROM t WHERE a = ? AND b = ?",
            )
        )
        assert decoded.text == "SELECT * FROM t WHERE a = 5 AND b = 'abc'"

    def test_numbered_question_marks(self, decoder):
        decoded = decoder.decode(
            message(
                "p0 = '5' (Type = Int32)",
                "p1 = 'abc' (Type = String)",
                template="WHERE a = ?2 OR b = ?1",
            )
        )
        assert decoded.text == "WHERE a = 'abc' OR b = 5"

    def test_numbered_out_of_range(self, decoder):
        with pytest.raises(UnresolvedPlaceholderError) as exc_info:
            decoder.decode(message("p0 = '5' (Type = Int32)", template="WHERE a = ?3"))
        assert exc_info.value.placeholder == "?3"

    def test_more_marks_than_declarations(self, decoder):
        with pytest.raises(UnresolvedPlaceholderError) as exc_info:
            decoder.decode(
                message("p0 = '5' (Type = Int32)", template="WHERE a = ? AND b = ?")
            )
        assert exc_info.value.placeholder == "?2"


class TestMessageShape:

    def test_no_parameters_returns_template(self, decoder):
        decoded = decoder.decode(
            PREAMBLE + '\n\nCREATE TABLE "Books" (\n    "BookId" INTEGER NOT NULL\n)'
        )
        assert decoded.statement_lines == (
            'CREATE TABLE "Books" (',
            '"BookId" INTEGER NOT NULL',
            ")",
        )

    def test_no_parameters_leaves_placeholders(self, decoder):
        decoded = decoder.decode(PREAMBLE + "\n\nSELECT @unbound")
        assert decoded.text == "SELECT @unbound"

    def test_lines_are_trimmed(self, decoder):
        decoded = decoder.decode(
            message("id = '1' (Type = Int32)", template="   SELECT 1\n      WHERE a = @id   \n\n")
        )
        assert decoded.statement_lines == ("SELECT 1", "WHERE a = 1")

    def test_inline_parameters_in_metadata_line(self, decoder):
        raw = (
            "Executed DbCommand (3ms) [Parameters=[@__id_0='4' (DbType = Int32), "
            "@p1='New, Book' (Size = 4000)], CommandType='Text', CommandTimeout='30']\n"
            'SELECT "b"."Title"\nFROM "Books" AS "b"\n'
            'WHERE "b"."BookId" = @__id_0 OR "b"."Title" = @p1'
        )
        decoded = decoder.decode(raw)
        assert decoded[-1] == "WHERE \"b\".\"BookId\" = 4 OR \"b\".\"Title\" = 'New, Book'"

    def test_multiple_facet_groups(self, decoder):
        decoded = decoder.decode(
            message(
                "@p0 = 'New Book' (Nullable = false) (Size = 4000)",
                "@p1 = '1' (DbType = Int32)",
                template='INSERT INTO "Books" ("Title", "Price")\nVALUES (@p0, @p1)',
            )
        )
        assert decoded.statement_lines == (
            'INSERT INTO "Books" ("Title", "Price")',
            "VALUES ('New Book', 1)",
        )

    def test_inline_multiple_facet_groups(self, decoder):
        raw = (
            "Executed DbCommand (3ms) [Parameters=[@p0='New Book' (Nullable = false) "
            "(Size = 4000), @p1='1' (DbType = Int32)], CommandType='Text', "
            "CommandTimeout='30']\n"
            'INSERT INTO "Books" ("Title", "Price")\nVALUES (@p0, @p1)'
        )
        assert decoder.decode(raw)[-1] == "VALUES ('New Book', 1)"

    def test_malformed_declaration_line_is_an_error(self, decoder):
        with pytest.raises(ParameterFormatError) as exc_info:
            decoder.decode(
                message(
                    "@p0 = 'x' (Type = String)",
                    "@p1 = 'y' (Type = String",
                    template="VALUES (@p0, @p1)",
                )
            )
        assert exc_info.value.name == "@p1"
        assert "not a parameter declaration" in str(exc_info.value)

    def test_empty_message(self, decoder):
        assert decoder.decode("").statement_lines == ()

    def test_decoded_statement_behaves_like_sequence(self, decoder):
        decoded = decoder.decode(PREAMBLE + "\n\nSELECT 1\nFROM t")
        assert isinstance(decoded, DecodedStatement)
        assert len(decoded) == 2
        assert list(decoded) == ["SELECT 1", "FROM t"]
        assert str(decoded) == "SELECT 1\nFROM t"

    def test_decode_all_keeps_order(self, decoder):
        records = [LogRecord(PREAMBLE + f"\n\nSELECT {n}") for n in range(3)]
        assert [d.text for d in decoder.decode_all(records)] == [
            "SELECT 0",
            "SELECT 1",
            "SELECT 2",
        ]

    def test_decode_is_repeatable_across_threads(self, decoder):
        record = LogRecord(
            message("id = '1' (Type = Int32)", template="WHERE x.Id = @id")
        )
        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(decoder.decode, [record] * 20))
        assert {r.text for r in results} == {"WHERE x.Id = 1"}


class TestDialects:

    def test_bracketed_identifiers_select_sqlserver(self, decoder):
        raw = message(
            "@__id_0 = '1' (Type = Int32)",
            "@__deleted_1 = 'False' (Type = Boolean)",
            template=(
                "SELECT TOP(2) [b].[BookId], [b].[Title]\n"
                "FROM [Books] AS [b]\n"
                "WHERE ([b].[SoftDeleted] = @__deleted_1) AND ([b].[BookId] = @__id_0)"
            ),
        )
        decoded = decoder.decode(raw)
        assert decoded[-1] == (
            "WHERE ([b].[SoftDeleted] = CAST(0 AS bit)) AND ([b].[BookId] = 1)"
        )

    def test_quoted_identifiers_select_sqlite(self, decoder):
        decoded = decoder.decode(
            message(
                "p0 = 'True' (Type = Boolean)",
                template='WHERE "b"."SoftDeleted" = @p0',
            )
        )
        assert decoded.text == 'WHERE "b"."SoftDeleted" = 1'

    def test_brackets_inside_strings_do_not_select_sqlserver(self, decoder):
        decoded = decoder.decode(
            message(
                "p0 = 'True' (Type = Boolean)",
                template="WHERE name LIKE '[a-z]%' AND flag = @p0",
            )
        )
        assert decoded.text == "WHERE name LIKE '[a-z]%' AND flag = 1"

    def test_forced_dialect_wins(self):
        decoder = SqlDecoder(DialectName.SQLSERVER)
        decoded = decoder.decode(
            message("p0 = 'true' (Type = Boolean)", template='WHERE "b"."Flag" = @p0')
        )
        assert decoded.text == 'WHERE "b"."Flag" = CAST(1 AS bit)'

    def test_sqlserver_ignores_colon_sigil(self):
        decoded = SqlDecoder("sqlserver").decode(
            message("id = '1' (Type = Int32)", template="WHERE [a] = @id AND [b] = :id")
        )
        assert decoded.text == "WHERE [a] = 1 AND [b] = :id"

    def test_sqlserver_positional_marks(self):
        decoded = SqlDecoder("sqlserver").decode(
            message(
                "p0 = '5' (Type = Int32)",
                "p1 = 'x' (Type = String)",
                template="WHERE [a] = ? AND [b] = ?",
            )
        )
        assert decoded.text == "WHERE [a] = 5 AND [b] = 'x'"

    def test_dialect_name_is_case_insensitive(self):
        assert SqlDecoder("SQLServer").dialect.name is DialectName.SQLSERVER

    def test_unknown_dialect(self):
        with pytest.raises(ValueError, match="oracle"):
            SqlDecoder("oracle")

    def test_decode_message_helper(self):
        decoded = decode_message(
            message("d = '2020-01-02T03:04:05.0000000' (Type = DateTime)", template="SELECT @d"),
            dialect="sqlite",
        )
        assert decoded.text == "SELECT '2020-01-02 03:04:05'"


class TestFormatErrors:

    def test_unknown_type_tag(self, decoder):
        with pytest.raises(ParameterFormatError) as exc_info:
            decoder.decode(message("p0 = 'x' (Type = Widget)", template="SELECT @p0"))
        assert exc_info.value.type_tag == "Widget"

    def test_non_numeric_number(self, decoder):
        with pytest.raises(ParameterFormatError) as exc_info:
            decoder.decode(message("p0 = 'abc' (Type = Int32)", template="SELECT @p0"))
        assert exc_info.value.name == "p0"
        assert exc_info.value.value == "abc"

    def test_masked_value_cannot_be_inlined_as_number(self, decoder):
        with pytest.raises(ParameterFormatError):
            decoder.decode(message("id = '?' (Type = Int32)", template="WHERE x = @id"))
