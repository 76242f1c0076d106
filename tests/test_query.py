import re

import pytest

from pgschema.query import (
    ColumnQueryResult,
    EnumQueryResult,
    SchemaQueryBuilder,
    Statement,
    TableQueryResult,
    TableType,
    UniqueIndexQueryResult,
    select_base_table_and_view,
)


def placeholders(sql):
    return [int(n) for n in re.findall(r"\$(\d+)", sql)]


def assert_numbered(statement):
    assert placeholders(statement.sql) == list(range(1, len(statement.values) + 1))


@pytest.fixture
def builder():
    return SchemaQueryBuilder()


def test_table_type_base_table_is_bound(builder):
    statement = builder.query_tables("public")
    assert statement.values[1] == TableType.BASE_TABLE.value
    assert statement.values[1] == "BASE TABLE"
    assert TableType("LOCAL TEMPORARY") is TableType.TEMPORARY


def test_select_base_table_and_view():
    statement = select_base_table_and_view()
    assert statement.values == ("r", "t", "v", "m", "f", "p")
    assert statement.sql.startswith('SELECT "pg_class"."relname" FROM "pg_inherits"')
    assert '"pg_class"."relkind" IN' in statement.sql
    assert_numbered(statement)


def test_query_tables_binds_schema_then_subquery(builder):
    statement = builder.query_tables("public")
    assert statement.values == ("public", "BASE TABLE", "r", "t", "v", "m", "f", "p")
    assert '"information_schema"."tables"' in statement.sql
    assert '"table_name" NOT IN (SELECT' in statement.sql
    assert_numbered(statement)


def test_query_columns(builder):
    statement = builder.query_columns("public", "film")
    assert statement.values == ("public", "film")
    assert '"information_schema"."columns"' in statement.sql
    assert "::regtype" in statement.sql
    assert '"udt_name_regtype"' in statement.sql
    assert statement.sql.index('"column_name"') < statement.sql.index('"udt_name"')
    assert_numbered(statement)


def test_query_enums_has_no_values(builder):
    statement = builder.query_enums()
    assert statement.values == ()
    assert "ORDER BY" in statement.sql
    order = statement.sql.split("ORDER BY", 1)[1]
    assert order.index("typname") < order.index("enumsortorder") < order.index("enumlabel")


def test_query_table_unique_indexes(builder):
    statement = builder.query_table_unique_indexes("public", "film")
    assert statement.values == (True, False, "film", "public")
    for alias in ("idx", "insp", "tbl", "tnsp", "col"):
        assert f'AS "{alias}"' in statement.sql
    assert_numbered(statement)


def test_statement_str_inlines_values():
    statement = Statement('SELECT 1 WHERE "a" = $1 AND "b" = $2', ("O'Brien", True))
    assert str(statement) == "SELECT 1 WHERE \"a\" = 'O''Brien' AND \"b\" = TRUE"


def test_statement_str_without_values():
    statement = SchemaQueryBuilder().query_enums()
    assert str(statement) == statement.sql


def test_inlined_unique_index_query_contains_names(builder):
    text = str(builder.query_table_unique_indexes("public", "film"))
    assert "'film'" in text and "'public'" in text
    assert "$" not in text


def test_column_result_from_row():
    row = ["id", "integer", None, None, "NO", "YES", 32, 2, 0, None, None, None, None, None, "int4", "integer"]
    result = ColumnQueryResult.from_row(row)
    assert result.column_name == "id"
    assert result.is_identity == "YES"
    assert result.numeric_precision == 32
    assert result.udt_name_regtype == "integer"


def test_table_result_from_row():
    result = TableQueryResult.from_row(("film", None, None))
    assert result == TableQueryResult(table_name="film")


def test_enum_result_from_row():
    assert EnumQueryResult.from_row(("mood", "happy")) == EnumQueryResult("mood", "happy")


def test_unique_index_result_from_row():
    result = UniqueIndexQueryResult.from_row(("idx_a", "public", "film", "title"))
    assert result.index_name == "idx_a"
    assert result.column_name == "title"


def test_short_row_raises():
    with pytest.raises(ValueError):
        UniqueIndexQueryResult.from_row(("idx_a", "public"))


def test_defaults_match_empty_row():
    assert ColumnQueryResult().column_default is None
    assert EnumQueryResult() == EnumQueryResult("", "")