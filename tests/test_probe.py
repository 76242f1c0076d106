import re

import pytest

from pgschema.probe import PostgresProbe


@pytest.fixture
def probe():
    return PostgresProbe()


def assert_numbered(statement):
    found = [int(n) for n in re.findall(r"\$(\d+)", statement.sql)]
    assert found == list(range(1, len(statement.values) + 1))


def test_current_schema_expression(probe):
    assert probe.get_current_schema() == "CURRENT_SCHEMA()"


def test_query_tables(probe):
    statement = probe.query_tables()
    assert statement.values == ("BASE TABLE",)
    assert '"information_schema"."tables"' in statement.sql
    assert "CURRENT_SCHEMA()" in statement.sql
    assert_numbered(statement)


def test_has_table_wraps_table_query(probe):
    statement = probe.has_table("film")
    assert statement.values == ("BASE TABLE", "film")
    assert statement.sql.startswith("SELECT COUNT(*) > 0")
    assert '"has_table"' in statement.sql
    assert 'AS "subquery"' in statement.sql
    assert probe.query_tables().sql.split("WHERE", 1)[1] in statement.sql
    assert_numbered(statement)


def test_has_column(probe):
    statement = probe.has_column("film", "title")
    assert statement.values == ("film", "title")
    assert '"has_column"' in statement.sql
    assert '"information_schema"."columns"' in statement.sql
    assert_numbered(statement)


def test_has_index(probe):
    statement = probe.has_index("film", "idx_title")
    assert statement.values == ("film", "idx_title")
    assert '"pg_indexes"' in statement.sql
    assert '"schemaname" = CURRENT_SCHEMA()' in statement.sql
    assert_numbered(statement)


def test_has_index_inlined(probe):
    text = str(probe.has_index("film", "idx_title"))
    assert "'film'" in text
    assert "'idx_title'" in text
    assert "$" not in text


def test_quotes_in_names_are_escaped(probe):
    text = str(probe.has_table("it's"))
    assert "'it''s'" in text