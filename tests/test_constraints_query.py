import re

import pytest

from pgschema.constraints_query import (
    TableConstraintsQueryResult,
    query_table_constraints,
)


def _row(n):
    return [f"v{i}" for i in range(n)]


def test_from_row_maps_columns_in_order():
    row = _row(18)
    result = TableConstraintsQueryResult.from_row(row)
    assert result.constraint_schema == "v0"
    assert result.constraint_name == "v1"
    assert result.constraint_type == "v4"
    assert result.check_clause == "v7"
    assert result.column_name == "v8"
    assert result.update_rule == "v14"
    assert result.delete_rule == "v15"
    assert result.referential_key_table_name == "v16"
    assert result.referential_key_column_name == "v17"


def test_from_row_ignores_extra_columns():
    result = TableConstraintsQueryResult.from_row(_row(20))
    assert result.referential_key_column_name == "v17"


def test_from_row_rejects_short_row():
    with pytest.raises(ValueError):
        TableConstraintsQueryResult.from_row(_row(17))


def test_defaults():
    result = TableConstraintsQueryResult()
    assert result.constraint_name == ""
    assert result.check_clause is None
    assert result.referential_key_column_name is None


def test_bound_values_order():
    statement = query_table_constraints("public", "film")
    assert statement.values == ("public", "film", "r", "t", "v", "m", "f", "p")


def test_placeholders_match_values():
    statement = query_table_constraints("public", "film")
    numbers = sorted({int(n) for n in re.findall(r"\$(\d+)", statement.sql)})
    assert numbers == list(range(1, len(statement.values) + 1))


def test_sql_structure():
    sql = query_table_constraints("public", "film").sql
    assert sql.startswith("SELECT ")
    assert "SELECT DISTINCT" in sql
    assert '"referential_constraints_subquery"' in sql
    assert '"information_schema"."table_constraints"' in sql
    assert sql.count("LEFT JOIN") == 5
    assert sql.index('ORDER BY "table_constraints"."constraint_name" ASC') > sql.index("WHERE")


def test_order_by_sequence():
    sql = query_table_constraints("public", "film").sql
    order = sql[sql.index("ORDER BY"):]
    positions = [
        order.index('"table_constraints"."constraint_name"'),
        order.index('"key_column_usage"."ordinal_position"'),
        order.index('"referential_constraints_subquery"."unique_constraint_name"'),
        order.index('"referential_constraints_subquery"."constraint_name"'),
    ]
    assert positions == sorted(positions)


def test_rendered_statement_inlines_literals():
    text = str(query_table_constraints("public", "it's"))
    assert "'public'" in text
    assert "'it''s'" in text
    assert "$1" not in text
    assert "IN ('r', 't', 'v', 'm', 'f', 'p')" in text


def test_selected_column_count_matches_result_fields():
    sql = query_table_constraints("public", "film").sql
    start = len("SELECT ")
    end = sql.index(" FROM ")
    selected = sql[start:end].split(", ")
    assert len(selected) == 18
    result = TableConstraintsQueryResult.from_row(_row(18))
    assert len(vars(result)) == 18