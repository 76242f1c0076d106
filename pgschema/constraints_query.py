"""The query listing a table's constraints, and the rows it returns."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence

from .query import Statement, _Builder, _quote, _row_to, select_base_table_and_view

_SCHEMA = "information_schema"
_TC = "table_constraints"
_CC = "check_constraints"
_KCU = "key_column_usage"
_RC = "referential_constraints"
_CCU = "constraint_column_usage"
_RCSQ = "referential_constraints_subquery"


@dataclass
class TableConstraintsQueryResult:
    """One row of the table constraints query."""

    # From table_constraints
    constraint_schema: str = ""
    constraint_name: str = ""
    table_schema: str = ""
    table_name: str = ""
    constraint_type: str = ""
    is_deferrable: str = ""
    initially_deferred: str = ""

    # From check_constraints
    check_clause: Optional[str] = None

    # From key_column_usage
    column_name: Optional[str] = None
    ordinal_position: Optional[int] = None
    position_in_unique_constraint: Optional[int] = None

    # From referential_constraints
    unique_constraint_schema: Optional[str] = None
    unique_constraint_name: Optional[str] = None
    match_option: Optional[str] = None
    update_rule: Optional[str] = None
    delete_rule: Optional[str] = None

    # From key_column_usage, through the referential constraints subquery
    referential_key_table_name: Optional[str] = None
    referential_key_column_name: Optional[str] = None

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "TableConstraintsQueryResult":
        return _row_to(cls, row)


def _eq(left: tuple[str, str], right: tuple[str, str]) -> str:
    return f"{_quote(*left)} = {_quote(*right)}"


def _referential_subquery() -> str:
    columns = [
        _quote(_RC, "constraint_name"),
        _quote(_RC, "unique_constraint_schema"),
        _quote(_RC, "unique_constraint_name"),
        _quote(_RC, "match_option"),
        _quote(_RC, "update_rule"),
        _quote(_RC, "delete_rule"),
        _quote(_CCU, "table_name"),
        _quote(_CCU, "column_name"),
        # The ordinal position of the referenced key column
        _quote(_KCU, "ordinal_position"),
    ]
    key_join = " AND ".join(
        [
            _eq((_CCU, "column_name"), (_KCU, "column_name")),
            _eq((_RC, "unique_constraint_name"), (_KCU, "constraint_name")),
            _eq((_RC, "unique_constraint_schema"), (_KCU, "constraint_schema")),
        ]
    )
    return " ".join(
        [
            "SELECT DISTINCT " + ", ".join(columns),
            f"FROM {_quote(_SCHEMA, _RC)}",
            f"LEFT JOIN {_quote(_SCHEMA, _CCU)}",
            f"ON {_eq((_RC, 'constraint_name'), (_CCU, 'constraint_name'))}",
            f"LEFT JOIN {_quote(_SCHEMA, _KCU)}",
            f"ON {key_join}",
        ]
    )


def query_table_constraints(schema: str, table: str) -> Statement:
    """Constraints of ``table`` in ``schema``, one row per constraint column.

    Rows come ordered by constraint name, then column position, then the
    referenced constraint name.
    """
    builder = _Builder()
    columns = [
        *(
            _quote(_TC, name)
            for name in (
                "constraint_schema",
                "constraint_name",
                "table_schema",
                "table_name",
                "constraint_type",
                "is_deferrable",
                "initially_deferred",
            )
        ),
        _quote(_CC, "check_clause"),
        _quote(_KCU, "column_name"),
        _quote(_KCU, "ordinal_position"),
        _quote(_KCU, "position_in_unique_constraint"),
        *(
            _quote(_RCSQ, name)
            for name in (
                "unique_constraint_schema",
                "unique_constraint_name",
                "match_option",
                "update_rule",
                "delete_rule",
                "table_name",
                "column_name",
            )
        ),
    ]
    check_join = " AND ".join(
        _eq((_TC, name), (_CC, name))
        for name in ("constraint_name", "constraint_catalog", "constraint_schema")
    )
    key_join = " AND ".join(
        _eq((_TC, name), (_KCU, name))
        for name in (
            "constraint_name",
            "constraint_catalog",
            "constraint_schema",
            "table_catalog",
            "table_schema",
            "table_name",
        )
    )
    referential_join = (
        f"{_eq((_TC, 'constraint_name'), (_RCSQ, 'constraint_name'))} AND "
        # Match the referenced key position to the foreign key column, or allow
        # a foreign key column without a unique constraint.
        f"({_eq((_KCU, 'position_in_unique_constraint'), (_RCSQ, 'ordinal_position'))}"
        f" OR {_quote(_RCSQ, 'ordinal_position')} IS NULL)"
    )
    conditions = [
        f"{_quote(_TC, 'table_schema')} = {builder.param(schema)}",
        f"{_quote(_TC, 'table_name')} = {builder.param(table)}",
        f"({_quote(_RCSQ, 'table_name')} IS NULL OR {_quote(_RCSQ, 'table_name')} "
        f"NOT IN {builder.subquery(select_base_table_and_view())})",
    ]
    order = ", ".join(
        [
            f"{_quote(_TC, 'constraint_name')} ASC",
            f"{_quote(_KCU, 'ordinal_position')} ASC",
            f"{_quote(_RCSQ, 'unique_constraint_name')} ASC",
            f"{_quote(_RCSQ, 'constraint_name')} ASC",
        ]
    )
    return builder.build(
        "SELECT " + ", ".join(columns),
        f"FROM {_quote(_SCHEMA, _TC)}",
        f"LEFT JOIN {_quote(_SCHEMA, _CC)} ON {check_join}",
        f"LEFT JOIN {_quote(_SCHEMA, _KCU)} ON {key_join}",
        f"LEFT JOIN ({_referential_subquery()}) AS {_quote(_RCSQ)} ON {referential_join}",
        "WHERE " + " AND ".join(conditions),
        f"ORDER BY {order}",
    )