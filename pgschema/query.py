"""Catalogue queries for discovering a PostgreSQL schema, and the rows they return."""

from __future__ import annotations

import re
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Iterable, Optional, Sequence

_PLACEHOLDER = re.compile(r"\$(\d+)")


def _quote(*parts: str) -> str:
    """Quote an identifier, optionally qualified, for PostgreSQL."""
    return ".".join('"' + part.replace('"', '""') + '"' for part in parts)


def _literal(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float)):
        return str(value)
    return "'" + str(value).replace("'", "''") + "'"


@dataclass(frozen=True)
class Statement:
    """A SQL statement with ``$n`` placeholders and the values bound to them.

    ``str()`` gives the statement with the values written in as literals.
    """

    sql: str
    values: tuple[Any, ...] = ()

    def __str__(self) -> str:
        return _PLACEHOLDER.sub(
            lambda match: _literal(self.values[int(match.group(1)) - 1]), self.sql
        )


class _Builder:
    """Collects bound values in the order their placeholders appear."""

    def __init__(self) -> None:
        self._values: list[Any] = []

    def param(self, value: Any) -> str:
        self._values.append(value)
        return f"${len(self._values)}"

    def params(self, values: Iterable[Any]) -> str:
        return ", ".join(self.param(value) for value in values)

    def subquery(self, statement: Statement) -> str:
        offset = len(self._values)
        self._values.extend(statement.values)
        sql = _PLACEHOLDER.sub(
            lambda match: f"${int(match.group(1)) + offset}", statement.sql
        )
        return f"({sql})"

    def build(self, *clauses: str) -> Statement:
        return Statement(" ".join(clauses), tuple(self._values))


def _row_to(cls: type, row: Sequence[Any]) -> Any:
    names = [f.name for f in fields(cls)]
    values = tuple(row)
    if len(values) < len(names):
        raise ValueError(
            f"{cls.__name__} needs {len(names)} columns, the row has {len(values)}"
        )
    return cls(*values[: len(names)])


class TableType(Enum):
    """Values of ``information_schema.tables.table_type``."""

    BASE_TABLE = "BASE TABLE"
    VIEW = "VIEW"
    FOREIGN = "FOREIGN"
    TEMPORARY = "LOCAL TEMPORARY"


def select_base_table_and_view() -> Statement:
    """Names of tables and views that inherit from another relation."""
    builder = _Builder()
    relkind = builder.params(["r", "t", "v", "m", "f", "p"])
    return builder.build(
        f"SELECT {_quote('pg_class', 'relname')}",
        f"FROM {_quote('pg_inherits')}",
        f"JOIN {_quote('pg_class')}",
        f"ON {_quote('pg_inherits', 'inhrelid')} = {_quote('pg_class', 'oid')}",
        f"AND {_quote('pg_class', 'relkind')} IN ({relkind})",
    )


@dataclass
class TableQueryResult:
    """One row of the table query."""

    table_name: str = ""
    user_defined_type_schema: Optional[str] = None
    user_defined_type_name: Optional[str] = None

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "TableQueryResult":
        return _row_to(cls, row)


@dataclass
class ColumnQueryResult:
    """One row of the column query."""

    column_name: str = ""
    column_type: str = ""
    column_default: Optional[str] = None
    column_generated: Optional[str] = None
    is_nullable: str = ""
    is_identity: str = ""
    numeric_precision: Optional[int] = None
    numeric_precision_radix: Optional[int] = None
    numeric_scale: Optional[int] = None
    character_maximum_length: Optional[int] = None
    character_octet_length: Optional[int] = None
    datetime_precision: Optional[int] = None
    interval_type: Optional[str] = None
    interval_precision: Optional[int] = None
    udt_name: Optional[str] = None
    udt_name_regtype: Optional[str] = None

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "ColumnQueryResult":
        return _row_to(cls, row)


@dataclass
class EnumQueryResult:
    """One label of an enum type."""

    typename: str = ""
    enumlabel: str = ""

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "EnumQueryResult":
        return _row_to(cls, row)


@dataclass
class UniqueIndexQueryResult:
    """One column of a unique, non-primary index."""

    index_name: str = ""
    table_schema: str = ""
    table_name: str = ""
    column_name: str = ""

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "UniqueIndexQueryResult":
        return _row_to(cls, row)


_COLUMN_FIELDS = (
    "column_name",
    "data_type",
    "column_default",
    "generation_expression",
    "is_nullable",
    "is_identity",
    "numeric_precision",
    "numeric_precision_radix",
    "numeric_scale",
    "character_maximum_length",
    "character_octet_length",
    "datetime_precision",
    "interval_type",
    "interval_precision",
    "udt_name",
)


class SchemaQueryBuilder:
    """Builds the catalogue queries used to discover a schema."""

    def query_tables(self, schema: str) -> Statement:
        builder = _Builder()
        columns = ", ".join(
            _quote(name)
            for name in ("table_name", "user_defined_type_schema", "user_defined_type_name")
        )
        conditions = [
            f"{_quote('table_schema')} = {builder.param(schema)}",
            f"{_quote('table_type')} = {builder.param(TableType.BASE_TABLE.value)}",
            f"{_quote('table_name')} NOT IN "
            f"{builder.subquery(select_base_table_and_view())}",
        ]
        return builder.build(
            f"SELECT {columns}",
            f"FROM {_quote('information_schema', 'tables')}",
            "WHERE " + " AND ".join(conditions),
        )

    def query_columns(self, schema: str, table: str) -> Statement:
        builder = _Builder()
        columns = ", ".join(_quote(name) for name in _COLUMN_FIELDS)
        # Quoting the name keeps user types with upper case letters intact.
        regtype = (
            "CAST(CONCAT('\"', udt_name, '\"')::regtype AS text) "
            f"AS {_quote('udt_name_regtype')}"
        )
        conditions = [
            f"{_quote('table_schema')} = {builder.param(schema)}",
            f"{_quote('table_name')} = {builder.param(table)}",
        ]
        return builder.build(
            f"SELECT {columns}, {regtype}",
            f"FROM {_quote('information_schema', 'columns')}",
            "WHERE " + " AND ".join(conditions),
        )

    def query_enums(self) -> Statement:
        return _Builder().build(
            f"SELECT {_quote('pg_type', 'typname')}, {_quote('pg_enum', 'enumlabel')}",
            f"FROM {_quote('pg_type')}",
            f"INNER JOIN {_quote('pg_enum')}",
            f"ON {_quote('pg_enum', 'enumtypid')} = {_quote('pg_type', 'oid')}",
            f"ORDER BY {_quote('pg_type', 'typname')} ASC,",
            f"{_quote('pg_enum', 'enumsortorder')} ASC,",
            f"{_quote('pg_enum', 'enumlabel')} ASC",
        )

    def query_table_unique_indexes(self, schema: str, table: str) -> Statement:
        builder = _Builder()
        joins = [
            ("pg_class", "idx", _quote("idx", "oid"), _quote("pg_index", "indexrelid")),
            ("pg_namespace", "insp", _quote("insp", "oid"), _quote("idx", "relnamespace")),
            ("pg_class", "tbl", _quote("tbl", "oid"), _quote("pg_index", "indrelid")),
            ("pg_namespace", "tnsp", _quote("tnsp", "oid"), _quote("tbl", "relnamespace")),
            ("pg_attribute", "col", _quote("col", "attrelid"), _quote("idx", "oid")),
        ]
        join_clauses = [
            f"JOIN {_quote(relation)} AS {_quote(alias)} ON {left} = {right}"
            for relation, alias, left, right in joins
        ]
        conditions = [
            f"{_quote('pg_index', 'indisunique')} = {builder.param(True)}",
            f"{_quote('pg_index', 'indisprimary')} = {builder.param(False)}",
            f"{_quote('tbl', 'relname')} = {builder.param(table)}",
            f"{_quote('tnsp', 'nspname')} = {builder.param(schema)}",
        ]
        columns = ", ".join(
            [
                _quote("idx", "relname"),
                _quote("insp", "nspname"),
                _quote("tbl", "relname"),
                _quote("col", "attname"),
            ]
        )
        return builder.build(
            f"SELECT {columns}",
            f"FROM {_quote('pg_index')}",
            *join_clauses,
            "WHERE " + " AND ".join(conditions),
            f"ORDER BY {_quote('pg_index', 'indexrelid')} ASC",
        )