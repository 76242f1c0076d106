"""Queries that check whether a table, column or index exists in the current schema."""

from __future__ import annotations

from .query import Statement, TableType, _Builder, _quote

_CURRENT_SCHEMA = "CURRENT_SCHEMA()"


class PostgresProbe:
    """Builds existence checks against the current PostgreSQL schema."""

    def get_current_schema(self) -> str:
        """The SQL expression naming the current schema."""
        return _CURRENT_SCHEMA

    def _tables(self, table: str | None = None) -> Statement:
        builder = _Builder()
        conditions = [
            f"{self.get_current_schema()} = {_quote('tables', 'table_schema')}",
            f"{_quote('table_type')} = {builder.param(TableType.BASE_TABLE.value)}",
        ]
        if table is not None:
            conditions.append(f"{_quote('table_name')} = {builder.param(table)}")
        return builder.build(
            f"SELECT {_quote('table_name')} AS {_quote('table_name')}",
            f"FROM {_quote('information_schema', 'tables')}",
            "WHERE " + " AND ".join(conditions),
        )

    def query_tables(self) -> Statement:
        """Names of the base tables in the current schema."""
        return self._tables()

    def has_table(self, table: str) -> Statement:
        builder = _Builder()
        subquery = builder.subquery(self._tables(table))
        return builder.build(
            f"SELECT COUNT(*) > 0 AS {_quote('has_table')}",
            f"FROM {subquery} AS {_quote('subquery')}",
        )

    def has_column(self, table: str, column: str) -> Statement:
        builder = _Builder()
        conditions = [
            f"{self.get_current_schema()} = {_quote('columns', 'table_schema')}",
            f"{_quote('table_name')} = {builder.param(table)}",
            f"{_quote('column_name')} = {builder.param(column)}",
        ]
        return builder.build(
            f"SELECT COUNT(*) > 0 AS {_quote('has_column')}",
            f"FROM {_quote('information_schema', 'columns')}",
            "WHERE " + " AND ".join(conditions),
        )

    def has_index(self, table: str, index: str) -> Statement:
        builder = _Builder()
        conditions = [
            f"{_quote('schemaname')} = {self.get_current_schema()}",
            f"{_quote('tablename')} = {builder.param(table)}",
            f"{_quote('indexname')} = {builder.param(index)}",
        ]
        return builder.build(
            f"SELECT COUNT(*) > 0 AS {_quote('has_index')}",
            f"FROM {_quote('pg_indexes')}",
            "WHERE " + " AND ".join(conditions),
        )