"""Discover a PostgreSQL schema by running the catalogue queries."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Sequence, Union

from .constraints_query import TableConstraintsQueryResult, query_table_constraints
from .definitions import (
    Check,
    ColumnInfo,
    Constraint,
    EnumDef,
    Exclusion,
    NotNull,
    PrimaryKey,
    References,
    Schema,
    TableDef,
    TableInfo,
    Unique,
)
from .parser import (
    EnumVariantMap,
    parse_column_query_result,
    parse_table_constraint_query_results,
    parse_table_query_result,
    parse_unique_index_query_results,
)
from .query import (
    ColumnQueryResult,
    EnumQueryResult,
    SchemaQueryBuilder,
    Statement,
    TableQueryResult,
    UniqueIndexQueryResult,
)

_log = logging.getLogger(__name__)

Row = Sequence[Any]
Fetch = Callable[..., Awaitable[Sequence[Row]]]


class Executor:
    """Runs statements through an async ``fetch(sql, *values)`` callable.

    The callable receives the SQL with ``$n`` placeholders and the bound
    values, and returns the rows as sequences of column values.
    """

    def __init__(self, fetch: Fetch) -> None:
        self._fetch = fetch

    async def fetch_all(self, statement: Statement) -> list[Row]:
        _log.debug("%s, %r", statement.sql, statement.values)
        return list(await self._fetch(statement.sql, *statement.values))


class SchemaDiscovery:
    """Reads the tables, columns, constraints and enums of one schema."""

    def __init__(
        self,
        executor: Union[Executor, Fetch],
        schema: str,
        query: Optional[SchemaQueryBuilder] = None,
    ) -> None:
        self.executor = executor if isinstance(executor, Executor) else Executor(executor)
        self.schema = schema
        self.query = query if query is not None else SchemaQueryBuilder()

    async def discover(self) -> Schema:
        enums = {enum.typename: enum.values for enum in await self.discover_enums()}
        infos = await self.discover_tables()
        tables = await asyncio.gather(*(self.discover_table(info, enums) for info in infos))
        return Schema(schema=self.schema, tables=list(tables))

    async def discover_tables(self) -> list[TableInfo]:
        rows = await self.executor.fetch_all(self.query.query_tables(self.schema))
        tables = []
        for row in rows:
            result = TableQueryResult.from_row(row)
            _log.debug("%r", result)
            table = parse_table_query_result(result)
            _log.debug("%r", table)
            tables.append(table)
        return tables

    async def discover_table(self, info: TableInfo, enums: EnumVariantMap) -> TableDef:
        columns = await self.discover_columns(self.schema, info.name, enums)
        constraints = await self.discover_constraints(self.schema, info.name)

        checks: list[Check] = []
        not_nulls: list[NotNull] = []
        primary_keys: list[PrimaryKey] = []
        references: list[References] = []
        exclusions: list[Exclusion] = []
        for constraint in constraints:
            if isinstance(constraint, Check):
                checks.append(constraint)
            elif isinstance(constraint, NotNull):
                not_nulls.append(constraint)
            elif isinstance(constraint, PrimaryKey):
                primary_keys.append(constraint)
            elif isinstance(constraint, References):
                references.append(constraint)
            elif isinstance(constraint, Exclusion):
                exclusions.append(constraint)
            # Unique constraints are read from the unique indexes instead.

        uniques = await self.discover_unique_indexes(self.schema, info.name)

        return TableDef(
            info=info,
            columns=columns,
            check_constraints=checks,
            not_null_constraints=not_nulls,
            unique_constraints=uniques,
            primary_key_constraints=primary_keys,
            reference_constraints=references,
            exclusion_constraints=exclusions,
        )

    async def discover_columns(
        self, schema: str, table: str, enums: EnumVariantMap
    ) -> list[ColumnInfo]:
        rows = await self.executor.fetch_all(self.query.query_columns(schema, table))
        columns = []
        for row in rows:
            result = ColumnQueryResult.from_row(row)
            _log.debug("%r", result)
            column = parse_column_query_result(result, enums)
            _log.debug("%r", column)
            columns.append(column)
        return columns

    async def discover_constraints(self, schema: str, table: str) -> list[Constraint]:
        rows = await self.executor.fetch_all(query_table_constraints(schema, table))
        results = [TableConstraintsQueryResult.from_row(row) for row in rows]
        constraints = list(parse_table_constraint_query_results(results))
        _log.debug("%r", constraints)
        return constraints

    async def discover_unique_indexes(self, schema: str, table: str) -> list[Unique]:
        rows = await self.executor.fetch_all(
            self.query.query_table_unique_indexes(schema, table)
        )
        results = [UniqueIndexQueryResult.from_row(row) for row in rows]
        uniques = list(parse_unique_index_query_results(results))
        _log.debug("%r", uniques)
        return uniques

    async def discover_enums(self) -> list[EnumDef]:
        rows = await self.executor.fetch_all(self.query.query_enums())
        labels: dict[str, list[str]] = {}
        for row in rows:
            result = EnumQueryResult.from_row(row)
            _log.debug("%r", result)
            labels.setdefault(result.typename, []).append(result.enumlabel)
        return [EnumDef(values=values, typename=name) for name, values in labels.items()]