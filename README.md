# pgschema

Describe a PostgreSQL schema as plain Python objects, read it from a live
database, and write it back out as SQL.

The package has these modules:

- `pgschema.definitions`: dataclasses for a schema: `Schema`, `TableDef`,
  `TableInfo`, `ColumnInfo`, the column `Type` (a `TypeKind` plus its
  attributes such as `StringAttr`, `TimeAttr` or `EnumDef`), and the
  constraints `Check`, `NotNull`, `Unique`, `PrimaryKey`, `References` and
  `Exclusion`. `Type.from_str` maps a catalogue type name to a `Type`.
- `pgschema.query`: `SchemaQueryBuilder`, whose methods build `SELECT`
  statements that list tables, columns, enum labels and unique indexes, and
  the result dataclasses (`TableQueryResult`, `ColumnQueryResult`,
  `EnumQueryResult`, `UniqueIndexQueryResult`), each with `from_row`.
- `pgschema.constraints_query`: `query_table_constraints(schema, table)` and
  its row type `TableConstraintsQueryResult`.
- `pgschema.probe`: `PostgresProbe`, which builds existence checks.
- `pgschema.parser`: turns result rows into definitions.
- `pgschema.writer`: turns definitions into `CREATE TABLE` and
  `CREATE TYPE ... AS ENUM` statements.
- `pgschema.discovery`: `SchemaDiscovery` and `Executor`, which run the
  queries and assemble a `Schema`.

Every query is a `Statement`: `sql` holds the SQL with `$1`, `$2`, ...
placeholders and `values` the values bound to them. `str(statement)` gives
the SQL with the values written in as literals.

## Installation

```
pip install pgschema
```

The package uses only the standard library. The tests need the `test` extra:

```
pip install "pgschema[test]"
pytest
```

## Writing a table

```python
from pgschema.definitions import (
    ColumnInfo, NotNull, PrimaryKey, StringAttr, TableDef, TableInfo, Type, TypeKind,
)
from pgschema.writer import write_table

table = TableDef(
    info=TableInfo(name="actor"),
    columns=[
        ColumnInfo(name="actor_id", col_type=Type(TypeKind.INTEGER),
                   not_null=NotNull(), is_identity=True),
        ColumnInfo(name="first_name",
                   col_type=Type(TypeKind.VARCHAR, StringAttr(length=45)),
                   not_null=NotNull()),
    ],
    primary_key_constraints=[PrimaryKey(name="actor_pkey", columns=["actor_id"])],
)

print(write_table(table).to_sql())
```

prints

```
CREATE TABLE "actor" ( "actor_id" serial NOT NULL, "first_name" varchar(45) NOT NULL, CONSTRAINT "actor_pkey" PRIMARY KEY ("actor_id") )
```

An identity column, or a column whose default begins with `nextval`, is
written as `smallserial`, `serial` or `bigserial` when its type is
`smallint`, `integer` or `bigint`; a `nextval` default is not written out.
Any other default becomes a `DEFAULT` clause.

`write_table` writes the columns, primary keys, unique constraints and
foreign keys. `write_schema(schema)` returns one `TableCreateStatement` per
table. Enum types are written separately with `write_enum(enum_def)`.

## Discovering a schema

`SchemaDiscovery(executor, schema)` takes an `Executor`, or an async callable
`fetch(sql, *values)` that it wraps in one. The callable receives the SQL with
`$n` placeholders and the bound values, and must return the rows as sequences
of column values, which is what the `fetch` method of most asyncio
PostgreSQL drivers looks like.

```python
from pgschema.discovery import SchemaDiscovery
from pgschema.writer import write_schema

discovery = SchemaDiscovery(connection.fetch, "public")
schema = await discovery.discover()
for statement in write_schema(schema):
    print(statement.to_sql())
```

`discover()` reads the enum types first, then the base tables of the schema
that do not inherit from another relation, each with its columns, its check,
primary-key and foreign-key constraints, and its unique indexes. Unique
constraints come from the unique, non-primary indexes. Each step is also
available on its own: `discover_enums`, `discover_tables`, `discover_table`,
`discover_columns`, `discover_constraints` and `discover_unique_indexes`.

## Probing

```python
from pgschema.probe import PostgresProbe

probe = PostgresProbe()
probe.has_table("actor")
probe.has_column("actor", "first_name")
probe.has_index("actor", "actor_pkey")
```

Each call returns a `Statement` whose single result column is true when the
object exists in the current schema.

## What it does not do

- It has no database driver and opens no connections; you supply the
  `fetch` callable.
- It has no command-line tool.
- Check and exclusion constraints are discovered but not written by
  `write_table`, and nothing is written for views, sequences, comments or
  table inheritance.