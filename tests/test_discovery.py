import pytest

from pgschema.definitions import (
    Check,
    ColumnExpression,
    EnumDef,
    ForeignKeyAction,
    NotNull,
    PrimaryKey,
    References,
    TableInfo,
    Type,
    TypeKind,
    Unique,
)
from pgschema.discovery import Executor, SchemaDiscovery
from pgschema.query import SchemaQueryBuilder, Statement

ENUM_ROWS = [("mood", "happy"), ("mood", "sad"), ("size", "small")]

TABLE_ROWS = [("actor", None, None), ("film_actor", None, None)]


def column_row(name, data_type, default=None, nullable="NO", udt_name=None):
    return (
        name, data_type, default, None, nullable, "NO",
        None, None, None, None, None, None, None, None, udt_name, None,
    )


COLUMN_ROWS = {
    "actor": [
        column_row("actor_id", "integer", default="nextval('actor_id_seq'::regclass)"),
        column_row("mood", "USER-DEFINED", nullable="YES", udt_name="mood"),
    ],
    "film_actor": [column_row("actor_id", "integer")],
}


def constraint_row(table, name, kind, column=None, check=None,
                   update=None, delete=None, ref_table=None, ref_column=None):
    return (
        "public", name, "public", table, kind, "NO", "NO",
        check, column, 1, None,
        None, None, None, update, delete,
        ref_table, ref_column,
    )


CONSTRAINT_ROWS = {
    "actor": [
        constraint_row("actor", "actor_check", "CHECK", check="(actor_id > 0)"),
        constraint_row("actor", "actor_mood_key", "UNIQUE", column="mood"),
        constraint_row("actor", "actor_pkey", "PRIMARY KEY", column="actor_id"),
    ],
    "film_actor": [
        constraint_row(
            "film_actor", "fk_actor", "FOREIGN KEY", column="actor_id",
            update="CASCADE", delete="RESTRICT", ref_table="actor", ref_column="actor_id",
        ),
    ],
}

UNIQUE_ROWS = {
    "actor": [("actor_mood_idx", "public", "actor", "mood")],
    "film_actor": [],
}


class FakeDatabase:
    def __init__(self):
        self.calls = []

    async def fetch(self, sql, *values):
        self.calls.append((sql, values))
        if 'FROM "pg_type"' in sql:
            return ENUM_ROWS
        if 'FROM "information_schema"."tables"' in sql:
            return TABLE_ROWS
        if 'FROM "information_schema"."columns"' in sql:
            return COLUMN_ROWS[values[1]]
        if 'FROM "information_schema"."table_constraints"' in sql:
            return CONSTRAINT_ROWS[values[1]]
        if 'FROM "pg_index"' in sql:
            return UNIQUE_ROWS[values[2]]
        raise AssertionError(f"unexpected query: {sql}")


@pytest.fixture
def database():
    return FakeDatabase()


@pytest.fixture
def discovery(database):
    return SchemaDiscovery(database.fetch, "public")


@pytest.mark.asyncio
async def test_executor_passes_sql_and_values():
    seen = []

    async def fetch(sql, *values):
        seen.append((sql, values))
        return [(1,), (2,)]

    rows = await Executor(fetch).fetch_all(Statement("SELECT $1", ("x",)))
    assert rows == [(1,), (2,)]
    assert seen == [("SELECT $1", ("x",))]


@pytest.mark.asyncio
async def test_executor_propagates_errors():
    async def fetch(sql, *values):
        raise RuntimeError("connection lost")

    with pytest.raises(RuntimeError, match="connection lost"):
        await Executor(fetch).fetch_all(Statement("SELECT 1"))


def test_plain_callable_is_wrapped_in_executor(database):
    discovery = SchemaDiscovery(database.fetch, "public")
    executor = Executor(database.fetch)
    assert isinstance(discovery.executor, Executor)
    assert SchemaDiscovery(executor, "public").executor is executor


@pytest.mark.asyncio
async def test_discover_enums_groups_labels(discovery):
    enums = await discovery.discover_enums()
    assert enums == [
        EnumDef(values=["happy", "sad"], typename="mood"),
        EnumDef(values=["small"], typename="size"),
    ]


@pytest.mark.asyncio
async def test_discover_tables(discovery, database):
    tables = await discovery.discover_tables()
    assert tables == [TableInfo(name="actor"), TableInfo(name="film_actor")]
    expected = SchemaQueryBuilder().query_tables("public")
    assert database.calls == [(expected.sql, expected.values)]


@pytest.mark.asyncio
async def test_discover_columns_resolves_enums(discovery):
    columns = await discovery.discover_columns("public", "actor", {"mood": ["happy", "sad"]})
    assert [c.name for c in columns] == ["actor_id", "mood"]
    assert columns[0].col_type == Type(TypeKind.INTEGER)
    assert columns[0].default == ColumnExpression("nextval('actor_id_seq'::regclass)")
    assert columns[0].not_null == NotNull()
    assert columns[1].col_type == Type(
        TypeKind.ENUM, EnumDef(values=["happy", "sad"], typename="mood")
    )
    assert columns[1].not_null is None


@pytest.mark.asyncio
async def test_discover_constraints(discovery):
    constraints = await discovery.discover_constraints("public", "actor")
    assert constraints == [
        Check(name="actor_check", expr="(actor_id > 0)", no_inherit=False),
        Unique(name="actor_mood_key", columns=["mood"]),
        PrimaryKey(name="actor_pkey", columns=["actor_id"]),
    ]


@pytest.mark.asyncio
async def test_discover_table_takes_uniques_from_indexes(discovery):
    table = await discovery.discover_table(TableInfo(name="actor"), {"mood": ["happy"]})
    assert table.unique_constraints == [Unique(name="actor_mood_idx", columns=["mood"])]
    assert table.check_constraints == [Check(name="actor_check", expr="(actor_id > 0)")]
    assert table.primary_key_constraints == [PrimaryKey(name="actor_pkey", columns=["actor_id"])]
    assert table.reference_constraints == []


@pytest.mark.asyncio
async def test_discover_whole_schema(discovery):
    schema = await discovery.discover()
    assert schema.schema == "public"
    assert [t.info.name for t in schema.tables] == ["actor", "film_actor"]
    actor, film_actor = schema.tables
    assert actor.columns[1].col_type.attr == EnumDef(values=["happy", "sad"], typename="mood")
    assert film_actor.reference_constraints == [
        References(
            name="fk_actor",
            columns=["actor_id"],
            table="actor",
            foreign_columns=["actor_id"],
            on_update=ForeignKeyAction.CASCADE,
            on_delete=ForeignKeyAction.RESTRICT,
        )
    ]
    assert film_actor.unique_constraints == []