"""Turn schema definitions into CREATE statements for PostgreSQL."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .definitions import (
    ColumnInfo,
    EnumDef,
    ForeignKeyAction,
    PrimaryKey,
    References,
    Schema,
    TableDef,
    Type,
    TypeKind,
    Unique,
)
from .query import _literal, _quote

_PLAIN_TYPES: dict[TypeKind, str] = {
    TypeKind.SMALL_INT: "smallint",
    TypeKind.INTEGER: "integer",
    TypeKind.BIG_INT: "bigint",
    TypeKind.SMALL_SERIAL: "smallint",
    TypeKind.SERIAL: "integer",
    TypeKind.BIG_SERIAL: "bigint",
    TypeKind.REAL: "real",
    TypeKind.DOUBLE_PRECISION: "double precision",
    TypeKind.MONEY: "money",
    TypeKind.TEXT: "text",
    TypeKind.BYTEA: "bytea",
    TypeKind.TIMESTAMP: "timestamp without time zone",
    TypeKind.TIMESTAMP_WITH_TIME_ZONE: "timestamp with time zone",
    TypeKind.DATE: "date",
    TypeKind.TIME: "time",
    TypeKind.TIME_WITH_TIME_ZONE: "time",
    TypeKind.BOOLEAN: "bool",
    TypeKind.UUID: "uuid",
    TypeKind.JSON: "json",
    TypeKind.JSON_BINARY: "jsonb",
    TypeKind.POINT: "point",
    TypeKind.LINE: "line",
    TypeKind.LSEG: "lseg",
    TypeKind.BOX: "box",
    TypeKind.PATH: "path",
    TypeKind.POLYGON: "polygon",
    TypeKind.CIRCLE: "circle",
    TypeKind.CIDR: "cidr",
    TypeKind.INET: "inet",
    TypeKind.MAC_ADDR: "macaddr",
    TypeKind.MAC_ADDR8: "macaddr8",
    TypeKind.TS_VECTOR: "tsvector",
    TypeKind.TS_QUERY: "tsquery",
    TypeKind.XML: "xml",
    TypeKind.INT4_RANGE: "int4range",
    TypeKind.INT8_RANGE: "int8range",
    TypeKind.NUM_RANGE: "numrange",
    TypeKind.TS_RANGE: "tsrange",
    TypeKind.TS_TZ_RANGE: "tstzrange",
    TypeKind.DATE_RANGE: "daterange",
    TypeKind.PG_LSN: "pg_lsn",
}

_INTERVAL_FIELDS = frozenset(
    {
        "YEAR",
        "MONTH",
        "DAY",
        "HOUR",
        "MINUTE",
        "SECOND",
        "YEAR TO MONTH",
        "DAY TO HOUR",
        "DAY TO MINUTE",
        "DAY TO SECOND",
        "HOUR TO MINUTE",
        "HOUR TO SECOND",
        "MINUTE TO SECOND",
    }
)

_TO_SERIAL = {
    TypeKind.SMALL_INT: TypeKind.SMALL_SERIAL,
    TypeKind.INTEGER: TypeKind.SERIAL,
    TypeKind.BIG_INT: TypeKind.BIG_SERIAL,
}
_SERIAL_KINDS = frozenset(_TO_SERIAL.values())

_AUTO_INCREMENT_SQL = {
    "smallint": "smallserial",
    "integer": "serial",
    "bigint": "bigserial",
}


def _columns_sql(columns: list[str]) -> str:
    return "(" + ", ".join(_quote(column) for column in columns) + ")"


@dataclass
class ColumnDef:
    """A column as it appears in CREATE TABLE."""

    name: str
    col_type: str
    not_null: bool = False
    auto_increment: bool = False
    extra: Optional[str] = None

    def to_sql(self) -> str:
        type_sql = self.col_type
        if self.auto_increment:
            type_sql = _AUTO_INCREMENT_SQL.get(type_sql, type_sql)
        parts = [_quote(self.name), type_sql]
        if self.not_null:
            parts.append("NOT NULL")
        if self.extra:
            parts.append(self.extra)
        return " ".join(parts)


@dataclass
class IndexDef:
    """A primary key or unique constraint inside CREATE TABLE."""

    name: Optional[str]
    columns: list[str] = field(default_factory=list)
    primary: bool = False
    unique: bool = False

    def to_sql(self) -> str:
        parts = []
        if self.name:
            parts.append(f"CONSTRAINT {_quote(self.name)}")
        if self.primary:
            parts.append("PRIMARY KEY")
        elif self.unique:
            parts.append("UNIQUE")
        parts.append(_columns_sql(self.columns))
        return " ".join(parts)


@dataclass
class ForeignKeyDef:
    """A foreign key constraint inside CREATE TABLE."""

    name: str
    table: str
    from_columns: list[str] = field(default_factory=list)
    to_columns: list[str] = field(default_factory=list)
    on_update: Optional[ForeignKeyAction] = None
    on_delete: Optional[ForeignKeyAction] = None

    def to_sql(self) -> str:
        parts = [
            f"CONSTRAINT {_quote(self.name)}",
            f"FOREIGN KEY {_columns_sql(self.from_columns)}",
            f"REFERENCES {_quote(self.table)} {_columns_sql(self.to_columns)}",
        ]
        if self.on_delete is not None:
            parts.append(f"ON DELETE {self.on_delete.value}")
        if self.on_update is not None:
            parts.append(f"ON UPDATE {self.on_update.value}")
        return " ".join(parts)


@dataclass
class TableCreateStatement:
    """A CREATE TABLE statement."""

    table: str
    columns: list[ColumnDef] = field(default_factory=list)
    indexes: list[IndexDef] = field(default_factory=list)
    foreign_keys: list[ForeignKeyDef] = field(default_factory=list)

    def to_sql(self) -> str:
        items = [column.to_sql() for column in self.columns]
        items.extend(index.to_sql() for index in self.indexes)
        items.extend(key.to_sql() for key in self.foreign_keys)
        return f"CREATE TABLE {_quote(self.table)} ( {', '.join(items)} )"


@dataclass
class TypeCreateStatement:
    """A CREATE TYPE ... AS ENUM statement."""

    name: str
    values: list[str] = field(default_factory=list)

    def to_sql(self) -> str:
        labels = ", ".join(_literal(value) for value in self.values)
        return f"CREATE TYPE {_quote(self.name)} AS ENUM ({labels})"


def _type_sql(col_type: Type) -> str:
    kind = col_type.kind
    plain = _PLAIN_TYPES.get(kind)
    if plain is not None:
        return plain
    attr = col_type.attr
    if kind in (TypeKind.DECIMAL, TypeKind.NUMERIC):
        if attr.precision is None and attr.scale is None:
            return "decimal"
        return f"decimal({attr.precision or 0}, {attr.scale or 0})"
    if kind is TypeKind.VARCHAR:
        return "varchar" if attr.length is None else f"varchar({attr.length})"
    if kind is TypeKind.CHAR:
        return "char" if attr.length is None else f"char({attr.length})"
    if kind is TypeKind.INTERVAL:
        sql = "interval"
        if attr.field is not None and attr.field in _INTERVAL_FIELDS:
            sql += f" {attr.field}"
        if attr.precision is not None:
            sql += f"({attr.precision})"
        return sql
    if kind is TypeKind.BIT:
        return "bit" if attr.length is None else f"bit({attr.length})"
    if kind is TypeKind.VAR_BIT:
        return f"varbit({attr.length if attr.length is not None else 1})"
    if kind is TypeKind.UNKNOWN:
        return attr
    if kind is TypeKind.ENUM:
        return attr.typename
    if kind is TypeKind.ARRAY:
        if attr.col_type is None:
            raise ValueError("Array type not defined")
        return f"{_type_sql(attr.col_type)}[]"
    raise ValueError(f"cannot write a column of type {kind.name}")


def _to_serial(col_type: Type) -> Type:
    serial = _TO_SERIAL.get(col_type.kind)
    return Type(serial) if serial is not None else col_type


def write_col_type(column: ColumnInfo) -> str:
    """The SQL type of a column."""
    return _type_sql(column.col_type)


def write_column(column: ColumnInfo) -> ColumnDef:
    """The column definition for CREATE TABLE.

    A default drawn from a sequence makes the column serial instead.
    """
    col_type = column.col_type
    extras: list[str] = []
    if column.default is not None:
        if column.default.value.startswith("nextval"):
            col_type = _to_serial(col_type)
        else:
            extras.append(f"DEFAULT {column.default.value}")
    type_sql = _type_sql(col_type)
    if column.is_identity:
        col_type = _to_serial(col_type)
    return ColumnDef(
        name=column.name,
        col_type=type_sql,
        not_null=column.not_null is not None,
        auto_increment=col_type.kind in _SERIAL_KINDS,
        extra=" ".join(extras) if extras else None,
    )


def write_primary_key(primary_key: PrimaryKey) -> IndexDef:
    return IndexDef(name=primary_key.name, columns=list(primary_key.columns), primary=True)


def write_unique(unique: Unique) -> IndexDef:
    return IndexDef(name=unique.name, columns=list(unique.columns), unique=True)


def write_references(references: References) -> ForeignKeyDef:
    return ForeignKeyDef(
        name=references.name,
        table=references.table,
        from_columns=list(references.columns),
        to_columns=list(references.foreign_columns),
        on_update=references.on_update,
        on_delete=references.on_delete,
    )


def write_enum(enum_def: EnumDef) -> TypeCreateStatement:
    return TypeCreateStatement(name=enum_def.typename, values=list(enum_def.values))


def write_table(table: TableDef) -> TableCreateStatement:
    indexes = [write_primary_key(key) for key in table.primary_key_constraints]
    indexes.extend(write_unique(unique) for unique in table.unique_constraints)
    return TableCreateStatement(
        table=table.info.name,
        columns=[write_column(column) for column in table.columns],
        indexes=indexes,
        foreign_keys=[write_references(key) for key in table.reference_constraints],
    )


def write_schema(schema: Schema) -> list[TableCreateStatement]:
    return [write_table(table) for table in schema.tables]