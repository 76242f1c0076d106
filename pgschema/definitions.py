"""Data definitions describing a PostgreSQL schema: types, columns, constraints and tables."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Union


@dataclass
class ArbitraryPrecisionNumericAttr:
    """Precision and scale of a ``numeric`` or ``decimal`` column.

    When neither is set, any precision or scale up to the implementation limit may be stored.
    """

    precision: Optional[int] = None
    scale: Optional[int] = None


@dataclass
class StringAttr:
    """Length of a character column."""

    length: Optional[int] = None


@dataclass
class TimeAttr:
    """Fractional-seconds precision of a time or timestamp column."""

    precision: Optional[int] = None


@dataclass
class IntervalAttr:
    """Field restriction and precision of an ``interval`` column."""

    field: Optional[str] = None
    precision: Optional[int] = None


@dataclass
class BitAttr:
    """Length of a bit string column."""

    length: Optional[int] = None


@dataclass
class EnumDef:
    """A PostgreSQL enum type: its name and its labels in order."""

    values: list[str] = field(default_factory=list)
    typename: str = ""


@dataclass
class ArrayDef:
    """An array column; ``col_type`` is the element type once known."""

    col_type: Optional["Type"] = None


class TypeKind(Enum):
    """All built-in PostgreSQL types, excluding synonyms."""

    SMALL_INT = auto()
    INTEGER = auto()
    BIG_INT = auto()
    DECIMAL = auto()
    NUMERIC = auto()
    REAL = auto()
    DOUBLE_PRECISION = auto()
    SMALL_SERIAL = auto()
    SERIAL = auto()
    BIG_SERIAL = auto()
    MONEY = auto()
    VARCHAR = auto()
    CHAR = auto()
    TEXT = auto()
    BYTEA = auto()
    TIMESTAMP = auto()
    TIMESTAMP_WITH_TIME_ZONE = auto()
    DATE = auto()
    TIME = auto()
    TIME_WITH_TIME_ZONE = auto()
    INTERVAL = auto()
    BOOLEAN = auto()
    POINT = auto()
    LINE = auto()
    LSEG = auto()
    BOX = auto()
    PATH = auto()
    POLYGON = auto()
    CIRCLE = auto()
    CIDR = auto()
    INET = auto()
    MAC_ADDR = auto()
    MAC_ADDR8 = auto()
    BIT = auto()
    VAR_BIT = auto()
    TS_VECTOR = auto()
    TS_QUERY = auto()
    UUID = auto()
    XML = auto()
    JSON = auto()
    JSON_BINARY = auto()
    ARRAY = auto()
    INT4_RANGE = auto()
    INT8_RANGE = auto()
    NUM_RANGE = auto()
    TS_RANGE = auto()
    TS_TZ_RANGE = auto()
    DATE_RANGE = auto()
    PG_LSN = auto()
    UNKNOWN = auto()
    ENUM = auto()


_ATTR_CLASSES: dict[TypeKind, type] = {
    TypeKind.DECIMAL: ArbitraryPrecisionNumericAttr,
    TypeKind.NUMERIC: ArbitraryPrecisionNumericAttr,
    TypeKind.VARCHAR: StringAttr,
    TypeKind.CHAR: StringAttr,
    TypeKind.TIMESTAMP: TimeAttr,
    TypeKind.TIMESTAMP_WITH_TIME_ZONE: TimeAttr,
    TypeKind.TIME: TimeAttr,
    TypeKind.TIME_WITH_TIME_ZONE: TimeAttr,
    TypeKind.INTERVAL: IntervalAttr,
    TypeKind.BIT: BitAttr,
    TypeKind.VAR_BIT: BitAttr,
    TypeKind.ENUM: EnumDef,
    TypeKind.ARRAY: ArrayDef,
}

_NAMES: dict[str, TypeKind] = {
    "smallint": TypeKind.SMALL_INT,
    "int2": TypeKind.SMALL_INT,
    "integer": TypeKind.INTEGER,
    "int": TypeKind.INTEGER,
    "int4": TypeKind.INTEGER,
    "bigint": TypeKind.BIG_INT,
    "int8": TypeKind.BIG_INT,
    "decimal": TypeKind.DECIMAL,
    "numeric": TypeKind.NUMERIC,
    "real": TypeKind.REAL,
    "float4": TypeKind.REAL,
    "double precision": TypeKind.DOUBLE_PRECISION,
    "double": TypeKind.DOUBLE_PRECISION,
    "float8": TypeKind.DOUBLE_PRECISION,
    "smallserial": TypeKind.SMALL_SERIAL,
    "serial2": TypeKind.SMALL_SERIAL,
    "serial": TypeKind.SERIAL,
    "serial4": TypeKind.SERIAL,
    "bigserial": TypeKind.BIG_SERIAL,
    "serial8": TypeKind.BIG_SERIAL,
    "money": TypeKind.MONEY,
    "character varying": TypeKind.VARCHAR,
    "varchar": TypeKind.VARCHAR,
    "character": TypeKind.CHAR,
    "char": TypeKind.CHAR,
    "text": TypeKind.TEXT,
    "bytea": TypeKind.BYTEA,
    "timestamp": TypeKind.TIMESTAMP,
    "timestamp without time zone": TypeKind.TIMESTAMP,
    "timestamp with time zone": TypeKind.TIMESTAMP_WITH_TIME_ZONE,
    "date": TypeKind.DATE,
    "time": TypeKind.TIME,
    "time without time zone": TypeKind.TIME,
    "time with time zone": TypeKind.TIME_WITH_TIME_ZONE,
    "interval": TypeKind.INTERVAL,
    "boolean": TypeKind.BOOLEAN,
    "bool": TypeKind.BOOLEAN,
    "point": TypeKind.POINT,
    "line": TypeKind.LINE,
    "lseg": TypeKind.LSEG,
    "box": TypeKind.BOX,
    "path": TypeKind.PATH,
    "polygon": TypeKind.POLYGON,
    "circle": TypeKind.CIRCLE,
    "cidr": TypeKind.CIDR,
    "inet": TypeKind.INET,
    "macaddr": TypeKind.MAC_ADDR,
    "macaddr8": TypeKind.MAC_ADDR8,
    "bit": TypeKind.BIT,
    "bit varying": TypeKind.VAR_BIT,
    "varbit": TypeKind.VAR_BIT,
    "tsvector": TypeKind.TS_VECTOR,
    "tsquery": TypeKind.TS_QUERY,
    "uuid": TypeKind.UUID,
    "xml": TypeKind.XML,
    "json": TypeKind.JSON,
    "jsonb": TypeKind.JSON_BINARY,
    "int4range": TypeKind.INT4_RANGE,
    "int8range": TypeKind.INT8_RANGE,
    "numrange": TypeKind.NUM_RANGE,
    "tsrange": TypeKind.TS_RANGE,
    "tstzrange": TypeKind.TS_TZ_RANGE,
    "daterange": TypeKind.DATE_RANGE,
    "pg_lsn": TypeKind.PG_LSN,
    "array": TypeKind.ARRAY,
}

_TIME_KINDS = frozenset(
    {
        TypeKind.TIMESTAMP,
        TypeKind.TIMESTAMP_WITH_TIME_ZONE,
        TypeKind.TIME,
        TypeKind.TIME_WITH_TIME_ZONE,
    }
)


@dataclass
class Type:
    """A column type.

    ``attr`` carries the kind's attributes: an attribute object for kinds that
    have one (filled with defaults when omitted), the type name for
    ``TypeKind.UNKNOWN``, and nothing for every other kind.
    """

    kind: TypeKind
    attr: Union[
        ArbitraryPrecisionNumericAttr,
        StringAttr,
        TimeAttr,
        IntervalAttr,
        BitAttr,
        EnumDef,
        ArrayDef,
        str,
        None,
    ] = None

    def __post_init__(self) -> None:
        if self.kind is TypeKind.UNKNOWN:
            if not isinstance(self.attr, str):
                raise TypeError("an unknown type needs its name as a string")
            return
        attr_class = _ATTR_CLASSES.get(self.kind)
        if attr_class is None:
            if self.attr is not None:
                raise ValueError(f"{self.kind.name} takes no attributes")
            return
        if self.attr is None:
            self.attr = attr_class()
        elif not isinstance(self.attr, attr_class):
            raise TypeError(
                f"{self.kind.name} needs a {attr_class.__name__}, "
                f"not {type(self.attr).__name__}"
            )

    @classmethod
    def from_str(cls, column_type: str, udt_name: Optional[str], is_enum: bool) -> "Type":
        """Map a type name as reported by the catalogue to a ``Type``."""
        key = column_type.lower()
        if key == "user-defined":
            if is_enum:
                return cls(TypeKind.ENUM)
            if udt_name is not None:
                return cls(TypeKind.UNKNOWN, udt_name)
        kind = _NAMES.get(key)
        if kind is None:
            return cls(TypeKind.UNKNOWN, column_type)
        return cls(kind)

    def has_numeric_attr(self) -> bool:
        return self.kind in (TypeKind.NUMERIC, TypeKind.DECIMAL)

    def has_string_attr(self) -> bool:
        return self.kind in (TypeKind.VARCHAR, TypeKind.CHAR)

    def has_time_attr(self) -> bool:
        return self.kind in _TIME_KINDS

    def has_interval_attr(self) -> bool:
        return self.kind is TypeKind.INTERVAL

    def has_bit_attr(self) -> bool:
        return self.kind in (TypeKind.BIT, TypeKind.VAR_BIT)

    def has_enum_attr(self) -> bool:
        return self.kind is TypeKind.ENUM

    def has_array_attr(self) -> bool:
        return self.kind is TypeKind.ARRAY


ColumnType = Type


@dataclass
class ColumnExpression:
    """A default or generation expression of a column."""

    value: str

    @classmethod
    def from_option_string(cls, maybe_string: Optional[str]) -> Optional["ColumnExpression"]:
        return None if maybe_string is None else cls(maybe_string)


@dataclass
class NotNull:
    """The constraint that a value must not be null."""

    @classmethod
    def from_bool(cls, boolean: bool) -> Optional["NotNull"]:
        return cls() if boolean else None


@dataclass
class ColumnInfo:
    """A column: its name, type, expressions and nullability."""

    name: str
    col_type: Type
    default: Optional[ColumnExpression] = None
    generated: Optional[ColumnExpression] = None
    not_null: Optional[NotNull] = None
    is_identity: bool = False


@dataclass
class Check:
    """A constraint whose Boolean expression every row must satisfy."""

    name: str
    expr: str
    no_inherit: bool = False


@dataclass
class Unique:
    """Each set of values for these columns must be unique across the table."""

    name: str
    columns: list[str] = field(default_factory=list)


@dataclass
class PrimaryKey:
    """The columns that together identify each row of the table."""

    name: str
    columns: list[str] = field(default_factory=list)


class ForeignKeyAction(Enum):
    """What happens to referencing rows when the referenced row changes."""

    CASCADE = "CASCADE"
    SET_NULL = "SET NULL"
    SET_DEFAULT = "SET DEFAULT"
    RESTRICT = "RESTRICT"
    NO_ACTION = "NO ACTION"

    @classmethod
    def from_name(cls, name: str) -> Optional["ForeignKeyAction"]:
        """Return the action spelled ``name`` in SQL, or None if there is none."""
        try:
            return cls(name)
        except ValueError:
            return None


@dataclass
class References:
    """A foreign key: columns referring to columns of another table."""

    name: str
    columns: list[str]
    table: str
    foreign_columns: list[str]
    on_update: Optional[ForeignKeyAction] = None
    on_delete: Optional[ForeignKeyAction] = None


@dataclass
class Exclusion:
    """An exclusion constraint over columns compared with an operator."""

    name: str
    using: str
    columns: list[str]
    operation: str


Constraint = Union[Check, NotNull, Unique, PrimaryKey, References, Exclusion]


@dataclass
class TableInfo:
    """Information about a table itself, apart from its columns and constraints."""

    name: str
    of_type: Optional[Type] = None


@dataclass
class TableDef:
    """A table with its columns and constraints."""

    info: TableInfo
    columns: list[ColumnInfo] = field(default_factory=list)
    check_constraints: list[Check] = field(default_factory=list)
    not_null_constraints: list[NotNull] = field(default_factory=list)
    unique_constraints: list[Unique] = field(default_factory=list)
    primary_key_constraints: list[PrimaryKey] = field(default_factory=list)
    reference_constraints: list[References] = field(default_factory=list)
    exclusion_constraints: list[Exclusion] = field(default_factory=list)


@dataclass
class Schema:
    """A named schema and its tables."""

    schema: str
    tables: list[TableDef] = field(default_factory=list)