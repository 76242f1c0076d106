"""Turn rows returned by the catalogue queries into schema definitions."""

from __future__ import annotations

from itertools import groupby
from typing import Iterable, Iterator, Mapping, Optional, Sequence, TypeVar

from .constraints_query import TableConstraintsQueryResult
from .definitions import (
    ArbitraryPrecisionNumericAttr,
    ArrayDef,
    BitAttr,
    Check,
    ColumnExpression,
    ColumnInfo,
    Constraint,
    EnumDef,
    ForeignKeyAction,
    IntervalAttr,
    NotNull,
    PrimaryKey,
    References,
    StringAttr,
    TableInfo,
    TimeAttr,
    Type,
    TypeKind,
    Unique,
)
from .query import ColumnQueryResult, TableQueryResult, UniqueIndexQueryResult

EnumVariantMap = Mapping[str, Sequence[str]]

_U16_MAX = 0xFFFF

_T = TypeVar("_T")


def yes_or_no_to_bool(string: str) -> bool:
    """True for the catalogue's ``YES``, in any letter case."""
    return string.upper() == "YES"


def _to_u16(value: Optional[int]) -> Optional[int]:
    if value is None or not 0 <= value <= _U16_MAX:
        return None
    return value


def _require(value: Optional[_T], what: str) -> _T:
    if value is None:
        raise ValueError(f"constraint row has no {what}")
    return value


def parse_column_query_result(result: ColumnQueryResult, enums: EnumVariantMap) -> ColumnInfo:
    """Build a column definition from one row of the column query."""
    return ColumnInfo(
        name=result.column_name,
        col_type=parse_column_type(result, enums),
        default=ColumnExpression.from_option_string(result.column_default),
        generated=ColumnExpression.from_option_string(result.column_generated),
        not_null=NotNull.from_bool(not yes_or_no_to_bool(result.is_nullable)),
        is_identity=yes_or_no_to_bool(result.is_identity),
    )


def parse_column_type(result: ColumnQueryResult, enums: EnumVariantMap) -> Type:
    """Work out a column's type with all the attributes the row reports."""
    is_enum = result.udt_name is not None and result.udt_name in enums
    ctype = Type.from_str(result.column_type, result.udt_name, is_enum)

    if ctype.has_numeric_attr():
        ctype = parse_numeric_attributes(
            result.numeric_precision,
            result.numeric_precision_radix,
            result.numeric_scale,
            ctype,
        )
    if ctype.has_string_attr():
        ctype = parse_string_attributes(result.character_maximum_length, ctype)
    if ctype.has_time_attr():
        ctype = parse_time_attributes(result.datetime_precision, ctype)
    if ctype.has_interval_attr():
        ctype = parse_interval_attributes(
            result.interval_type, result.interval_precision, ctype
        )
    if ctype.has_bit_attr():
        ctype = parse_bit_attributes(result.character_maximum_length, ctype)
    if ctype.has_enum_attr():
        ctype = parse_enum_attributes(result.udt_name, ctype, enums)
    if ctype.has_array_attr():
        ctype = parse_array_attributes(result.udt_name_regtype, ctype, enums)
    return ctype


def parse_numeric_attributes(
    num_precision: Optional[int],
    num_precision_radix: Optional[int],
    num_scale: Optional[int],
    ctype: Type,
) -> Type:
    """Set precision and scale on a ``numeric`` or ``decimal`` type."""
    if not ctype.has_numeric_attr():
        raise ValueError(
            "parse_numeric_attributes received a type other than Decimal or Numeric"
        )
    return Type(
        ctype.kind,
        ArbitraryPrecisionNumericAttr(
            precision=_to_u16(num_precision), scale=_to_u16(num_scale)
        ),
    )


def parse_string_attributes(character_maximum_length: Optional[int], ctype: Type) -> Type:
    """Set the length of a ``varchar`` or ``char`` type."""
    if not ctype.has_string_attr():
        raise ValueError("parse_string_attributes received a type that does not have StringAttr")
    return Type(ctype.kind, StringAttr(length=_to_u16(character_maximum_length)))


def parse_time_attributes(datetime_precision: Optional[int], ctype: Type) -> Type:
    """Set the fractional-seconds precision of a time or timestamp type."""
    if not ctype.has_time_attr():
        raise ValueError("parse_time_attributes received a type that does not have TimeAttr")
    return Type(ctype.kind, TimeAttr(precision=_to_u16(datetime_precision)))


def parse_interval_attributes(
    interval_type: Optional[str], interval_precision: Optional[int], ctype: Type
) -> Type:
    """Set the field restriction and precision of an ``interval`` type."""
    if not ctype.has_interval_attr():
        raise ValueError(
            "parse_interval_attributes received a type that does not have IntervalAttr"
        )
    return Type(
        ctype.kind,
        IntervalAttr(field=interval_type, precision=_to_u16(interval_precision)),
    )


def parse_bit_attributes(character_maximum_length: Optional[int], ctype: Type) -> Type:
    """Set the length of a ``bit`` or ``bit varying`` type."""
    if not ctype.has_bit_attr():
        raise ValueError("parse_bit_attributes received a type that does not have BitAttr")
    return Type(ctype.kind, BitAttr(length=_to_u16(character_maximum_length)))


def parse_enum_attributes(
    udt_name: Optional[str], ctype: Type, enums: EnumVariantMap
) -> Type:
    """Name an enum type and fill in its labels from ``enums``."""
    if not ctype.has_enum_attr():
        raise ValueError("parse_enum_attributes received a type that does not have EnumDef")
    if udt_name is None:
        raise ValueError("parse_enum_attributes received an empty udt_name")
    variants = enums.get(udt_name)
    values = list(variants) if variants is not None else list(ctype.attr.values)
    return Type(TypeKind.ENUM, EnumDef(values=values, typename=udt_name))


def parse_array_attributes(
    udt_name_regtype: Optional[str], ctype: Type, enums: EnumVariantMap
) -> Type:
    """Set the element type of an array from its ``regtype`` name."""
    if not ctype.has_array_attr():
        raise ValueError("parse_array_attributes received a type that does not have ArrayDef")
    if udt_name_regtype is None:
        raise ValueError("parse_array_attributes received an empty udt_name_regtype")
    typename = udt_name_regtype.replace('"', "", 2).replace("[]", "", 1)
    variants = enums.get(typename)
    if variants is not None:
        element = Type(TypeKind.ENUM, EnumDef(values=list(variants), typename=typename))
    else:
        element = Type.from_str(typename, typename, False)
    return Type(TypeKind.ARRAY, ArrayDef(col_type=element))


def parse_table_query_result(table_query: TableQueryResult) -> TableInfo:
    """Build table information from one row of the table query."""
    type_name = table_query.user_defined_type_name
    of_type = None if type_name is None else Type.from_str(type_name, type_name, False)
    return TableInfo(name=table_query.table_name, of_type=of_type)


def parse_unique_index_query_results(
    results: Iterable[UniqueIndexQueryResult],
) -> Iterator[Unique]:
    """Group consecutive rows of the same index into unique constraints."""
    for index_name, rows in groupby(results, key=lambda row: row.index_name):
        yield Unique(name=index_name, columns=[row.column_name for row in rows])


def parse_table_constraint_query_results(
    results: Iterable[TableConstraintsQueryResult],
) -> Iterator[Constraint]:
    """Group constraint rows into constraints.

    Rows are expected ordered by constraint name, then ordinal position. A row
    of a constraint type that is not understood ends the sequence.
    """
    rows = iter(results)
    pending: Optional[TableConstraintsQueryResult] = None

    def following(name: str) -> Iterator[TableConstraintsQueryResult]:
        """Rows after the first that belong to constraint ``name``."""
        nonlocal pending
        for row in rows:
            if row.constraint_name != name:
                pending = row
                return
            yield row

    while True:
        if pending is not None:
            result, pending = pending, None
        else:
            result = next(rows, None)
            if result is None:
                return

        name = result.constraint_name
        kind = result.constraint_type

        if kind == "CHECK":
            if result.check_clause is not None:
                yield Check(name=name, expr=result.check_clause, no_inherit=False)
        elif kind == "FOREIGN KEY":
            columns = [_require(result.column_name, "column name")]
            table = _require(result.referential_key_table_name, "referenced table")
            foreign_columns = [
                _require(result.referential_key_column_name, "referenced column")
            ]
            on_update = ForeignKeyAction.from_name(result.update_rule or "")
            on_delete = ForeignKeyAction.from_name(result.delete_rule or "")
            for row in following(name):
                if row.column_name is not None and row.referential_key_column_name is not None:
                    columns.append(row.column_name)
                    foreign_columns.append(row.referential_key_column_name)
            yield References(
                name=name,
                columns=columns,
                table=table,
                foreign_columns=foreign_columns,
                on_update=on_update,
                on_delete=on_delete,
            )
        elif kind in ("PRIMARY KEY", "UNIQUE"):
            columns = [_require(result.column_name, "column name")]
            columns.extend(
                _require(row.column_name, "column name") for row in following(name)
            )
            if kind == "PRIMARY KEY":
                yield PrimaryKey(name=name, columns=columns)
            else:
                yield Unique(name=name, columns=columns)
        else:
            return