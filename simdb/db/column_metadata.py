##############################################################################
# Copyright (c) simdb developers. See the top-level LICENSE file for dates and
# other details. Released under the MIT license.
##############################################################################

"""
Descriptors for query result columns and table locations.

`ColumnMetaData` describes one column of a query result. It is built once per
query from the cursor's description and, when the query reads a known table, from
the table's column catalog (`PRAGMA table_info`). `DbSchemaInfo` pins down where a
table lives so exports and imports can be routed to it.
"""

from dataclasses import asdict, dataclass
from enum import Enum, IntEnum
from typing import Any, Dict, List, NamedTuple, Optional, Sequence


class Nullability(Enum):
    """Whether a column accepts NULL values."""

    UNKNOWN = "unknown"
    NO = "no"
    YES = "yes"


class ColumnAffinity(IntEnum):
    """
    The type affinity of a column, used as its numeric type code.

    The affinity is derived from the declared type with SQLite's rules so the
    same code applies to every engine built on SQLite storage.
    """

    INTEGER = 1
    REAL = 2
    TEXT = 3
    BLOB = 4
    NUMERIC = 5


# Declared types that are stored with NUMERIC affinity but read back as richer Python types
PYTHON_TYPE_NAMES: Dict[str, str] = {
    "BOOLEAN": "bool",
    "DATE": "datetime.date",
    "DATETIME": "datetime.datetime",
    "TIMESTAMP": "datetime.datetime",
}

AFFINITY_TYPE_NAMES: Dict[ColumnAffinity, str] = {
    ColumnAffinity.INTEGER: "int",
    ColumnAffinity.REAL: "float",
    ColumnAffinity.TEXT: "str",
    ColumnAffinity.BLOB: "bytes",
    ColumnAffinity.NUMERIC: "object",
}


def base_type_name(declared_type: Optional[str]) -> str:
    """
    Strip any size or precision arguments from a declared type.

    Args:
        declared_type: A declared column type such as `VARCHAR(510)`.

    Returns:
        The upper-case type name without arguments, e.g. `VARCHAR`.
    """
    if not declared_type:
        return ""
    return declared_type.split("(", 1)[0].strip().upper()


def affinity_for(declared_type: Optional[str]) -> ColumnAffinity:
    """
    Determine the affinity of a declared column type.

    Args:
        declared_type: The declared type of the column, possibly empty.

    Returns:
        The affinity the declared type maps to.
    """
    type_name = (declared_type or "").upper()
    if "INT" in type_name:
        return ColumnAffinity.INTEGER
    if any(token in type_name for token in ("CHAR", "CLOB", "TEXT")):
        return ColumnAffinity.TEXT
    if not type_name or "BLOB" in type_name:
        return ColumnAffinity.BLOB
    if any(token in type_name for token in ("REAL", "FLOA", "DOUB")):
        return ColumnAffinity.REAL
    return ColumnAffinity.NUMERIC


@dataclass(frozen=True)
class ColumnMetaData:  # pylint: disable=too-many-instance-attributes
    """
    Immutable description of one column of a query result.

    Attributes:
        catalog_name: The catalog the column belongs to (the database file name).
        class_name: The name of the Python type values of this column are read as.
        label: The display label of the column.
        name: The column name.
        type_name: The declared SQL type name.
        type_code: The numeric type code (see `ColumnAffinity`).
        table_name: The table the column belongs to, if known.
        schema_name: The schema the table belongs to, if known.
        auto_increment: True if the column is a rowid alias that is filled automatically.
        case_sensitive: True if comparisons on the column are case sensitive.
        currency: True if the column holds a currency value.
        definitely_writable: True if a write to the column is known to succeed.
        read_only: True if the column cannot be written (e.g. an expression).
        searchable: True if the column can be used in a WHERE clause.
        readable: True if the column can be read.
        signed: True if the column holds signed numbers.
        writable: True if a write to the column is possible.
        nullable: Whether the column accepts NULL.
    """

    catalog_name: Optional[str]
    class_name: str
    label: str
    name: str
    type_name: str
    type_code: int
    table_name: Optional[str] = None
    schema_name: Optional[str] = None
    auto_increment: bool = False
    case_sensitive: bool = False
    currency: bool = False
    definitely_writable: bool = False
    read_only: bool = False
    searchable: bool = True
    readable: bool = True
    signed: bool = False
    writable: bool = True
    nullable: Nullability = Nullability.UNKNOWN

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the descriptor to a dictionary.

        Returns:
            A dictionary of every field, with `nullable` given by its value.
        """
        result = asdict(self)
        result["nullable"] = self.nullable.value
        return result


class DbSchemaInfo(NamedTuple):
    """The location of a table: catalog, schema, and table name."""

    catalog_name: Optional[str]
    schema_name: Optional[str]
    table_name: str


def build_column_metadata(
    description: Optional[Sequence[Sequence[Any]]],
    table_info: Optional[Sequence[Sequence[Any]]] = None,
    table_name: Optional[str] = None,
    schema_name: Optional[str] = None,
    catalog_name: Optional[str] = None,
) -> List[ColumnMetaData]:
    """
    Build the column descriptors of a query result.

    Args:
        description: The `cursor.description` of the query. `None` yields no columns.
        table_info: Rows of `PRAGMA table_info` for the table the query reads, if any.
            Each row is `(cid, name, type, notnull, dflt_value, pk)`.
        table_name: The table the query reads, if any.
        schema_name: The schema holding that table.
        catalog_name: The catalog (database file) name.

    Returns:
        One `ColumnMetaData` per column, in result order.
    """
    if not description:
        return []

    catalog = {}
    primary_keys = 0
    for row in table_info or []:
        catalog[row[1].lower()] = row
        if row[5]:
            primary_keys += 1

    columns = []
    for entry in description:
        label = entry[0]
        info = catalog.get(label.lower())
        if info is None:
            # Expressions and columns of unknown origin
            columns.append(
                ColumnMetaData(
                    catalog_name=catalog_name,
                    class_name="object",
                    label=label,
                    name=label,
                    type_name="",
                    type_code=int(ColumnAffinity.BLOB),
                    read_only=True,
                    writable=False,
                    searchable=False,
                )
            )
            continue

        declared = info[2] or ""
        affinity = affinity_for(declared)
        base_name = base_type_name(declared)
        is_rowid = bool(info[5]) and primary_keys == 1 and base_name == "INTEGER"
        columns.append(
            ColumnMetaData(
                catalog_name=catalog_name,
                class_name=PYTHON_TYPE_NAMES.get(base_name, AFFINITY_TYPE_NAMES[affinity]),
                label=label,
                name=info[1],
                type_name=declared,
                type_code=int(affinity),
                table_name=table_name,
                schema_name=schema_name,
                auto_increment=is_rowid,
                case_sensitive=affinity == ColumnAffinity.TEXT,
                signed=affinity in (ColumnAffinity.INTEGER, ColumnAffinity.REAL, ColumnAffinity.NUMERIC),
                nullable=Nullability.NO if info[3] or is_rowid else Nullability.YES,
            )
        )
    return columns
