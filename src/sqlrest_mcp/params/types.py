"""Catalog type name to canonical parameter type mapping.

The catalog reports SQL Server type names (``int``, ``nvarchar`` ...). The
binding layer works with a small closed enumeration instead, and each member
knows the SQLAlchemy type used when the value is bound to a statement.
Every non-numeric, non-boolean catalog type collapses to ``TEXT``: those values
are always bound as unicode strings and the engine coerces them.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Final

import sqlalchemy as sa
from sqlalchemy.dialects import mssql
from sqlalchemy.sql.type_api import TypeEngine


class CanonicalParamType(Enum):
    """Closed set of parameter types understood by the binder."""

    TINYINT = "TinyInt"
    SMALLINT = "SmallInt"
    INT = "Int"
    BIGINT = "BigInt"
    DECIMAL = "Decimal"
    NUMERIC = "Numeric"
    FLOAT = "Float"
    MONEY = "Money"
    SMALLMONEY = "SmallMoney"
    TEXT = "Text"
    BIT = "Bit"
    UNKNOWN = "Unknown"


TEXT_CATALOG_TYPES: Final[frozenset[str]] = frozenset(
    {"datetime", "date", "time", "varchar", "char", "text", "nchar", "nvarchar", "ntext", "blob"}
)

CATALOG_TYPE_MAP: Final[dict[str, CanonicalParamType]] = {
    "tinyint": CanonicalParamType.TINYINT,
    "smallint": CanonicalParamType.SMALLINT,
    "int": CanonicalParamType.INT,
    "bigint": CanonicalParamType.BIGINT,
    "decimal": CanonicalParamType.DECIMAL,
    "numeric": CanonicalParamType.NUMERIC,
    "float": CanonicalParamType.FLOAT,
    "money": CanonicalParamType.MONEY,
    "smallmoney": CanonicalParamType.SMALLMONEY,
    "bit": CanonicalParamType.BIT,
    **dict.fromkeys(TEXT_CATALOG_TYPES, CanonicalParamType.TEXT),
}

_BIND_TYPES: Final[dict[CanonicalParamType, TypeEngine[Any] | type[TypeEngine[Any]]]] = {
    CanonicalParamType.TINYINT: mssql.TINYINT,
    CanonicalParamType.SMALLINT: sa.SmallInteger,
    CanonicalParamType.INT: sa.Integer,
    CanonicalParamType.BIGINT: sa.BigInteger,
    CanonicalParamType.DECIMAL: sa.Numeric(asdecimal=True),
    CanonicalParamType.NUMERIC: sa.Numeric(asdecimal=True),
    CanonicalParamType.FLOAT: sa.Float,
    CanonicalParamType.MONEY: mssql.MONEY,
    CanonicalParamType.SMALLMONEY: mssql.SMALLMONEY,
    CanonicalParamType.TEXT: sa.Unicode,
    CanonicalParamType.BIT: mssql.BIT,
}


def map_type(catalog_type_name: str | None) -> CanonicalParamType:
    """Return the canonical type for a catalog type name (case-insensitive).

    Unrecognized or empty names yield ``CanonicalParamType.UNKNOWN``.
    """
    if not catalog_type_name:
        return CanonicalParamType.UNKNOWN
    key = str(catalog_type_name).strip().lower()
    return CATALOG_TYPE_MAP.get(key, CanonicalParamType.UNKNOWN)


def sqlalchemy_type_for(param_type: CanonicalParamType) -> TypeEngine[Any] | None:
    """Return a SQLAlchemy bind type instance for *param_type*, or None for UNKNOWN."""
    bind_type = _BIND_TYPES.get(param_type)
    if bind_type is None:
        return None
    if isinstance(bind_type, type):
        return bind_type()
    return bind_type
