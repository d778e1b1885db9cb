"""Default values for discovered stored procedure parameters.

Procedures that follow the pagination convention accept ``start``, ``limit``
and ``page`` arguments; those get fixed defaults whatever their declared type.
Everything else falls back to a per-type default so the procedure can be
executed even when the caller omits the argument.
"""

from __future__ import annotations

from typing import Final

from .models import ParamValue
from .types import CanonicalParamType

NAME_DEFAULTS: Final[dict[str, ParamValue]] = {
    "start": 0,
    "limit": 100,
    "page": 1,
}

CATALOG_TYPE_DEFAULTS: Final[dict[str, ParamValue]] = {
    **dict.fromkeys(
        (
            "tinyint",
            "smallint",
            "int",
            "bigint",
            "decimal",
            "numeric",
            "money",
            "smallmoney",
            "float",
            "bit",
        ),
        0,
    ),
    "date": "1900-01-01",
    "datetime": "1900-01-01 00:00:00",
    "time": "00:00:00",
    **dict.fromkeys(("varchar", "char", "text", "nchar", "nvarchar", "ntext", "blob"), ""),
}

CANONICAL_TYPE_DEFAULTS: Final[dict[CanonicalParamType, ParamValue]] = {
    **{
        member: 0
        for member in CanonicalParamType
        if member not in {CanonicalParamType.TEXT, CanonicalParamType.UNKNOWN}
    },
    CanonicalParamType.TEXT: "",
}


def resolve_default(param_name: str, param_type: CanonicalParamType | str | None) -> ParamValue:
    """Return the default value for a parameter.

    Args:
        param_name: Logical parameter name (sigil already stripped)
        param_type: Canonical type, or the raw catalog type name. Catalog names
            keep the date/time distinctions that the canonical TEXT type loses.

    Returns:
        The name-based default when one exists, otherwise the type default,
        otherwise None.
    """
    key = param_name.lower().lstrip("@")
    if key in NAME_DEFAULTS:
        return NAME_DEFAULTS[key]

    if isinstance(param_type, CanonicalParamType):
        return CANONICAL_TYPE_DEFAULTS.get(param_type)
    if param_type is None:
        return None
    return CATALOG_TYPE_DEFAULTS.get(str(param_type).strip().lower())
