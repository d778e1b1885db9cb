"""Parameter models shared by the introspector and the binder."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from pydantic import BaseModel, Field

from .types import CanonicalParamType

ParamValue = int | float | Decimal | str | bool | None


@dataclass(slots=True)
class ParameterSpec:
    """One discovered stored procedure parameter.

    ``value`` starts as the resolved default and is overwritten at most once
    by the binder; ``param_type`` is never changed after introspection.
    """

    name: str
    param_type: CanonicalParamType
    value: ParamValue
    catalog_type: str | None = None


# Ordered by catalog discovery; binding is by name only.
ParameterSet = dict[str, ParameterSpec]


class QueryParameter(BaseModel):
    """Caller-declared parameter for an ad-hoc query."""

    name: str = Field(description="Bind name as used in the SQL text, e.g. ':user_id' -> 'user_id'")
    type: str = Field(description="SQL type name, e.g. 'int', 'nvarchar', 'bit'")
    value: ParamValue = Field(default=None, description="Value to bind")
