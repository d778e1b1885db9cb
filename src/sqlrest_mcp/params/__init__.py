"""Parameter introspection and binding engine.

Maps catalog types to canonical parameter types, resolves defaults, discovers
stored procedure signatures and binds caller values onto them.
"""

from __future__ import annotations

from .binder import (
    bind_procedure_arguments,
    bind_query_parameters,
    executable_parameters,
    translate_placeholders,
)
from .defaults import resolve_default
from .introspection import DEFAULT_SCHEMA, ProcedureIntrospector, qualified_name
from .models import ParameterSet, ParameterSpec, ParamValue, QueryParameter
from .types import CanonicalParamType, map_type, sqlalchemy_type_for

__all__ = [
    "DEFAULT_SCHEMA",
    "CanonicalParamType",
    "ParamValue",
    "ParameterSet",
    "ParameterSpec",
    "ProcedureIntrospector",
    "QueryParameter",
    "bind_procedure_arguments",
    "bind_query_parameters",
    "executable_parameters",
    "map_type",
    "qualified_name",
    "resolve_default",
    "sqlalchemy_type_for",
    "translate_placeholders",
]
