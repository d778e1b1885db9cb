"""Binding caller values onto parameters.

Two paths share the same fail-fast rule: the first invalid parameter aborts
the whole bind and nothing is applied.

- Stored procedures: caller arguments are matched by name against the
  introspected ParameterSet; values override the defaults, types never change.
- Ad-hoc queries: the caller declares ``{name, type, value}`` triples and each
  type is validated through the type mapper. The SQL may reference them as
  ``:name`` or as ``@name``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
import re

from fastmcp.utilities.logging import get_logger
from pydantic import ValidationError

from sqlrest_mcp.exceptions import UnknownParameterError

from .introspection import qualified_name
from .models import ParameterSet, ParameterSpec, ParamValue, QueryParameter
from .types import CanonicalParamType, map_type

_logger = get_logger(__name__)


def bind_procedure_arguments(
    param_set: ParameterSet,
    supplied: Mapping[str, ParamValue] | None,
    schema: str | None,
    procedure_name: str,
) -> ParameterSet:
    """Apply *supplied* argument values onto *param_set*.

    Parameters with an unmapped catalog type can only be left out: the
    procedure's own default applies to them (see ``executable_parameters``).

    Returns:
        The same ParameterSet with overridden values

    Raises:
        UnknownParameterError: If an argument name is not declared by the
            procedure, or a supplied parameter has an unmapped catalog type
    """
    target = qualified_name(procedure_name, schema)
    supplied = supplied or {}

    # Validate everything first so a failure leaves the set untouched.
    for name in supplied:
        spec = param_set.get(name)
        if spec is None:
            msg = f"The parameter '{name}' is not declared by the stored procedure {target}"
            raise UnknownParameterError(msg)
        if spec.param_type is CanonicalParamType.UNKNOWN:
            msg = (
                f"Invalid type '{spec.catalog_type}' for parameter '{spec.name}' "
                f"of the stored procedure {target}"
            )
            raise UnknownParameterError(msg)

    for name, value in supplied.items():
        param_set[name].value = value

    _logger.debug("Bound %d argument(s) onto %s", len(supplied), target)
    return param_set


def executable_parameters(param_set: ParameterSet) -> list[ParameterSpec]:
    """Return the specs to execute with; unmapped types fall back to the procedure default."""
    return [
        spec for spec in param_set.values() if spec.param_type is not CanonicalParamType.UNKNOWN
    ]


def bind_query_parameters(
    parameters: Iterable[QueryParameter | Mapping[str, ParamValue]],
) -> list[ParameterSpec]:
    """Validate caller-declared query parameters and return their bound specs.

    Raises:
        UnknownParameterError: On the first parameter whose type does not map
    """
    bound: list[ParameterSpec] = []
    for raw in parameters:
        try:
            param = raw if isinstance(raw, QueryParameter) else QueryParameter.model_validate(raw)
        except ValidationError as exc:
            msg = f"Invalid query parameter declaration: {raw!r}"
            raise UnknownParameterError(msg, detail=str(exc)) from exc
        param_type = map_type(param.type)
        if param_type is CanonicalParamType.UNKNOWN:
            msg = f"Invalid type '{param.type}' for parameter '{param.name}'"
            raise UnknownParameterError(msg)
        bound.append(
            ParameterSpec(
                name=param.name.removeprefix("@").removeprefix(":"),
                param_type=param_type,
                value=param.value,
                catalog_type=param.type,
            )
        )
    return bound


def translate_placeholders(sql: str, parameters: Sequence[ParameterSpec]) -> str:
    """Rewrite T-SQL style ``@name`` references to declared parameters as ``:name``.

    Only names in *parameters* are rewritten; local variables and ``@@``
    system functions are left as they are.
    """
    for spec in parameters:
        pattern = re.compile(rf"(?<![\w@])@{re.escape(spec.name)}(?!\w)", re.IGNORECASE)
        sql = pattern.sub(lambda _match, name=spec.name: f":{name}", sql)
    return sql
