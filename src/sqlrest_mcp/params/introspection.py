"""Stored procedure parameter discovery.

This module provides the ProcedureIntrospector class that reads a stored
procedure's parameter list from the catalog and turns it into a ParameterSet
with canonical types and usable default values.

The catalog is queried on every call. Nothing is cached, so a changed
procedure signature is picked up by the very next execution.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Final

from fastmcp.utilities.logging import get_logger

from sqlrest_mcp.exceptions import MetadataLookupError

from .defaults import resolve_default
from .models import ParameterSet, ParameterSpec
from .types import map_type

_logger = get_logger(__name__)

DEFAULT_SCHEMA: Final[str] = "dbo"
PARAMETER_SIGIL: Final[str] = "@"
RETURN_VALUE_COLUMN: Final[str] = "@RETURN_VALUE"


def strip_sigil(column_name: str) -> str:
    """Remove one leading parameter sigil from a catalog column name."""
    return column_name.removeprefix(PARAMETER_SIGIL)


def qualified_name(procedure_name: str, schema: str | None = None) -> str:
    """Return ``schema.procedure_name``, falling back to the default schema."""
    return f"{schema or DEFAULT_SCHEMA}.{procedure_name}"


def build_parameter_set(rows: list[Mapping[str, Any]]) -> ParameterSet:
    """Build a ParameterSet from catalog rows, skipping the return-value row."""
    params: ParameterSet = {}
    for row in rows:
        column_name = str(row.get("COLUMN_NAME") or "")
        if not column_name or column_name.upper() == RETURN_VALUE_COLUMN:
            continue
        name = strip_sigil(column_name)
        catalog_type = row.get("TYPE_NAME")
        spec = ParameterSpec(
            name=name,
            param_type=map_type(catalog_type),
            value=resolve_default(name, catalog_type),
            catalog_type=catalog_type,
        )
        _logger.debug(
            "Discovered parameter %s (catalog=%s, type=%s, default=%r)",
            name,
            catalog_type,
            spec.param_type.value,
            spec.value,
        )
        params[name] = spec
    return params


class ProcedureIntrospector:
    """Discover stored procedure parameters through a database client.

    Attributes:
        client: Any object exposing ``describe_procedure(name, schema)``
            that returns catalog rows with ``COLUMN_NAME`` and ``TYPE_NAME``.
    """

    def __init__(self, client: Any) -> None:
        self.client = client

    def introspect(self, procedure_name: str, schema: str = DEFAULT_SCHEMA) -> ParameterSet:
        """Return the ParameterSet for ``schema.procedure_name``.

        Raises:
            MetadataLookupError: If the catalog call fails or returns no rows
        """
        target = qualified_name(procedure_name, schema)
        _logger.info("Introspecting stored procedure %s", target)

        rows = self.client.describe_procedure(procedure_name, schema or DEFAULT_SCHEMA)
        if not rows:
            msg = f"The stored procedure {target} does not exist"
            _logger.warning(msg)
            raise MetadataLookupError(msg)

        params = build_parameter_set(rows)
        _logger.info("Stored procedure %s declares %d parameter(s)", target, len(params))
        return params
