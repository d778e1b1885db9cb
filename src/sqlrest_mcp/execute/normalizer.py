"""Turn execution outcomes into ExecutionResult envelopes."""

from __future__ import annotations

from typing import Any, Final

from sqlrest_mcp.exceptions import SqlRestError
from sqlrest_mcp.execute.client import Recordset, format_detail
from sqlrest_mcp.models import ExecutionResult

DEFAULT_PAGE_SIZE_FIELD: Final[str] = "NUMREGISTROS"


def extract_page_size(recordsets: list[Recordset] | None, field: str) -> int:
    """Return the page-size column of the first row of the first recordset, else 0."""
    if not recordsets or not recordsets[0]:
        return 0
    value: Any = recordsets[0][0].get(field)
    if value is None or isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def normalize(
    recordsets: list[Recordset] | None,
    error: BaseException | None = None,
    *,
    page_size_field: str = DEFAULT_PAGE_SIZE_FIELD,
) -> ExecutionResult:
    """Wrap rows or an error into a single ExecutionResult."""
    if error is not None:
        if isinstance(error, SqlRestError):
            detail = error.detail or format_detail(error)
            message = error.message
        else:
            detail = format_detail(error)
            message = str(error)
        return ExecutionResult(
            success=False,
            error=True,
            data=None,
            page_size=0,
            error_detail=detail,
            message=message,
        )

    data = recordsets or []
    return ExecutionResult(
        success=True,
        error=False,
        data=data,
        page_size=extract_page_size(data, page_size_field),
    )
