"""Pydantic models for sqlrest-mcp I/O.

``ExecutionResult`` is the one shape returned by every public operation.
Its wire field names are fixed for compatibility with existing callers.
"""

from __future__ import annotations

import base64
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator
import sqlalchemy as sa

# -----------------------
# Results
# -----------------------


def _wire_value(value: Any) -> Any:
    # varbinary, image and rowversion columns arrive as bytes
    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode("ascii")
    return value


class ExecutionResult(BaseModel):
    """Uniform envelope for query and stored procedure outcomes."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(description="True when the statement executed without error")
    error: bool = Field(description="Always the negation of success")
    data: list[list[dict[str, Any]]] | None = Field(
        default=None, description="Every recordset produced by the statement, or null on error"
    )
    page_size: int = Field(
        default=0,
        alias="pageSize",
        description="Page-size field of the first row of the first recordset, 0 when absent",
    )
    error_detail: str | None = Field(
        default=None, alias="errorDetail", description="Full failure trace when error is true"
    )
    message: str | None = Field(
        default=None, description="Human-readable failure summary when error is true"
    )

    @model_validator(mode="after")
    def _check_flags(self) -> ExecutionResult:
        if self.error == self.success:
            msg = "success and error must be logical negations"
            raise ValueError(msg)
        return self

    @field_serializer("data", when_used="json")
    def _encode_binary(
        self, data: list[list[dict[str, Any]]] | None
    ) -> list[list[dict[str, Any]]] | None:
        if data is None:
            return None
        return [
            [{key: _wire_value(value) for key, value in row.items()} for row in recordset]
            for recordset in data
        ]

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-safe wire dictionary (camelCase keys, absent optionals omitted)."""
        payload = self.model_dump(mode="json", by_alias=True)
        for key in ("errorDetail", "message"):
            if payload.get(key) is None:
                payload.pop(key, None)
        return payload


# -----------------------
# Configuration
# -----------------------


class ConnectionConfig(BaseModel):
    """Database connection settings.

    ``url`` wins over the individual parts when set, which allows any
    SQLAlchemy dialect (SQLite in tests, for example).
    """

    user: str | None = None
    password: str | None = None
    server: str = "localhost"
    database: str = ""
    port: int = Field(default=1433, ge=1, le=65535)
    encrypt: bool = False
    driver: str = "ODBC Driver 18 for SQL Server"
    url: str | None = Field(default=None, description="Full SQLAlchemy URL override")

    def to_url(self) -> sa.URL | str:
        """Return the SQLAlchemy URL for this configuration."""
        if self.url:
            return self.url
        return sa.URL.create(
            "mssql+pyodbc",
            username=self.user,
            password=self.password,
            host=self.server,
            port=self.port,
            database=self.database,
            query={
                "driver": self.driver,
                "Encrypt": "yes" if self.encrypt else "no",
                "TrustServerCertificate": "no" if self.encrypt else "yes",
            },
        )

    @property
    def display_name(self) -> str:
        """Database name for log and error messages."""
        if self.database:
            return self.database
        if self.url:
            return sa.make_url(self.url).database or self.url
        return self.server
