"""Shared fixtures: an in-memory DatabaseClient and a facade built on it."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from sqlrest_mcp.execute.facade import SqlRest
from sqlrest_mcp.models import ConnectionConfig

from tests.fakes import SAMPLE_CATALOG, FakeClient


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient(
        catalog=SAMPLE_CATALOG,
        recordsets=[[{"id": 1, "name": "Alice", "NUMREGISTROS": 42}]],
    )


@pytest.fixture
def make_facade() -> Callable[[FakeClient], SqlRest]:
    def _make(client: FakeClient) -> SqlRest:
        return SqlRest(
            ConnectionConfig(server="db.local", database="appdb"),
            client=client,
            page_size_field="NUMREGISTROS",
            default_schema="dbo",
        )

    return _make
