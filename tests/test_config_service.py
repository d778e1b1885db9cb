from __future__ import annotations

import asyncio

from _pytest.monkeypatch import MonkeyPatch
import pytest
import sqlalchemy as sa

from sqlrest_mcp.models import ConnectionConfig
from sqlrest_mcp.services.config_service import ConfigService
from sqlrest_mcp.services.facade_manager import SqlRestManager

_ENV_VARS = (
    "SQLREST_DATABASE_URL",
    "SQLREST_DB_USER",
    "SQLREST_DB_PASSWORD",
    "SQLREST_DB_SERVER",
    "SQLREST_DB_NAME",
    "SQLREST_DB_PORT",
    "SQLREST_DB_ENCRYPT",
    "SQLREST_DB_DRIVER",
    "SQLREST_PAGE_SIZE_FIELD",
    "SQLREST_DEFAULT_SCHEMA",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_connection_config_from_parts(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setenv("SQLREST_DB_SERVER", "sql.internal")
    monkeypatch.setenv("SQLREST_DB_NAME", "crm")
    monkeypatch.setenv("SQLREST_DB_USER", "app")
    monkeypatch.setenv("SQLREST_DB_PASSWORD", "s3cret")
    monkeypatch.setenv("SQLREST_DB_PORT", "not-a-port")
    monkeypatch.setenv("SQLREST_DB_ENCRYPT", "Yes")

    cfg = ConfigService.get_connection_config()

    assert cfg.server == "sql.internal"
    assert cfg.database == "crm"
    assert cfg.port == 1433
    assert cfg.encrypt is True
    url = cfg.to_url()
    assert isinstance(url, sa.URL)
    assert url.drivername == "mssql+pyodbc"
    assert url.host == "sql.internal"
    assert url.database == "crm"
    assert url.query["Encrypt"] == "yes"
    assert url.query["TrustServerCertificate"] == "no"


def test_connection_config_defaults() -> None:
    cfg = ConnectionConfig(server="db", database="app")

    assert cfg.port == 1433
    assert cfg.encrypt is False
    url = cfg.to_url()
    assert isinstance(url, sa.URL)
    assert url.port == 1433
    assert url.query["Encrypt"] == "no"


def test_url_override_wins(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setenv("SQLREST_DATABASE_URL", "sqlite+pysqlite://")

    cfg = ConfigService.get_connection_config()

    assert cfg.to_url() == "sqlite+pysqlite://"
    assert cfg.display_name == "sqlite+pysqlite://"


def test_missing_configuration_raises() -> None:
    with pytest.raises(ValueError, match="SQLREST_DATABASE_URL"):
        ConfigService.get_connection_config()


def test_page_size_field_and_schema(monkeypatch: MonkeyPatch) -> None:
    assert ConfigService.page_size_field() == "NUMREGISTROS"
    assert ConfigService.default_schema() == "dbo"

    monkeypatch.setenv("SQLREST_PAGE_SIZE_FIELD", "TotalRows")
    monkeypatch.setenv("SQLREST_DEFAULT_SCHEMA", "api")

    assert ConfigService.page_size_field() == "TotalRows"
    assert ConfigService.default_schema() == "api"


def test_manager_starts_facade_once(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setenv("SQLREST_DATABASE_URL", "sqlite+pysqlite://")
    SqlRestManager.reset_instance()
    mgr = SqlRestManager.get_instance()

    with pytest.raises(RuntimeError, match="not been started"):
        mgr.get_facade()

    facade = mgr.start()
    assert mgr.start() is facade
    assert mgr.get_facade() is facade

    result = asyncio.run(facade.execute_query("SELECT 2 AS two"))
    assert result.data == [[{"two": 2}]]

    asyncio.run(mgr.shutdown())
    with pytest.raises(RuntimeError):
        mgr.get_facade()
    SqlRestManager.reset_instance()
