from __future__ import annotations

import pytest
import sqlalchemy as sa

from sqlrest_mcp.params.types import CanonicalParamType, map_type, sqlalchemy_type_for


@pytest.mark.parametrize(
    "catalog_name,expected",
    [
        ("tinyint", CanonicalParamType.TINYINT),
        ("SmallInt", CanonicalParamType.SMALLINT),
        ("INT", CanonicalParamType.INT),
        ("bigint", CanonicalParamType.BIGINT),
        ("Decimal", CanonicalParamType.DECIMAL),
        ("numeric", CanonicalParamType.NUMERIC),
        ("float", CanonicalParamType.FLOAT),
        ("MONEY", CanonicalParamType.MONEY),
        ("smallmoney", CanonicalParamType.SMALLMONEY),
        ("bit", CanonicalParamType.BIT),
        ("datetime", CanonicalParamType.TEXT),
        ("Date", CanonicalParamType.TEXT),
        ("time", CanonicalParamType.TEXT),
        ("VarChar", CanonicalParamType.TEXT),
        ("NVarChar", CanonicalParamType.TEXT),
        ("ntext", CanonicalParamType.TEXT),
        ("blob", CanonicalParamType.TEXT),
    ],
)
def test_map_type_known(catalog_name: str, expected: CanonicalParamType) -> None:
    assert map_type(catalog_name) is expected


@pytest.mark.parametrize("catalog_name", ["BadType", "uniqueidentifier", "xml", "", None, "int4"])
def test_map_type_unknown_is_total(catalog_name: str | None) -> None:
    assert map_type(catalog_name) is CanonicalParamType.UNKNOWN


def test_every_known_type_has_bind_type() -> None:
    for member in CanonicalParamType:
        bind_type = sqlalchemy_type_for(member)
        if member is CanonicalParamType.UNKNOWN:
            assert bind_type is None
        else:
            assert isinstance(bind_type, sa.types.TypeEngine)


def test_text_binds_as_unicode() -> None:
    assert isinstance(sqlalchemy_type_for(CanonicalParamType.TEXT), sa.Unicode)
    assert isinstance(sqlalchemy_type_for(CanonicalParamType.INT), sa.Integer)
