from __future__ import annotations

import pytest

from bsontranspile.backends import get_backend
from bsontranspile.errors import UndefinedSymbolError
from bsontranspile.types import (
    REGEX_FLAG,
    SYMBOL_NAMES,
    CallableKind,
    TypeRegistry,
    TypeTemplates,
    is_domain_type,
    is_numeric,
)


def test_symbols() -> None:
    registry = TypeRegistry.build({})
    assert set(registry.symbols) == set(SYMBOL_NAMES)
    assert "ObjectId" in SYMBOL_NAMES
    with pytest.raises(UndefinedSymbolError):
        registry.lookup("print")


def test_attributes_are_registered_as_types() -> None:
    registry = TypeRegistry.build({})
    from_datetime = registry.lookup("ObjectId").attr["from_datetime"]
    assert from_datetime is registry["ObjectId.from_datetime"]
    assert from_datetime.callable is CallableKind.FUNCTION
    assert from_datetime.result_id == "ObjectId"
    assert registry.lookup("re").attr["IGNORECASE"].value == "i"
    assert REGEX_FLAG in registry


def test_templates_are_attached_per_target() -> None:
    registry = TypeRegistry.build({"MinKey": TypeTemplates(template=lambda: "MK")})
    assert registry.lookup("MinKey").template() == "MK"
    assert registry.lookup("MaxKey").template is None
    assert get_backend("python").registry.lookup("Regex").template is None
    assert get_backend("java").registry.lookup("Regex").template() == "BsonRegularExpression"


def test_classification() -> None:
    registry = TypeRegistry.build({})
    assert is_numeric(registry["_hex"])
    assert not is_numeric(registry["_string"])
    assert is_domain_type(registry.lookup("Code"))
    assert is_domain_type(registry[REGEX_FLAG])
    assert not is_domain_type(registry["_undefined"])


def test_codes_are_stable() -> None:
    registry = TypeRegistry.build({})
    codes = {name: registry.lookup(name).code for name in ("Code", "ObjectId", "DBRef", "Int64", "Decimal128")}
    assert codes == {"Code": 100, "ObjectId": 101, "DBRef": 103, "Int64": 106, "Decimal128": 112}
    assert registry["Date"].code == registry.lookup("datetime").code == 200
