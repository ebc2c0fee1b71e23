from __future__ import annotations

from bsontranspile.backends import get_backend
from bsontranspile.imports import ImportRegistry, ImportTable
from bsontranspile.types import AGGREGATES_CODE, FILTERS_CODE, GEOJSON_CODE, MODEL_CODE, SORTS_CODE


def _table() -> ImportTable:
    return ImportTable(
        templates={
            1: lambda names: "import one",
            2: lambda names: "import two",
            3: lambda names: "import one",
            FILTERS_CODE: lambda names: ",".join(sorted(set(names))),
        }
    )


def test_empty_registry_renders_nothing() -> None:
    assert ImportRegistry().render(_table()) == ""
    assert ImportRegistry().used() == {}


def test_touch_renders_in_code_order_without_duplicates() -> None:
    imports = ImportRegistry()
    imports.touch(2)
    imports.touch(1)
    imports.touch(3)
    imports.touch(2)
    assert imports.render(_table()) == "import one\nimport two"


def test_codes_without_templates_are_skipped() -> None:
    imports = ImportRegistry()
    imports.touch(42)
    assert imports.render(_table()) == ""


def test_builder_names_are_collected() -> None:
    imports = ImportRegistry()
    imports.add(FILTERS_CODE, "lt")
    imports.add(FILTERS_CODE, "gt")
    imports.add(FILTERS_CODE, "lt")
    imports.touch(FILTERS_CODE)
    assert imports.used() == {FILTERS_CODE: ["lt", "gt", "lt"]}
    assert imports.render(_table()) == "gt,lt"


def test_copy_is_independent() -> None:
    imports = ImportRegistry()
    imports.add(FILTERS_CODE, "gt")
    clone = imports.copy()
    clone.add(FILTERS_CODE, "lt")
    clone.touch(1)
    assert imports.used() == {FILTERS_CODE: ["gt"]}
    assert clone.used() == {1: True, FILTERS_CODE: ["gt", "lt"]}


def test_java_builder_families_render_in_code_order() -> None:
    imports = ImportRegistry()
    imports.add(MODEL_CODE, "Facet")
    imports.add(GEOJSON_CODE, "Point")
    imports.add(SORTS_CODE, "ascending")
    imports.add(AGGREGATES_CODE, "sort")
    imports.add(AGGREGATES_CODE, "facet")
    assert imports.render(get_backend("java").imports) == "\n".join(
        [
            "import static com.mongodb.client.model.Aggregates.facet;",
            "import static com.mongodb.client.model.Aggregates.sort;",
            "import static com.mongodb.client.model.Sorts.ascending;",
            "import com.mongodb.client.model.geojson.Point;",
            "import com.mongodb.client.model.Facet;",
        ]
    )


def test_java_import_table() -> None:
    imports = ImportRegistry()
    imports.touch(101)
    imports.touch(10)
    imports.add(FILTERS_CODE, "gt")
    imports.add(FILTERS_CODE, "and")
    assert imports.render(get_backend("java").imports) == "\n".join(
        [
            "import org.bson.Document;",
            "import org.bson.types.ObjectId;",
            "import static com.mongodb.client.model.Filters.and;",
            "import static com.mongodb.client.model.Filters.gt;",
        ]
    )


def test_python_import_block() -> None:
    imports = ImportRegistry()
    imports.touch(103)
    imports.touch(101)
    imports.touch(200)
    imports.touch(8)
    imports.touch(10)
    assert imports.render(get_backend("python").imports) == (
        "import re\nimport datetime\nfrom bson import ObjectId, DBRef"
    )
