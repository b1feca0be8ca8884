import pytest

from feedmap.core import (
    Extraction,
    JsonShape,
    PathEmptyError,
    PathResolver,
    PathShapeError,
    PathSyntaxError,
    classify_shape,
    extract,
    resolve,
)


def _catalog():
    return {
        "catalog": {
            "products": [
                {"sku": "X1", "title": "Widget", "properties": [{"code": "COLOR", "value": "red"}]},
                {"sku": "X2", "title": "Gadget", "properties": []},
            ],
            "name": "Spring",
        }
    }


# ==========================================================
# RESOLVE
# ==========================================================


def test_top_level_key_round_trip():
    doc = {"a": 1, "b": [1, 2], "c": {"d": None}, "e": False}
    for key, value in doc.items():
        assert resolve(doc, key) == value


@pytest.mark.parametrize("value", [{"a": 1}, [1, 2], "text", 0, None])
def test_empty_path_is_identity(value):
    assert resolve(value, "") == value
    assert resolve(value, None) == value


def test_plain_key_broadcasts_over_array():
    assert resolve({"items": [{"a": 1}, {"a": 2}]}, "items.a") == [1, 2]


def test_broadcast_yields_none_for_non_objects():
    assert resolve({"items": [{"a": 1}, "x", {"b": 2}]}, "items.a") == [1, None, None]


def test_indexed_access():
    doc = {"items": [{"a": 1}, {"a": 2}]}
    assert resolve(doc, "items[1].a") == 2
    assert resolve({"items": []}, "items[0]") is None


def test_index_on_current_value():
    assert resolve({"items": [[10, 20], [30]]}, "items[0].[1]") == 20


def test_terminal_array_is_preserved():
    doc = _catalog()
    assert resolve(doc, "catalog.products") is doc["catalog"]["products"]


def test_missing_and_non_object_steps_resolve_to_none():
    doc = _catalog()
    assert resolve(doc, "catalog.missing.deeper") is None
    assert resolve(doc, "catalog.name.length") is None
    assert resolve(doc, "catalog.name[0]") is None


def test_malformed_segment_resolves_to_none():
    assert resolve(_catalog(), "catalog.products[x]") is None
    assert resolve(_catalog(), "catalog.products[0") is None


def test_parse_segment_rejects_malformed_input():
    assert PathResolver.parse_segment("items[3]") == ("items", 3)
    assert PathResolver.parse_segment("[0]") == ("", 0)
    with pytest.raises(PathSyntaxError):
        PathResolver.parse_segment("items[-1]")


# ==========================================================
# EXTRACT
# ==========================================================


def test_extract_array_of_objects():
    doc = {"products": [{"sku": "X1", "title": "Widget", "price": 9.99}]}
    result = extract(doc, "products")
    assert isinstance(result, Extraction)
    assert result.shape is JsonShape.ARRAY_OF_OBJECTS
    assert result.value == doc["products"]
    assert result.record_count == 1


def test_extract_single_object_has_no_record_count():
    result = extract(_catalog(), "catalog.products[0]")
    assert isinstance(result, Extraction)
    assert result.shape is JsonShape.OBJECT
    assert result.record_count is None
    assert result.records == [result.value]


def test_extract_index_out_of_range_is_empty_error():
    doc = {"products": [{"sku": "X1", "title": "Widget", "price": 9.99}]}
    result = extract(doc, "products[5]")
    assert isinstance(result, PathEmptyError)
    assert result.path == "products[5]"
    assert "no data" in result.message


def test_extract_empty_root_message():
    result = extract(None, "")
    assert isinstance(result, PathEmptyError)
    assert "root" in result.message


@pytest.mark.parametrize(
    "path, shape",
    [
        ("catalog.name", JsonShape.SCALAR),
        ("catalog.products.sku", JsonShape.ARRAY_OF_SCALARS),
        ("catalog.products[1].properties", JsonShape.ARRAY_OF_SCALARS),
    ],
)
def test_extract_unmappable_shapes(path, shape):
    result = extract(_catalog(), path)
    assert isinstance(result, PathShapeError)
    assert result.shape is shape


def test_classify_shape():
    assert classify_shape(None) is JsonShape.NULL
    assert classify_shape({}) is JsonShape.OBJECT
    assert classify_shape([{"a": 1}, 2]) is JsonShape.ARRAY_OF_OBJECTS
    assert classify_shape([1, {"a": 1}]) is JsonShape.ARRAY_OF_SCALARS
    assert classify_shape([]) is JsonShape.ARRAY_OF_SCALARS
    assert classify_shape(False) is JsonShape.SCALAR
