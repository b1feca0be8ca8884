from feedmap.core import (
    DynamicMetafieldMapping,
    FieldOption,
    MappingSpec,
    SingleMetafieldMapping,
    StaleKeyWarning,
    StandardField,
    extract,
    reconcile,
    revalidate,
    validate,
)


def _options(*keys):
    return [FieldOption.of(k) for k in keys]


def _spec():
    return MappingSpec(
        title_key="name",
        optional_field_keys={StandardField.VENDOR: "brand", StandardField.PRICE: "cost"},
        active_optional_fields=(StandardField.VENDOR, StandardField.PRICE),
        metafield_mappings=(
            SingleMetafieldMapping("color", "custom", "color", id="mf-1"),
            DynamicMetafieldMapping("props", "specs", "k", "v", id="mf-2"),
        ),
    )


def test_valid_spec_is_unchanged():
    result = reconcile(_spec(), _options("name", "brand", "cost", "color", "props"))
    assert result.spec == _spec()
    assert result.stale == ()


def test_stale_keys_are_cleared_not_removed():
    result = reconcile(_spec(), _options("title", "brand", "props"))

    spec = result.spec
    assert spec.title_key == "title"
    assert spec.field_key(StandardField.VENDOR) == "brand"
    assert spec.field_key(StandardField.PRICE) == ""
    assert spec.active_optional_fields == (StandardField.VENDOR, StandardField.PRICE)

    single, dynamic = spec.metafield_mappings
    assert single.source_key == "" and single.id == "mf-1"
    assert dynamic.source_key == "props"

    assert set(result.stale) == {
        StaleKeyWarning("title", "name"),
        StaleKeyWarning("price", "cost"),
        StaleKeyWarning("metafieldMappings[0]", "color"),
    }


def test_missing_title_selects_first_option():
    spec = validate(MappingSpec(), _options("sku", "title"))
    assert spec.title_key == "sku"


def test_no_options_resets_spec():
    result = reconcile(_spec(), [])
    assert result.spec == MappingSpec()
    assert StaleKeyWarning("title", "name") in result.stale


def test_validate_is_idempotent():
    opts = _options("title", "brand", "props")
    once = validate(_spec(), opts)
    assert validate(once, opts) == once


def test_structural_failure_clears_whole_spec():
    doc = {"products": [{"sku": "X1", "title": "Widget", "price": 9.99}]}
    result = revalidate(_spec(), extract(doc, "products[5]"))
    assert result.spec == MappingSpec()


def test_revalidate_against_new_document():
    doc = {"products": [{"name": "Widget", "brand": "Acme"}]}
    result = revalidate(_spec(), extract(doc, "products"))
    assert result.spec.title_key == "name"
    assert result.spec.field_key("FIELD_PRICE") == ""
