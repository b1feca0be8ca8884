import pytest

from feedmap.core import (
    DynamicMetafieldMapping,
    FieldOption,
    MappingError,
    MappingSpec,
    MappingSpecBuilder,
    ProductTransformer,
    SingleMetafieldMapping,
    StandardField,
    validate_mapping,
)


def _persisted(**overrides):
    base = {
        "mapping": {
            "title": "name",
            "vendor": "brand",
            "descriptionHtml": "desc",
            "seo": {"title": "seoTitle"},
            "inventoryItem": {"cost": "purchase"},
            "price": "price",
        },
        "metafieldMappings": [
            {
                "mappingType": "single",
                "sourceKey": "color",
                "metafieldNamespace": "custom",
                "metafieldKey": "color",
                "metafieldType": "single_line_text_field",
            },
            {
                "mappingType": "dynamic_from_array",
                "sourceKey": "props",
                "metafieldNamespace": "specs",
                "arrayKeySource": "k",
                "arrayValueSource": "v",
                "metafieldType": "single_line_text_field",
            },
        ],
    }
    base.update(overrides)
    return base


# ==========================================================
# PERSISTED SHAPE
# ==========================================================


def test_from_dict_activates_every_mapped_field():
    spec = MappingSpec.from_dict(_persisted())
    assert spec.title_key == "name"
    assert spec.field_key(StandardField.SEO_TITLE) == "seoTitle"
    assert spec.field_key(StandardField.COST) == "purchase"
    assert set(spec.active_optional_fields) == {
        StandardField.VENDOR,
        StandardField.DESCRIPTION_HTML,
        StandardField.SEO_TITLE,
        StandardField.COST,
        StandardField.PRICE,
    }
    assert isinstance(spec.metafield_mappings[0], SingleMetafieldMapping)
    assert isinstance(spec.metafield_mappings[1], DynamicMetafieldMapping)


def test_to_dict_nests_dotted_fields():
    spec = MappingSpec(title_key="name").with_field("seo.description", "summary").with_field("FIELD_VENDOR", "brand")
    assert spec.to_dict() == {
        "mapping": {"title": "name", "vendor": "brand", "seo": {"description": "summary"}},
        "metafieldMappings": [],
    }


def test_persisted_shape_survives_reload():
    persisted = _persisted()
    again = MappingSpec.from_dict(MappingSpec.from_dict(persisted).to_dict())
    assert again == MappingSpec.from_dict(persisted)


def test_cleared_fields_are_not_persisted():
    spec = MappingSpec.from_dict(_persisted()).set_field_key(StandardField.VENDOR, "")
    assert "vendor" not in spec.to_dict()["mapping"]


def test_from_dict_rejects_invalid_document():
    with pytest.raises(MappingError) as exc:
        MappingSpec.from_dict(_persisted(mapping={"title": "name", "colour": "c"}))
    assert "$.mapping.colour" in str(exc.value)


# ==========================================================
# VALIDATION
# ==========================================================


def test_validate_mapping_accepts_persisted_document():
    assert validate_mapping(_persisted()) == (True, [])


def test_validate_mapping_collects_errors():
    doc = _persisted(
        mapping={"title": 1, "seo": {"keywords": "k"}, "inventoryItem": "sku"},
        metafieldMappings=[
            {"mappingType": "multi", "sourceKey": "a"},
            {"mappingType": "single", "sourceKey": "a", "metafieldNamespace": "", "metafieldType": "url"},
            {"mappingType": "dynamic_from_array", "sourceKey": "p", "metafieldNamespace": "n", "metafieldType": "url", "extra": 1},
        ],
        extra=True,
    )
    ok, errors = validate_mapping(doc)
    assert not ok
    joined = "\n".join(errors)
    assert "$.mapping.title: Source key must be a string." in errors
    assert "$.mapping.seo.keywords" in joined
    assert "$.mapping.inventoryItem: 'inventoryItem' must be an object." in errors
    assert "$.metafieldMappings[0].mappingType" in joined
    assert "$.metafieldMappings[1].metafieldNamespace" in joined
    assert "$.metafieldMappings[1].metafieldKey" in joined
    assert "$.metafieldMappings[2].arrayKeySource" in joined
    assert "Unknown keys in metafield mapping: ['extra']" in joined
    assert "$: Unknown keys in persisted mapping: ['extra']" in errors


def test_validate_mapping_raise_on_error():
    with pytest.raises(MappingError, match="Invalid mapping"):
        validate_mapping(["not", "a", "dict"], raise_on_error=True)


# ==========================================================
# EDITING
# ==========================================================


def test_edits_return_new_instances():
    spec = MappingSpec(title_key="name")
    edited = spec.with_field(StandardField.VENDOR, "brand")
    assert spec.active_optional_fields == ()
    assert edited.active_optional_fields == (StandardField.VENDOR,)
    assert edited.remove_field(StandardField.VENDOR).field_key(StandardField.VENDOR) == ""


def test_activate_field_keeps_order_and_is_unique():
    spec = MappingSpec().activate_field("sku").activate_field("price").activate_field("sku")
    assert spec.active_optional_fields == (StandardField.SKU, StandardField.PRICE)


def test_unknown_field_is_rejected():
    with pytest.raises(MappingError):
        MappingSpec().with_field("colour", "c")


def test_add_metafield_requires_parts():
    with pytest.raises(MappingError):
        MappingSpec().add_metafield(SingleMetafieldMapping("a", "custom", ""))
    with pytest.raises(MappingError):
        MappingSpec().add_metafield(DynamicMetafieldMapping("a", "custom", "k", ""))
    with pytest.raises(MappingError):
        MappingSpec().add_metafield(SingleMetafieldMapping("a", "", "k"))


def test_remove_metafield_by_row_id():
    spec = MappingSpec(metafield_mappings=(
        SingleMetafieldMapping("a", "custom", "a", id="mf-1"),
        SingleMetafieldMapping("b", "custom", "b", id="mf-2"),
    ))
    assert [m.source_key for m in spec.remove_metafield("mf-1").metafield_mappings] == ["b"]


def test_row_id_does_not_affect_equality():
    assert SingleMetafieldMapping("a", "custom", "a", id="x") == SingleMetafieldMapping("a", "custom", "a", id="y")


def test_specs_are_hashable():
    spec = MappingSpec.from_dict(_persisted())
    same = MappingSpec.from_dict(_persisted())
    other = spec.set_field_key(StandardField.VENDOR, "maker")

    assert hash(spec) == hash(same)
    assert len({spec, same, other}) == 2


def test_mapping_status():
    spec = MappingSpec.from_dict(_persisted())
    status = spec.mapping_status([FieldOption.of("name"), FieldOption.of("ean"), FieldOption.of("props")])
    assert status == [
        {"key": "name", "mapped": True},
        {"key": "ean", "mapped": False},
        {"key": "props", "mapped": True},
    ]


# ==========================================================
# BUILDER
# ==========================================================


def test_builder_assigns_row_ids():
    spec = MappingSpecBuilder().title("name").single("color", "color").dynamic("props", "k", "v").build()
    ids = [m.id for m in spec.metafield_mappings]
    assert all(i and i.startswith("mf-") for i in ids)
    assert len(set(ids)) == 2


def test_builder_requires_title():
    with pytest.raises(MappingError):
        MappingSpecBuilder().field("vendor", "brand").build()


def test_builder_rejects_title_as_optional_field():
    with pytest.raises(ValueError):
        MappingSpecBuilder().field(StandardField.TITLE, "name")


def test_builder_from_dict_and_to_transformer():
    transformer = MappingSpecBuilder().from_dict(_persisted()).to_transformer()
    assert isinstance(transformer, ProductTransformer)
    assert transformer.transform({"name": "Widget", "purchase": 3})["inventoryItem"] == {"cost": 3}
    assert all(m.id for m in transformer.spec.metafield_mappings)
