import logging

from feedmap.core import (
    DynamicMetafieldMapping,
    FieldOption,
    MappingSpec,
    SingleMetafieldMapping,
    StandardField,
    merge_suggestions,
    review_suggestions,
)


def _sample():
    return {
        "name": "Widget",
        "brand": "Acme",
        "price": 2.82,
        "material": "steel",
        "tags": ["a", "b"],
        "properties": [{"prop_code": "COLOR", "prod_value": "Red"}],
    }


def _options():
    return [FieldOption.of(k) for k in _sample()]


def _single(source_key, key, **overrides):
    entry = {
        "mappingType": "single",
        "sourceKey": source_key,
        "metafieldNamespace": "custom",
        "metafieldKey": key,
        "metafieldType": "single_line_text_field",
    }
    entry.update(overrides)
    return entry


def _dynamic(source_key="properties", key_source="prop_code", value_source="prod_value"):
    return {
        "mappingType": "dynamic_from_array",
        "sourceKey": source_key,
        "metafieldNamespace": "specifications",
        "arrayKeySource": key_source,
        "arrayValueSource": value_source,
        "metafieldType": "single_line_text_field",
    }


def test_valid_suggestion_is_merged():
    suggestion = {
        "titleKey": "name",
        "optionalFieldKeys": {"FIELD_VENDOR": "brand", "price": "price"},
        "metafieldMappings": [_single("material", "material"), _dynamic()],
    }
    review = review_suggestions(MappingSpec(), suggestion, _options(), sample=_sample())

    assert review.rejected == ()
    spec = review.spec
    assert spec.title_key == "name"
    assert spec.active_optional_fields == (StandardField.VENDOR, StandardField.PRICE)
    assert spec.field_key(StandardField.PRICE) == "price"
    assert isinstance(spec.metafield_mappings[0], SingleMetafieldMapping)
    assert isinstance(spec.metafield_mappings[1], DynamicMetafieldMapping)
    assert all(m.id.startswith("ai-") for m in spec.metafield_mappings)


def test_invalid_entries_are_rejected_individually():
    suggestion = {
        "titleKey": "Name",
        "optionalFieldKeys": {"FIELD_COLOUR": "brand", "FIELD_VENDOR": "manufacturer", "FIELD_SKU": "name"},
        "metafieldMappings": [
            _single("weight", "weight"),
            _single("material", ""),
            {"mappingType": "multi", "sourceKey": "material", "metafieldNamespace": "c", "metafieldType": "t"},
            "not an object",
        ],
    }
    review = review_suggestions(MappingSpec(title_key="brand"), suggestion, _options(), sample=_sample())

    assert review.spec.title_key == "brand"
    assert review.spec.active_optional_fields == (StandardField.SKU,)
    assert review.spec.metafield_mappings == ()
    assert [r.section for r in review.rejected] == [
        "titleKey",
        "optionalFieldKeys",
        "optionalFieldKeys",
        "metafieldMappings",
        "metafieldMappings",
        "metafieldMappings",
        "metafieldMappings",
    ]


def test_dynamic_suggestion_checks_array_shape():
    suggestion = {
        "metafieldMappings": [
            _dynamic(source_key="tags"),
            _dynamic(key_source="code"),
            _dynamic(value_source="value"),
        ]
    }
    review = review_suggestions(MappingSpec(), suggestion, _options(), sample=_sample())
    reasons = [r.reason for r in review.rejected]
    assert reasons == [
        "Source is not an array of objects.",
        "arrayKeySource 'code' not found in array objects.",
        "arrayValueSource 'value' not found in array objects.",
    ]


def test_dynamic_suggestion_without_sample_is_rejected():
    review = review_suggestions(MappingSpec(), {"metafieldMappings": [_dynamic()]}, _options())
    assert len(review.rejected) == 1
    assert review.spec.metafield_mappings == ()


def test_dynamic_suggestion_with_array_sample_is_rejected():
    suggestion = {"titleKey": "name", "metafieldMappings": [_dynamic(), _single("material", "material")]}
    review = review_suggestions(MappingSpec(), suggestion, _options(), sample=[_sample()])

    assert review.spec.title_key == "name"
    assert [m.key for m in review.spec.metafield_mappings] == ["material"]
    assert [r.reason for r in review.rejected] == ["No sample record (object) to check the array shape against."]


def test_suggested_row_ids_are_deterministic():
    suggestion = {"metafieldMappings": [_single("material", "material"), _dynamic()]}
    first = review_suggestions(MappingSpec(), suggestion, _options(), sample=_sample()).spec
    second = review_suggestions(MappingSpec(), suggestion, _options(), sample=_sample()).spec

    assert [m.id for m in first.metafield_mappings] == ["ai-1", "ai-2"]
    assert [m.id for m in second.metafield_mappings] == ["ai-1", "ai-2"]

    more = merge_suggestions(first, {"metafieldMappings": [_single("brand", "brand")]}, _options())
    assert [m.id for m in more.metafield_mappings] == ["ai-1", "ai-2", "ai-3"]


def test_merge_appends_and_rejects_conflicts():
    existing = MappingSpec(metafield_mappings=(SingleMetafieldMapping("material", "custom", "material", id="mf-1"),))
    suggestion = {
        "metafieldMappings": [
            _single("material", "material"),
            _single("brand", "material"),
            _single("brand", "brand"),
        ]
    }
    review = review_suggestions(existing, suggestion, _options())

    assert [m.key for m in review.spec.metafield_mappings] == ["material", "brand"]
    assert review.spec.metafield_mappings[0].id == "mf-1"
    assert [r.reason for r in review.rejected] == [
        "Duplicate of an existing metafield mapping.",
        "Metafield 'custom.material' is already mapped.",
    ]


def test_non_object_suggestion_leaves_spec_unchanged():
    spec = MappingSpec(title_key="name")
    review = review_suggestions(spec, ["titleKey"], _options())
    assert review.spec is spec
    assert review.rejected[0].section == "suggestion"


def test_rejections_are_logged(caplog):
    logger = logging.getLogger("feedmap.suggestions.test")
    with caplog.at_level(logging.WARNING, logger=logger.name):
        spec = merge_suggestions(MappingSpec(), {"titleKey": "nope"}, _options(), logger=logger)
    assert spec == MappingSpec()
    assert "Suggestion rejected (titleKey)" in caplog.text
