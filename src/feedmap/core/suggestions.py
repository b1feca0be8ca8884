from __future__ import annotations
import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .discovery import FieldOption, option_values
from .fields import StandardField
from .results import SuggestionRejected
from .spec import DynamicMetafieldMapping, MappingSpec, MetafieldMapping, SingleMetafieldMapping, metafield_from_dict
from .types import JsonShape, classify_shape


@dataclass(frozen=True)
class SuggestionReview:
    spec: MappingSpec
    rejected: Tuple[SuggestionRejected, ...] = ()


def review_suggestions(
    spec: MappingSpec,
    suggestion: Any,
    options: Sequence[FieldOption],
    *,
    sample: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> SuggestionReview:
    """
    Merge an externally produced mapping suggestion into ``spec``.

    Every suggested entry is checked on its own against the current field
    options (and, for dynamic metafields, against the array shape found in
    ``sample``). Bad entries are dropped and reported; the rest is merged.

    Expected suggestion shape::

        {"titleKey": "name",
         "optionalFieldKeys": {"FIELD_VENDOR": "brand", ...},
         "metafieldMappings": [{"mappingType": "single", ...}, ...]}
    """
    rejected: List[SuggestionRejected] = []

    def reject(section: str, entry: Any, reason: str) -> None:
        rejected.append(SuggestionRejected(section, entry, reason))
        if logger is not None:
            logger.warning("Suggestion rejected (%s): %s | entry=%r", section, reason, entry)

    if not isinstance(suggestion, dict):
        reject("suggestion", suggestion, "Suggestion is not an object.")
        return SuggestionReview(spec, tuple(rejected))

    valid = option_values(options)
    out = spec

    title = suggestion.get("titleKey")
    if title is not None:
        if isinstance(title, str) and title in valid:
            out = out.with_title(title)
        else:
            reject("titleKey", title, "Suggested title key is not an available source field.")

    fields = suggestion.get("optionalFieldKeys")
    if isinstance(fields, dict):
        for name, source_key in fields.items():
            f = StandardField.lookup(name)
            if f is None or f is StandardField.TITLE:
                reject("optionalFieldKeys", {name: source_key}, f"Unknown standard field '{name}'.")
            elif not isinstance(source_key, str) or source_key not in valid:
                reject("optionalFieldKeys", {name: source_key}, f"Source key {source_key!r} is not an available source field.")
            else:
                out = out.with_field(f, source_key)
    elif fields is not None:
        reject("optionalFieldKeys", fields, "'optionalFieldKeys' must be an object.")

    metafields = suggestion.get("metafieldMappings")
    if isinstance(metafields, list):
        for entry in metafields:
            mapping, reason = _check_metafield(entry, valid, sample)
            if mapping is None:
                reject("metafieldMappings", entry, reason)
                continue

            reason = _conflict(out.metafield_mappings, mapping)
            if reason:
                reject("metafieldMappings", entry, reason)
                continue

            mapping = replace(mapping, id=_next_id(out.metafield_mappings))
            out = replace(out, metafield_mappings=out.metafield_mappings + (mapping,))
    elif metafields is not None:
        reject("metafieldMappings", metafields, "'metafieldMappings' must be a list.")

    return SuggestionReview(out, tuple(rejected))


def merge_suggestions(
    spec: MappingSpec,
    suggestion: Any,
    options: Sequence[FieldOption],
    *,
    sample: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> MappingSpec:
    return review_suggestions(spec, suggestion, options, sample=sample, logger=logger).spec


def _check_metafield(entry: Any, valid: set, sample: Any) -> Tuple[Optional[MetafieldMapping], str]:
    if not isinstance(entry, dict):
        return None, "Metafield mapping is not an object."

    for required in ("mappingType", "sourceKey", "metafieldNamespace", "metafieldType"):
        if not isinstance(entry.get(required), str) or not entry.get(required):
            return None, f"Missing required field '{required}'."

    if entry["sourceKey"] not in valid:
        return None, f"Source key '{entry['sourceKey']}' is not an available source field."

    mapping_type = entry["mappingType"]
    if mapping_type == SingleMetafieldMapping.mapping_type:
        if not isinstance(entry.get("metafieldKey"), str) or not entry.get("metafieldKey"):
            return None, "Single mapping is missing 'metafieldKey'."

    elif mapping_type == DynamicMetafieldMapping.mapping_type:
        key_source, value_source = entry.get("arrayKeySource"), entry.get("arrayValueSource")
        if not isinstance(key_source, str) or not key_source or not isinstance(value_source, str) or not value_source:
            return None, "Dynamic mapping is missing 'arrayKeySource' or 'arrayValueSource'."

        if not isinstance(sample, dict):
            return None, "No sample record (object) to check the array shape against."

        items = sample.get(entry["sourceKey"])
        if classify_shape(items) is not JsonShape.ARRAY_OF_OBJECTS:
            return None, "Source is not an array of objects."

        first = items[0]
        if key_source not in first:
            return None, f"arrayKeySource '{key_source}' not found in array objects."
        if value_source not in first:
            return None, f"arrayValueSource '{value_source}' not found in array objects."

    else:
        return None, f"Unknown mapping type {mapping_type!r}."

    data = {k: v for k, v in entry.items() if k != "id"}
    return metafield_from_dict(data), ""


def _conflict(existing: Sequence[MetafieldMapping], mapping: MetafieldMapping) -> str:
    for m in existing:
        if m == mapping:
            return "Duplicate of an existing metafield mapping."
        if (
            isinstance(m, SingleMetafieldMapping)
            and isinstance(mapping, SingleMetafieldMapping)
            and (m.namespace, m.key) == (mapping.namespace, mapping.key)
        ):
            return f"Metafield '{mapping.namespace}.{mapping.key}' is already mapped."
    return ""


def _next_id(existing: Sequence[MetafieldMapping]) -> str:
    used = {m.id for m in existing}
    n = 1
    while f"ai-{n}" in used:
        n += 1
    return f"ai-{n}"
