from __future__ import annotations

from typing import Any, Dict, List, Set, Tuple

from .exceptions import MappingError
from .fields import StandardField

SUPPORTED_MAPPING_TYPES: Set[str] = {"single", "dynamic_from_array"}

_NESTED_GROUPS: Dict[str, Set[str]] = {}
for _f in StandardField:
    if "." in _f.value:
        _group, _sub = _f.value.split(".", 1)
        _NESTED_GROUPS.setdefault(_group, set()).add(_sub)

ROOT_FIELD_KEYS: Set[str] = {f.value for f in StandardField if "." not in f.value}

_COMMON_METAFIELD_KEYS: Set[str] = {"id", "mappingType", "sourceKey", "metafieldNamespace", "metafieldType"}
_SINGLE_KEYS: Set[str] = _COMMON_METAFIELD_KEYS | {"metafieldKey"}
# dynamic rows may still carry the unused metafieldKey of the edit form
_DYNAMIC_KEYS: Set[str] = _COMMON_METAFIELD_KEYS | {"metafieldKey", "arrayKeySource", "arrayValueSource"}


def validate_mapping(persisted: Dict[str, Any], *, raise_on_error: bool = False) -> Tuple[bool, List[str]]:
    """
    Check the structure of a persisted mapping document.

    Expected shape::

        {"mapping": {"title": "...", "vendor": "...", "seo": {...}, "inventoryItem": {...}},
         "metafieldMappings": [{"mappingType": "single", ...}, ...]}
    """
    errors: List[str] = []

    def err(msg: str, path: str = "$") -> None:
        errors.append(f"{path}: {msg}")

    if not isinstance(persisted, dict):
        err("Persisted mapping must be an object (dict).")
        return _finish(errors, raise_on_error)

    mapping = persisted.get("mapping", {})
    if not isinstance(mapping, dict):
        err("'mapping' must be an object.", "$.mapping")
    else:
        _validate_fields(mapping, path="$.mapping", add_err=err)

    metafields = persisted.get("metafieldMappings", [])
    if not isinstance(metafields, list):
        err("'metafieldMappings' must be a list.", "$.metafieldMappings")
    else:
        for i, mf in enumerate(metafields):
            _validate_metafield(mf, path=f"$.metafieldMappings[{i}]", add_err=err)

    unknown = set(persisted.keys()) - {"mapping", "metafieldMappings"}
    if unknown:
        err(f"Unknown keys in persisted mapping: {sorted(unknown)}")

    return _finish(errors, raise_on_error)


def _finish(errors: List[str], raise_on_error: bool) -> Tuple[bool, List[str]]:
    if errors and raise_on_error:
        raise MappingError("Invalid mapping:\n- " + "\n- ".join(errors))
    return (len(errors) == 0, errors)


def _validate_fields(mapping: Dict[str, Any], *, path: str, add_err) -> None:
    for key, value in mapping.items():
        if key in _NESTED_GROUPS:
            if not isinstance(value, dict):
                add_err(f"'{key}' must be an object.", f"{path}.{key}")
                continue
            for sub, sub_value in value.items():
                if sub not in _NESTED_GROUPS[key]:
                    add_err(f"Unknown field '{key}.{sub}' (allowed: {sorted(_NESTED_GROUPS[key])})", f"{path}.{key}.{sub}")
                elif not isinstance(sub_value, str):
                    add_err("Source key must be a string.", f"{path}.{key}.{sub}")
            continue

        if key not in ROOT_FIELD_KEYS:
            add_err(f"Unknown standard field '{key}'.", f"{path}.{key}")
        elif not isinstance(value, str):
            add_err("Source key must be a string.", f"{path}.{key}")


def _validate_metafield(mf: Any, *, path: str, add_err) -> None:
    if not isinstance(mf, dict):
        add_err("Metafield mapping must be an object.", path)
        return

    mapping_type = mf.get("mappingType")
    if mapping_type not in SUPPORTED_MAPPING_TYPES:
        add_err(f"Invalid 'mappingType' {mapping_type!r}. Allowed: {sorted(SUPPORTED_MAPPING_TYPES)}", f"{path}.mappingType")
        return

    if not isinstance(mf.get("sourceKey"), str):
        add_err("'sourceKey' must be a string.", f"{path}.sourceKey")

    for required in ("metafieldNamespace", "metafieldType"):
        if not isinstance(mf.get(required), str) or not mf.get(required):
            add_err(f"'{required}' must be a non-empty string.", f"{path}.{required}")

    if mapping_type == "single":
        if not isinstance(mf.get("metafieldKey"), str) or not mf.get("metafieldKey"):
            add_err("'metafieldKey' is required for single mappings.", f"{path}.metafieldKey")
        allowed = _SINGLE_KEYS
    else:
        for required in ("arrayKeySource", "arrayValueSource"):
            if not isinstance(mf.get(required), str) or not mf.get(required):
                add_err(f"'{required}' is required for dynamic_from_array mappings.", f"{path}.{required}")
        allowed = _DYNAMIC_KEYS

    unknown = set(mf.keys()) - allowed
    if unknown:
        add_err(f"Unknown keys in metafield mapping: {sorted(unknown)}", path)
