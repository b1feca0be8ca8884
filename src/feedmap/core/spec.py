from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, ClassVar, Dict, Iterable, List, Mapping, Optional, Set, Tuple, Union

from .discovery import FieldOption
from .exceptions import MappingError
from .fields import DEFAULT_METAFIELD_TYPE, StandardField
from .validation import validate_mapping


@dataclass(frozen=True)
class SingleMetafieldMapping:
    """One source value becomes one metafield."""
    source_key: str
    namespace: str
    key: str
    type: str = DEFAULT_METAFIELD_TYPE
    id: Optional[str] = field(default=None, compare=False)

    mapping_type: ClassVar[str] = "single"

    def emit(self, record: Dict[str, Any]) -> List[Dict[str, Any]]:
        if not self.source_key or self.source_key not in record:
            return []
        return [{"namespace": self.namespace, "key": self.key, "type": self.type, "value": record[self.source_key]}]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mappingType": self.mapping_type,
            "sourceKey": self.source_key,
            "metafieldNamespace": self.namespace,
            "metafieldKey": self.key,
            "metafieldType": self.type,
        }


@dataclass(frozen=True)
class DynamicMetafieldMapping:
    """
    Every object in the source array becomes one metafield; the metafield key
    and value are read from ``array_key_source`` and ``array_value_source``.
    """
    source_key: str
    namespace: str
    array_key_source: str
    array_value_source: str
    type: str = DEFAULT_METAFIELD_TYPE
    id: Optional[str] = field(default=None, compare=False)

    mapping_type: ClassVar[str] = "dynamic_from_array"

    def emit(self, record: Dict[str, Any]) -> List[Dict[str, Any]]:
        items = record.get(self.source_key) if self.source_key else None
        if not isinstance(items, list):
            return []

        out: List[Dict[str, Any]] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            if self.array_key_source not in item or self.array_value_source not in item:
                continue
            out.append({
                "namespace": self.namespace,
                "key": item[self.array_key_source],
                "type": self.type,
                "value": item[self.array_value_source],
            })
        return out

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mappingType": self.mapping_type,
            "sourceKey": self.source_key,
            "metafieldNamespace": self.namespace,
            "arrayKeySource": self.array_key_source,
            "arrayValueSource": self.array_value_source,
            "metafieldType": self.type,
        }


MetafieldMapping = Union[SingleMetafieldMapping, DynamicMetafieldMapping]


def metafield_from_dict(data: Dict[str, Any]) -> MetafieldMapping:
    mapping_type = data.get("mappingType")
    if mapping_type == SingleMetafieldMapping.mapping_type:
        return SingleMetafieldMapping(
            source_key=data.get("sourceKey") or "",
            namespace=data["metafieldNamespace"],
            key=data["metafieldKey"],
            type=data.get("metafieldType") or DEFAULT_METAFIELD_TYPE,
            id=data.get("id"),
        )

    if mapping_type == DynamicMetafieldMapping.mapping_type:
        return DynamicMetafieldMapping(
            source_key=data.get("sourceKey") or "",
            namespace=data["metafieldNamespace"],
            array_key_source=data["arrayKeySource"],
            array_value_source=data["arrayValueSource"],
            type=data.get("metafieldType") or DEFAULT_METAFIELD_TYPE,
            id=data.get("id"),
        )

    raise MappingError(f"Unknown metafield mapping type: {mapping_type!r}")


def _as_field(name: Any) -> StandardField:
    f = StandardField.lookup(name)
    if f is None:
        raise MappingError(f"Unknown standard field: {name!r}")
    return f


@dataclass(frozen=True)
class MappingSpec:
    """
    Declarative description of how source fields map onto a target product.

    Instances are immutable; every edit returns a new spec.
    """
    title_key: str = ""
    optional_field_keys: Mapping[StandardField, str] = field(default_factory=dict)
    active_optional_fields: Tuple[StandardField, ...] = ()
    metafield_mappings: Tuple[MetafieldMapping, ...] = ()

    def __post_init__(self) -> None:
        keys = {_as_field(k): v for k, v in dict(self.optional_field_keys).items()}
        active: List[StandardField] = []
        for name in self.active_optional_fields:
            f = _as_field(name)
            if f not in active:
                active.append(f)
        object.__setattr__(self, "optional_field_keys", keys)
        object.__setattr__(self, "active_optional_fields", tuple(active))
        object.__setattr__(self, "metafield_mappings", tuple(self.metafield_mappings))

    def __hash__(self) -> int:
        # optional_field_keys is a dict; hash its items instead
        return hash((
            self.title_key,
            frozenset(self.optional_field_keys.items()),
            self.active_optional_fields,
            self.metafield_mappings,
        ))

    def field_key(self, f: Union[StandardField, str]) -> str:
        return self.optional_field_keys.get(_as_field(f), "")

    def with_title(self, key: str) -> "MappingSpec":
        return replace(self, title_key=key or "")

    def set_field_key(self, f: Union[StandardField, str], key: str) -> "MappingSpec":
        keys = dict(self.optional_field_keys)
        keys[_as_field(f)] = key or ""
        return replace(self, optional_field_keys=keys)

    def activate_field(self, f: Union[StandardField, str]) -> "MappingSpec":
        f = _as_field(f)
        if f in self.active_optional_fields:
            return self
        return replace(self, active_optional_fields=self.active_optional_fields + (f,))

    def with_field(self, f: Union[StandardField, str], key: str) -> "MappingSpec":
        return self.set_field_key(f, key).activate_field(f)

    def remove_field(self, f: Union[StandardField, str]) -> "MappingSpec":
        f = _as_field(f)
        keys = dict(self.optional_field_keys)
        keys[f] = ""
        active = tuple(a for a in self.active_optional_fields if a is not f)
        return replace(self, optional_field_keys=keys, active_optional_fields=active)

    def add_metafield(self, mapping: MetafieldMapping) -> "MappingSpec":
        if isinstance(mapping, SingleMetafieldMapping) and not mapping.key:
            raise MappingError("Metafield key is required for single mappings.")
        if isinstance(mapping, DynamicMetafieldMapping) and not (mapping.array_key_source and mapping.array_value_source):
            raise MappingError("Key source and value source are required for dynamic array mappings.")
        if not mapping.namespace or not mapping.type:
            raise MappingError("Metafield namespace and type are required.")
        return replace(self, metafield_mappings=self.metafield_mappings + (mapping,))

    def remove_metafield(self, mapping_id: str) -> "MappingSpec":
        kept = tuple(m for m in self.metafield_mappings if m.id != mapping_id)
        return replace(self, metafield_mappings=kept)

    def mapped_source_keys(self) -> Set[str]:
        keys: Set[str] = set()
        if self.title_key:
            keys.add(self.title_key)
        for f in self.active_optional_fields:
            mapped = self.optional_field_keys.get(f)
            if mapped:
                keys.add(mapped)
        for m in self.metafield_mappings:
            if m.source_key:
                keys.add(m.source_key)
        return keys

    def mapping_status(self, options: Iterable[FieldOption]) -> List[Dict[str, Any]]:
        used = self.mapped_source_keys()
        return [{"key": o.value, "mapped": o.value in used} for o in options]

    def to_dict(self) -> Dict[str, Any]:
        mapping: Dict[str, Any] = {"title": self.title_key}
        groups: Dict[str, Dict[str, str]] = {"seo": {}, "inventoryItem": {}}

        for f in self.active_optional_fields:
            mapped = self.optional_field_keys.get(f)
            if not mapped:
                continue
            if "." in f.value:
                group, sub = f.value.split(".", 1)
                groups[group][sub] = mapped
            else:
                mapping[f.value] = mapped

        for group, values in groups.items():
            if values:
                mapping[group] = values

        return {
            "mapping": mapping,
            "metafieldMappings": [m.to_dict() for m in self.metafield_mappings],
        }

    @classmethod
    def from_dict(cls, persisted: Dict[str, Any]) -> "MappingSpec":
        validate_mapping(persisted, raise_on_error=True)
        mapping = persisted.get("mapping", {}) or {}

        keys: Dict[StandardField, str] = {}
        for f in StandardField:
            if f is StandardField.TITLE:
                continue
            if "." in f.value:
                group, sub = f.value.split(".", 1)
                value = (mapping.get(group) or {}).get(sub)
            else:
                value = mapping.get(f.value)
            if value:
                keys[f] = value

        return cls(
            title_key=mapping.get("title") or "",
            optional_field_keys=keys,
            active_optional_fields=tuple(keys),
            metafield_mappings=tuple(metafield_from_dict(m) for m in persisted.get("metafieldMappings", []) or []),
        )
