from __future__ import annotations
import itertools
from dataclasses import replace
from typing import Any, Dict, List, Mapping as TMapping, Optional, Union

from ..exceptions import MappingError
from ..fields import DEFAULT_METAFIELD_TYPE, DEFAULT_NAMESPACE, StandardField
from ..spec import DynamicMetafieldMapping, MappingSpec, MetafieldMapping, SingleMetafieldMapping

_row_ids = itertools.count(1)


def _next_row_id() -> str:
    return f"mf-{next(_row_ids)}"


class MappingSpecBuilder:
    __slots__ = ("_title", "_fields", "_metafields")

    def __init__(self) -> None:
        self._title: str = ""
        self._fields: Dict[StandardField, str] = {}
        self._metafields: List[MetafieldMapping] = []

    def title(self, source_key: str) -> "MappingSpecBuilder":
        if not source_key or not isinstance(source_key, str):
            raise ValueError("title(source_key=...) requires a non-empty string.")
        self._title = source_key
        return self

    def field(self, name: Union[StandardField, str], source_key: str) -> "MappingSpecBuilder":
        f = StandardField.lookup(name)
        if f is None or f is StandardField.TITLE:
            raise ValueError(f"field(name=...) must be an optional standard field, got {name!r}.")
        if not source_key or not isinstance(source_key, str):
            raise ValueError("field(source_key=...) requires a non-empty string.")
        self._fields[f] = source_key
        return self

    def fields(self, mapping: TMapping[Union[StandardField, str], str]) -> "MappingSpecBuilder":
        if not isinstance(mapping, dict) or not mapping:
            raise ValueError("fields(mapping=...) requires a non-empty dict.")
        for k, v in mapping.items():
            self.field(k, v)
        return self

    def single(
        self,
        source_key: str,
        key: str,
        *,
        namespace: str = DEFAULT_NAMESPACE,
        type: str = DEFAULT_METAFIELD_TYPE,
        id: Optional[str] = None,
    ) -> "MappingSpecBuilder":
        if not source_key or not key:
            raise ValueError("single(source_key, key) require non-empty strings.")
        self._metafields.append(SingleMetafieldMapping(source_key, namespace, key, type, id=id or _next_row_id()))
        return self

    def dynamic(
        self,
        source_key: str,
        key_source: str,
        value_source: str,
        *,
        namespace: str = DEFAULT_NAMESPACE,
        type: str = DEFAULT_METAFIELD_TYPE,
        id: Optional[str] = None,
    ) -> "MappingSpecBuilder":
        if not source_key or not key_source or not value_source:
            raise ValueError("dynamic(source_key, key_source, value_source) require non-empty strings.")
        self._metafields.append(
            DynamicMetafieldMapping(source_key, namespace, key_source, value_source, type, id=id or _next_row_id())
        )
        return self

    def build(self) -> MappingSpec:
        if not self._title:
            raise MappingError("Cannot build mapping: no title key defined.")
        spec = MappingSpec()
        spec = spec.with_title(self._title)
        for f, key in self._fields.items():
            spec = spec.with_field(f, key)
        for mf in self._metafields:
            spec = spec.add_metafield(mf)
        return spec

    def to_transformer(self, **kwargs: Any):
        from ..engine import ProductTransformer
        return ProductTransformer(self.build(), **kwargs)

    def from_dict(self, persisted: Dict[str, Any]) -> "MappingSpecBuilder":
        spec = MappingSpec.from_dict(persisted)
        self._title = spec.title_key
        self._fields = {f: spec.optional_field_keys[f] for f in spec.active_optional_fields}
        self._metafields = [
            m if m.id else _with_id(m) for m in spec.metafield_mappings
        ]
        return self


def _with_id(mapping: MetafieldMapping) -> MetafieldMapping:
    return replace(mapping, id=_next_row_id())
