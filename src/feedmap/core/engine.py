from __future__ import annotations
import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional

from .backends.pandas import DataFrameBackend, PandasBackend
from .fields import Placement, StandardField, Target
from .results import record_error
from .spec import MappingSpec


@dataclass
class EngineConfig:
    trace_enabled: bool = False
    backend: DataFrameBackend = field(default_factory=PandasBackend)

    logger: Optional[logging.Logger] = None
    metrics_increment: Optional[Callable[[str, int], None]] = None


def transform(record: Any, spec: MappingSpec) -> Dict[str, Any]:
    """
    Apply ``spec`` to one source record and build the target product document.

    Unmapped or missing source fields are left out of the result rather than
    set to an empty value. A record that is not an object yields the
    ``{"error": ...}`` sentinel.
    """
    if not isinstance(record, dict):
        return record_error()

    root: Dict[str, Any] = {}
    groups: Dict[Target, Dict[str, Any]] = {Target.SEO: {}, Target.INVENTORY_ITEM: {}}

    if spec.title_key and spec.title_key in record:
        _place(root, groups, StandardField.TITLE.placement, record[spec.title_key])

    for f in spec.active_optional_fields:
        mapped = spec.optional_field_keys.get(f)
        if mapped and mapped in record:
            _place(root, groups, f.placement, record[mapped])

    out = dict(root)
    for target, values in groups.items():
        if values:
            out[target.value] = values

    metafields = [mf for m in spec.metafield_mappings for mf in m.emit(record)]
    if metafields:
        out["metafields"] = metafields

    return copy.deepcopy(out)


def _place(root: Dict[str, Any], groups: Dict[Target, Dict[str, Any]], placement: Placement, value: Any) -> None:
    if placement.target is Target.ROOT:
        root[placement.key] = value
    else:
        groups[placement.target][placement.key] = value


class ProductTransformer:
    """
    Applies one mapping spec to source records for preview and sync.
    """
    def __init__(
        self,
        spec: MappingSpec,
        *,
        config: Optional[EngineConfig] = None,
        backend: Optional[DataFrameBackend] = None,
    ) -> None:
        if not isinstance(spec, MappingSpec):
            raise TypeError("spec must be a MappingSpec.")
        self.spec: MappingSpec = spec

        self._config: EngineConfig = config if config is not None else EngineConfig()
        if backend is not None:
            self._config.backend = backend

    def transform(self, record: Any) -> Dict[str, Any]:
        out = transform(record, self.spec)
        if "error" in out:
            self._record_rejected(record)
        elif self._config.trace_enabled and self._config.logger is not None:
            self._config.logger.debug("Transform trace: %s", self.trace(record))
        return out

    def transform_batch(self, records: Iterable[Any]) -> List[Dict[str, Any]]:
        return [self.transform(rec) for rec in records]

    def preview(self, extracted: Any, index: int = 0) -> Dict[str, Any]:
        from .preview import preview_record
        return preview_record(extracted, index, self.spec)

    def to_dataframe(self, records: Iterable[Any]):
        products = [p for p in self.transform_batch(records) if "error" not in p]
        return self._config.backend.to_dataframe(products)

    def trace(self, record: Any) -> Dict[str, Any]:
        if not isinstance(record, dict):
            return record_error()

        def node(source: Optional[str], placement: Placement) -> Dict[str, Any]:
            if not source:
                return {"source": None, "target": placement.location, "status": "unmapped"}
            if source not in record:
                return {"source": source, "target": placement.location, "status": "missing"}
            return {"source": source, "target": placement.location, "status": "mapped", "value": record[source]}

        fields = {
            f.value: node(self.spec.optional_field_keys.get(f), f.placement)
            for f in self.spec.active_optional_fields
        }

        metafields = []
        for m in self.spec.metafield_mappings:
            emitted = m.emit(record)
            if not m.source_key:
                status = "unmapped"
            elif m.source_key not in record:
                status = "missing"
            else:
                status = "mapped"
            metafields.append({
                "mappingType": m.mapping_type,
                "source": m.source_key or None,
                "status": status,
                "emitted": len(emitted),
            })

        return {
            "title": node(self.spec.title_key, StandardField.TITLE.placement),
            "fields": fields,
            "metafields": metafields,
        }

    def _record_rejected(self, record: Any) -> None:
        if self._config.metrics_increment:
            self._config.metrics_increment("transformer.record_errors", 1)

        logger = self._config.logger
        if logger is not None:
            logger.warning("Record rejected: expected an object, got %s", type(record).__name__)
