from __future__ import annotations
import json
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional

from .engine import transform
from .results import Extraction, PathEmptyError, PathShapeError
from .spec import MappingSpec

PREVIEW_CHAR_LIMIT = 5000


def preview_record(extracted: Any, index: int, spec: MappingSpec) -> Dict[str, Any]:
    """
    Transform the record at ``index`` of an extracted dataset.

    Returns an ``{"info": ...}`` or ``{"error": ...}`` dict when there is no
    product to show.
    """
    if isinstance(extracted, Extraction):
        extracted = extracted.value
    elif isinstance(extracted, (PathEmptyError, PathShapeError)):
        extracted = extracted.value if isinstance(extracted, PathShapeError) else None

    if extracted is None:
        return {"info": "No data processed yet."}

    if isinstance(extracted, list):
        if not 0 <= index < len(extracted):
            return {"error": "Preview index out of bounds."}
        return transform(extracted[index], spec)

    if index != 0:
        return {"error": "Preview navigation not possible for non-array data."}

    if isinstance(extracted, dict):
        return transform(extracted, spec)

    return {"info": "Data is not an object or array, cannot generate mapped preview."}


@dataclass(frozen=True)
class PreviewNavigator:
    """Selected position within the extracted records; moving returns a new navigator."""
    records: List[Any]
    index: int = 0

    @classmethod
    def of(cls, extracted: Any) -> "PreviewNavigator":
        if isinstance(extracted, Extraction):
            return cls(extracted.records)
        if isinstance(extracted, list):
            return cls(extracted)
        if extracted is None or isinstance(extracted, (PathEmptyError, PathShapeError)):
            return cls([])
        return cls([extracted])

    @property
    def total(self) -> int:
        return len(self.records)

    @property
    def can_previous(self) -> bool:
        return self.total > 1 and self.index > 0

    @property
    def can_next(self) -> bool:
        return self.total > 1 and self.index < self.total - 1

    def next(self) -> "PreviewNavigator":
        return replace(self, index=min(max(self.total - 1, 0), self.index + 1))

    def previous(self) -> "PreviewNavigator":
        return replace(self, index=max(0, self.index - 1))

    def current(self) -> Optional[Any]:
        if 0 <= self.index < self.total:
            return self.records[self.index]
        return None

    def render(self, spec: MappingSpec) -> Dict[str, Any]:
        return preview_record(self.records, self.index, spec)


def truncate_preview(data: Any, limit: int = PREVIEW_CHAR_LIMIT) -> str:
    """Pretty-print extracted data for display; arrays show their first element only."""
    if data is None:
        return '{ info: "No data fetched or processed yet." }'

    if isinstance(data, (dict, list)):
        if isinstance(data, list) and data:
            data = data[0]
        try:
            text = json.dumps(data, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            text = f'{{ error: "Could not format preview data: {e}" }}'
    else:
        text = str(data)

    if len(text) > limit:
        return text[:limit] + "\n... (truncated)"
    return text
