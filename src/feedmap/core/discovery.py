from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Iterable, List, Set

from .results import Extraction, PathEmptyError, PathShapeError
from .types import JsonShape, classify_shape


@dataclass(frozen=True)
class FieldOption:
    label: str
    value: str

    @classmethod
    def of(cls, key: str) -> "FieldOption":
        return cls(label=key, value=key)


def discover_options(extracted: Any) -> List[FieldOption]:
    """
    List the mappable source keys of an extracted value.

    Objects contribute their own keys; arrays of objects contribute the keys of
    their first element. Any other shape has nothing to map.
    """
    if isinstance(extracted, (PathEmptyError, PathShapeError)):
        return []

    if isinstance(extracted, Extraction):
        extracted = extracted.value

    shape = classify_shape(extracted)
    if shape is JsonShape.OBJECT:
        return [FieldOption.of(str(k)) for k in extracted.keys()]

    if shape is JsonShape.ARRAY_OF_OBJECTS:
        return [FieldOption.of(str(k)) for k in extracted[0].keys()]

    return []


def element_options(value: Any) -> List[FieldOption]:
    if classify_shape(value) is not JsonShape.ARRAY_OF_OBJECTS:
        return []
    return discover_options(value)


def option_values(options: Iterable[FieldOption]) -> Set[str]:
    return {o.value for o in options}
