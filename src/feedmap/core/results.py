from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from .types import JsonShape


INVALID_RECORD_MESSAGE = "Invalid source product data for preview."


@dataclass(frozen=True)
class Extraction:
    """
    Successful extraction of a mappable value (object or array of objects).
    """
    path: str
    value: Any
    shape: JsonShape

    @property
    def records(self) -> List[Any]:
        if isinstance(self.value, list):
            return self.value
        return [self.value]

    @property
    def record_count(self) -> Optional[int]:
        if isinstance(self.value, list):
            return len(self.value)
        return None


@dataclass(frozen=True)
class PathEmptyError:
    path: str
    message: str = "The specified Data Path resulted in no data. Check the path and the source file."


@dataclass(frozen=True)
class PathShapeError:
    path: str
    shape: JsonShape
    value: Any = None
    message: str = "Data at the specified path is not suitable for mapping (must be an object or array of objects)."


ExtractionResult = Union[Extraction, PathEmptyError, PathShapeError]


@dataclass(frozen=True)
class StaleKeyWarning:
    """A source key that disappeared from the field options and was cleared."""
    location: str
    key: str


@dataclass(frozen=True)
class SuggestionRejected:
    section: str
    entry: Any
    reason: str


def record_error(message: str = INVALID_RECORD_MESSAGE) -> Dict[str, Any]:
    return {"error": message}


def is_error_result(result: Any) -> bool:
    return isinstance(result, dict) and "error" in result


def is_extraction_error(result: Any) -> bool:
    return isinstance(result, (PathEmptyError, PathShapeError))
