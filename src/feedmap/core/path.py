from __future__ import annotations
import logging
import re
from typing import Any, List, Optional, Tuple

from .exceptions import PathSyntaxError
from .results import Extraction, ExtractionResult, PathEmptyError, PathShapeError
from .types import JsonShape, classify_shape

_log = logging.getLogger(__name__)


class PathResolver:
    """
    Resolve dotted paths into nested dict/list structures.

    Supported selectors per segment:
      - key                  e.g. products
      - key[N]               index into the list held by key
      - [N]                  index into the current value

    A plain key applied to a list is broadcast over its elements, so
    ``products.sku`` over a list of products yields the list of skus.
    Arrays at the end of a path are returned intact.

    Examples:
      catalog.products
      catalog.products[0].properties
      feed.items.sku
    """

    _segment = re.compile(r"^([^\[\]]*)(?:\[(\d+)\])?$")

    @classmethod
    def resolve(cls, obj: Any, path: Optional[str]) -> Any:
        if not path:
            return obj

        try:
            return cls._walk(obj, cls.parse(path))
        except Exception as exc:
            _log.debug("Path %r could not be resolved: %r", path, exc)
            return None

    @classmethod
    def parse(cls, path: str) -> List[Tuple[str, Optional[int]]]:
        return [cls.parse_segment(seg) for seg in path.split(".")]

    @classmethod
    def parse_segment(cls, segment: str) -> Tuple[str, Optional[int]]:
        m = cls._segment.match(segment)
        if not m:
            raise PathSyntaxError(f"Malformed path segment '{segment}'")

        key, index = m.group(1), m.group(2)
        return key, (int(index) if index is not None else None)

    @classmethod
    def _walk(cls, obj: Any, segments: List[Tuple[str, Optional[int]]]) -> Any:
        cur = obj
        for key, index in segments:
            if cur is None:
                return None

            if index is not None:
                base = cls._field(cur, key) if key else cur
                if not isinstance(base, list) or len(base) <= index:
                    return None
                cur = base[index]
                continue

            if isinstance(cur, list):
                cur = [el.get(key) if isinstance(el, dict) else None for el in cur]
                continue

            cur = cls._field(cur, key)

        return cur

    @staticmethod
    def _field(base: Any, key: str) -> Any:
        if isinstance(base, dict):
            return base.get(key)
        return None


def resolve(obj: Any, path: Optional[str]) -> Any:
    return PathResolver.resolve(obj, path)


def extract(document: Any, path: Optional[str]) -> ExtractionResult:
    path = path or ""
    value = PathResolver.resolve(document, path)

    if value is None:
        if path:
            return PathEmptyError(path)
        return PathEmptyError(
            path,
            message="The source file appears empty or is not a valid JSON object/array at the root.",
        )

    shape = classify_shape(value)
    if not shape.mappable:
        return PathShapeError(path, shape, value)

    return Extraction(path, value, shape)
