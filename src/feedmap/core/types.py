from enum import Enum
from typing import Any, Dict, List, Union

Json = Union[Dict[str, Any], List[Any], str, int, float, bool, None]


class JsonShape(str, Enum):
    OBJECT = "object"
    ARRAY_OF_OBJECTS = "array_of_objects"
    ARRAY_OF_SCALARS = "array_of_scalars"
    SCALAR = "scalar"
    NULL = "null"

    @property
    def mappable(self) -> bool:
        return self in (JsonShape.OBJECT, JsonShape.ARRAY_OF_OBJECTS)


def classify_shape(value: Any) -> JsonShape:
    """
    Classify a decoded JSON value by the structure the mapping layer cares about.

    An array counts as ARRAY_OF_OBJECTS when its first element is an object;
    the element schema is assumed to be uniform. Empty arrays are reported as
    ARRAY_OF_SCALARS since no field names can be derived from them.
    """
    if value is None:
        return JsonShape.NULL

    if isinstance(value, dict):
        return JsonShape.OBJECT

    if isinstance(value, list):
        if value and isinstance(value[0], dict):
            return JsonShape.ARRAY_OF_OBJECTS

        return JsonShape.ARRAY_OF_SCALARS

    return JsonShape.SCALAR
