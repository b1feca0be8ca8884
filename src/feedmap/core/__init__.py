from .exceptions import MappingError, PathSyntaxError
from .types import Json, JsonShape, classify_shape
from .path import PathResolver, resolve, extract
from .results import (
    Extraction, PathEmptyError, PathShapeError, StaleKeyWarning, SuggestionRejected,
    is_error_result, is_extraction_error,
)
from .discovery import FieldOption, discover_options, element_options
from .fields import StandardField, Placement, Target, METAFIELD_TYPES
from .spec import MappingSpec, SingleMetafieldMapping, DynamicMetafieldMapping, MetafieldMapping
from .validation import validate_mapping
from .reconcile import Reconciliation, reconcile, validate, revalidate
from .suggestions import SuggestionReview, review_suggestions, merge_suggestions
from .engine import ProductTransformer, EngineConfig, transform
from .backends.pandas import DataFrameBackend, PandasBackend
from .preview import PreviewNavigator, preview_record, truncate_preview
from .builder.mapping import MappingSpecBuilder

__all__ = [
    "MappingError",
    "PathSyntaxError",
    "Json",
    "JsonShape",
    "classify_shape",
    "PathResolver",
    "resolve",
    "extract",
    "Extraction",
    "PathEmptyError",
    "PathShapeError",
    "StaleKeyWarning",
    "SuggestionRejected",
    "is_error_result",
    "is_extraction_error",
    "FieldOption",
    "discover_options",
    "element_options",
    "StandardField",
    "Placement",
    "Target",
    "METAFIELD_TYPES",
    "MappingSpec",
    "SingleMetafieldMapping",
    "DynamicMetafieldMapping",
    "MetafieldMapping",
    "validate_mapping",
    "Reconciliation",
    "reconcile",
    "validate",
    "revalidate",
    "SuggestionReview",
    "review_suggestions",
    "merge_suggestions",
    "ProductTransformer",
    "EngineConfig",
    "transform",
    "DataFrameBackend",
    "PandasBackend",
    "PreviewNavigator",
    "preview_record",
    "truncate_preview",
    "MappingSpecBuilder",
]
