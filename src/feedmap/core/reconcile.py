from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Any, List, Sequence, Tuple

from .discovery import FieldOption, discover_options, option_values
from .results import Extraction, StaleKeyWarning
from .spec import MappingSpec


@dataclass(frozen=True)
class Reconciliation:
    spec: MappingSpec
    stale: Tuple[StaleKeyWarning, ...] = ()


def reconcile(spec: MappingSpec, options: Sequence[FieldOption]) -> Reconciliation:
    """
    Bring a mapping spec in line with a fresh set of field options.

    Keys that vanished from the options are cleared, never deleted: optional
    fields stay enrolled and metafield rows stay listed so they can be
    re-mapped. With no options at all the whole spec is reset.
    """
    valid = option_values(options)
    stale: List[StaleKeyWarning] = []

    title = spec.title_key
    if title and title not in valid:
        stale.append(StaleKeyWarning("title", title))
        title = ""
    if not title and options:
        title = options[0].value

    keys = dict(spec.optional_field_keys)
    for fld, key in spec.optional_field_keys.items():
        if key and key not in valid:
            stale.append(StaleKeyWarning(fld.value, key))
            keys[fld] = ""

    metafields = []
    for i, m in enumerate(spec.metafield_mappings):
        if m.source_key and m.source_key not in valid:
            stale.append(StaleKeyWarning(f"metafieldMappings[{i}]", m.source_key))
            m = replace(m, source_key="")
        metafields.append(m)

    if not options:
        return Reconciliation(MappingSpec(), tuple(stale))

    out = replace(spec, title_key=title, optional_field_keys=keys, metafield_mappings=tuple(metafields))
    return Reconciliation(out, tuple(stale))


def validate(spec: MappingSpec, options: Sequence[FieldOption]) -> MappingSpec:
    return reconcile(spec, options).spec


def revalidate(spec: MappingSpec, result: Any) -> Reconciliation:
    """Reconcile against an ``extract()`` result; extraction errors leave nothing to map."""
    if isinstance(result, Extraction):
        return reconcile(spec, discover_options(result))
    return reconcile(spec, [])
