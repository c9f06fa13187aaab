"""
Legacy Field Migration Table

Upstream tools have exported publications with several naming conventions over
time. This module lists every accepted legacy field once, together with the
canonical field it migrates to and the policy used when both are present.

Policies:
- fill: copy the legacy value only when the canonical field is absent or empty
- merge: both values are mappings; canonical entries win on key collision
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

FILL = 'fill'
MERGE = 'merge'


@dataclass(frozen=True)
class FieldAlias:
    """One legacy -> canonical field migration rule."""

    legacy: str
    canonical: str
    policy: str = FILL


LEGACY_FIELD_ALIASES: tuple[FieldAlias, ...] = (
    FieldAlias('categorySlug', 'category'),
    FieldAlias('subcategorySlug', 'subcategory'),
    FieldAlias('subSubcategorySlug', 'subsubcategory'),
    FieldAlias('amount', 'price'),
    FieldAlias('attributes', 'features', MERGE),
)

LEGACY_FIELDS: frozenset[str] = frozenset(alias.legacy for alias in LEGACY_FIELD_ALIASES)


def _is_missing(value: Any) -> bool:
    return value is None or value == ''


def apply_legacy_aliases(record: dict[str, Any]) -> dict[str, Any]:
    """
    Copy legacy field values onto their canonical names, in place.

    Legacy keys are left on the record so that the function is idempotent;
    use strip_legacy_fields() once the record has been fully normalized.

    Args:
        record: Raw publication dictionary (mutated)

    Returns:
        The same dictionary, for chaining

    Raises:
        TypeError: If a merge alias holds a value that is not a mapping
    """
    for alias in LEGACY_FIELD_ALIASES:
        legacy_value = record.get(alias.legacy)
        if _is_missing(legacy_value):
            continue

        if alias.policy == MERGE:
            current = record.get(alias.canonical)
            if current is None:
                current = {}
            if not isinstance(legacy_value, Mapping) or not isinstance(current, Mapping):
                raise TypeError(
                    f"{alias.legacy} and {alias.canonical} must be mappings to be merged"
                )
            record[alias.canonical] = {**legacy_value, **current}
        elif _is_missing(record.get(alias.canonical)):
            record[alias.canonical] = legacy_value
            logger.debug(
                "Migrated legacy field",
                extra={'legacy': alias.legacy, 'canonical': alias.canonical},
            )

    return record


def strip_legacy_fields(record: dict[str, Any]) -> dict[str, Any]:
    """Remove every legacy key from the record, in place."""
    for legacy in LEGACY_FIELDS:
        record.pop(legacy, None)
    return record
