"""
Publication Validation

Checks a raw publication record before it is normalized. Besides reporting
whether a record can be imported, validation fills in the importer's
convenience defaults in place:

- legacy field names are migrated to their canonical names
- a placeholder contact is synthesized when none is given
- a default location is synthesized when none is given

The synthesized contact and location are placeholders, not corrections.
Callers that need accurate data must supply it explicitly.
"""

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

from .categories import VALID_CATEGORIES, is_valid_category
from .config_loader import UploaderConfig
from .field_aliases import apply_legacy_aliases

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('title', 'description')


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one record."""

    valid: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def fail(cls, error: str) -> "ValidationResult":
        return cls(valid=False, error=error)


def validate_publication(
    publication: Any,
    config: Optional[UploaderConfig] = None
) -> ValidationResult:
    """
    Validate a raw publication and apply fallbacks in place.

    Checks, in order:
    1. The record is a JSON object
    2. ``title`` and ``description`` are present and non-empty
    3. ``category`` (or legacy ``categorySlug``) is one of the fixed categories
    4. ``contact`` and ``location`` are objects when given (defaults otherwise)
    5. ``price`` (or legacy ``amount``), when given, is a number >= 0

    Args:
        publication: Raw record as parsed from JSON (mutated on success paths)
        config: Deployment defaults; built-in defaults when None

    Returns:
        ValidationResult with ``valid`` set, and ``error`` describing the first
        problem found when invalid
    """
    if not isinstance(publication, dict):
        return ValidationResult.fail(
            f"Publication must be a JSON object, got {type(publication).__name__}"
        )

    config = config or UploaderConfig()

    category_before = publication.get('category')
    try:
        apply_legacy_aliases(publication)
    except TypeError as e:
        return ValidationResult.fail(str(e))

    if not category_before and publication.get('category'):
        logger.info(
            f'Using categorySlug "{publication["category"]}" for "{publication.get("title")}"'
        )

    missing_fields = [
        field for field in REQUIRED_FIELDS if _is_blank(publication.get(field))
    ]
    if missing_fields:
        return ValidationResult.fail(
            f"Missing required fields: {', '.join(missing_fields)}"
        )

    for field in REQUIRED_FIELDS:
        if not isinstance(publication[field], str):
            return ValidationResult.fail(
                f"Field {field} must be a string, got {type(publication[field]).__name__}"
            )

    category = publication.get('category')
    if not is_valid_category(category):
        return ValidationResult.fail(
            f"Invalid category: {category}. Valid categories: {', '.join(VALID_CATEGORIES)}"
        )

    contact_error = _apply_contact_defaults(publication, config)
    if contact_error:
        return ValidationResult.fail(contact_error)

    location_error = _apply_location_defaults(publication, config)
    if location_error:
        return ValidationResult.fail(location_error)

    if publication.get('price') is not None:
        if parse_price(publication['price']) is None:
            return ValidationResult.fail(f"Invalid price: {publication['price']}")

    return ValidationResult.ok()


def parse_price(value: Any) -> Optional[float]:
    """
    Parse a price into a non-negative finite float.

    Accepts numbers and numeric strings. Booleans are rejected even though
    Python treats them as integers.

    Returns:
        The price as float, or None if the value is not a valid price
    """
    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        price = float(value)
    elif isinstance(value, str):
        try:
            price = float(value.strip())
        except ValueError:
            return None
    else:
        return None

    if math.isnan(price) or math.isinf(price) or price < 0:
        return None
    return price


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _apply_contact_defaults(publication: dict[str, Any], config: UploaderConfig) -> Optional[str]:
    """Collapse legacy phone lists and synthesize a contact when absent."""
    contact = publication.get('contact')
    defaults = config.contact

    if contact is None:
        publication['contact'] = {
            'name': defaults.name,
            'phone': defaults.phone,
            'whatsapp': defaults.whatsapp,
            'email': defaults.email,
        }
        return None

    if not isinstance(contact, Mapping):
        return f"Invalid contact: expected an object, got {type(contact).__name__}"

    phones = contact.get('phones')
    if phones is not None:
        if not isinstance(phones, list):
            return f"Invalid contact.phones: expected a list, got {type(phones).__name__}"
        phone = contact_number(phones[0]) if phones else ''
        publication['contact'] = {
            'name': contact.get('name') or defaults.name,
            'phone': phone,
            'whatsapp': phone,
            'email': contact.get('email') or defaults.email,
        }
        return None

    # Flat contact object: keep what was given, fill the gaps
    phone = contact_number(contact.get('phone'))
    publication['contact'] = {
        **contact,
        'name': contact.get('name') or defaults.name,
        'phone': phone,
        'whatsapp': contact_number(contact.get('whatsapp')) or phone,
        'email': contact.get('email') or defaults.email,
    }
    return None


def _apply_location_defaults(publication: dict[str, Any], config: UploaderConfig) -> Optional[str]:
    """Synthesize the default region, or complete a location lacking a city."""
    location = publication.get('location')
    region = config.region

    if not location:
        publication['location'] = {'city': region.city, 'district': region.district}
        logger.info(f'Auto-created location for "{publication.get("title")}"')
        return None

    if not isinstance(location, Mapping):
        return f"Invalid location: expected an object, got {type(location).__name__}"

    if not location.get('city'):
        location = dict(location)
        location['city'] = default_city_for(location, region.city)
        publication['location'] = location

    return None


def default_city_for(location: Mapping[str, Any], region_city: str) -> str:
    """
    Pick the city for a location that has none.

    A location with a district belongs to the default region; ``province``
    only stands in for the city when there is no district either.
    """
    if location.get('district'):
        return region_city
    return location.get('province') or region_city


def contact_number(value: Any) -> str:
    """Return a phone number as a string ('' when missing)."""
    if value is None or value == '' or isinstance(value, bool):
        return ''
    return str(value).strip()
