"""
Publication Normalization Logic

This module transforms a validated publication record into the canonical
schema stored in the publications tables. It handles legacy field migration,
identifier/slug/URL generation, type conversions and default values.

Key Responsibilities:
- Migrate legacy field names and drop them from the result
- Generate the short id, slug and URL path
- Apply defaults for status, timestamps, images, owner, price and currency
- Guarantee complete location and contact objects
"""

import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Optional

from .config_loader import UploaderConfig
from .field_aliases import apply_legacy_aliases, strip_legacy_fields
from .slug_generator import (
    ShortIdExhaustedError,
    ShortIdGenerator,
    build_url_path,
    generate_slug,
)
from .validator import contact_number, default_city_for, parse_price

logger = logging.getLogger(__name__)


class NormalizationError(Exception):
    """Raised when a publication cannot be converted to the canonical schema."""
    pass


def normalize_publication(
    publication: dict[str, Any],
    short_ids: Optional[ShortIdGenerator] = None,
    config: Optional[UploaderConfig] = None,
    now: Optional[datetime] = None
) -> dict[str, Any]:
    """
    Normalize a validated publication into the canonical format.

    The input must already have passed validate_publication(); it is not
    modified. The result contains every field of the input (unknown fields
    are carried through) plus:

        {
            'id': str,              # Caller id, or the short id
            'shortId': str,         # Human-facing numeric id
            'slug': str,            # Derived from title
            'urlPath': str,         # /category/subcategory[/subsub]/shortId-slug
            'category': str,
            'subcategory': str,     # Default: 'general'
            'subsubcategory': str,  # Only present when given
            'price': float,         # Default: 0
            'currency': str,        # Default: 'PEN'
            'location': dict,       # Always has 'city'
            'contact': dict,        # name, phone, whatsapp, email
            'features': dict,       # Merged with legacy 'attributes'
            'images': list[str],    # Default: []
            'status': str,          # Default: 'active'
            'user_id': str,         # Default: 'admin'
            'created_at': str,      # ISO 8601, default: now
            'updated_at': str,      # ISO 8601, default: now
        }

    Args:
        publication: Validated publication dictionary
        short_ids: Generator shared across one import run; a private one is
                   created when None
        config: Deployment defaults; built-in defaults when None
        now: Timestamp used for missing created_at/updated_at (defaults to
             current UTC time)

    Returns:
        Canonical publication dictionary

    Raises:
        NormalizationError: If the record cannot be normalized
    """
    config = config or UploaderConfig()
    if short_ids is None:
        short_ids = ShortIdGenerator(
            digits=config.short_id.digits,
            max_attempts=config.short_id.max_attempts,
        )

    try:
        record = dict(publication)
        try:
            apply_legacy_aliases(record)
        except TypeError as e:
            raise NormalizationError(str(e)) from e

        title = record.get('title')
        category = record.get('category')
        if not title or not isinstance(title, str):
            raise NormalizationError("title is required and must be a non-empty string")
        if not category or not isinstance(category, str):
            raise NormalizationError("category is required and must be a non-empty string")

        try:
            short_id = short_ids.next_id()
        except ShortIdExhaustedError as e:
            raise NormalizationError(str(e)) from e

        slug = generate_slug(title)
        subcategory = record.get('subcategory') or config.subcategory
        subsubcategory = record.get('subsubcategory') or None
        url_path = build_url_path(category, subcategory, short_id, slug, subsubcategory)

        timestamp = _format_timestamp(now or datetime.now(timezone.utc))

        normalized = {
            **record,
            'id': _resolve_id(record.get('id'), short_id),
            'shortId': short_id,
            'slug': slug,
            'urlPath': url_path,
            'category': category,
            'subcategory': subcategory,
            'price': _normalize_price(record.get('price')),
            'currency': record.get('currency') or config.currency,
            'location': _normalize_location(record.get('location'), config),
            'contact': _normalize_contact(record.get('contact'), config),
            'features': _normalize_features(record.get('features')),
            'images': _normalize_images(record.get('images')),
            'status': record.get('status') or config.status,
            'user_id': record.get('user_id') or config.user_id,
            'created_at': record.get('created_at') or timestamp,
            'updated_at': record.get('updated_at') or timestamp,
        }

        if subsubcategory:
            normalized['subsubcategory'] = subsubcategory
        else:
            normalized.pop('subsubcategory', None)

        strip_legacy_fields(normalized)

        logger.debug(
            "Successfully normalized publication",
            extra={
                'id': normalized['id'],
                'short_id': short_id,
                'category': category,
                'url_path': url_path,
            }
        )

        return normalized

    except NormalizationError:
        raise
    except Exception as e:
        logger.error(
            "Unexpected error during normalization",
            extra={
                'error': str(e),
                'error_type': type(e).__name__,
                'record_keys': list(publication.keys()) if publication else None,
            }
        )
        raise NormalizationError(f"Unexpected normalization error: {e}") from e


def _resolve_id(raw_id: Any, short_id: str) -> str:
    """
    Keep the caller's id unless it is missing or a legacy composite id.

    Legacy exports used ids such as ``prefix_1700000000_ab12cd34``; those are
    recognised by the underscore and replaced by the short id.
    """
    if raw_id is None or raw_id == '' or isinstance(raw_id, bool):
        return short_id
    raw_id = str(raw_id)
    if '_' in raw_id:
        return short_id
    return raw_id


def _normalize_price(value: Any) -> float:
    if value is None or value == '':
        return 0.0
    price = parse_price(value)
    if price is None:
        raise NormalizationError(f"Invalid price: {value}")
    return price


def _normalize_location(location: Any, config: UploaderConfig) -> dict[str, Any]:
    if not location:
        return {'city': config.region.city, 'district': config.region.district}
    if not isinstance(location, Mapping):
        raise NormalizationError(
            f"location must be an object, got {type(location).__name__}"
        )
    normalized = dict(location)
    if not normalized.get('city'):
        normalized['city'] = default_city_for(normalized, config.region.city)
    return normalized


def _normalize_contact(contact: Any, config: UploaderConfig) -> dict[str, Any]:
    defaults = config.contact
    if contact is None:
        return {
            'name': defaults.name,
            'phone': defaults.phone,
            'whatsapp': defaults.whatsapp,
            'email': defaults.email,
        }
    if not isinstance(contact, Mapping):
        raise NormalizationError(
            f"contact must be an object, got {type(contact).__name__}"
        )

    normalized = {key: value for key, value in contact.items() if key != 'phones'}
    phones = contact.get('phones')
    phone = contact.get('phone')
    if not phone and isinstance(phones, list) and phones:
        phone = phones[0]
    phone = contact_number(phone)

    normalized.update({
        'name': contact.get('name') or defaults.name,
        'phone': phone,
        'whatsapp': contact_number(contact.get('whatsapp')) or phone,
        'email': contact.get('email') or defaults.email,
    })
    return normalized


def _normalize_features(features: Any) -> dict[str, Any]:
    if features is None:
        return {}
    if not isinstance(features, Mapping):
        raise NormalizationError(
            f"features must be an object, got {type(features).__name__}"
        )
    return dict(features)


def _normalize_images(images: Any) -> list[str]:
    if images is None:
        return []
    if not isinstance(images, list):
        raise NormalizationError(f"images must be a list, got {type(images).__name__}")
    for image in images:
        if not isinstance(image, str):
            raise NormalizationError(
                f"images must contain strings, got {type(image).__name__}"
            )
    return list(images)


def _format_timestamp(value: datetime) -> str:
    """Format as ISO 8601 with millisecond precision and a 'Z' suffix for UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec='milliseconds').replace('+00:00', 'Z')
