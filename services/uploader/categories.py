"""
Category Table

Fixed mapping from publication category to the physical table that stores it.
The order of the entries is significant: it is the order used when listing the
valid categories in error messages.
"""

from typing import Optional

# Category name -> storage table (must match the publications database)
CATEGORY_COLLECTIONS: dict[str, str] = {
    'empleos': 'publications_empleos',
    'inmuebles': 'publications_inmuebles',
    'vehiculos': 'publications_vehiculos',
    'servicios': 'publications_servicios',
    'productos': 'publications_productos',
    'eventos': 'publications_eventos',
    'negocios': 'publications_negocios',
    'comunidad': 'publications_comunidad',
}

VALID_CATEGORIES: tuple[str, ...] = tuple(CATEGORY_COLLECTIONS)


def is_valid_category(category: object) -> bool:
    """Return True if ``category`` is one of the fixed category names."""
    return isinstance(category, str) and category in CATEGORY_COLLECTIONS


def collection_for(category: str, table_prefix: Optional[str] = None) -> str:
    """
    Resolve a category to its storage table.

    Args:
        category: Canonical category name
        table_prefix: Optional override for the ``publications_`` prefix

    Returns:
        Table name for the category

    Raises:
        KeyError: If the category is not part of the Category Table
    """
    collection = CATEGORY_COLLECTIONS[category]
    if table_prefix is None:
        return collection
    return f"{table_prefix}{category}"
