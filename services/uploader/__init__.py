"""
Uploader Service

This service ingests loosely structured publication (advertisement) records
from JSON files and converts them into the canonical schema expected by the
publications store.

Key responsibilities:
- Read JSON files from a source directory
- Migrate legacy field names to their canonical names
- Validate required fields, category taxonomy and prices
- Generate short ids, slugs and URL paths
- Write canonical publications to the per-category tables
"""

__version__ = "0.1.0"
