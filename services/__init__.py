"""Publication Importer Services Package.

This package contains the services for loading classified advertisements:
- uploader: Validates, normalizes and persists publication JSON files
"""

__version__ = "0.1.0"
