"""Publication Uploader Test Suite.

This package contains unit and integration tests for the publication uploader.

Test Structure:
- unit/: Unit tests for individual functions and classes
- integration/: Integration tests against a real PostgreSQL database
"""

__version__ = "0.1.0"
