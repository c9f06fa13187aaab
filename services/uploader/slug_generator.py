"""
Slug, Short Id and URL Path Generation

Pure helpers used by the normalizer to build the public address of a
publication:

    /{category}/{subcategory}[/{subsubcategory}]/{short_id}-{slug}

Key Concepts:
- Slugs are deterministic: the same title always yields the same slug
- Spanish accented vowels and ñ are transliterated, not dropped
- Short ids are random, human-facing numbers; uniqueness is only enforced
  within one ShortIdGenerator (i.e. one import run)
"""

import random
import re
import unicodedata
from typing import Optional

MAX_SLUG_LENGTH = 80

# Characters that survive the cleanup step: ASCII word characters, whitespace,
# and the accented letters that get transliterated below.
_DISALLOWED_CHARS = re.compile(r'[^a-z0-9_\sáàäâéèëêíìïîóòöôúùüûñ]')
_WHITESPACE = re.compile(r'\s+')
_REPEATED_HYPHENS = re.compile(r'-+')

_TRANSLITERATIONS = (
    (re.compile(r'[áàäâ]'), 'a'),
    (re.compile(r'[éèëê]'), 'e'),
    (re.compile(r'[íìïî]'), 'i'),
    (re.compile(r'[óòöô]'), 'o'),
    (re.compile(r'[úùüû]'), 'u'),
    (re.compile(r'ñ'), 'n'),
)


def generate_slug(title: str) -> str:
    """
    Generate a URL-friendly slug from a publication title.

    Examples:
        >>> generate_slug("¡Vendo Casa Bonita!")
        'vendo-casa-bonita'
        >>> generate_slug("Clases de Inglés  en Ñuñoa")
        'clases-de-ingles-en-nunoa'

    Args:
        title: Publication title

    Returns:
        Lowercase, hyphenated slug of at most 80 characters
    """
    if not title:
        return ''

    slug = unicodedata.normalize('NFC', title).lower()
    slug = _DISALLOWED_CHARS.sub('', slug)
    slug = _WHITESPACE.sub('-', slug)
    for pattern, replacement in _TRANSLITERATIONS:
        slug = pattern.sub(replacement, slug)
    slug = _REPEATED_HYPHENS.sub('-', slug).strip('-')

    return slug[:MAX_SLUG_LENGTH]


def build_url_path(
    category: str,
    subcategory: str,
    short_id: str,
    slug: str,
    subsubcategory: Optional[str] = None
) -> str:
    """
    Compose the public URL path of a publication.

    Examples:
        >>> build_url_path('inmuebles', 'casas', '1234', 'vendo-casa')
        '/inmuebles/casas/1234-vendo-casa'
        >>> build_url_path('inmuebles', 'casas', '1234', 'vendo-casa', 'campo')
        '/inmuebles/casas/campo/1234-vendo-casa'
    """
    segments = [category, subcategory]
    if subsubcategory:
        segments.append(subsubcategory)
    segments.append(f"{short_id}-{slug}")
    return '/' + '/'.join(segments)


class ShortIdExhaustedError(Exception):
    """Raised when no unused short id could be drawn."""
    pass


class ShortIdGenerator:
    """
    Draws random fixed-width numeric ids, never repeating within one instance.

    A fresh generator should be used per import run. Ids already stored in
    the database by earlier runs are not known here; enforcing uniqueness
    across runs is the job of the storage layer.
    """

    def __init__(
        self,
        digits: int = 4,
        max_attempts: int = 50,
        rng: Optional[random.Random] = None
    ):
        self.digits = digits
        self.max_attempts = max_attempts
        self._low = 10 ** (digits - 1)
        self._high = 10 ** digits - 1
        self._rng = rng or random.Random()
        self._issued: set[str] = set()

    def next_id(self) -> str:
        """
        Return a short id not yet issued by this generator.

        Raises:
            ShortIdExhaustedError: If every attempt collided with an issued id
        """
        for _ in range(self.max_attempts):
            candidate = str(self._rng.randint(self._low, self._high))
            if candidate not in self._issued:
                self._issued.add(candidate)
                return candidate

        raise ShortIdExhaustedError(
            f"Could not draw an unused {self.digits}-digit short id after "
            f"{self.max_attempts} attempts ({len(self._issued)} already issued)"
        )
