# blogdesk/slug.py
import re

_DISALLOWED = re.compile(r'[^a-z0-9\s-]')
_SEPARATORS = re.compile(r'[\s_]+')


def slugify(text: str) -> str:
    """Convert a post title or category name to a URL-safe slug.

    Uniqueness is not guaranteed here; the unique constraint on ``slug``
    decides that at write time. Input made only of punctuation yields "".
    """
    # Remove special characters except hyphens
    slug = _DISALLOWED.sub('', text.lower())
    # Replace whitespace with hyphens
    slug = _SEPARATORS.sub('-', slug)
    # Remove leading/trailing hyphens
    return slug.strip('-')
