"""
Identifier generation for asset scan codes and public slugs.
"""

import re
import secrets
import string

# Same alphabet as nanoid: URL-safe, no padding characters.
SLUG_ALPHABET = string.ascii_letters + string.digits + "_-"
CODE_ALPHABET = string.ascii_uppercase + string.digits

_PREFIX_RE = re.compile(r"[^A-Z0-9]")


class IDGenerator:
    """ID generation utilities"""

    @staticmethod
    def generate_public_slug(length: int = 10) -> str:
        """Generate a short, non-guessable public slug"""
        if length < 6:
            raise ValueError("Public slug length must be at least 6")
        return ''.join(secrets.choice(SLUG_ALPHABET) for _ in range(length))

    @staticmethod
    def generate_short_id(length: int = 8) -> str:
        """Generate a short alphanumeric ID"""
        return ''.join(secrets.choice(CODE_ALPHABET) for _ in range(length))

    @staticmethod
    def generate_external_code(category: str) -> str:
        """Generate a scan code in format BED-1A2B3C4D"""
        prefix = _PREFIX_RE.sub("", category.upper())[:4] or "AST"
        return f"{prefix}-{IDGenerator.generate_short_id(8)}"
