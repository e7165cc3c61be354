"""Short code generation utilities."""

import secrets
import string
from typing import Iterable, Optional


class ShortCodeGenerator:
    """Generate short codes for URLs."""

    # Base62 characters (alphanumeric, case-sensitive)
    BASE62_CHARS = string.ascii_letters + string.digits  # a-zA-Z0-9

    def __init__(self, default_length: int = 6, reserved_words: Iterable[str] = ()):
        """Initialize short code generator.

        Args:
            default_length: Default length for generated codes
            reserved_words: Codes that must never be handed out (route names)
        """
        if default_length < 1:
            raise ValueError("default_length must be positive")
        self.default_length = default_length
        self.reserved_words = frozenset(word.lower() for word in reserved_words)

    def generate_random(self, length: Optional[int] = None) -> str:
        """Generate a random short code.

        Uses the ``secrets`` CSPRNG so codes cannot be predicted from
        previously issued ones.

        Args:
            length: Length of the code (uses default if not specified)

        Returns:
            Random short code
        """
        length = length or self.default_length
        return ''.join(secrets.choice(self.BASE62_CHARS) for _ in range(length))

    def is_reserved(self, code: str) -> bool:
        """Check if code collides with a reserved word (case-insensitive)."""
        return code.lower() in self.reserved_words

    @staticmethod
    def is_valid_format(code: str) -> bool:
        """Check if code has valid format (alphanumeric).

        Args:
            code: Code to validate

        Returns:
            True if valid format
        """
        return bool(code) and all(c in ShortCodeGenerator.BASE62_CHARS for c in code)
