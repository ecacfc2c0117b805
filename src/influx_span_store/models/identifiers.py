"""
Identifier helpers for trace, span and parent IDs.

Identifiers are unsigned 64-bit integers. Their canonical form is a 16 character
lowercase hexadecimal string, which is also how they are stored as InfluxDB tags.
"""

import random
import re

from ..errors import InvalidIdentifierError

ID_BITS = 64
MAX_ID = (1 << ID_BITS) - 1

# Sentinel meaning "no parent"; a span whose parent is ROOT_ID is a root span.
ROOT_ID = 0

CANONICAL_ID_PATTERN = re.compile(r"^[0-9a-f]{16}$")
_PARSEABLE_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{1,16}$")

_random = random.SystemRandom()


def format_id(value: int) -> str:
    """Return the canonical string encoding of an identifier."""
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= MAX_ID:
        raise InvalidIdentifierError(f"identifier out of range: {value!r}")
    return format(value, "016x")


def parse_id(text: str) -> int:
    """
    Parse a hexadecimal identifier.

    Args:
        text: One to sixteen hexadecimal digits, in either case

    Returns:
        The identifier as an integer

    Raises:
        InvalidIdentifierError: If the text is not a hexadecimal identifier
    """
    if not isinstance(text, str) or not _PARSEABLE_ID_PATTERN.match(text):
        raise InvalidIdentifierError(f"invalid identifier: {text!r}")
    return int(text, 16)


def canonical_id(value) -> str:
    """Accept an int or string identifier and return its canonical string."""
    if isinstance(value, str):
        if CANONICAL_ID_PATTERN.match(value):
            return value
        raise InvalidIdentifierError(f"non-canonical identifier: {value!r}")
    return format_id(value)


def generate_id() -> int:
    """Return a random non-zero identifier."""
    return _random.randint(1, MAX_ID)
