"""
Short Code Generator

Produces random candidate codes for links created without an explicit code.

Design Decisions:
- Alphabet [A-Za-z0-9]: 62 URL-safe symbols, 62^6 (about 5.6e10) codes at length 6
- Cryptographic RNG (secrets): codes are not guessable from earlier ones
- No uniqueness guarantee: the link registry's unique index decides,
  and the registry retries on collision
"""

import secrets
import string

ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits

MIN_CODE_LENGTH = 6
MAX_CODE_LENGTH = 8


def generate_code(length: int = MIN_CODE_LENGTH) -> str:
    """
    Generate a random short code.

    Each character is drawn uniformly and independently from ALPHABET.

    Args:
        length: Number of characters (6-8)

    Returns:
        A candidate code, e.g. "Ab3xZ9"

    Raises:
        ValueError: If length is outside 6-8
    """
    if not MIN_CODE_LENGTH <= length <= MAX_CODE_LENGTH:
        raise ValueError(
            f"Code length must be between {MIN_CODE_LENGTH} and {MAX_CODE_LENGTH}, got {length}"
        )
    return "".join(secrets.choice(ALPHABET) for _ in range(length))
