"""
Input Validators

This module provides validation functions for user inputs.
Both run before any database access so malformed input fails fast.

Security Considerations:
- Short codes are restricted to [A-Za-z0-9]{6,8}
- Length limits prevent DoS attacks
"""

import re
from urllib.parse import urlparse

CODE_PATTERN = re.compile(r"[A-Za-z0-9]{6,8}")
SCHEME_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*")
HOST_REQUIRED_SCHEMES = {"http", "https", "ftp", "ws", "wss"}

MAX_URL_LENGTH = 2048  # RFC 7230 recommendation


def is_valid_code(short_code: str) -> bool:
    """
    Check that a short code matches [A-Za-z0-9]{6,8} exactly.

    Args:
        short_code: The short code to check

    Returns:
        True if the whole string matches, False otherwise
    """
    if not isinstance(short_code, str):
        return False
    return CODE_PATTERN.fullmatch(short_code) is not None


def is_valid_url(url: str) -> bool:
    """
    Check that a destination is a syntactically valid absolute URL.

    The URL must parse and carry a well-formed scheme. Surrounding whitespace
    is ignored. Hierarchical web schemes (http, https, ftp, ws, wss) must also
    name a host; other schemes such as mailto: or urn: need not. The URL must
    fit within MAX_URL_LENGTH characters.

    Args:
        url: The URL string to validate

    Returns:
        True if valid, False otherwise
    """
    if not isinstance(url, str):
        return False

    url = url.strip()
    if not url or len(url) > MAX_URL_LENGTH:
        return False

    try:
        result = urlparse(url)
        # Accessing .port raises ValueError for out-of-range or non-numeric ports
        result.port
    except ValueError:
        return False

    if not result.scheme or not SCHEME_PATTERN.fullmatch(result.scheme):
        return False

    if result.netloc and any(char.isspace() for char in result.netloc):
        return False

    if result.scheme.lower() in HOST_REQUIRED_SCHEMES:
        return bool(result.hostname)

    return True
