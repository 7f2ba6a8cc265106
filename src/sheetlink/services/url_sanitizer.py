"""Normalization of user-supplied URLs into hyperlink targets."""

import unicodedata
from urllib.parse import urlsplit

from sheetlink.utils.exceptions import InvalidUrlError

DEFAULT_MAX_URL_LENGTH = 2000

_WEB_SCHEMES = ("http://", "https://")
_MAILTO_SCHEME = "mailto:"


def sanitize_url(url: str, max_length: int = DEFAULT_MAX_URL_LENGTH) -> str:
    """Return a normalized absolute URL or raise :class:`InvalidUrlError`.

    Accepted forms are ``http://``, ``https://`` and ``mailto:`` URLs; a bare
    ``www.`` host is promoted to ``https://``. Anything else, including a
    bare domain such as ``example.com``, is rejected.

    Args:
        url: Raw URL text from a cell.
        max_length: Maximum length of the resulting URL.

    Returns:
        The sanitized URL.

    Raises:
        InvalidUrlError: If the URL is empty, too long, contains control
            characters, or has no recognized scheme.
    """
    candidate = url.strip()
    if not candidate:
        raise InvalidUrlError(url, reason="empty")

    if any(unicodedata.category(char) == "Cc" for char in candidate):
        raise InvalidUrlError(url, reason="control_characters")

    lowered = candidate.lower()
    if lowered.startswith(_WEB_SCHEMES):
        if not urlsplit(candidate).netloc:
            raise InvalidUrlError(url, reason="missing_host")
    elif lowered.startswith(_MAILTO_SCHEME):
        if len(candidate) == len(_MAILTO_SCHEME):
            raise InvalidUrlError(url, reason="missing_address")
    elif lowered.startswith("www."):
        candidate = f"https://{candidate}"
    else:
        raise InvalidUrlError(url, reason="unsupported_scheme")

    if len(candidate) > max_length:
        raise InvalidUrlError(url, reason="too_long")

    return candidate
