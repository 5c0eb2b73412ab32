"""Filename resolution and sanitization for downloaded media."""

import re
from collections.abc import Collection
from pathlib import PurePosixPath
from urllib.parse import unquote, urlparse

from pathvalidate import sanitize_filename
from unidecode import unidecode

DEFAULT_FILENAME = "download"

_FILENAME_EXT_PATTERN = re.compile(r"filename\*\s*=\s*([^;]+)", re.IGNORECASE)
_FILENAME_PATTERN = re.compile(
    r'filename\s*=\s*(?:"((?:[^"\\]|\\.)*)"|([^;]+))', re.IGNORECASE
)

# RFC 5987 extended value: charset'lang'percent-encoded
_EXT_VALUE_PATTERN = re.compile(r"^(?P<charset>[^']*)'[^']*'(?P<value>.*)$")


def clean_filename(s: str, *, ascii_filenames: bool = False) -> str:
    """Sanitize a string for use in a filename.

    Optionally transliterates unicode characters to ASCII equivalents,
    then removes or replaces characters that are invalid in filenames.

    Args:
        s: String to sanitize.
        ascii_filenames: If True, transliterate unicode to ASCII before sanitizing.

    Returns:
        Sanitized string safe for use in filenames.

    Example:
        >>> clean_filename("twitter_1825427547108053062.mp4")
        'twitter_1825427547108053062.mp4'
        >>> clean_filename("AC/DC.mp3")
        'ACDC.mp3'
        >>> clean_filename("Björk.opus", ascii_filenames=True)
        'Bjork.opus'
    """
    if ascii_filenames:
        s = unidecode(s)
    return sanitize_filename(s)


def filename_from_content_disposition(header: str | None) -> str | None:
    """Extract the filename from a Content-Disposition header.

    Prefers the RFC 5987 ``filename*`` parameter over plain ``filename``.

    Args:
        header: Raw header value, or None.

    Returns:
        The filename, or None if the header has none.
    """
    if not header:
        return None

    if match := _FILENAME_EXT_PATTERN.search(header):
        extended = match.group(1).strip().strip('"')
        if ext_match := _EXT_VALUE_PATTERN.match(extended):
            charset = ext_match.group("charset") or "utf-8"
            try:
                name = unquote(ext_match.group("value"), encoding=charset)
            except LookupError:
                name = unquote(ext_match.group("value"))
        else:
            name = unquote(extended)
        if name:
            return name

    if match := _FILENAME_PATTERN.search(header):
        quoted, bare = match.group(1), match.group(2)
        name = quoted.replace('\\"', '"') if quoted is not None else bare.strip()
        return name or None

    return None


def filename_from_url(url: str) -> str | None:
    """Use the last path segment of a URL as a filename.

    Returns:
        The decoded segment, or None if it has no extension.
    """
    segment = PurePosixPath(unquote(urlparse(url).path)).name
    if not segment or "." not in segment.strip("."):
        return None
    return segment


def resolve_filename(
    *candidates: str | None,
    fallback: str = DEFAULT_FILENAME,
    ascii_filenames: bool = False,
) -> str:
    """Pick the first usable candidate and sanitize it.

    Args:
        candidates: Filenames in order of preference; None entries are skipped.
        fallback: Name used when no candidate survives sanitization.
        ascii_filenames: If True, transliterate unicode to ASCII.

    Returns:
        A non-empty filename safe to join onto a directory.
    """
    for candidate in candidates:
        if not candidate:
            continue
        safe = clean_filename(candidate, ascii_filenames=ascii_filenames).strip()
        if safe and safe.strip("."):
            return safe
    return clean_filename(fallback, ascii_filenames=ascii_filenames) or DEFAULT_FILENAME


def unique_filename(
    name: str, taken: Collection[str], *, fallback: str | None = None
) -> str:
    """Make a filename distinct from names already used in a batch.

    Tries ``name``, then ``fallback``, then ``name`` with a numeric suffix
    before the extension (``image_2.jpg``, ``image_3.jpg``...).

    Args:
        name: Preferred filename.
        taken: Filenames already claimed.
        fallback: Alternative name to try before numbering.

    Returns:
        A filename not in taken.
    """
    if name not in taken:
        return name
    if fallback and fallback not in taken:
        return fallback

    path = PurePosixPath(name)
    n = 2
    while (candidate := f"{path.stem}_{n}{path.suffix}") in taken:
        n += 1
    return candidate
