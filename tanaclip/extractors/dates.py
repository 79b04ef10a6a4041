"""Pick a single human-readable date out of noisy byline strings."""

from __future__ import annotations

import re

_MONTHS = (
    r"Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|Jun(?:e)?|Jul(?:y)?"
    r"|Aug(?:ust)?|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?"
)

# "July 22, 2025" / "Sept 3, 2024"
_LONG_FORM_RE = re.compile(rf"\b(?:{_MONTHS})\s+\d{{1,2}},\s+\d{{4}}\b")
# "2025-07-22", also when followed by a time part ("2025-07-22T10:00:00Z")
_ISO_RE = re.compile(r"\b\d{4}-\d{2}-\d{2}(?!\d)")

_EDGE_LEAD_RE = re.compile(r"^[\s\[(<\"'`\-–—]+")
_EDGE_TRAIL_RE = re.compile(r"[\s\])>\"'`\-–—]+$")
_WS_RE = re.compile(r"\s+")
_DATE_PREFIX_RE = re.compile(r"^date:\s*", re.IGNORECASE)
_SEGMENT_SPLIT_RE = re.compile(r"\s{2,}|;|\||,")
_BRACKET_EDGES_RE = re.compile(r"^[\s\[(]+|[\])\s]+$")
_BRACKETS_RE = re.compile(r"[\[\]]")
_YEAR_RE = re.compile(r"\d{4}")
_URL_YEAR_RE = re.compile(r"/(20\d{2})(?:/|$)")

MAX_FALLBACK_LEN = 80


def extract_first_date(candidate: str | None) -> str:
    """Return the first recognisable date in *candidate*.

    Long-form English dates win over ISO dates.  Without either, the first
    separator-delimited segment of the cleaned string is returned, capped at
    80 characters.

    >>> extract_first_date("Posted on July 22, 2025 by Staff")
    'July 22, 2025'
    >>> extract_first_date("2025-07-22T10:00:00Z")
    '2025-07-22'
    """
    if not candidate:
        return ""
    text = _EDGE_TRAIL_RE.sub("", _EDGE_LEAD_RE.sub("", str(candidate)))

    match = _LONG_FORM_RE.search(text)
    if match:
        return match.group(0).strip()

    match = _ISO_RE.search(text)
    if match:
        return match.group(0)

    cleaned = _DATE_PREFIX_RE.sub("", _WS_RE.sub(" ", text).strip())
    return _SEGMENT_SPLIT_RE.split(cleaned)[0].strip()[:MAX_FALLBACK_LEN]


def year_from_url(url: str | None) -> str:
    """Return the ``20YY`` year of a ``/20YY/`` path segment in *url*, or ``""``."""
    if not url:
        return ""
    match = _URL_YEAR_RE.search(url)
    return match.group(1) if match else ""


def normalize_date(candidate: str | None, url: str = "") -> str:
    """Extract the first date from *candidate* and tidy it for a ``[[date:]]`` field.

    Stray brackets are removed.  When no four-digit year survives, a year taken
    from *url* is appended (``"July 22"`` + ``/2025/`` -> ``"July 22, 2025"``).
    """
    date = extract_first_date(candidate)
    date = _BRACKETS_RE.sub("", _BRACKET_EDGES_RE.sub("", date)).strip()
    if not _YEAR_RE.search(date) and url:
        year = year_from_url(url)
        if year:
            date = f"{date}, {year}" if date else year
    return date
