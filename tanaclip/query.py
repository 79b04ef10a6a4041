"""tanaclip.query - fetch a live page and turn it into Tana paste text.

Uses only the stdlib (``urllib``) for HTTP.

Basic usage::

    from tanaclip.query import clip_url

    text = clip_url(
        "https://example.com/2025/07/22/some-post/",
        selector="article",
    )
    print(text)

Low-level access::

    from tanaclip.query import fetch_html, extract_page

    html = fetch_html("https://example.com/blog/post")
    record = extract_page(html, url="https://example.com/blog/post", selector="main")
"""

from __future__ import annotations

import gzip
import logging
import random
import time
import urllib.error
import urllib.request
import zlib
from collections.abc import Mapping
from email.message import Message
from typing import Any
from urllib.parse import urlparse

from tanaclip.compose import compose
from tanaclip.extractors.page import collect_page
from tanaclip.items import OptionsOverride, PageRecord, TanaOptions

logger = logging.getLogger(__name__)

_DEFAULT_UA = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)


# ---------------------------------------------------------------------------
# Public exception
# ---------------------------------------------------------------------------

class FetchError(RuntimeError):
    """A page could not be fetched for clipping.

    ``status`` holds the HTTP status code, or 0 when no response arrived.
    """

    def __init__(self, message: str, url: str = "", status: int = 0) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


# ---------------------------------------------------------------------------
# Low-level HTTP fetch
# ---------------------------------------------------------------------------

_ACCEPT_HTML = "text/html,application/xhtml+xml;q=0.9,*/*;q=0.5"
_RETRY_CODES: frozenset[int] = frozenset({429, 500, 502, 503, 504})


def _decode_body(raw: bytes, headers: Message | None) -> str:
    content_encoding = ""
    charset = None
    if headers is not None:
        content_encoding = (headers.get("Content-Encoding") or "").lower().strip()
        charset = headers.get_content_charset()

    if content_encoding == "gzip":
        raw = gzip.decompress(raw)
    elif content_encoding in ("deflate", "zlib"):
        raw = zlib.decompress(raw)
    elif content_encoding not in ("", "identity"):
        raise ValueError(f"unsupported content encoding {content_encoding!r}")

    try:
        return raw.decode(charset or "utf-8", errors="replace")
    except LookupError:
        return raw.decode("utf-8", errors="replace")


def _retry_after(exc: urllib.error.HTTPError) -> int:
    value = (exc.headers.get("Retry-After") if exc.headers else None) or ""
    return int(value) if value.strip().isdigit() else 0


def _backoff(attempt: int, retry_after: int = 0) -> float:
    return max(retry_after, 2 ** attempt) + random.uniform(0, 1)


def fetch_html(
    url: str,
    *,
    timeout: int = 30,
    user_agent: str | None = None,
    max_retries: int = 3,
) -> str:
    """Fetch the page at *url* and return its decoded HTML.

    Rate limiting (429), server errors (5xx) and network failures are retried
    up to *max_retries* times with jittered exponential backoff; a
    ``Retry-After`` header sets the minimum wait.

    Raises:
        FetchError: When the page cannot be fetched or decoded.
    """
    if urlparse(url).scheme not in ("http", "https"):
        raise FetchError(f"Cannot clip {url!r}: only http(s) pages can be fetched", url=url)

    request = urllib.request.Request(
        url,
        headers={
            "User-Agent": user_agent or _DEFAULT_UA,
            "Accept": _ACCEPT_HTML,
            "Accept-Encoding": "gzip, deflate",
        },
    )

    error = FetchError(f"Could not fetch {url}", url=url)
    for attempt in range(max_retries + 1):
        retry_after = 0
        try:
            with urllib.request.urlopen(request, timeout=timeout) as resp:
                raw: bytes = resp.read()
                headers = resp.headers
        except urllib.error.HTTPError as exc:
            error = FetchError(
                f"Could not fetch {url}: HTTP {exc.code} {exc.reason}", url=url, status=exc.code,
            )
            if exc.code not in _RETRY_CODES:
                raise error from exc
            retry_after = _retry_after(exc)
        except OSError as exc:
            # URLError is an OSError; its reason is the useful part
            error = FetchError(f"Could not reach {url}: {getattr(exc, 'reason', exc)}", url=url)
        else:
            try:
                return _decode_body(raw, headers)
            except (OSError, zlib.error, ValueError) as exc:
                raise FetchError(f"Could not decode page from {url}: {exc}", url=url) from exc

        if attempt < max_retries:
            delay = _backoff(attempt, retry_after)
            logger.debug("%s; retrying in %.1fs (%d/%d)", error, delay, attempt + 1, max_retries)
            time.sleep(delay)

    raise error


# ---------------------------------------------------------------------------
# Page records and clipping
# ---------------------------------------------------------------------------

def extract_page(
    html: str,
    url: str = "",
    *,
    selector: str | None = None,
    selection_html: str | None = None,
    selection_text: str | None = None,
) -> PageRecord:
    """Build a :class:`PageRecord` from pre-fetched *html* (no network calls)."""
    return collect_page(
        html,
        url,
        selector=selector,
        selection_html=selection_html,
        selection_text=selection_text,
    )


def fetch_page(url: str, *, selector: str | None = None, **fetch_kwargs: Any) -> PageRecord:
    """Fetch *url* and collect its :class:`PageRecord`.

    Keyword arguments other than *selector* are forwarded to :func:`fetch_html`.
    """
    html = fetch_html(url, **fetch_kwargs)
    record = extract_page(html, url, selector=selector)
    logger.info(
        "Collected %s (title=%r, selection=%s)",
        url, record.title, "yes" if record.selection_html else "no",
    )
    return record


def clip_url(
    url: str,
    options: TanaOptions | None = None,
    *,
    selector: str | None = None,
    override: OptionsOverride | Mapping[str, Any] | None = None,
    **fetch_kwargs: Any,
) -> str:
    """Fetch *url* and return its Tana paste text.

    Raises:
        FetchError: When the page cannot be fetched.
    """
    record = fetch_page(url, selector=selector, **fetch_kwargs)
    effective = (options or TanaOptions()).merged(override)
    return compose(record, effective)
