"""Build a :class:`~tanaclip.items.PageRecord` from a page snapshot.

Lookup order per field (first non-empty wins):

    author       meta[name=author] → meta[property=article:author]
    publication  meta[property=og:site_name] → meta[name=publication]
    date         meta[property=article:published_time] → meta[name=date]
    image        meta[property=og:image]
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

from tanaclip.items import PageRecord

logger = logging.getLogger(__name__)


def _safe_str(val: Any, default: str = "") -> str:
    """Safely convert a BeautifulSoup attribute value (str | list | None) to str."""
    if val is None:
        return default
    if isinstance(val, list):
        return " ".join(str(v) for v in val)
    return str(val)


def _meta(soup: BeautifulSoup, attr: str, key: str) -> str:
    tag = soup.find("meta", attrs={attr: key})
    if tag and isinstance(tag, Tag):
        return _safe_str(tag.get("content"), "").strip()
    return ""


def _first(*values: str) -> str:
    for v in values:
        if v:
            return v
    return ""


def _select_fragment(soup: BeautifulSoup, selector: str) -> str | None:
    """Serialize every element matching *selector*, in document order."""
    try:
        matches = soup.select(selector)
    except Exception as exc:
        logger.debug("Selector %r failed: %s", selector, exc)
        return None
    if not matches:
        logger.debug("Selector %r matched nothing", selector)
        return None
    return "".join(str(m) for m in matches)


def fragment_text(fragment_html: str | None) -> str:
    """Plain text of an HTML fragment, as a browser selection would copy it."""
    if not fragment_html:
        return ""
    try:
        return BeautifulSoup(fragment_html, "lxml").get_text()
    except Exception as exc:
        logger.debug("Fragment text extraction failed: %s", exc)
        return ""


def collect_page(
    html: str,
    url: str = "",
    *,
    selection_html: str | None = None,
    selection_text: str | None = None,
    selector: str | None = None,
    soup: BeautifulSoup | None = None,
) -> PageRecord:
    """Collect title, byline metadata and the selection from *html*.

    Args:
        html:           Full page HTML.
        url:            Resolved page URL; relative ``og:image`` values are
                        joined against it.
        selection_html: Serialized selection markup.  Takes precedence over
                        *selector*.
        selection_text: Plain selection text.  Derived from the selection
                        markup when omitted.
        selector:       CSS selector standing in for a live selection; all
                        matching elements form the selection.
        soup:           Pre-parsed BeautifulSoup object for *html*.
    """
    if soup is None:
        try:
            soup = BeautifulSoup(html or "", "lxml")
        except Exception as exc:
            logger.debug("Page parse failed for %s: %s", url or "<no url>", exc)
            return PageRecord(
                url=url,
                selection_html=selection_html,
                selection_text=selection_text or fragment_text(selection_html),
            )

    title_tag = soup.find("title")
    title = title_tag.get_text().strip() if title_tag else ""

    author = _first(
        _meta(soup, "name", "author"),
        _meta(soup, "property", "article:author"),
    )
    publication = _first(
        _meta(soup, "property", "og:site_name"),
        _meta(soup, "name", "publication"),
    )
    date = _first(
        _meta(soup, "property", "article:published_time"),
        _meta(soup, "name", "date"),
    )
    image = _meta(soup, "property", "og:image")
    if image and url and not image.startswith(("http://", "https://", "data:")):
        image = urljoin(url, image)

    if selection_html is None and selector:
        selection_html = _select_fragment(soup, selector)
    if selection_text is None:
        selection_text = fragment_text(selection_html)

    return PageRecord(
        title=title,
        url=url,
        author=author,
        publication=publication,
        date=date,
        image=image,
        selection_text=selection_text,
        selection_html=selection_html,
    )
