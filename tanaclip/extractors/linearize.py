"""Flatten an HTML selection fragment into Tana bullet lines.

The walk is depth-first and pre-order.  Headings, images, anchors and list
items each collapse to a single line; every other element is a transparent
container whose children are visited in document order.

Line shapes::

    - text
    - **heading text**
    - ![](src)
    - [text](href)
"""

from __future__ import annotations

import logging
import re

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PageElement, PreformattedString, Tag

logger = logging.getLogger(__name__)

_HEADING_TAGS: frozenset[str] = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})

# Subtrees whose text is never part of what the user sees on the page
_SKIP_TAGS: frozenset[str] = frozenset({"script", "style", "template", "noscript"})

_LINEBREAK_WS_RE = re.compile(r"\s*\n\s*")
_HEADING_LINE_RE = re.compile(r"^- \*\*(.+)\*\*")

BULLET = "- "


def clean_text(text: str) -> str:
    """Trim *text* and fold whitespace runs spanning a line break to one space."""
    return _LINEBREAK_WS_RE.sub(" ", text.strip())


def _attr(tag: Tag, name: str) -> str:
    val = tag.get(name)
    if val is None:
        return ""
    if isinstance(val, list):
        return " ".join(str(v) for v in val)
    return str(val).strip()


def _walk(node: PageElement, out: list[str]) -> None:
    if isinstance(node, NavigableString):
        if isinstance(node, PreformattedString):
            return
        text = clean_text(str(node))
        if text:
            out.append(f"{BULLET}{text}")
        return

    if not isinstance(node, Tag):
        return

    name = (node.name or "").lower()
    if name in _SKIP_TAGS:
        return

    if name in _HEADING_TAGS:
        text = clean_text(node.get_text())
        if text:
            out.append(f"{BULLET}**{text}**")
        return

    if name == "img":
        src = _attr(node, "src") or _attr(node, "data-src")
        if src:
            out.append(f"{BULLET}![]({src})")
        return

    if name == "a":
        href = _attr(node, "href")
        text = clean_text(node.get_text()) or href
        if text or href:
            out.append(f"{BULLET}[{text}]({href})")
        return

    if name == "li":
        text = clean_text(node.get_text())
        if text:
            out.append(f"{BULLET}{text}")
        return

    for child in node.children:
        _walk(child, out)


def linearize(fragment_html: str | None) -> list[str]:
    """Return the bullet lines for *fragment_html* in document order.

    Empty input, markup without renderable text or media, and fragments the
    parser cannot handle all yield an empty list.
    """
    if not fragment_html or not fragment_html.strip():
        return []

    try:
        soup = BeautifulSoup(fragment_html, "lxml")
    except Exception as exc:
        logger.debug("Fragment parse failed: %s", exc)
        return []

    root = soup.body or soup
    out: list[str] = []
    try:
        for child in root.children:
            _walk(child, out)
    except RecursionError:
        logger.debug("Fragment nested too deeply; keeping %d line(s)", len(out))
    return out


# ---------------------------------------------------------------------------
# Line helpers
# ---------------------------------------------------------------------------

def strip_bullet(line: str) -> str:
    """Return the content of *line* without its leading ``- `` bullet."""
    trimmed = line.strip()
    if trimmed.startswith(BULLET):
        return trimmed[len(BULLET):].strip()
    return trimmed


def is_heading_line(line: str) -> bool:
    return bool(_HEADING_LINE_RE.match(line))


def heading_text(line: str) -> str:
    """Return the inner text of a ``- **text**`` line."""
    return _HEADING_LINE_RE.sub(r"\1", line, count=1).strip()
