"""Compose a Tana paste outline from a page record.

Output shape::

    - **Heading** #webclip                   parent (heading, link or title)
      - Publication:: Grants.gov Blog        metadata block, fixed order
      - Date:: [[date:July 22, 2025]]
      - Author:: Grants.gov
      - Source:: [Title](https://...)
      - ![](https://.../hero.png)
      - Body line                            linearized selection

Only one parent line is produced, metadata always precedes the body and no
line is empty.  The same inputs always give the same text.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from tanaclip.extractors.dates import extract_first_date, normalize_date
from tanaclip.extractors.linearize import (
    clean_text,
    heading_text,
    is_heading_line,
    linearize,
    strip_bullet,
)
from tanaclip.items import PageRecord, TanaOptions

logger = logging.getLogger(__name__)

INDENT = "  "
UNTITLED = "Untitled"

_POSTED_ON_RE = re.compile(r"^posted on$", re.IGNORECASE)
_BY_RE = re.compile(r"^by$", re.IGNORECASE)

# Section furniture that surrounds blog posts
_STOP_PHRASE_RE = re.compile(
    r"^(?:share this post:?|click to share(?: on)?|related|posted in|tagged"
    r"|posted on|share this|leave a comment|comments?)$",
    re.IGNORECASE,
)
_METADATA_FIELD_PREFIXES: tuple[str, ...] = (
    "publication::",
    "date::",
    "author::",
    "source::",
)
_IMAGE_EMBED = "![]("
_PUNCTUATION_ONLY_RE = re.compile(r"^[\W_]+$")


@dataclass
class BodyExtraction:
    """Body lines that survived filtering plus the byline facts mined from them."""

    lines: list[str] = field(default_factory=list)
    date: str = ""
    author: str = ""


# ---------------------------------------------------------------------------
# Parent line
# ---------------------------------------------------------------------------

def tag_suffix(options: TanaOptions) -> str:
    return f" #{options.default_tag}" if options.default_tag else ""


def build_parent_line(record: PageRecord, bold_parent: str | None, options: TanaOptions) -> str:
    suffix = tag_suffix(options)
    if bold_parent:
        return f"- **{bold_parent}**{suffix}"
    if record.url:
        return f"- [{record.title or record.url}]({record.url}){suffix}"
    return f"- {record.title or UNTITLED}{suffix}"


# ---------------------------------------------------------------------------
# Body lines
# ---------------------------------------------------------------------------

def _unbold(content: str) -> str:
    if content.startswith("**") and content.endswith("**") and len(content) > 4:
        return content[2:-2].strip()
    return content


def _is_degenerate(content: str) -> bool:
    return len(content) < 2 or bool(_PUNCTUATION_ONLY_RE.match(content))


def mine_body_lines(
    lines: list[str],
    bold_parent: str | None = None,
    *,
    strict: bool = True,
) -> BodyExtraction:
    """Filter linearized *lines* into indented body lines.

    "Posted on" and "by" labels consume the following line as the date and
    author candidates; neither line reaches the body.  Duplicates of the bold
    parent, metadata-shaped lines and image embeds are dropped.  With *strict*,
    boilerplate stop-phrases and degenerate one-character or punctuation-only
    lines are dropped as well.  Stop phrases match the whole content of a line,
    or the inner text of a bold heading line, so ``- **Related**`` is dropped
    like ``- Related``.
    """
    result = BodyExtraction()
    parent_line = f"- **{bold_parent}**" if bold_parent else None

    i = 0
    while i < len(lines):
        raw = lines[i] or ""
        i += 1
        trimmed = raw.strip()
        content = strip_bullet(trimmed)

        if _POSTED_ON_RE.match(content) or _BY_RE.match(content):
            nxt = (lines[i] if i < len(lines) else "").strip()
            if nxt:
                value = strip_bullet(nxt)
                if _BY_RE.match(content):
                    result.author = value or result.author
                else:
                    result.date = value or result.date
                i += 1
            continue

        if parent_line and trimmed == parent_line:
            continue
        if strict and _STOP_PHRASE_RE.match(_unbold(content)):
            continue
        if content.lower().startswith(_METADATA_FIELD_PREFIXES):
            continue
        if content.startswith(_IMAGE_EMBED) or _IMAGE_EMBED in raw:
            continue
        if strict and _is_degenerate(content):
            continue
        if not content:
            continue

        result.lines.append(INDENT + raw)

    return result


# ---------------------------------------------------------------------------
# Metadata block
# ---------------------------------------------------------------------------

def _field(label: str, value: str, omit_empty: bool) -> str | None:
    if value and value.strip():
        return f"{INDENT}- {label}:: {value}"
    if omit_empty:
        return None
    return f"{INDENT}- {label}:: {value or ''}"


def _source_link(record: PageRecord) -> str:
    return f"[{record.title or record.url}]({record.url})"


def build_metadata_lines(
    record: PageRecord,
    options: TanaOptions,
    extracted_date: str = "",
    extracted_author: str = "",
) -> list[str]:
    """Return the Publication, Date, Author, Source and Image lines, in that order."""
    if not options.include_metadata:
        return []

    omit = options.omit_empty_metadata
    selection_html = record.selection_html or ""
    lines: list[str | None] = []

    lines.append(_field("Publication", record.publication, omit))

    final_date = normalize_date(extracted_date or record.date, record.url)
    if final_date or not omit:
        lines.append(f"{INDENT}- Date:: [[date:{final_date}]]")

    lines.append(_field("Author", extracted_author or record.author, omit))

    if record.url.strip() or not omit:
        lines.append(f"{INDENT}- Source:: {_source_link(record)}")

    embedded = bool(record.image and selection_html and record.image in selection_html)
    if record.image.strip() and not embedded:
        lines.append(f"{INDENT}- ![]({record.image})")
    elif not omit and not embedded:
        lines.append(f"{INDENT}- ![]()")

    meta = [line for line in lines if line]
    if meta:
        return meta

    # Nothing survived: fall back to the raw page values
    logger.debug("Metadata block empty; applying raw-value fallback")
    fallback: list[str | None] = [
        _field("Publication", record.publication, omit),
    ]
    raw_date = extract_first_date(extracted_date or record.date)
    if raw_date.strip() or not omit:
        fallback.append(f"{INDENT}- Date:: [[date:{raw_date}]]")
    fallback.append(_field("Author", record.author, omit))
    if record.url.strip() or not omit:
        fallback.append(f"{INDENT}- Source:: {_source_link(record)}")
    if record.image.strip() or not omit:
        fallback.append(f"{INDENT}- ![]({record.image})")
    return [line for line in fallback if line]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def compose(
    record: PageRecord | Mapping[str, Any],
    options: TanaOptions | None = None,
) -> str:
    """Render *record* as Tana paste text.

    Args:
        record:  Page snapshot (or a mapping that validates as one).
        options: Clip options; defaults to :class:`TanaOptions` defaults.

    Returns:
        Newline-joined outline without a trailing newline.
    """
    if not isinstance(record, PageRecord):
        record = PageRecord.model_validate(dict(record))
    if options is None:
        options = TanaOptions()

    processed = linearize(record.selection_html)
    bold_parent: str | None = None
    if processed and is_heading_line(processed[0]):
        bold_parent = heading_text(processed[0]) or None
        processed = processed[1:]

    body = mine_body_lines(processed, bold_parent, strict=options.strict_filtering)
    logger.debug(
        "Linearized %d line(s), kept %d body line(s); date=%r author=%r",
        len(processed), len(body.lines), body.date, body.author,
    )

    lines = [build_parent_line(record, bold_parent, options)]
    lines.extend(build_metadata_lines(record, options, body.date, body.author))

    selection = clean_text(record.selection_text)
    if not body.lines and selection:
        lines.append(f"{INDENT}- {selection}")
    else:
        lines.extend(body.lines)

    return "\n".join(lines)
