"""Pydantic models for page snapshots, clip options and collaborator results."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# ---------------------------------------------------------------------------
# Page snapshot
# ---------------------------------------------------------------------------

def _as_text(v: Any) -> str:
    """Coerce a page value to text; ``None`` and containers become blank."""
    if v is None or isinstance(v, (Mapping, list, tuple, set)):
        return ""
    return v if isinstance(v, str) else str(v)


class PageRecord(BaseModel):
    """Snapshot of a page and the user's selection, taken once per clip."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )

    title: str = ""
    url: str = ""
    author: str = ""
    publication: str = ""
    date: str = ""
    image: str = ""
    selection_text: str = Field(
        default="",
        validation_alias=AliasChoices("selection_text", "selectionText", "selection"),
    )
    selection_html: str | None = None

    @field_validator(
        "title", "author", "publication", "date", "image", "selection_text",
        mode="before",
    )
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        return _as_text(v)

    @field_validator("url", mode="before")
    @classmethod
    def strip_url(cls, v: Any) -> Any:
        return _as_text(v).strip()

    @field_validator("selection_html", mode="before")
    @classmethod
    def empty_html_to_none(cls, v: Any) -> Any:
        if not isinstance(v, str) or not v:
            return None
        return v


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------

class OptionsOverride(BaseModel):
    """Per-invocation partial options.  ``None`` means "keep the base value"."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )

    include_metadata: bool | None = None
    omit_empty_metadata: bool | None = None
    default_tag: str | None = None
    notification_enabled: bool | None = None
    strict_filtering: bool | None = None


class TanaOptions(BaseModel):
    """User configuration for building a Tana paste."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )

    include_metadata: bool = True
    omit_empty_metadata: bool = True
    default_tag: str = "webclip"
    notification_enabled: bool = True
    # Boilerplate stop-phrases and degenerate one-character lines are dropped
    # from the body when set.
    strict_filtering: bool = True

    @field_validator("default_tag", mode="before")
    @classmethod
    def clean_tag(cls, v: Any) -> Any:
        if v is None:
            return ""
        if isinstance(v, str):
            return v.strip().lstrip("#")
        return v

    def merged(
        self,
        override: OptionsOverride | Mapping[str, Any] | None = None,
    ) -> TanaOptions:
        """Return a copy of these options with *override* applied on top.

        Field-by-field precedence: an override value that is not ``None`` wins,
        anything else keeps the base value.  ``self`` is never modified.
        """
        if override is None:
            return self.model_copy()
        if not isinstance(override, OptionsOverride):
            override = OptionsOverride.model_validate(dict(override))
        updates = {
            name: value
            for name, value in override.model_dump().items()
            if value is not None
        }
        if not updates:
            return self.model_copy()
        return TanaOptions.model_validate({**self.model_dump(), **updates})


# ---------------------------------------------------------------------------
# Clipboard collaborator result
# ---------------------------------------------------------------------------

class CopyResult(BaseModel):
    ok: bool
    err: str | None = None
    method: str = ""
