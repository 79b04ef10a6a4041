"""tanaclip - turn a web page selection into Tana Paste outline text.

Quick usage::

    from tanaclip import PageRecord, TanaOptions, compose

    record = PageRecord(
        title="Title",
        url="https://example.com/a",
        selection_html="<h1>Title</h1><p>Body text</p>",
    )
    print(compose(record, TanaOptions(include_metadata=False)))
    # - **Title** #webclip
    #   - Body text

Live pages::

    from tanaclip import clip_url

    print(clip_url("https://example.com/2025/07/22/post/", selector="article"))

Saved options with a one-off override::

    from tanaclip import get_settings_store

    options = get_settings_store().options({"includeMetadata": False})
"""

from tanaclip.clipboard import copy_to_clipboard
from tanaclip.compose import compose
from tanaclip.extractors.dates import extract_first_date
from tanaclip.extractors.linearize import linearize
from tanaclip.extractors.page import collect_page
from tanaclip.items import CopyResult, OptionsOverride, PageRecord, TanaOptions
from tanaclip.query import FetchError, clip_url, extract_page, fetch_html, fetch_page
from tanaclip.settings import SettingsStore, get_settings_store

__version__ = "0.1.0"
__all__ = [
    "CopyResult",
    "FetchError",
    "OptionsOverride",
    "PageRecord",
    "SettingsStore",
    "TanaOptions",
    "clip_url",
    "collect_page",
    "compose",
    "copy_to_clipboard",
    "extract_first_date",
    "extract_page",
    "fetch_html",
    "fetch_page",
    "get_settings_store",
    "linearize",
]
