"""Tests for tanaclip.extractors.page (page-data collector)."""

from __future__ import annotations

from tanaclip.compose import compose
from tanaclip.extractors.page import collect_page, fragment_text

POST_URL = "https://grantsgovprod.example.com/2025/07/22/simpler-search/"


class TestCollectPage:
    def test_meta_fields(self, grants_page_html):
        record = collect_page(grants_page_html, POST_URL)
        assert record.title.startswith("The Simpler.Grants.gov Search Experience")
        assert record.url == POST_URL
        assert record.author == "Grants.gov"
        assert record.publication == "Grants.gov Community Blog"
        assert record.date == "2025-07-22T14:05:00+00:00"

    def test_relative_og_image_resolved(self, grants_page_html):
        record = collect_page(grants_page_html, POST_URL)
        assert record.image == (
            "https://grantsgovprod.example.com/wp-content/uploads/2025/07/simpler-search.png"
        )

    def test_fallback_meta_names(self):
        html = (
            "<html><head>"
            '<meta property="article:author" content="Prop Author">'
            '<meta name="publication" content="The Pub">'
            '<meta name="date" content="March 3, 2021">'
            "</head><body></body></html>"
        )
        record = collect_page(html)
        assert record.author == "Prop Author"
        assert record.publication == "The Pub"
        assert record.date == "March 3, 2021"

    def test_name_author_preferred(self):
        html = (
            '<head><meta name="author" content="Name">'
            '<meta property="article:author" content="Prop"></head>'
        )
        assert collect_page(html).author == "Name"

    def test_missing_meta_is_blank(self, minimal_page_html):
        record = collect_page(minimal_page_html, "https://x.test/p")
        assert record.title == "Plain Page"
        assert record.author == ""
        assert record.publication == ""
        assert record.date == ""
        assert record.image == ""
        assert record.selection_html is None
        assert record.selection_text == ""

    def test_selector_selection(self, minimal_page_html):
        record = collect_page(minimal_page_html, "https://x.test/p", selector="#para")
        assert record.selection_html == '<p id="para">Just a paragraph of text.</p>'
        assert record.selection_text == "Just a paragraph of text."

    def test_selector_without_match(self, minimal_page_html):
        record = collect_page(minimal_page_html, selector="article")
        assert record.selection_html is None

    def test_invalid_selector_is_ignored(self, minimal_page_html):
        record = collect_page(minimal_page_html, selector="p[[")
        assert record.selection_html is None

    def test_explicit_selection_wins(self, minimal_page_html):
        record = collect_page(
            minimal_page_html,
            selector="#para",
            selection_html="<b>chosen</b>",
            selection_text="chosen!",
        )
        assert record.selection_html == "<b>chosen</b>"
        assert record.selection_text == "chosen!"

    def test_empty_html(self):
        record = collect_page("", "https://x.test")
        assert record.url == "https://x.test"
        assert record.title == ""


class TestFragmentText:
    def test_text(self):
        assert fragment_text("<p>a <b>b</b></p>") == "a b"

    def test_empty(self):
        assert fragment_text(None) == ""
        assert fragment_text("") == ""


class TestPageToOutline:
    def test_article_selection(self, grants_page_html):
        record = collect_page(grants_page_html, POST_URL, selector="article.post")
        lines = compose(record).split("\n")
        assert lines[0].startswith("- **The Simpler.Grants.gov Search Experience")
        assert lines[0].endswith(" #webclip")
        assert "  - Publication:: Grants.gov Community Blog" in lines
        assert "  - Date:: [[date:July 22, 2025]]" in lines
        assert "  - Author:: Grants.gov" in lines
        assert "  - An improved search feature is now available on Grants.gov." in lines
        # footer furniture and the body screenshot stay out of the outline
        assert not any("Leave a comment" in line for line in lines)
        assert not any("search-screenshot" in line for line in lines)
        assert not any(line.strip() == "- **Related**" for line in lines)
