"""Tests for the content extractor (raw body → Page)."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from docindex.crawler.errors import ParsingError
from docindex.crawler.extractor import (
    MAX_CODE_EXAMPLES,
    _extract_title,
    decode_entities,
    extract,
    tokenize,
)
from docindex.crawler.models import Page

_URL = "https://docs.example.com/design/buttons"
_WHEN = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

_DOC = """\
<!DOCTYPE html>
<html>
<head>
  <title>Buttons &amp; Controls</title>
  <meta name="description" content="How to use buttons.">
  <meta name="keywords" content="ui, buttons , controls">
  <meta name="author" content="Docs Team">
  <meta property="article:modified_time" content="2025-11-30">
  <style>.x { color: red }</style>
  <script>var hidden = 1;</script>
</head>
<body>
  <!-- navigation omitted -->
  <h1>Buttons</h1>
  <p>Buttons initiate actions.</p>
  <h2>Usage</h2>
  <p>Use buttons for primary actions.</p>
  <pre><code class="language-swift">Button("OK") { }</code></pre>
  <h3>Sizes</h3>
  <p>Small &lt;and&gt; large.</p>
  <h2>Accessibility</h2>
  <p>Label every button.</p>
</body>
</html>
"""


@pytest.fixture()
def page() -> Page:
    return extract(_DOC, _URL, depth=2, crawled_at=_WHEN)


# ---------------------------------------------------------------------------
# Plain text
# ---------------------------------------------------------------------------

class TestContent:
    def test_scripts_styles_and_comments_removed(self, page: Page) -> None:
        assert "hidden" not in page.content
        assert "color" not in page.content
        assert "navigation omitted" not in page.content

    def test_tags_stripped_and_whitespace_collapsed(self, page: Page) -> None:
        assert "<p>" not in page.content
        assert "  " not in page.content
        assert "Use buttons for primary actions." in page.content

    def test_entities_decoded(self, page: Page) -> None:
        assert "Small <and> large." in page.content

    def test_entities_decoded_once(self) -> None:
        assert decode_entities("a &amp;lt; b") == "a &lt; b"
        assert decode_entities("&quot;x&quot;&#39;&nbsp;") == "\"x\"' "


class TestTitle:
    def test_title_tag_preferred(self, page: Page) -> None:
        assert page.title == "Buttons & Controls"

    def test_h1_fallback(self) -> None:
        assert _extract_title("<body><h1>Guide <em>One</em></h1></body>") == "Guide One"

    def test_untitled_default(self) -> None:
        assert extract("<p>no headings here</p>", _URL).title == "Untitled"


# ---------------------------------------------------------------------------
# Structure
# ---------------------------------------------------------------------------

class TestSections:
    def test_one_section_per_h2_to_h4_in_order(self, page: Page) -> None:
        assert [(s.heading, s.level) for s in page.sections] == [
            ("Usage", 2),
            ("Sizes", 3),
            ("Accessibility", 2),
        ]

    def test_h2_span_runs_to_next_h2(self, page: Page) -> None:
        usage = page.sections[0]
        assert [b.type for b in usage.content_blocks] == ["text", "code", "text"]
        assert usage.content_blocks[0].text == "Use buttons for primary actions."
        assert usage.content_blocks[1].code == 'Button("OK") { }'
        assert usage.content_blocks[1].language == "swift"
        assert "Small <and> large." in usage.content_blocks[2].text

    def test_h3_span_stops_at_h2(self, page: Page) -> None:
        sizes = page.sections[1]
        assert [b.text for b in sizes.content_blocks] == ["Small <and> large."]

    def test_h1_closes_a_section(self) -> None:
        html = "<h2>First</h2><p>one</p><h1>Top</h1><p>two</p>"
        (section,) = extract(html, _URL).sections
        assert [b.text for b in section.content_blocks] == ["one"]

    def test_h5_does_not_create_a_section(self) -> None:
        html = "<h2>Main</h2><h5>Minor</h5><p>detail</p>"
        (section,) = extract(html, _URL).sections
        assert section.content_blocks[0].text == "Minor detail"


class TestCodeExamples:
    def test_pre_consumes_nested_code(self, page: Page) -> None:
        assert len(page.code_examples) == 1
        example = page.code_examples[0]
        assert example.title == "Example 1"
        assert example.code == 'Button("OK") { }'
        assert example.language == "swift"

    def test_default_language_is_plaintext(self) -> None:
        (example,) = extract("<pre>plain text</pre>", _URL).code_examples
        assert example.language == "plaintext"

    def test_data_lang_hint(self) -> None:
        (example,) = extract('<pre data-lang="Python">x = 1</pre>', _URL).code_examples
        assert example.language == "python"

    def test_highlight_markup_and_entities_removed(self) -> None:
        html = '<pre><span class="k">if</span> a &lt; b:</pre>'
        (example,) = extract(html, _URL).code_examples
        assert example.code == "if a < b:"

    def test_capped_at_ten_in_document_order(self) -> None:
        html = "".join(f"<code>snippet{i}</code>" for i in range(12))
        examples = extract(html, _URL).code_examples
        assert len(examples) == MAX_CODE_EXAMPLES
        assert examples[0].code == "snippet0"
        assert examples[-1].code == "snippet9"


# ---------------------------------------------------------------------------
# Keywords
# ---------------------------------------------------------------------------

class TestKeywords:
    def test_tokenize_casefolds_and_drops_short_tokens(self) -> None:
        assert tokenize("An API, the APIs & UI_kit v2") == ["api", "the", "apis", "kit"]

    def test_most_frequent_first(self, page: Page) -> None:
        assert page.keywords[0] == "buttons"
        assert "actions" in page.keywords

    def test_ties_keep_first_occurrence_order(self) -> None:
        page = extract("<p>beta Alpha BETA alpha gamma</p>", _URL)
        assert page.keywords == ["beta", "alpha", "gamma"]

    def test_at_most_thirty(self) -> None:
        words = " ".join(f"word{i:02d}" for i in range(40))
        assert len(extract(f"<p>{words}</p>", _URL).keywords) == 30


# ---------------------------------------------------------------------------
# Metadata and derived fields
# ---------------------------------------------------------------------------

class TestMetadata:
    def test_meta_tags(self, page: Page) -> None:
        assert page.metadata == {
            "tags": ["ui", "buttons", "controls"],
            "author": "Docs Team",
            "last_modified": "2025-11-30",
            "description": "How to use buttons.",
        }

    def test_abstract_prefers_description(self, page: Page) -> None:
        assert page.abstract == "How to use buttons."

    def test_abstract_from_first_two_sentences(self) -> None:
        page = extract("<p>First sentence. Second one! Third.</p>", _URL)
        assert page.abstract == "First sentence. Second one!"

    def test_abstract_capped(self) -> None:
        page = extract("<p>" + "x" * 300 + "</p>", _URL)
        assert page.abstract == "x" * 200 + "..."

    def test_identity_fields(self, page: Page) -> None:
        assert page.url == _URL
        assert page.domain == "docs.example.com"
        assert page.depth == 2
        assert page.crawled_at == _WHEN
        assert page.category == "Design"
        assert page.subcategory == "Buttons"

    def test_category_defaults_at_root(self) -> None:
        page = extract("<p>home</p>", "https://docs.example.com/")
        assert page.category == "General"
        assert page.subcategory is None


class TestExtractContract:
    def test_deterministic(self) -> None:
        assert extract(_DOC, _URL, crawled_at=_WHEN) == extract(_DOC, _URL, crawled_at=_WHEN)

    def test_bytes_body_decoded(self) -> None:
        page = extract("<title>Café</title>".encode("utf-8"), _URL)
        assert page.title == "Café"

    def test_explicit_encoding(self) -> None:
        page = extract("<title>Café</title>".encode("latin-1"), _URL, encoding="latin-1")
        assert page.title == "Café"

    def test_undecodable_body_raises_parsing_error(self) -> None:
        with pytest.raises(ParsingError):
            extract(b"\xff\xfe\xfa binary", _URL)

    def test_empty_document_does_not_raise(self) -> None:
        page = extract("", _URL)
        assert page.content == ""
        assert page.title == "Untitled"
        assert page.sections == []
        assert page.keywords == []
