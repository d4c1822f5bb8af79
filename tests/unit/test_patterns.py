"""Tests for the individual content patterns."""

import json

from staff_pipeline.extractors.markup import html_to_text
from staff_pipeline.extractors.patterns import (
    DEFAULT_PATTERNS,
    LineListPattern,
    MarkdownTableLinkPattern,
    MarkdownTablePattern,
    NameThenTitlePattern,
    StructuredMarkupPattern,
    TitleThenNamePattern,
)
from staff_pipeline.models import RawContent, Strategy


def page(text: str = "", html: str = None) -> RawContent:
    return RawContent(source_url="https://example.edu/staff", text=text, html=html, strategy=Strategy.REMOTE)


def pairs(candidates) -> list[tuple]:
    return [(c.name, c.title_fragment) for c in candidates]


class TestTablePatterns:
    def test_linked_rows(self, staff_markdown):
        found = MarkdownTableLinkPattern().match(page(staff_markdown))
        assert pairs(found) == [
            ("Jane Doe", "Head Basketball Coach"),
            ("John Smith", "Assistant Basketball Coach"),
            ("Maria Garcia", "Associate Head Basketball Coach"),
        ]
        assert {c.pattern for c in found} == {"markdown_table_link"}

    def test_plain_rows(self):
        text = "| Name | Title |\n| --- | --- |\n| Pat Lee | Head Soccer Coach |\n| Ticket Office | Hours |\n"
        assert pairs(MarkdownTablePattern().match(page(text))) == [("Pat Lee", "Head Soccer Coach")]

    def test_plain_rows_ignore_linked_names(self, staff_markdown):
        assert MarkdownTablePattern().match(page(staff_markdown)) == []


class TestProsePatterns:
    def test_title_then_name(self):
        text = "Head Coach: Jane Doe\nAssistant Coach - John Smith"
        assert pairs(TitleThenNamePattern().match(page(text))) == [
            ("Jane Doe", "Head Coach"),
            ("John Smith", "Assistant Coach"),
        ]

    def test_name_then_title(self):
        text = "John Smith - Assistant Football Coach, john.smith@school.edu"
        assert pairs(NameThenTitlePattern().match(page(text))) == [("John Smith", "Assistant Football Coach")]

    def test_name_then_title_without_separator(self):
        text = "Jane Doe Head Basketball Coach"
        assert pairs(NameThenTitlePattern().match(page(text))) == [("Jane Doe", "Head Basketball Coach")]

    def test_names_do_not_cross_lines(self):
        text = "Meet The\nStaff Jane Doe, Head Coach"
        names = [c.name for c in NameThenTitlePattern().match(page(text))]
        assert all("\n" not in name for name in names)

    def test_faculty_line_has_no_candidates(self):
        text = "Dr. Amanda Lee, Professor of Kinesiology"
        assert TitleThenNamePattern().match(page(text)) == []
        assert NameThenTitlePattern().match(page(text)) == []


class TestLineListPattern:
    def test_name_with_title_below(self):
        """Title lines match too; the engine's validator drops them later."""
        text = "Jane Doe\nHead Women's Soccer Coach\n\nJohn Smith\nAssistant Coach\n"
        found = LineListPattern().match(page(text))
        assert {"Jane Doe", "John Smith"} <= {c.name for c in found}
        assert found[0].name == "Jane Doe"
        assert "Head Women's Soccer Coach" in found[0].title_fragment

    def test_long_following_line_is_not_a_title(self):
        text = "Jane Doe\n" + "x" * 120 + "\n"
        found = LineListPattern().match(page(text))
        assert found[0].title_fragment is None


class TestStructuredMarkupPattern:
    def test_staff_cards(self, staff_html):
        found = StructuredMarkupPattern().match(page(html=staff_html))
        assert pairs(found) == [
            ("Jane Doe", "Head Basketball Coach"),
            ("John Smith", "Assistant Basketball Coach"),
        ]
        assert found[0].email == "jdoe@example.edu"
        assert found[0].photo_url == "/images/jane-doe.jpg"
        assert found[1].email is None

    def test_json_ld_people(self):
        data = {
            "@context": "https://schema.org",
            "@type": "SportsTeam",
            "name": "Example Soccer",
            "coach": [{
                "@type": "Person",
                "name": "Pat Lee",
                "jobTitle": "Head Soccer Coach",
                "email": "mailto:plee@example.edu",
                "telephone": "555-222-3333",
                "image": {"@type": "ImageObject", "url": "https://example.edu/pat.jpg"},
                "description": "Pat Lee enters her fifth season.",
            }],
        }
        html = f'<html><head><script type="application/ld+json">{json.dumps(data)}</script></head><body></body></html>'
        found = StructuredMarkupPattern().match(page(html=html))
        assert len(found) == 1
        person = found[0]
        assert (person.name, person.title_fragment) == ("Pat Lee", "Head Soccer Coach")
        assert person.email == "plee@example.edu"
        assert person.phone == "555-222-3333"
        assert person.photo_url == "https://example.edu/pat.jpg"
        assert person.bio.startswith("Pat Lee")

    def test_broken_json_ld_is_skipped(self):
        html = '<html><head><script type="application/ld+json">{not json</script></head><body></body></html>'
        assert StructuredMarkupPattern().match(page(html=html)) == []

    def test_markdown_only_content(self, staff_markdown):
        assert StructuredMarkupPattern().match(page(staff_markdown)) == []


class TestHtmlToText:
    def test_drops_scripts_and_chrome(self, staff_html):
        text = html_to_text(staff_html)
        assert "Jane Doe" in text.splitlines()
        assert "Tickets" not in text
        assert "Copyright" not in text


def test_default_pattern_order():
    """Tables first, then markup, then prose, then bare lists."""
    assert [p.name for p in DEFAULT_PATTERNS] == [
        "markdown_table_link",
        "markdown_table",
        "structured_markup",
        "title_then_name",
        "name_then_title",
        "line_list",
    ]
