"""Unit tests for changelog_parser."""

import pytest

from changelog_parser import (
    ChangelogParseError,
    DuplicateBuildTagError,
    MalformedBuildHeadingError,
    MalformedCategoryHeaderError,
    MissingEntryListError,
    NoBodyElementError,
    OrphanApplicationEntryError,
    OrphanCategoryHeaderError,
    parse_changelog,
    parse_document,
)
from page_builders import NOTES_URL, VIEW_ALL, application, build_heading, category, make_page


class TestParseDocument:
    def test_build_tags_match_headings(self, sample_page):
        document = parse_document(sample_page, NOTES_URL)
        assert list(document.keys()) == ["1657", "1656"]

    def test_sections_applications_and_lines_keep_page_order(self, sample_page):
        sections = parse_document(sample_page, NOTES_URL)["1657"]

        assert [s.name for s in sections] == ["Features", "Fixes"]
        assert [a.name for a in sections[0].applications] == ["Dream Maker", "Dream Seeker"]
        assert sections[0].applications[0].entries == ["Added a new proc.", "Improved compile times."]
        assert [a.name for a in sections[1].applications] == ["Dream Daemon"]

    def test_relative_links_resolved_against_source(self, sample_page):
        sections = parse_document(sample_page, NOTES_URL)["1657"]
        assert sections[0].link == "https://secure.byond.com/forum/?post=2901"
        assert sections[1].link == "https://www.byond.com/forum/?post=2902"

    def test_links_left_alone_without_source(self, sample_page):
        sections = parse_document(sample_page)["1656"]
        assert sections[0].link == "/forum/?post=2890"

    def test_header_and_footer_are_dropped(self):
        # A heading in the first slot is treated as the page header
        html = (
            "<html><body>"
            f"{build_heading('1000')}{build_heading('1001')}"
            f"{category('Fixes', '/f')}{application('Dream Maker', ['x'])}"
            f"{build_heading('1002')}"
            "</body></html>"
        )
        document = parse_document(html, NOTES_URL)
        assert list(document.keys()) == ["1001"]

    def test_non_list_items_ignored(self):
        html = make_page(
            build_heading("1656")
            + category("Fixes", "/f")
            + "<p>Dream Maker</p><ul><li>one</li><span>stray</span><li>two</li></ul>"
        )
        sections = parse_document(html, NOTES_URL)["1656"]
        assert sections[0].applications[0].entries == ["one", "two"]

    def test_names_are_trimmed(self):
        html = make_page(
            build_heading("1656")
            + "<p>\n  <u> Fixes </u> (<a href=\"/f\">discuss</a>)\n</p>"
            + application("\n  Dream Maker\n", ["x"])
        )
        section = parse_document(html, NOTES_URL)["1656"][0]
        assert section.name == "Fixes"
        assert section.applications[0].name == "Dream Maker"

    def test_empty_build_has_no_sections(self):
        html = make_page(build_heading("1656") + build_heading("1655"))
        document = parse_document(html, NOTES_URL)
        assert document == {"1656": [], "1655": []}


class TestViewAllSentinel:
    def test_stops_walk_without_error(self, sample_page):
        document = parse_document(sample_page, NOTES_URL)
        assert [s.name for s in document["1656"]] == ["Fixes"]

    def test_content_after_sentinel_is_ignored(self):
        html = make_page("\n".join([
            build_heading("1656"),
            category("Fixes", "/f"),
            application("Dream Maker", ["kept"]),
            VIEW_ALL,
            build_heading("1655"),
            "<p>not a real <i>category</i> <b>header</b></p>",
        ]))
        document = parse_document(html, NOTES_URL)
        assert list(document.keys()) == ["1656"]
        assert document["1656"][0].applications[0].entries == ["kept"]


class TestParseErrors:
    def test_missing_body(self):
        with pytest.raises(NoBodyElementError) as exc_info:
            parse_changelog("<html><head><title>x</title></head></html>", "1656", NOTES_URL)
        assert exc_info.value.rule == "no_body_element"
        assert exc_info.value.source_url == NOTES_URL
        assert NOTES_URL in str(exc_info.value)

    def test_heading_without_build_marker(self):
        html = make_page("<h3>BYOND Version 515</h3>")
        with pytest.raises(MalformedBuildHeadingError):
            parse_document(html, NOTES_URL)

    def test_heading_with_empty_tag(self):
        html = make_page("<h3>Build </h3>")
        with pytest.raises(MalformedBuildHeadingError):
            parse_document(html, NOTES_URL)

    def test_duplicate_build(self):
        html = make_page(build_heading("1656") + build_heading("1656"))
        with pytest.raises(DuplicateBuildTagError):
            parse_document(html, NOTES_URL)

    def test_category_without_underline(self):
        html = make_page(build_heading("1656") + "<p><b>Fixes</b> <a href='/f'>discuss</a></p>")
        with pytest.raises(MalformedCategoryHeaderError):
            parse_document(html, NOTES_URL)

    def test_category_without_anchor(self):
        html = make_page(build_heading("1656") + "<p><u>Fixes</u> <b>discuss</b></p>")
        with pytest.raises(MalformedCategoryHeaderError):
            parse_document(html, NOTES_URL)

    def test_category_with_blank_href(self):
        html = make_page(build_heading("1656") + "<p><u>Fixes</u> <a href=' '>discuss</a></p>")
        with pytest.raises(MalformedCategoryHeaderError):
            parse_document(html, NOTES_URL)

    def test_category_before_any_build(self):
        html = make_page(category("Fixes", "/f"))
        with pytest.raises(OrphanCategoryHeaderError):
            parse_document(html, NOTES_URL)

    def test_application_before_any_category(self):
        html = make_page(build_heading("1656") + application("Dream Maker", ["x"]))
        with pytest.raises(OrphanApplicationEntryError):
            parse_document(html, NOTES_URL)

    def test_application_followed_by_wrong_tag(self):
        html = make_page(
            build_heading("1656") + category("Fixes", "/f") + "<p>Dream Maker</p><ol><li>x</li></ol>"
        )
        with pytest.raises(MissingEntryListError):
            parse_document(html, NOTES_URL)

    def test_application_followed_by_page_footer(self):
        html = make_page(build_heading("1656") + category("Fixes", "/f") + "<p>Dream Maker</p>")
        with pytest.raises(MissingEntryListError) as exc_info:
            parse_document(html, NOTES_URL)
        assert "Dream Maker" in exc_info.value.detail

    def test_all_errors_share_base_class(self):
        html = make_page(build_heading("1656") + application("Dream Maker", ["x"]))
        with pytest.raises(ChangelogParseError):
            parse_changelog(html, "1656", NOTES_URL)


class TestParseChangelog:
    def test_returns_target_build_sections(self, sample_page):
        sections = parse_changelog(sample_page, "1656", NOTES_URL)
        assert [s.name for s in sections] == ["Fixes"]
        assert sections[0].applications[0].entries == ["Fixed a parser bug."]

    def test_missing_build_returns_none(self, sample_page):
        assert parse_changelog(sample_page, "1700", NOTES_URL) is None

    def test_each_call_builds_fresh_objects(self, sample_page):
        first = parse_changelog(sample_page, "1656", NOTES_URL)
        second = parse_changelog(sample_page, "1656", NOTES_URL)
        assert first == second
        assert first[0] is not second[0]
