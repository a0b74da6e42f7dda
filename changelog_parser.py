"""
BYOND Changelog Parser

This module turns a BYOND release notes page (docs/notes/<major>.html) into
structured changelog data:
- <h3> headings open a new build ("... Build 1656")
- <p> with two child elements open a category ("Fixes", "Features") linking
  to its forum thread
- any other non-blank <p> names an application and is followed by a <ul>
  whose <li> items are that application's changelog lines

The page has no semantic markup, so the walk is a small state machine over
the body's direct children. Any unexpected shape aborts the whole parse with
a ChangelogParseError naming the rule that failed.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from changelog_models import ApplicationEntry, CategorySection, ChangelogDocument

logger = logging.getLogger(__name__)

# Marker preceding the build tag in every <h3>
BUILD_MARKER = "Build "

# Text of the trailing "View All" link paragraph that ends the changelog content
VIEW_ALL_SENTINEL = "View All"

CATEGORY_HEADER_CHILD_COUNT = 2


class ChangelogParseError(Exception):
    """Raised when the page does not have the expected shape."""

    rule = "parse_error"

    def __init__(self, source_url: str = "", detail: str = ""):
        self.source_url = source_url
        self.detail = detail
        message = f"[{self.rule}] Parsing error - URL: {source_url or '<unknown>'}"
        if detail:
            message += f" - {detail}"
        super().__init__(message)


class NoBodyElementError(ChangelogParseError):
    rule = "no_body_element"


class MalformedBuildHeadingError(ChangelogParseError):
    rule = "malformed_build_heading"


class DuplicateBuildTagError(ChangelogParseError):
    rule = "duplicate_build_tag"


class MalformedCategoryHeaderError(ChangelogParseError):
    rule = "malformed_category_header"


class OrphanCategoryHeaderError(ChangelogParseError):
    rule = "orphan_category_header"


class MissingEntryListError(ChangelogParseError):
    rule = "missing_entry_list"


class OrphanApplicationEntryError(ChangelogParseError):
    rule = "orphan_application_entry"


class ParserState(Enum):
    AWAITING_BUILD = "awaiting_build"
    AWAITING_CATEGORY = "awaiting_category"
    AWAITING_APPLICATION_BODY = "awaiting_application_body"


@dataclass
class _WalkState:
    """Cursor for the sibling walk.

    build_tag is set from AWAITING_CATEGORY onwards, section only in
    AWAITING_APPLICATION_BODY.
    """

    phase: ParserState = ParserState.AWAITING_BUILD
    build_tag: Optional[str] = None
    section: Optional[CategorySection] = None

    def open_build(self, build_tag: str) -> None:
        self.phase = ParserState.AWAITING_CATEGORY
        self.build_tag = build_tag
        self.section = None

    def open_section(self, section: CategorySection) -> None:
        self.phase = ParserState.AWAITING_APPLICATION_BODY
        self.section = section


class _StopWalk(Exception):
    """Internal signal: the end-of-content sentinel was reached."""


def _content_elements(body: Tag) -> List[Tag]:
    """
    Return the body's direct child elements minus the page header and footer.

    The notes pages always open with a title block and close with a footer;
    neither is checked, they are just dropped.
    """
    children = body.find_all(recursive=False)
    return children[1:-1]


def _is_blank(element: Tag) -> bool:
    return not element.get_text().strip()


def _extract_build_tag(element: Tag, source_url: str) -> str:
    text = element.get_text()
    parts = text.split(BUILD_MARKER)
    if len(parts) < 2 or not parts[1].strip():
        raise MalformedBuildHeadingError(source_url, text.strip())
    return parts[1].strip()


def _parse_category_header(element: Tag, source_url: str) -> Optional[CategorySection]:
    """
    Build a CategorySection from a two-child paragraph.

    Returns None when the paragraph is the "View All" footer link.
    """
    text = element.get_text()

    name_elem = element.find("u")
    if name_elem is None:
        if VIEW_ALL_SENTINEL in text:
            return None
        raise MalformedCategoryHeaderError(source_url, f"no <u> in '{text.strip()}'")

    link_elem = element.find("a")
    if link_elem is None:
        raise MalformedCategoryHeaderError(source_url, f"no <a> in '{text.strip()}'")

    href = link_elem.get("href")
    if not href or not href.strip():
        raise MalformedCategoryHeaderError(source_url, f"blank href in '{text.strip()}'")

    link = urljoin(source_url, href.strip()) if source_url else href.strip()
    return CategorySection(name=name_elem.get_text().strip(), link=link)


def _parse_application(element: Tag, source_url: str) -> ApplicationEntry:
    """Build an ApplicationEntry from a name paragraph and the <ul> after it."""
    application = ApplicationEntry(name=element.get_text().strip())

    entry_list = element.find_next_sibling()
    if entry_list is None:
        raise MissingEntryListError(source_url, f"no element after '{application.name}'")
    if entry_list.name != "ul":
        raise MissingEntryListError(
            source_url, f"element after '{application.name}' is <{entry_list.name}>, not <ul>"
        )

    for item in entry_list.find_all("li", recursive=False):
        application.entries.append(item.get_text().strip())

    return application


def _handle_heading(element: Tag, state: _WalkState, document: ChangelogDocument, source_url: str) -> None:
    build_tag = _extract_build_tag(element, source_url)
    if build_tag in document:
        raise DuplicateBuildTagError(source_url, f"Build {build_tag}")
    document[build_tag] = []
    state.open_build(build_tag)


def _handle_paragraph(element: Tag, state: _WalkState, document: ChangelogDocument, source_url: str) -> None:
    if _is_blank(element):
        return

    if len(element.find_all(recursive=False)) == CATEGORY_HEADER_CHILD_COUNT:
        section = _parse_category_header(element, source_url)
        if section is None:
            raise _StopWalk()
        if state.phase is ParserState.AWAITING_BUILD:
            raise OrphanCategoryHeaderError(source_url, f"'{section.name}' appears before any build heading")
        document[state.build_tag].append(section)
        state.open_section(section)
        return

    application = _parse_application(element, source_url)
    if state.phase is not ParserState.AWAITING_APPLICATION_BODY:
        raise OrphanApplicationEntryError(source_url, f"'{application.name}' appears before any category")
    state.section.applications.append(application)


def parse_document(html_body: str, source_url: str = "") -> ChangelogDocument:
    """
    Parse a whole notes page into build tag -> sections.

    Args:
        html_body: Raw HTML of the notes page
        source_url: Where the page came from (used for links and error context)

    Returns:
        Ordered dict of build tag to its CategorySection list

    Raises:
        ChangelogParseError: If the page does not match the expected layout
    """
    soup = BeautifulSoup(html_body, "html.parser")
    body = soup.body
    if body is None:
        raise NoBodyElementError(source_url)

    document: ChangelogDocument = {}
    state = _WalkState()

    for element in _content_elements(body):
        try:
            if element.name == "h3":
                _handle_heading(element, state, document, source_url)
            elif element.name == "p":
                _handle_paragraph(element, state, document, source_url)
        except _StopWalk:
            logger.debug(f"Reached end of changelog content on {source_url}")
            break

    return document


def parse_changelog(html_body: str, target_build_tag: str, source_url: str = "") -> Optional[List[CategorySection]]:
    """
    Parse a notes page and return the sections for one build.

    Args:
        html_body: Raw HTML of the notes page
        target_build_tag: Build to extract (e.g. "1656")
        source_url: Where the page came from

    Returns:
        The build's sections, or None if the page has no such build yet

    Raises:
        ChangelogParseError: If the page does not match the expected layout
    """
    document = parse_document(html_body, source_url)

    if target_build_tag not in document:
        logger.info(f"Couldn't find build {target_build_tag} in {source_url or 'changelog'}")
        return None

    return document[target_build_tag]
