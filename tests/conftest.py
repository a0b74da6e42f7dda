"""Shared fixtures for the changelog notifier tests."""

import pytest

from page_builders import VIEW_ALL, application, build_heading, category, make_page


@pytest.fixture
def sample_page() -> str:
    """Two builds; the newest has two categories."""
    return make_page("\n".join([
        build_heading("1657"),
        "<p>   </p>",
        category("Features", "/forum/?post=2901"),
        application("Dream Maker", ["Added a new proc.", "  Improved compile times.  "]),
        application("<b>Dream Seeker</b>", ["Better zoom."]),
        category("Fixes", "https://www.byond.com/forum/?post=2902"),
        application("Dream Daemon", ["Fixed a crash on shutdown."]),
        build_heading("1656"),
        category("Fixes", "/forum/?post=2890"),
        application("Dream Maker", ["Fixed a parser bug."]),
        VIEW_ALL,
    ]))
