"""
Data models for parsed BYOND changelogs.

A parsed page is a mapping of build tag -> list of CategorySection. Each
section ("Fixes", "Features", ...) holds the ApplicationEntry blocks for the
programs it covers ("Dream Maker", "Dream Seeker", ...).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List


class ReleaseChannel(Enum):
    """The two parallel BYOND version tracks."""

    STABLE = "stable"
    BETA = "beta"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


@dataclass
class ApplicationEntry:
    """Changelog lines for one program, in page order."""

    name: str
    entries: List[str] = field(default_factory=list)


@dataclass
class CategorySection:
    """A top-level grouping with its forum thread link."""

    name: str
    link: str
    applications: List[ApplicationEntry] = field(default_factory=list)


@dataclass(frozen=True)
class RenderedField:
    """One embed field, ready to be posted."""

    title: str
    body: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.title, "value": self.body}


# build tag -> sections, in document order
ChangelogDocument = Dict[str, List[CategorySection]]
