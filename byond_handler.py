"""
BYOND Website Handler for the BYOND Changelog Notifier

This module handles all requests to secure.byond.com:
- Fetching the current stable/beta versions from version.txt
- Building the release notes URL for a version
- Fetching the release notes page HTML
"""

import logging
import requests
from typing import Optional, Tuple

from config import Config

logger = logging.getLogger(__name__)


def split_version(version: str) -> Tuple[str, str]:
    """
    Split a BYOND version into its major version and build tag.

    Examples:
        "515.1656" -> ("515", "1656")
        "516" -> ("516", "516")
    """
    version = version.strip()
    if "." not in version:
        return version, version
    major, build = version.split(".", 1)
    return major, build


class ByondHandler:
    """Handler for BYOND website requests."""

    def __init__(self, version_url: str = None, notes_url_template: str = None, timeout: int = None):
        """
        Initialize BYOND handler.

        Args:
            version_url: URL of the plain text version feed
            notes_url_template: Release notes URL with a {major} placeholder
            timeout: Request timeout in seconds
        """
        self.version_url = version_url or Config.BYOND_VERSION_URL
        self.notes_url_template = notes_url_template or Config.BYOND_NOTES_URL_TEMPLATE
        self.timeout = timeout or Config.HTTP_TIMEOUT

    def _get_text(self, url: str) -> Optional[str]:
        """
        GET a URL and return the body text.

        Returns:
            Response text or None on failure
        """
        try:
            response = requests.get(url, timeout=self.timeout)
        except requests.exceptions.Timeout:
            logger.error(f"Request timeout: {url}")
            return None
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error for {url}: {e}")
            return None

        if response.status_code != 200:
            logger.error(f"Request to {url} failed with status {response.status_code}")
            return None

        return response.text

    def fetch_versions(self) -> Optional[Tuple[str, Optional[str]]]:
        """
        Fetch the current versions from the version feed.

        The feed has the stable version on the first line and, while a
        beta is running, the beta version on the second.

        Returns:
            Tuple of (stable_version, beta_version or None), or None on failure
        """
        body = self._get_text(self.version_url)
        if body is None:
            return None

        lines = [line.strip() for line in body.strip().split("\n")]

        if not body.strip():
            logger.error(f"No BYOND versions found - body content: {body!r}")
            return None

        if len(lines) > 2:
            logger.error(f"BYOND version had >2 versions - body content: {body!r}")
            return None

        stable_version = lines[0]
        beta_version = lines[1] if len(lines) == 2 and lines[1] else None

        if not stable_version and not beta_version:
            logger.error(f"BYOND version was somehow not set - body content: {body!r}")
            return None

        logger.info(f"Current versions - stable: {stable_version or 'none'}, beta: {beta_version or 'none'}")
        return stable_version, beta_version

    def get_notes_url(self, version: str) -> str:
        """Release notes page URL for a version's major family."""
        major, _ = split_version(version)
        return self.notes_url_template.format(major=major)

    def fetch_changelog(self, version: str) -> Optional[str]:
        """
        Fetch the release notes page covering a version.

        Args:
            version: Full version string (e.g. "515.1656")

        Returns:
            Page HTML or None on failure
        """
        url = self.get_notes_url(version)
        logger.info(f"Fetching changelog for {version} from {url}")
        return self._get_text(url)
