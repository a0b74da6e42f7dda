"""
On-disk state for the BYOND Changelog Notifier

Two files live in the data directory:
- versions.json: last version posted per release channel
- hooks.toml: Discord webhook URLs to post to
"""

import os
import json
import logging
import tomllib
from typing import Dict, List, Optional

from changelog_models import ReleaseChannel
from config import Config

logger = logging.getLogger(__name__)

HOOKS_TEMPLATE = """# Discord webhook URLs to post changelogs to
hooks = []
"""


class DataStoreError(Exception):
    """Raised when a data file exists but can't be used."""


class DataStore:
    """File-backed store for seen versions and webhook URLs."""

    def __init__(self, data_dir: Optional[str] = None):
        """
        Initialize the store, creating the data directory if needed.

        Args:
            data_dir: Directory holding the data files (defaults to Config.DATA_DIRECTORY)
        """
        self.data_dir = data_dir or Config.DATA_DIRECTORY
        self.versions_path = Config.get_versions_path(self.data_dir)
        self.hooks_path = Config.get_hooks_path(self.data_dir)

        if not os.path.exists(self.data_dir):
            os.makedirs(self.data_dir)
            logger.info(f"Created data directory: {self.data_dir}")

    def get_versions(self) -> Dict[ReleaseChannel, str]:
        """
        Load the last seen version for each channel.

        Returns:
            Dict of channel -> version; channels with no stored version are omitted
        """
        if not os.path.exists(self.versions_path):
            self._write_versions_file({})

        with open(self.versions_path, 'r') as f:
            file_data = f.read()

        if not file_data.strip():
            raise DataStoreError(f"{self.versions_path} is blank - delete and recreate!")

        try:
            data = json.loads(file_data)
        except json.JSONDecodeError as e:
            raise DataStoreError(f"{self.versions_path} is malformed - delete and recreate!") from e

        if not isinstance(data, dict):
            raise DataStoreError(f"{self.versions_path} is malformed - delete and recreate!")

        versions = {}
        for channel in ReleaseChannel:
            value = data.get(channel.value)
            if isinstance(value, str) and value.strip():
                versions[channel] = value
        return versions

    def write_versions(self, versions: Dict[ReleaseChannel, str]) -> None:
        """
        Merge the given versions over the stored ones and save.

        Args:
            versions: Dict of channel -> version to update
        """
        existing = self.get_versions()
        existing.update(versions)
        self._write_versions_file(existing)
        logger.info("Stored versions: " + ", ".join(f"{c.value}={v}" for c, v in existing.items()))

    def _write_versions_file(self, versions: Dict[ReleaseChannel, str]) -> None:
        data = {channel.value: versions.get(channel, "") for channel in ReleaseChannel}
        with open(self.versions_path, 'w') as f:
            json.dump(data, f, indent=2)

    def get_webhooks(self) -> List[str]:
        """
        Load the webhook URLs to post to.

        Returns:
            List of webhook URLs (may be empty)
        """
        if not os.path.exists(self.hooks_path):
            with open(self.hooks_path, 'w') as f:
                f.write(HOOKS_TEMPLATE)
            logger.warning(f"Created blank hooks file at {self.hooks_path} - add your webhook URLs")

        with open(self.hooks_path, 'r') as f:
            file_data = f.read()

        if not file_data.strip():
            raise DataStoreError(f"{self.hooks_path} is blank - delete and recreate!")

        try:
            data = tomllib.loads(file_data)
        except tomllib.TOMLDecodeError as e:
            raise DataStoreError(f"{self.hooks_path} is malformed - delete and recreate!") from e

        hooks = data.get("hooks", [])
        if not isinstance(hooks, list) or not all(isinstance(h, str) for h in hooks):
            raise DataStoreError(f"{self.hooks_path} is malformed - 'hooks' must be a list of URLs")

        return [h.strip() for h in hooks if h.strip()]
