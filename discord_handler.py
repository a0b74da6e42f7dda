"""
Discord Webhook Handler for the BYOND Changelog Notifier

This module handles Discord operations:
- Wrapping rendered changelog fields into a webhook embed payload
- Posting the payload to every configured webhook
"""

import logging
import requests
from datetime import datetime, timezone
from typing import Dict, List, Any, Union

from changelog_models import ReleaseChannel, RenderedField
from config import Config
from formatter import build_embed_title

logger = logging.getLogger(__name__)


class DiscordHandler:
    """Handler for Discord webhook posts."""

    def __init__(self, username: str = None, avatar_url: str = None,
                 footer_text: str = None, download_url: str = None, timeout: int = None):
        """
        Initialize Discord handler.

        Args:
            username: Name the webhook posts as
            avatar_url: Avatar the webhook posts with
            footer_text: Embed footer text
            download_url: URL the embed title links to
            timeout: Request timeout in seconds
        """
        self.username = username or Config.WEBHOOK_USERNAME
        self.avatar_url = avatar_url or Config.WEBHOOK_AVATAR_URL
        self.footer_text = footer_text or Config.WEBHOOK_FOOTER_TEXT
        self.download_url = download_url or Config.BYOND_DOWNLOAD_URL
        self.timeout = timeout or Config.HTTP_TIMEOUT

    def build_payload(self, version: str, channel: Union[ReleaseChannel, str],
                      fields: List[RenderedField]) -> Dict[str, Any]:
        """
        Build the webhook payload for one release.

        Args:
            version: Full version string (e.g. "515.1656")
            channel: Release channel of the version
            fields: Rendered changelog fields, in order

        Returns:
            JSON-serialisable webhook payload
        """
        embed = {
            "title": build_embed_title(version, channel),
            "url": self.download_url,
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S"),
            "footer": {"text": self.footer_text},
            "fields": [f.to_dict() for f in fields]
        }

        return {
            "username": self.username,
            "avatar_url": self.avatar_url,
            "embeds": [embed]
        }

    def post_payload(self, payload: Dict[str, Any], hook_urls: List[str]) -> int:
        """
        Post a payload to each webhook URL.

        Args:
            payload: Webhook payload from build_payload
            hook_urls: Webhook URLs to post to

        Returns:
            Number of webhooks that accepted the payload
        """
        if not hook_urls:
            logger.warning("No webhooks to post to - this doesn't seem right")
            return 0

        posted = 0
        for hook_url in hook_urls:
            try:
                response = requests.post(hook_url, json=payload, timeout=self.timeout)
            except requests.exceptions.RequestException as e:
                logger.error(f"Webhook request failed: {e}")
                continue

            if 200 <= response.status_code < 300:
                posted += 1
            else:
                logger.error(f"Webhook error: {response.status_code} - {response.text[:200]}")

        logger.info(f"Posted changelog to {posted}/{len(hook_urls)} webhooks")
        return posted
