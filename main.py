#!/usr/bin/env python3
"""
BYOND Changelog Notifier - Main Orchestration Script

This script runs one changelog check:
1. Fetch the current stable/beta versions from BYOND
2. Compare them against the last versions we posted
3. Fetch and parse the release notes page for each new version
4. Render the changelog into Discord embed fields
5. Post the embed to every configured webhook
"""

import sys
import json
import logging
import argparse
from typing import Dict, List, Optional, Any

from byond_handler import ByondHandler, split_version
from changelog_models import ReleaseChannel, RenderedField
from changelog_parser import ChangelogParseError, parse_changelog, parse_document
from config import Config, setup_logging
from data_store import DataStore
from discord_handler import DiscordHandler
from formatter import render_fields

logger = logging.getLogger(__name__)


def print_banner():
    """Print application banner."""
    print("""
╔═══════════════════════════════════════════════════════════════════╗
║           BYOND CHANGELOG NOTIFIER                                ║
║                                                                   ║
║   Posts new BYOND release notes to Discord                        ║
╚═══════════════════════════════════════════════════════════════════╝
    """)


def find_new_channels(current: Dict[ReleaseChannel, str],
                      stored: Dict[ReleaseChannel, str]) -> List[ReleaseChannel]:
    """
    Work out which channels have a version we haven't posted yet.

    Args:
        current: Versions from the version feed
        stored: Versions from the data store

    Returns:
        Channels to generate, stable first
    """
    return [
        channel for channel in ReleaseChannel
        if current.get(channel) and stored.get(channel) != current[channel]
    ]


def generate_fields(version: str, channel: ReleaseChannel,
                    byond: ByondHandler) -> Optional[List[RenderedField]]:
    """
    Fetch, parse and render the changelog for one version.

    Returns:
        Rendered fields, or None if the changelog isn't available

    Raises:
        ChangelogParseError: If the notes page has an unexpected layout
    """
    notes_url = byond.get_notes_url(version)
    html = byond.fetch_changelog(version)
    if html is None:
        return None

    document = parse_document(html, source_url=notes_url)

    # Headings may carry the full version ("Build 516.1656") or just the build
    _, build_suffix = split_version(version)
    build_tag = next((tag for tag in (version.strip(), build_suffix) if tag in document), None)
    if build_tag is None:
        logger.info(f"Couldn't find {version} in {notes_url}")
        return None
    sections = document[build_tag]

    fields = render_fields(build_tag, channel, sections)
    logger.info(f"Rendered {len(fields)} fields for {version} ({channel.display_name})")
    return fields


def run_changelog_check(store: DataStore = None, byond: ByondHandler = None,
                        discord: DiscordHandler = None, dry_run: bool = False,
                        force: List[ReleaseChannel] = None) -> Dict[str, Any]:
    """
    Run one full changelog check.

    Args:
        store: Version/webhook store
        byond: BYOND website handler
        discord: Discord webhook handler
        dry_run: Print payloads instead of posting them
        force: Channels to regenerate even if their version hasn't changed

    Returns:
        Summary dict with versions, generated channels, post counts and errors
    """
    store = store or DataStore()
    byond = byond or ByondHandler()
    discord = discord or DiscordHandler()

    summary = {"versions": {}, "generated": [], "posted": {}, "errors": []}

    fetched = byond.fetch_versions()
    if fetched is None:
        summary["errors"].append("Could not fetch BYOND versions")
        return summary

    stable_version, beta_version = fetched
    current = {}
    if stable_version:
        current[ReleaseChannel.STABLE] = stable_version
    if beta_version:
        current[ReleaseChannel.BETA] = beta_version
    summary["versions"] = {channel.value: version for channel, version in current.items()}

    to_generate = find_new_channels(current, store.get_versions())
    for channel in force or []:
        if channel in current and channel not in to_generate:
            to_generate.append(channel)

    if not to_generate:
        logger.info("No new updates - exiting")
        return summary

    # Stored before posting so a broken page isn't retried every hour
    if not dry_run:
        store.write_versions(current)

    hook_urls = [] if dry_run else store.get_webhooks()

    for channel in to_generate:
        version = current[channel]
        try:
            fields = generate_fields(version, channel, byond)
        except ChangelogParseError as e:
            logger.error(f"Failed to parse {channel.value} changelog for {version} ({e.rule}): {e}")
            summary["errors"].append(f"{channel.value}: {e.rule}")
            continue

        if fields is None:
            logger.error(f"Failed to generate {channel.value} changelog for {version} - investigate")
            summary["errors"].append(f"{channel.value}: changelog not available")
            continue

        summary["generated"].append(channel.value)
        payload = discord.build_payload(version, channel, fields)

        if dry_run:
            print(json.dumps(payload, indent=2, ensure_ascii=False))
            continue

        summary["posted"][channel.value] = discord.post_payload(payload, hook_urls)

    return summary


def render_local_file(path: str, build_tag: str, channel: ReleaseChannel) -> int:
    """Parse a saved notes page and print its rendered fields."""
    with open(path, 'r', encoding='utf-8') as f:
        html = f.read()

    try:
        sections = parse_changelog(html, build_tag, source_url=path)
    except ChangelogParseError as e:
        print(f"[Parse] ERROR ({e.rule}): {e}")
        return 1

    if sections is None:
        print(f"[Parse] Build {build_tag} not found in {path}")
        return 1

    for field in render_fields(build_tag, channel, sections):
        print(f"--- {field.title!r} ({len(field.body)} chars)")
        print(field.body)
    return 0


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Post new BYOND release notes to Discord webhooks',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python main.py                          Check for new versions and post
    python main.py --dry-run                Print payloads instead of posting
    python main.py --force beta             Repost the current beta changelog
    python main.py --file 515.html --build 1656
                                            Render a saved notes page
        """
    )
    parser.add_argument('--dry-run', action='store_true', help='Print payloads instead of posting')
    parser.add_argument('--force', action='append', choices=[c.value for c in ReleaseChannel],
                        help='Regenerate a channel even if its version is unchanged')
    parser.add_argument('--file', type=str, help='Render a local notes page instead of fetching')
    parser.add_argument('--build', type=str, help='Build tag to render with --file (e.g. 1656)')
    parser.add_argument('--channel', choices=[c.value for c in ReleaseChannel], default='stable',
                        help='Channel label to render with --file')

    args = parser.parse_args()

    if args.file:
        if not args.build:
            parser.error('--file requires --build')
        sys.exit(render_local_file(args.file, args.build, ReleaseChannel(args.channel)))

    print_banner()
    setup_logging()
    Config.print_config()

    force = [ReleaseChannel(value) for value in args.force or []]
    summary = run_changelog_check(dry_run=args.dry_run, force=force)

    print(json.dumps(summary, indent=2))
    sys.exit(1 if summary["errors"] else 0)


if __name__ == "__main__":
    main()
