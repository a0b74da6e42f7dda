"""
Changelog Field Formatter for the BYOND Changelog Notifier

This module turns parsed changelog sections into Discord embed fields:
- One link field per category section
- One or more fields per application, packed up to the field value limit
- "(Continued)" fields when an application's lines don't fit in one field

Discord caps embeds at 25 fields. Large builds can exceed that and nothing
here tries to trim them.
"""

from typing import List, Union

from changelog_models import CategorySection, ReleaseChannel, RenderedField

# Discord allows 1024 per field value; stay a little under
MAX_FIELD_BODY_LENGTH = 1000

# Discord field name limit
MAX_FIELD_TITLE_LENGTH = 256

# Discord rejects empty field names
SECTION_HEADER_TITLE = "\u200b"

BULLET = "\u25cf"

CONTINUED_SUFFIX = " (Continued)"


def format_section_link(section: CategorySection) -> str:
    """Bold, underlined markdown link for a category section."""
    return f"**__[{section.name}]({section.link})__**"


def field_title(name: str, continued: bool = False) -> str:
    """Application field title, cut so it fits the field name limit with any suffix."""
    suffix = CONTINUED_SUFFIX if continued else ""
    return name[:MAX_FIELD_TITLE_LENGTH - len(suffix)] + suffix


def format_bullet(line: str) -> str:
    return f"{BULLET} {line}\n"


def build_embed_title(version: str, channel: Union[ReleaseChannel, str]) -> str:
    """
    Build the embed title for a release.

    Examples:
        ("515.1656", ReleaseChannel.BETA) -> "BYOND version 515.1656 (Beta)"
    """
    label = channel.display_name if isinstance(channel, ReleaseChannel) else str(channel)
    return f"BYOND version {version} ({label})"


def _split_oversized(text: str) -> List[str]:
    """Cut a single bulleted line that is longer than a whole field."""
    return [text[i:i + MAX_FIELD_BODY_LENGTH] for i in range(0, len(text), MAX_FIELD_BODY_LENGTH)]


def render_fields(build_tag: str, channel: Union[ReleaseChannel, str],
                  sections: List[CategorySection]) -> List[RenderedField]:
    """
    Render a build's sections into ordered embed fields.

    Args:
        build_tag: Build the sections belong to
        channel: Release channel the build was published on
        sections: Parsed sections, in page order

    Returns:
        Fields in page order; every body is at most MAX_FIELD_BODY_LENGTH chars
    """
    fields: List[RenderedField] = []

    for section in sections:
        fields.append(RenderedField(SECTION_HEADER_TITLE, format_section_link(section)))

        for application in section.applications:
            title = field_title(application.name)
            content = ""

            for line in application.entries:
                bullet = format_bullet(line)

                if content and len(content) + len(bullet) > MAX_FIELD_BODY_LENGTH:
                    fields.append(RenderedField(title, content))
                    title = field_title(application.name, continued=True)
                    content = ""

                if len(bullet) > MAX_FIELD_BODY_LENGTH:
                    # The line gets fields of its own; the last chunk stays open
                    chunks = _split_oversized(bullet)
                    for chunk in chunks[:-1]:
                        fields.append(RenderedField(title, chunk))
                        title = field_title(application.name, continued=True)
                    bullet = chunks[-1]

                content += bullet

            # Always emitted, even for an application with no lines
            fields.append(RenderedField(title, content))

    return fields
