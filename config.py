"""
Configuration for the BYOND Changelog Notifier

This module contains all configuration settings for the version checker,
the changelog fetcher, the Discord payload and the hourly scheduler.
All values can be overridden via environment variables.
"""

import os
import sys
import logging
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Configuration settings for the changelog notifier."""

    # BYOND endpoints
    BYOND_VERSION_URL = os.getenv('BYOND_VERSION_URL', 'https://secure.byond.com/download/version.txt')
    BYOND_NOTES_URL_TEMPLATE = os.getenv('BYOND_NOTES_URL_TEMPLATE', 'https://secure.byond.com/docs/notes/{major}.html')
    BYOND_DOWNLOAD_URL = os.getenv('BYOND_DOWNLOAD_URL', 'https://secure.byond.com/download/')

    # HTTP settings
    HTTP_TIMEOUT = int(os.getenv('HTTP_TIMEOUT', '30'))

    # Data store
    DATA_DIRECTORY = os.getenv('DATA_DIRECTORY', 'bv_data')
    VERSIONS_FILE = os.getenv('VERSIONS_FILE', 'versions.json')
    HOOKS_FILE = os.getenv('HOOKS_FILE', 'hooks.toml')

    # Webhook presentation
    WEBHOOK_USERNAME = os.getenv('WEBHOOK_USERNAME', 'BYOND Changelog')
    WEBHOOK_AVATAR_URL = os.getenv('WEBHOOK_AVATAR_URL', 'http://mocha.affectedarc07.co.uk/byond.webp')
    WEBHOOK_FOOTER_TEXT = os.getenv('WEBHOOK_FOOTER_TEXT', 'https://github.com/AffectedArc07/ByondChangelogAzureFunction')

    # Schedule (runs every hour at this minute)
    TIMEZONE = os.getenv('SCHEDULER_TIMEZONE', 'UTC')
    SCHEDULE_MINUTE = int(os.getenv('SCHEDULE_MINUTE', '0'))

    # Logging configuration
    LOG_DIRECTORY = os.getenv('LOG_DIRECTORY', 'logs')
    LOG_FILE = os.getenv('LOG_FILE', 'byond_changelog.log')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    # Metrics file for tracking runs
    METRICS_FILE = os.getenv('METRICS_FILE', 'metrics.json')

    @classmethod
    def get_log_path(cls) -> str:
        """Get the full path to the log file."""
        return os.path.join(cls.LOG_DIRECTORY, cls.LOG_FILE)

    @classmethod
    def get_metrics_path(cls) -> str:
        """Get the full path to the metrics file."""
        return os.path.join(cls.LOG_DIRECTORY, cls.METRICS_FILE)

    @classmethod
    def get_versions_path(cls, data_dir: str = None) -> str:
        """Get the full path to the stored versions file."""
        return os.path.join(data_dir or cls.DATA_DIRECTORY, cls.VERSIONS_FILE)

    @classmethod
    def get_hooks_path(cls, data_dir: str = None) -> str:
        """Get the full path to the webhook list."""
        return os.path.join(data_dir or cls.DATA_DIRECTORY, cls.HOOKS_FILE)

    @classmethod
    def ensure_directories(cls) -> None:
        """Create the log and data directories if they don't exist."""
        for directory in (cls.LOG_DIRECTORY, cls.DATA_DIRECTORY):
            if not os.path.exists(directory):
                os.makedirs(directory)
                print(f"[Config] Created directory: {directory}")

    @classmethod
    def print_config(cls) -> None:
        """Print current configuration for debugging."""
        print("\n" + "=" * 50)
        print("  BYOND CHANGELOG CONFIGURATION")
        print("=" * 50)
        print(f"  Version feed: {cls.BYOND_VERSION_URL}")
        print(f"  Notes URL: {cls.BYOND_NOTES_URL_TEMPLATE}")
        print(f"  Data directory: {cls.DATA_DIRECTORY}")
        print(f"  Schedule: every hour at :{cls.SCHEDULE_MINUTE:02d} ({cls.TIMEZONE})")
        print(f"  Log file: {cls.get_log_path()}")
        print(f"  Timeout: {cls.HTTP_TIMEOUT}s")
        print("=" * 50 + "\n")


def setup_logging() -> None:
    """Configure root logging to the log file and stdout."""
    Config.ensure_directories()
    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
        format=Config.LOG_FORMAT,
        handlers=[
            logging.FileHandler(Config.get_log_path()),
            logging.StreamHandler(sys.stdout)
        ]
    )
