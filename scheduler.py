#!/usr/bin/env python3
"""
Hourly Scheduler for the BYOND Changelog Notifier

This script runs the changelog check automatically at the top of every hour.
It handles:
- Scheduled execution using APScheduler
- Logging all operations
- Metrics tracking

Usage:
    Start scheduler:   python scheduler.py
    Run immediately:   python scheduler.py --run-now
    Background:        nohup python scheduler.py > scheduler.log 2>&1 &
    Stop:              pkill -f scheduler.py
"""

import os
import sys
import json
import time
import logging
from datetime import datetime

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from config import Config, setup_logging
from main import run_changelog_check

logger = logging.getLogger(__name__)

MAX_RECORDED_RUNS = 30


def update_metrics(success: bool, duration: float, summary: dict = None, error: str = None,
                   metrics_path: str = None) -> None:
    """
    Update metrics file with run information.

    Args:
        success: Whether the run was successful
        duration: Duration of the run in seconds
        summary: Summary returned by run_changelog_check
        error: Error message if failed
        metrics_path: Override for the metrics file location
    """
    metrics_path = metrics_path or Config.get_metrics_path()

    try:
        # Load existing metrics or create new
        if os.path.exists(metrics_path):
            with open(metrics_path, 'r') as f:
                metrics = json.load(f)
        else:
            metrics = {
                "total_runs": 0,
                "successful_runs": 0,
                "failed_runs": 0,
                "changelogs_posted": 0,
                "runs": []
            }

        metrics["total_runs"] += 1
        if success:
            metrics["successful_runs"] += 1
        else:
            metrics["failed_runs"] += 1

        generated = (summary or {}).get("generated", [])
        metrics["changelogs_posted"] = metrics.get("changelogs_posted", 0) + len(generated)

        run_record = {
            "timestamp": datetime.now().isoformat(),
            "success": success,
            "duration_seconds": round(duration, 2),
            "generated": generated,
            "error": error
        }
        metrics["runs"].append(run_record)
        metrics["runs"] = metrics["runs"][-MAX_RECORDED_RUNS:]

        with open(metrics_path, 'w') as f:
            json.dump(metrics, f, indent=2)

        logger.info(f"Metrics updated: {metrics['successful_runs']}/{metrics['total_runs']} successful")

    except (OSError, ValueError) as e:
        logger.error(f"Error updating metrics: {str(e)}")


def run_scheduled_check() -> bool:
    """
    Run one changelog check and record it.

    Returns:
        True if the run finished without errors, False otherwise
    """
    logger.info("=" * 60)
    logger.info("Starting scheduled changelog check")
    logger.info(f"Time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    logger.info("=" * 60)

    start_time = time.time()

    try:
        summary = run_changelog_check()
    except Exception as e:
        duration = time.time() - start_time
        logger.exception(f"Changelog check crashed: {e}")
        update_metrics(success=False, duration=duration, error=str(e)[:200])
        return False

    duration = time.time() - start_time
    errors = summary.get("errors", [])

    if errors:
        logger.error(f"Changelog check finished with errors: {'; '.join(errors)}")
    else:
        logger.info(f"Changelog check completed in {duration:.2f} seconds")

    update_metrics(
        success=not errors,
        duration=duration,
        summary=summary,
        error="; ".join(errors)[:200] if errors else None
    )
    return not errors


def main():
    """Main entry point for the scheduler."""
    print("""
╔═══════════════════════════════════════════════════════════════════╗
║           BYOND CHANGELOG SCHEDULER                               ║
║                                                                   ║
║   Checks for new BYOND versions every hour                        ║
╚═══════════════════════════════════════════════════════════════════╝
    """)

    setup_logging()
    Config.print_config()

    if len(sys.argv) > 1:
        if sys.argv[1] == '--run-now':
            logger.info("Running changelog check immediately (manual trigger)")
            run_scheduled_check()
            return
        elif sys.argv[1] == '--help':
            print("""
Usage:
    python scheduler.py              Start scheduler (runs every hour)
    python scheduler.py --run-now    Run the changelog check immediately
    python scheduler.py --help       Show this help message

Background mode:
    nohup python scheduler.py > scheduler.log 2>&1 &

View logs:
    tail -f logs/byond_changelog.log
            """)
            return

    scheduler = BlockingScheduler()

    trigger = CronTrigger(
        minute=Config.SCHEDULE_MINUTE,
        timezone=Config.TIMEZONE
    )

    scheduler.add_job(
        run_scheduled_check,
        trigger=trigger,
        id='byond_changelog_check',
        name='Hourly BYOND Changelog Check',
        max_instances=1,
        coalesce=True,
        replace_existing=True
    )

    logger.info("Scheduler started successfully")
    print(f"\n[INFO] Scheduler is running...")
    print(f"[INFO] Checking every hour at :{Config.SCHEDULE_MINUTE:02d} {Config.TIMEZONE}")
    print(f"[INFO] Press Ctrl+C to stop\n")

    try:
        scheduler.start()

    except KeyboardInterrupt:
        logger.info("Scheduler stopped by user (Ctrl+C)")
        print("\n[INFO] Scheduler stopped.")


if __name__ == "__main__":
    main()
