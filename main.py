#!/usr/bin/env python3
"""
ApplyMate - Main Entry Point

Runs one job search-and-apply session from the command line.

Usage:
    # Run a session until it completes (Ctrl+C stops, SIGUSR1 toggles pause)
    python main.py run --settings settings.yaml --events logs/events.jsonl

    # Check a settings file
    python main.py validate --settings settings.yaml

    # Print an example settings file
    python main.py example-settings

    # Summarise recorded applications
    python main.py history --events logs/events.jsonl
"""

import os
import sys
import signal
import asyncio
import argparse
import logging
from collections import Counter

import yaml

from core.errors import ApplyMateError
from core.logging_config import setup_logging
from core.models import SessionState
from core.settings import EXAMPLE_SETTINGS_YAML, BotSettings
from monitoring.event_log import JsonlEventLog
from monitoring.progress import EventKind, ProgressEvent

logger = logging.getLogger(__name__)


def load_settings(path: str) -> BotSettings:
    """Load settings, taking the API key from OPENAI_API_KEY when the file has none."""
    try:
        settings = BotSettings.load(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error(f"Cannot read settings from {path}: {e}")
        sys.exit(2)
    if not settings.openai_api_key:
        settings.openai_api_key = os.getenv("OPENAI_API_KEY", "").strip()
    return settings


def print_event(event: ProgressEvent):
    """Console subscriber."""
    payload = event.payload
    if event.kind == EventKind.STATUS:
        print(f"  {payload.get('message', '')}")
    elif event.kind == EventKind.JOB_FOUND:
        print(f"🔍 {payload.get('title')} @ {payload.get('company')}")
    elif event.kind == EventKind.JOB_APPLIED:
        print(f"✅ Applied: {payload.get('job_title')} @ {payload.get('company')}")
    elif event.kind == EventKind.ERROR:
        print(f"❌ {payload.get('message')}")
    elif event.kind == EventKind.COMPLETE:
        print(f"\nDone: found={payload.get('found')} applied={payload.get('applied')} "
              f"skipped={payload.get('skipped')}")


async def run_session(settings_path: str, owner_id: str, events_path: str = None,
                      headed: bool = False) -> int:
    """Run a session to completion. Returns a process exit code."""
    from browser.stealth_manager import StealthBrowserManager
    from core.session_controller import SessionController

    settings = load_settings(settings_path)
    subscribers = [print_event]
    if events_path:
        subscribers.append(JsonlEventLog(events_path))

    controller = SessionController(
        browser_manager=StealthBrowserManager(headless=False if headed else None),
        subscribers=subscribers,
    )

    try:
        controller.start(owner_id, settings)
    except ApplyMateError as e:
        logger.error(str(e))
        return 2

    loop = asyncio.get_running_loop()

    def _stop():
        print("\n⏹  Stopping after the current application...")
        controller.stop(owner_id)

    def _toggle_pause():
        state = controller.get_status(owner_id).state
        if state == SessionState.PAUSED:
            controller.resume(owner_id)
        elif state == SessionState.RUNNING:
            controller.pause(owner_id)

    try:
        loop.add_signal_handler(signal.SIGINT, _stop)
        if hasattr(signal, "SIGUSR1"):
            loop.add_signal_handler(signal.SIGUSR1, _toggle_pause)
    except NotImplementedError:
        logger.debug("Signal handlers not supported on this platform")

    try:
        snapshot = await controller.wait(owner_id)
    finally:
        await controller.shutdown()

    if snapshot.state == SessionState.ERROR:
        logger.error(f"Session ended with error: {snapshot.error_message}")
        return 1
    return 0


def validate_settings(settings_path: str) -> int:
    settings = load_settings(settings_path)
    missing = settings.validate()
    if missing:
        print("❌ Missing required settings:")
        for item in missing:
            print(f"  - {item}")
        return 1
    print(f"✅ Settings OK: {len(settings.job_titles)} search titles, location {settings.location}")
    return 0


def show_history(events_path: str) -> int:
    log = JsonlEventLog(events_path)
    applications = list(log.applications())
    if not applications:
        print("No applications recorded")
        return 0
    for record in applications:
        print(f"{record.get('applied_at', '')[:19]}  {record.get('job_title')} @ {record.get('company')}")
    counts = Counter(record.get("status") for record in applications)
    print("\n" + ", ".join(f"{status}: {count}" for status, count in sorted(counts.items())))
    return 0


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="ApplyMate - automated job search and application sessions"
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # Run command
    run_parser = subparsers.add_parser('run', help='Run a session')
    run_parser.add_argument('--settings', required=True, help='Path to settings YAML')
    run_parser.add_argument('--owner', default='local', help='Owner id for the session')
    run_parser.add_argument('--events', help='Append progress events to this JSONL file')
    run_parser.add_argument('--headed', action='store_true', help='Show the browser window')

    # Validate command
    validate_parser = subparsers.add_parser('validate', help='Check a settings file')
    validate_parser.add_argument('--settings', required=True, help='Path to settings YAML')

    # Example settings command
    subparsers.add_parser('example-settings', help='Print an example settings file')

    # History command
    history_parser = subparsers.add_parser('history', help='List recorded applications')
    history_parser.add_argument('--events', required=True, help='JSONL event file')

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    setup_logging()

    if args.command == 'run':
        sys.exit(asyncio.run(run_session(args.settings, args.owner, args.events, args.headed)))

    elif args.command == 'validate':
        sys.exit(validate_settings(args.settings))

    elif args.command == 'example-settings':
        print(EXAMPLE_SETTINGS_YAML.strip())

    elif args.command == 'history':
        sys.exit(show_history(args.events))


if __name__ == "__main__":
    main()
