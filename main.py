#!/usr/bin/env python3
"""
Entry point for the Immich album sync tool.
"""

import argparse
import sys
from pathlib import Path

from albumsync.scheduler import (
    BACKGROUND_FLAG,
    SchedulerError,
    get_scheduler,
    is_running_as_admin,
    startup_command,
)
from albumsync.syncer import run_sync


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Immich Album Sync")
    parser.add_argument(
        BACKGROUND_FLAG,
        action="store_true",
        help="Run one sync pass without the menu (used by the startup task)",
    )
    parser.add_argument("--config", type=Path, help="Path to config.json (default: next to the program)")
    parser.add_argument("--log-file", type=Path, help="Log file to append to (default: Documents folder)")
    return parser.parse_args(argv)


def wait_for_enter():
    print("\nPress Enter to continue...")
    input()


def setup_scheduled_task(config_path=None):
    print("Setting up the startup task...")
    scheduler = get_scheduler()

    # Check for administrator privileges
    try:
        elevated = is_running_as_admin()
    except SchedulerError as e:
        print(f"Warning: could not determine whether the program runs with administrator rights: {e}")
        print("Trying to create the task anyway...")
    else:
        if elevated:
            print("Running with administrator rights.")
        elif scheduler.requires_elevation:
            print("ERROR: Administrator rights are required to set up the startup task.", file=sys.stderr)
            print("Please run the program as administrator.", file=sys.stderr)
            wait_for_enter()
            return False

    command, args = startup_command(config_path)
    print(f"Registering with {scheduler.name}: {command} {' '.join(args)}")

    try:
        message = scheduler.register_startup_job(command, args)
    except SchedulerError as e:
        print("Error setting up the startup task:", file=sys.stderr)
        print(e.details(), file=sys.stderr)
        if scheduler.requires_elevation:
            print("\nMake sure the program runs with administrator rights if the error persists.", file=sys.stderr)
        wait_for_enter()
        return False

    print(message)
    print("The sync will run in the background at every system start.")
    wait_for_enter()
    return True


def sync_now(args):
    try:
        return run_sync(args.config, args.log_file)
    except OSError as e:
        # e.g. the log file can't be opened, so nothing has been logged
        print(f"CRITICAL: Sync aborted: {e}", file=sys.stderr)
        return None


def show_menu():
    print("Immich Album Sync")
    print("=================")
    print("1. Sync now")
    print("2. Install as startup task (runs at system start)")
    print("3. Exit")
    print("")
    return input("Please choose (1-3): ").strip()


def main(argv=None):
    args = parse_arguments(argv)

    # Started by the startup task: sync once, no menu
    if args.background:
        return 0 if sync_now(args) is not None else 1

    choice = show_menu()
    if choice == "1":
        sync_now(args)
    elif choice == "2":
        setup_scheduled_task(args.config)
    else:
        print("Exiting.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
