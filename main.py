#!/usr/bin/env python3
"""
Main entry point for the grade monitor.

Polls the grade query endpoint for every configured student, prints the
current grade report each round and pushes a notification whenever a
student's grade list changes.

Usage:
    python main.py                      # run until interrupted
    python main.py --once               # run a single round
    python main.py --init-config        # write template config files
    python main.py --reset-state        # forget stored baselines
"""

import argparse
import sys
from typing import List, Optional

from core.monitor import GradeMonitor
from core.registry import SubjectRegistry
from core.state_manager import StateManager
from models.subject import mask_credential
from utils.exceptions import ConfigurationError
from utils.logger import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='gradewatch - Grade change monitor'
    )
    parser.add_argument(
        '--settings',
        type=str,
        help='Path to settings.yaml (default: config/settings.yaml)'
    )
    parser.add_argument(
        '--subjects',
        type=str,
        help='Path to subjects.yaml (default: config/subjects.yaml)'
    )
    parser.add_argument(
        '--once',
        action='store_true',
        help='Run a single round and exit'
    )
    parser.add_argument(
        '--rounds',
        type=int,
        help='Stop after this many rounds'
    )
    parser.add_argument(
        '--list',
        action='store_true',
        help='List configured subjects and channels'
    )
    parser.add_argument(
        '--init-config',
        action='store_true',
        help='Write template configuration files and exit'
    )
    parser.add_argument(
        '--reset-state',
        nargs='?',
        const='',
        metavar='SUBJECT_ID',
        help='Forget the stored baseline (of one subject, or of all) and exit'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        registry = SubjectRegistry(args.settings, args.subjects)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    setup_logging(registry.get_settings(), verbose=args.verbose)

    if args.init_config:
        written = registry.write_default_config()
        for path in written:
            print(f"Template written: {path}")
        if not written:
            print("Configuration files already exist, nothing written.")
        return 0

    state_file = (registry.get_settings().get('state') or {}).get('file')

    if args.reset_state is not None:
        if not state_file:
            print("No state file configured (state.file), nothing to reset.")
            return 0
        state_manager = StateManager(state_file)
        if args.reset_state:
            state_manager.clear_state(args.reset_state)
            print(f"Baseline cleared for {args.reset_state}")
        else:
            state_manager.clear_all()
            print("All baselines cleared")
        return 0

    if args.list:
        states = StateManager(state_file).get_all_states() if state_file else {}
        print("\nConfigured Subjects:")
        print("-" * 50)
        for subject in registry.get_subjects():
            state = states.get(subject.subject_id)
            print(f"  {subject.display_name}")
            if subject.label:
                print(f"    Id:          {subject.subject_id}")
            print(f"    Credential:  {mask_credential(subject.credential)}")
            print(f"    Push target: {subject.push_target or 'N/A'}")
            if state and not state.first_observation:
                print(f"    Baseline:    {state.last_count} items")
        print("\nConfigured Channels:")
        print("-" * 50)
        for channel in registry.get_settings()['channels']:
            print(f"  {channel.get('type')}")
        return 0

    try:
        monitor = GradeMonitor(registry)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        print("Run with --init-config to create template files.", file=sys.stderr)
        return 2

    max_rounds = 1 if args.once else args.rounds
    try:
        monitor.run_forever(max_rounds=max_rounds)
    except KeyboardInterrupt:
        print("\nStopped.")
    return 0


if __name__ == '__main__':
    sys.exit(main())
