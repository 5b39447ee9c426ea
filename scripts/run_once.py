#!/usr/bin/env python3
"""
CLI script to run a single polling round manually and print a summary.

Usage:
    python run_once.py                          # Check all subjects
    python run_once.py --subject 2020000001     # Check one subject
    python run_once.py --json                   # Print results as JSON
"""

import argparse
import json
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.monitor import GradeMonitor
from core.registry import SubjectRegistry
from utils.exceptions import ConfigurationError
from utils.logger import setup_logging


def main():
    parser = argparse.ArgumentParser(
        description='gradewatch - Single round grade check'
    )
    parser.add_argument('--settings', type=str, help='Path to settings.yaml')
    parser.add_argument('--subjects', type=str, help='Path to subjects.yaml')
    parser.add_argument(
        '--subject',
        type=str,
        help='Specific subject id to check (checks all if not specified)'
    )
    parser.add_argument(
        '--json',
        action='store_true',
        help='Print results as JSON'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    args = parser.parse_args()

    try:
        registry = SubjectRegistry(args.settings, args.subjects)
        setup_logging(registry.get_settings(), verbose=args.verbose)
        monitor = GradeMonitor(registry)
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        sys.exit(2)

    if args.subject:
        subject = monitor.registry.get_subject(args.subject)
        if subject is None:
            print(f"Subject not found: {args.subject}")
            sys.exit(1)
        print(f"\nChecking: {args.subject}")
        print("-" * 50)
        results = [monitor.check_subject(subject)]
        print(results[0])
    else:
        print("\nChecking all subjects...")
        print("-" * 50)
        results = monitor.run_round()

    if args.json:
        print(json.dumps([r.to_dict() for r in results], ensure_ascii=False, indent=2))
        return

    print("\nResults Summary:")
    print("-" * 70)
    for result in results:
        average = ''
        if result.snapshot and result.snapshot.weighted_average is not None:
            average = f" avg {result.snapshot.weighted_average:.2f}"
        print(f"  [{result.status.upper():10}] {result.subject_id}{average}")

    errors = sum(1 for r in results if r.error)
    print(f"\nSummary: {len(results) - errors} checked, {errors} errors")


if __name__ == '__main__':
    main()
