#!/usr/bin/env python3
"""
Submit Criterion benchmark output as a report.

Reads `cargo bench` console output, parses every `time: [...]` line into a
latency metric (nanoseconds) and ingests them as one report.

Usage:
    cargo bench 2>&1 | python scripts/submit_criterion.py --owner me --project my-lib
    python scripts/submit_criterion.py --owner me --project my-lib --file bench.txt --branch feature-x
    python scripts/submit_criterion.py --owner me --project my-lib --file bench.txt --dry-run

Requires: DATABASE_URL set (or defaults to sqlite:///local.db), schema migrated.
"""
import sys
import os
import argparse
import platform
import subprocess

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from benchwatch.adapters.criterion import parse_criterion_output
from benchwatch.config import DEFAULT_MEASURE
from benchwatch.errors import BenchwatchError
from benchwatch.logging_config import configure_logging
from benchwatch.pipeline.ingest import ReportSubmission, MetricInput, ingest_report


def _git_hash():
    """HEAD of the current checkout, or None outside a git repo."""
    try:
        out = subprocess.run(['git', 'rev-parse', 'HEAD'], capture_output=True, text=True, check=True)
    except (OSError, subprocess.CalledProcessError):
        return None
    return out.stdout.strip() or None


def main():
    parser = argparse.ArgumentParser(description='Submit Criterion benchmark output as a report')
    parser.add_argument('--owner', required=True, help='Submitter / project owner id')
    parser.add_argument('--project', required=True, help='Project slug')
    parser.add_argument('--branch', default='main')
    parser.add_argument('--testbed', default=platform.system().lower() or 'unknown')
    parser.add_argument('--hash', dest='git_hash', help='Source revision (defaults to git HEAD)')
    parser.add_argument('--file', help='Read output from this file instead of stdin')
    parser.add_argument('--dry-run', action='store_true', help='Parse and print, do not submit')
    args = parser.parse_args()

    configure_logging()

    if args.file:
        with open(args.file, encoding='utf-8') as f:
            output = f.read()
    else:
        output = sys.stdin.read()

    results = parse_criterion_output(output)
    if not results:
        print("No benchmark results found in output.")
        print("Make sure you're running Criterion benchmarks.")
        return 1

    print(f"Found {len(results)} benchmark results:")
    for r in results:
        print(f"  {r.name} : {r.value:.2f} ns [{r.lower:.2f} - {r.upper:.2f}]")

    if args.dry_run:
        print("Dry run - not submitting results.")
        return 0

    submission = ReportSubmission(
        project_slug=args.project,
        branch=args.branch,
        testbed=args.testbed,
        git_hash=args.git_hash or _git_hash(),
        metrics=[MetricInput(**r.to_metric(DEFAULT_MEASURE)) for r in results],
    )
    try:
        result = ingest_report(args.owner, submission)
    except BenchwatchError as e:
        print(f"Submission failed: {e.message}", file=sys.stderr)
        return 2

    print(f"Report submitted: {result.report['id']}")
    for alert in result.alerts:
        print(f"  ALERT threshold={alert['threshold_id']} metric={alert['metric_id']} "
              f"change={alert['percent_change']:+.2f}%")
    return 0


if __name__ == '__main__':
    sys.exit(main())
