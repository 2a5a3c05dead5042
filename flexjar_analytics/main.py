"""Command-line entry point for Flexjar analytics.

Reads an exported submission collection (plus optional themes and team
directory) from JSON files, runs one report and prints it as JSON or as a
Markdown digest. Logging and ``.env`` loading happen in :func:`main` so the
module can be imported by tests without side-effects.
"""
from __future__ import annotations

import argparse
import datetime
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from dotenv import load_dotenv

from flexjar_analytics.exceptions import InvalidPayloadError
from flexjar_analytics.models import Submission, Theme, load_submissions, load_themes
from flexjar_analytics.reporting.aggregator import REPORTS, aggregate
from flexjar_analytics.reporting.catalog import DEFAULT_PAGE_SIZE, feedback_page
from flexjar_analytics.reporting.render import render_digest, render_json

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DIGEST = "digest"
FEEDBACK = "feedback"


def _read_json(path: Path) -> Any:
    with path.open(encoding="utf-8") as fh:
        return json.load(fh)


def _load_items(path: Path) -> List[Submission]:
    raw = _read_json(path)
    # accept a bare list or a page export ({"content": [...]})
    if isinstance(raw, dict):
        raw = raw.get("content")
    if not isinstance(raw, list):
        raise InvalidPayloadError(f"{path} must contain a list of submissions")
    return load_submissions(raw)


def _load_themes(path: Optional[Path]) -> List[Theme]:
    if path is None:
        return []
    raw = _read_json(path)
    if not isinstance(raw, list):
        raise InvalidPayloadError(f"{path} must contain a list of themes")
    return load_themes(raw)


def _load_teams(path: Optional[Path]) -> Optional[Dict[str, List[str]]]:
    if path is None:
        return None
    raw = _read_json(path)
    if not isinstance(raw, dict):
        raise InvalidPayloadError(f"{path} must map team names to app lists")
    return {str(team): [str(app) for app in apps or []] for team, apps in raw.items()}


def _parse_filters(pairs: Sequence[str]) -> Dict[str, str]:
    filters: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"Filter must be key=value, got {pair!r}")
        filters[key.strip()] = value
    return filters


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="flexjar-analytics",
        description="Aggregate Flexjar feedback submissions into dashboard reports.",
    )
    parser.add_argument(
        "report",
        choices=sorted([*REPORTS, DIGEST, FEEDBACK]),
        help="Report to produce",
    )
    parser.add_argument(
        "--submissions", required=True, type=Path, help="JSON file with submissions"
    )
    parser.add_argument("--themes", type=Path, help="JSON file with theme definitions")
    parser.add_argument("--teams", type=Path, help="JSON file mapping team -> apps")
    parser.add_argument(
        "--filter",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Filter dimension, repeatable (e.g. --filter app=sykepenger)",
    )
    parser.add_argument(
        "--format",
        choices=("json", "markdown"),
        default="json",
        help="Output format; markdown always renders the digest",
    )
    parser.add_argument("--title", help="Digest title")
    parser.add_argument(
        "--today",
        type=datetime.date.fromisoformat,
        help="Reference date for the default period (YYYY-MM-DD)",
    )
    parser.add_argument("--page", type=int, default=0, help="Page for the feedback listing")
    parser.add_argument(
        "--size", type=int, default=DEFAULT_PAGE_SIZE, help="Page size for the feedback listing"
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the CLI and return the process exit status."""
    load_dotenv()
    logging.basicConfig(
        format=LOG_FORMAT, level=os.environ.get("FLEXJAR_LOG_LEVEL", "INFO")
    )

    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        filters = _parse_filters(args.filter)
    except argparse.ArgumentTypeError as exc:
        parser.error(str(exc))

    try:
        items = _load_items(args.submissions)
        themes = _load_themes(args.themes)
        teams = _load_teams(args.teams)
    except (OSError, ValueError) as exc:  # JSONDecodeError and InvalidPayloadError included
        logger.error("Cannot read input: %s", exc)
        return 1

    logger.info("Loaded %d submissions and %d themes", len(items), len(themes))

    if args.format == "markdown" or args.report == DIGEST:
        output = render_digest(
            items, filters, themes, teams, title=args.title, today=args.today
        )
    elif args.report == FEEDBACK:
        try:
            page = feedback_page(items, filters, args.page, args.size, teams)
        except ValueError as exc:
            parser.error(str(exc))
        output = render_json(page)
    else:
        output = render_json(aggregate(args.report, items, filters, themes, teams))

    sys.stdout.write(output)
    if not output.endswith("\n"):
        sys.stdout.write("\n")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
