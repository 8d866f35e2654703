"""CLI entrypoint: fetch a Linear team's states, labels and members as JSON."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from linear_team_info import __version__
from linear_team_info.cache import FileReportCache, ReportKey
from linear_team_info.config import LinearSettings, resolve_settings
from linear_team_info.linear.client import LinearClient, LinearError
from linear_team_info.logging import configure_logging
from linear_team_info.report import render_report
from linear_team_info.service import TeamInfoService

logger = logging.getLogger(__name__)

SETUP_GUIDE = """\
Setup:
  Provide a Linear API key in one of three ways (first match wins):
    1. command line:  linear-team-info --apiKey=<key> [--teamId=<id>]
    2. environment:   LINEAR_API_KEY=<key> [LINEAR_TEAM_ID=<id>] linear-team-info
    3. a .env file in the working directory defining the same variables

  Without a team id the first team visible to the key is used.

Output:
  A JSON object on stdout with the team id, its labels, its workflow statuses
  and (unless --no-members) each member with their most common labels.

Getting your Linear API key:
  Linear settings > Account > Security & access > Personal API keys.
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linear-team-info",
        description="Linear team info extractor",
        epilog=SETUP_GUIDE,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"linear-team-info {__version__}")
    parser.add_argument(
        "--apiKey",
        "--api-key",
        dest="api_key",
        default=None,
        help="Linear API key (overrides LINEAR_API_KEY)",
    )
    parser.add_argument(
        "--teamId",
        "--team-id",
        dest="team_id",
        default=None,
        help="Team id (overrides LINEAR_TEAM_ID; defaults to the first team)",
    )
    parser.add_argument(
        "--top",
        dest="top_labels",
        type=int,
        default=None,
        help="Number of common labels per member (overrides LINEAR_TOP_LABELS; default 2)",
    )
    parser.add_argument(
        "--no-members",
        action="store_true",
        help="Only report labels and statuses; skip the per-member label aggregation",
    )
    parser.add_argument(
        "--cache",
        action="store_true",
        help="Reuse the saved report if it was written today instead of calling Linear",
    )
    parser.add_argument(
        "--save",
        action="store_true",
        help="Also write the report to the report path",
    )
    parser.add_argument(
        "--report-path",
        default=None,
        help="Report file used by --cache and --save (overrides LINEAR_REPORT_PATH)",
    )
    parser.add_argument(
        "--max-concurrency",
        type=int,
        default=None,
        help="Members fetched in parallel (overrides LINEAR_MAX_CONCURRENCY)",
    )
    return parser


def _fetch_report(settings: LinearSettings, *, include_members: bool) -> dict[str, object]:
    client = LinearClient(
        api_key=settings.api_key,
        api_url=settings.api_url,
        timeout=settings.request_timeout,
    )
    try:
        service = TeamInfoService(
            client=client,
            top_n=settings.top_labels,
            max_concurrency=settings.max_concurrency,
        )
        report = service.build_report(team_id=settings.team_id, include_members=include_members)
        return report.to_document()
    finally:
        client.close()


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    resolution = resolve_settings(
        api_key=args.api_key,
        team_id=args.team_id,
        LINEAR_TOP_LABELS=args.top_labels,
        LINEAR_REPORT_PATH=args.report_path,
        LINEAR_MAX_CONCURRENCY=args.max_concurrency,
    )
    if resolution.settings is None:
        # Logging isn't configured yet; keep it simple and actionable.
        print(f"Configuration error: {resolution.error}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        print("Run with --help for setup instructions.", file=sys.stderr)
        return 2

    settings = resolution.settings
    configure_logging(settings.log_level, secrets=[settings.api_key])

    try:
        cache = FileReportCache(Path(settings.report_path))
        include_members = not args.no_members
        wanted = ReportKey(
            team_id=settings.team_id or "",
            top_labels=settings.top_labels,
            include_members=include_members,
        )

        if args.cache:
            entry = cache.get(wanted)
            if entry is not None:
                print(render_report(entry.document))
                return 0

        try:
            document = _fetch_report(settings, include_members=include_members)
        except LinearError as e:
            logger.error(
                "Error fetching Linear data",
                extra={"team_id": settings.team_id, "error": str(e)},
            )
            print(f"Error fetching Linear data: {e}", file=sys.stderr)
            return 1

        print(render_report(document))

        if args.save:
            saved = ReportKey(
                team_id=str(document["team_id"]),
                top_labels=settings.top_labels,
                include_members=include_members,
            )
            cache.put(saved, document)
            logger.info("Report written", extra={"path": str(cache.path)})

        return 0

    except Exception:
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
