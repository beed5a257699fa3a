"""CLI entry point for live_measures.

Usage:
  python -m live_measures persist analysis.json     # Reconcile live measures
  python -m live_measures persist analysis.json --json
  python -m live_measures persist analysis.json --no-upsert
  python -m live_measures show COMPONENT_UUID [--json]
  python -m live_measures blame FILE... [--repo PATH] [--json]
  python -m live_measures reset                     # Delete live_measures.db
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from live_measures.analysis_warnings import AnalysisWarnings
from live_measures.blame import BlameOutput, blame_files
from live_measures.config import Settings, load_settings
from live_measures.db import (
    count_live_measures,
    db_exists,
    db_path,
    get_live_measures,
    init_db,
    reset_db,
)
from live_measures.models import InputFile
from live_measures.repository import load_analysis
from live_measures.step import ComputationStatistics, PersistLiveMeasuresStep

log = logging.getLogger(__name__)


def _hot_zone(args: argparse.Namespace, settings: Settings) -> str | None:
    return args.hot_zone or settings.hot_zone


def _load_settings(repo: str | Path | None) -> Settings | None:
    """Load settings, reporting a bad config value on stderr."""
    try:
        return load_settings(repo)
    except ValueError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return None


# ---------------------------------------------------------------------------
# Persist command
# ---------------------------------------------------------------------------


def cmd_persist(args: argparse.Namespace) -> int:
    """Reconcile live_measures with the measures of an analysis document."""
    settings = _load_settings(args.repo)
    if settings is None:
        return 1
    try:
        root, metrics, measures = load_analysis(args.input)
    except (OSError, ValueError, KeyError) as exc:
        print(f"Cannot load {args.input}: {exc}", file=sys.stderr)
        return 1

    supports_upsert = False if args.no_upsert else settings.supports_upsert
    conn = init_db(_hot_zone(args, settings))
    try:
        step = PersistLiveMeasuresStep(conn, root, metrics, measures,
                                       supports_upsert=supports_upsert)
        statistics = ComputationStatistics()
        try:
            step.execute(statistics)
        except ValueError as exc:
            print(f"{step.description} failed: {exc}", file=sys.stderr)
            return 1
        stored = count_live_measures(conn, root.uuid)
    finally:
        conn.close()

    if args.json:
        output = {
            "project": root.uuid,
            "statistics": statistics.as_dict(),
            "stored": stored,
        }
        print(json.dumps(output))
    else:
        print(f"{step.description} for {root.key}", file=sys.stderr)
        for key, value in statistics.as_dict().items():
            print(f"  {key}: {value}", file=sys.stderr)
        print(f"  stored: {stored}", file=sys.stderr)
    return 0


# ---------------------------------------------------------------------------
# Show command
# ---------------------------------------------------------------------------


def cmd_show(args: argparse.Namespace) -> int:
    """List the live measures stored for a component."""
    settings = _load_settings(args.repo)
    if settings is None:
        return 1
    hot_zone = _hot_zone(args, settings)
    if not db_exists(hot_zone):
        print("No live_measures.db found. Run 'persist' first.", file=sys.stderr)
        return 1

    conn = init_db(hot_zone)
    try:
        records = get_live_measures(conn, args.component)
    finally:
        conn.close()

    if args.json:
        print(json.dumps([r.to_dict() for r in records], indent=2))
        return 0

    if not records:
        print(f"No live measures for {args.component}", file=sys.stderr)
        return 0
    print(f"Live measures of {args.component}:")
    for r in records:
        shown = r.text_value if r.value is None else f"{r.value:g}"
        variation = f"  variation={r.variation:g}" if r.variation is not None else ""
        print(f"  metric={r.metric_uuid:<6} value={shown}{variation}")
    return 0


# ---------------------------------------------------------------------------
# Blame command
# ---------------------------------------------------------------------------


def _count_lines(path: Path) -> int:
    try:
        with path.open("rb") as fh:
            return sum(1 for _ in fh)
    except OSError:
        return 0


def cmd_blame(args: argparse.Namespace) -> int:
    """Blame files through git and report the ones left without blame."""
    repo = Path(args.repo or ".").resolve()
    settings = _load_settings(repo)
    if settings is None:
        return 1

    files = [InputFile(path=f, lines=_count_lines(repo / f)) for f in args.files]
    warnings = AnalysisWarnings()
    output = BlameOutput(files, warnings, settings.server_url)
    try:
        blame_files(repo, files, output)
    except ValueError as exc:
        print(f"Invalid blame data: {exc}", file=sys.stderr)
        return 1

    results = output.results
    if args.json:
        print(json.dumps({
            "blamed": sorted(results),
            "missing": sorted(f.path for f in output.missing_files()),
            "warnings": [m.text for m in warnings.warnings()],
        }))
    else:
        for path, lines in sorted(results.items()):
            authors = {line.author for line in lines if line.author}
            print(f"  {path}: {len(lines)} lines, {len(authors)} authors", file=sys.stderr)
        for message in warnings.warnings():
            print(f"[WARN] {message.text}", file=sys.stderr)
    return 0


# ---------------------------------------------------------------------------
# Reset command
# ---------------------------------------------------------------------------


def cmd_reset(args: argparse.Namespace) -> int:
    """Delete live_measures.db."""
    settings = _load_settings(args.repo)
    if settings is None:
        return 1
    hot_zone = _hot_zone(args, settings)
    p = db_path(hot_zone)
    if p.exists():
        reset_db(hot_zone)
        print(f"Deleted {p}", file=sys.stderr)
    else:
        print(f"No live_measures.db found at {p}", file=sys.stderr)
    return 0


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="live_measures",
        description="Persist the live measures of an analysis",
    )
    parser.add_argument(
        "--hot-zone",
        dest="hot_zone",
        help="Database directory (default: MEASURES_HOT_ZONE or /dev/shm/measures)",
    )
    parser.add_argument(
        "--repo",
        help="Repository holding .measures/sync.conf (default: cwd)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    sub = parser.add_subparsers(dest="command")

    persist_parser = sub.add_parser("persist", help="Reconcile live measures")
    persist_parser.add_argument("input", help="Analysis JSON (tree, metrics, measures)")
    persist_parser.add_argument("--json", action="store_true", help="JSON output")
    persist_parser.add_argument("--no-upsert", action="store_true",
                                help="Force the delete/insert write path")

    show_parser = sub.add_parser("show", help="Live measures of a component")
    show_parser.add_argument("component", help="Component uuid")
    show_parser.add_argument("--json", action="store_true", help="JSON output")

    blame_parser = sub.add_parser("blame", help="Blame files through git")
    blame_parser.add_argument("files", nargs="+", help="Repository-relative paths")
    blame_parser.add_argument("--json", action="store_true", help="JSON output")

    sub.add_parser("reset", help="Delete live_measures.db")
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for live_measures."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)

    if args.command == "persist":
        return cmd_persist(args)
    if args.command == "show":
        return cmd_show(args)
    if args.command == "blame":
        return cmd_blame(args)
    if args.command == "reset":
        return cmd_reset(args)
    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
