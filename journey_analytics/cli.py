"""
Journey Analytics CLI
Runs the report pipeline over an exported event file.
"""

import argparse
import asyncio
import json
import logging
from pathlib import Path
import sys
from typing import List, Optional, Dict, Any
from datetime import datetime, timezone

import pandas as pd

from journey_analytics.__version__ import __version__
from journey_analytics.automation.run_metadata import create_run_metadata
from journey_analytics.config.loader import load_config
from journey_analytics.core.contracts import parse_timestamp
from journey_analytics.pipeline import AnalyticsPipeline, InMemoryEventStore, REPORT_NAMES

logger = logging.getLogger(__name__)


# -------------------------------------------------
# EVENT FILE LOADER
# -------------------------------------------------
def load_event_records(path: Path) -> List[Dict[str, Any]]:
    """
    Read a JSON array, JSON-lines or CSV export of raw events.

    Timestamps are left untouched here; normalization happens once,
    when the records enter the event store. Cells a row leaves empty are
    dropped so they read as absent rather than NaN.
    """
    suffix = path.suffix.lower()

    if suffix in (".jsonl", ".ndjson"):
        df = pd.read_json(path, lines=True, convert_dates=False, keep_default_dates=False)
    elif suffix == ".json":
        df = pd.read_json(path, orient="records", convert_dates=False, keep_default_dates=False)
    elif suffix == ".csv":
        df = pd.read_csv(path)
    else:
        raise ValueError(f"Unsupported event file: {path}")

    if df.empty:
        logger.warning("Event file is empty: %s", path)
        return []

    return [
        {k: v for k, v in row.items() if not (pd.api.types.is_scalar(v) and pd.isna(v))}
        for row in df.to_dict(orient="records")
    ]


# -------------------------------------------------
# PROGRAMMATIC ENTRY
# -------------------------------------------------
def run_report(
    input_path: str,
    config_path: Optional[str] = None,
    report: str = "all",
    days: Optional[int] = None,
    now: Optional[str] = None,
    output_dir: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build the requested report and write it to a fresh run folder.

    `now` defaults to the newest event in the file, so historical exports
    produce the same windows every time.

    Returns:
        {
            "report": <path>,
            "metadata": <path>,
            "run_dir": <path>,
            "payload": <dict>
        }
    """
    config = load_config(config_path)

    records = load_event_records(Path(input_path))
    store = InMemoryEventStore(records)
    logger.info("Loaded %d event(s) from %s", len(store), input_path)

    anchor = parse_timestamp(now) if now else store.latest_timestamp
    if now and anchor is None:
        raise ValueError(f"Unparseable --now value: {now}")
    anchor = anchor or datetime.now(timezone.utc)

    pipeline = AnalyticsPipeline(store, config=config)
    if report == "all":
        payload = asyncio.run(pipeline.full_report(days=days, now=anchor))
    else:
        payload = asyncio.run(pipeline.run(report, days=days, now=anchor))

    run_dir = Path(output_dir or config["output_dir"]) / datetime.now(timezone.utc).strftime("%Y-%m-%d_%H-%M-%S")
    run_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Run directory: %s", run_dir)

    report_path = run_dir / "report.json"
    with open(report_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, default=str)

    errors = [f"{e['section']}: {e['error']}" for e in payload.get("errors", [])]
    metadata_path = create_run_metadata(
        input_files=[str(input_path)],
        config=config,
        output_dir=run_dir,
        status="completed_with_errors" if errors else "completed",
        errors=errors,
        reports=list(REPORT_NAMES) if report == "all" else [report],
    )

    return {
        "report": str(report_path),
        "metadata": str(metadata_path),
        "run_dir": str(run_dir),
        "payload": payload,
    }


def _summary_lines(report: str, payload: Dict[str, Any]) -> List[str]:
    if report != "all":
        return [f"Sections: {', '.join(k for k in payload if k != 'meta')}"]

    sessions = payload.get("sessions", {})
    funnel = payload.get("funnel", {}).get("metrics", {})
    quality = payload.get("quality", {})
    demand = payload.get("demand", {})
    return [
        f"Sessions: {sessions.get('totalSessions', 0)}",
        f"Search to checkout: {funnel.get('searchToCheckout', 0):.1f}%",
        f"Avg session quality: {quality.get('avgScore', 0)}",
        f"Demand alerts: {len(demand.get('alerts', []))}",
        f"Section errors: {len(payload.get('errors', []))}",
    ]


# -------------------------------------------------
# CLI ENTRY
# -------------------------------------------------
def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="journey-analytics",
        description=f"Journey Analytics v{__version__}",
    )

    parser.add_argument("input", nargs="?", help="Event export (JSON, JSON lines or CSV)")
    parser.add_argument("--config", required=False, help="Path to config YAML")
    parser.add_argument(
        "--report",
        choices=("all",) + REPORT_NAMES,
        default="all",
        help="Report to build (default: all)",
    )
    parser.add_argument("--days", type=int, help="Look-back window in days")
    parser.add_argument("--now", help="Report anchor time (ISO-8601)")
    parser.add_argument("--output", help="Output directory (default: config output_dir)")

    parser.add_argument("--version", action="store_true")
    parser.add_argument("-v", "--verbose", action="store_true")

    args = parser.parse_args(argv)

    # ---- VERSION ----
    if args.version:
        print(f"Journey Analytics v{__version__}")
        return 0

    # ---- LOGGING ----
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    # ---- INPUT ----
    if not args.input:
        parser.error("Input file required")

    input_path = Path(args.input)
    if not input_path.exists():
        raise FileNotFoundError(input_path)

    result = run_report(
        input_path=str(input_path),
        config_path=args.config,
        report=args.report,
        days=args.days,
        now=args.now,
        output_dir=args.output,
    )

    print("\n✅ Report generated")
    for line in _summary_lines(args.report, result["payload"]):
        print(f"   {line}")
    print(f"📄 Report: {result['report']}")
    print(f"📁 Run folder: {result['run_dir']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
