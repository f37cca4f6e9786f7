"""Workforce reconciliation and institution scoring script."""
from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from datetime import date
from pathlib import Path
from typing import Dict, Optional, Sequence

from workforce_report.data_loader import DataLoadError, load_snapshot
from workforce_report.fields import parse_date
from workforce_report.pipeline import ReconciliationReport, build_report
from workforce_report.processing import education_frame, population_filter, review_frame, scores_frame
from workforce_report.settings import ALLOCATION_BASES, DEFAULT_SETTINGS

BASE_DIR = Path(__file__).resolve().parent


class ReconciliationError(Exception):
    pass


def resolve_path(path_str: str) -> Path:
    path = Path(path_str)
    if not path.is_absolute():
        path = BASE_DIR / path
    return path


def save_outputs(
    report: ReconciliationReport,
    scores_path: Path,
    education_path: Path,
    review_path: Path,
) -> None:
    for path in (scores_path, education_path, review_path):
        path.parent.mkdir(parents=True, exist_ok=True)
    scores_frame(report.scored).to_csv(scores_path, index=False)
    education_frame(report.education).to_csv(education_path, index=False)
    review_frame(report.unmatched, report.institutions).to_csv(review_path, index=False)


def report_metrics(
    logger: logging.Logger,
    report: ReconciliationReport,
    durations: Dict[str, float],
) -> None:
    diagnostics = report.diagnostics
    logger.info("Diagnostics: %s", json.dumps(diagnostics.as_dict(), ensure_ascii=False))
    raw = sum(diagnostics.matches_by_method.values()) or 1
    logger.info(
        "Match shares: %s",
        json.dumps(
            {k: round(v / raw, 4) for k, v in diagnostics.matches_by_method.items()},
            ensure_ascii=False,
        ),
    )
    if diagnostics.duplicate_count:
        logger.info(
            "Duplicate matches collapsed: %d of %d",
            diagnostics.duplicate_count,
            diagnostics.raw_match_count,
        )
    if diagnostics.rejected_without_id:
        logger.warning("Matches rejected for lacking a resident id: %d", diagnostics.rejected_without_id)
    if diagnostics.unmatched_count:
        logger.warning("Unmatched persons: %d", diagnostics.unmatched_count)
    if diagnostics.ambiguous_matches:
        logger.warning("Matches resolved among tied candidates: %d", diagnostics.ambiguous_matches)
    if diagnostics.duplicate_institution_codes:
        logger.warning(
            "Duplicate institution codes ignored: %s",
            ", ".join(diagnostics.duplicate_institution_codes),
        )
    estimated = [item.metrics.code for item in report.scored if not item.has_real_match]
    if estimated:
        logger.info("Scored from registry estimates (no real match): %s", ", ".join(estimated))
    for name, duration in durations.items():
        logger.info("Duration %s: %.3fs", name, duration)


def setup_logger(log_path: Path) -> logging.Logger:
    log_path.parent.mkdir(parents=True, exist_ok=True)
    logger = logging.getLogger("workforce_reconciler")
    logger.setLevel(logging.INFO)
    handler = logging.FileHandler(log_path, encoding="utf-8")
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
    handler.setFormatter(formatter)
    logger.handlers = [handler]
    return logger


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile workforce rosters and score institutions")
    parser.add_argument("--employees", required=True, help="Employee roster (CSV/Excel)")
    parser.add_argument("--participants", help="Education participant roster (CSV/Excel)")
    parser.add_argument("--institutions", required=True, help="Institution registry (CSV/Excel)")
    parser.add_argument("--as-of", dest="as_of", required=True, help="Snapshot date, e.g. 2024-06-30")
    parser.add_argument("--scores", required=True, help="Output CSV for ranked institutions")
    parser.add_argument("--education", required=True, help="Output CSV for education statuses")
    parser.add_argument("--review", required=True, help="Output CSV for unmatched persons")
    parser.add_argument("--log", required=True, help="Log file path")
    parser.add_argument(
        "--allocation-basis",
        dest="allocation_basis",
        choices=ALLOCATION_BASES,
        default=DEFAULT_SETTINGS.allocation_basis,
    )
    parser.add_argument("--similarity-threshold", dest="similarity_threshold", type=float)
    parser.add_argument("--exclude-closed", dest="exclude_closed", action="store_true")
    parser.add_argument("--district", dest="districts", action="append", help="Limit scoring to a district")
    parser.add_argument(
        "--require-resident-id",
        dest="require_resident_id",
        action="store_true",
        help="Reject matches without a resident id instead of deduplicating by name",
    )
    return parser.parse_args(argv)


def snapshot_date(value: str) -> date:
    parsed = parse_date(value)
    if parsed is None:
        raise ReconciliationError(f"Invalid --as-of date: {value}")
    return parsed


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    as_of = snapshot_date(args.as_of)
    logger = setup_logger(resolve_path(args.log))
    logger.info("Starting reconciliation with parameters: %s", json.dumps(vars(args), ensure_ascii=False))
    settings = DEFAULT_SETTINGS.with_overrides(
        allocation_basis=args.allocation_basis,
        similarity_threshold=args.similarity_threshold,
        require_secondary_id=args.require_resident_id or None,
    )
    start_time = time.perf_counter()
    try:
        snapshot = load_snapshot(
            resolve_path(args.employees),
            resolve_path(args.participants) if args.participants else None,
            resolve_path(args.institutions),
        )
    except DataLoadError as exc:
        logger.error("Loading failed: %s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    load_duration = time.perf_counter() - start_time
    logger.info("Loaded tables in %.3fs", load_duration)
    build_start = time.perf_counter()
    report = build_report(
        snapshot["employees"],
        snapshot["participants"],
        snapshot["institutions"],
        as_of,
        settings=settings,
        population_filter=population_filter(args.exclude_closed, args.districts),
    )
    build_duration = time.perf_counter() - build_start
    save_start = time.perf_counter()
    save_outputs(report, resolve_path(args.scores), resolve_path(args.education), resolve_path(args.review))
    save_duration = time.perf_counter() - save_start
    total_duration = time.perf_counter() - start_time
    durations = {
        "load": load_duration,
        "reconcile": build_duration,
        "save": save_duration,
        "total": total_duration,
    }
    report_metrics(logger, report, durations)
    logger.info("Reconciliation completed in %.3fs", total_duration)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
