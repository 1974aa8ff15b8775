"""Standalone CLI that proposes meetup times for a group.

Usage::

    python -m festmeet.cli.meetups --schedule Alex=alex1.png,alex2.png --schedule Sam=sam.txt
    python -m festmeet.cli.meetups --schedule Alex=alex.png --schedule Sam=sam.png --json
    python -m festmeet.cli.meetups --schedule Alex=a.png --schedule Sam=s.png --day 2025-05-16

Each ``--schedule`` names one person and lists their screenshots (JPEG, PNG
or WEBP, read with text recognition) or ``.txt`` files already holding
recognized text.  Schedules are ingested one after the other, then ranked
meetup candidates are printed as a report or as JSON.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from datetime import date
from pathlib import Path

import yaml

from festmeet.config.loader import load_config
from festmeet.main import build_services
from festmeet.models.ingestion import IngestionReport
from festmeet.models.meetup import MeetupCandidate
from festmeet.models.performance import Schedule
from festmeet.models.recognition import ScheduleImage
from festmeet.pipeline.ingestion import ScheduleIngestionPipeline
from festmeet.services.meetup_engine import find_shared_gaps
from festmeet.services.reference_lineup import ReferenceLineup
from festmeet.utils.errors import FestmeetError, ProviderUnavailableError
from festmeet.utils.logging import configure_logging

_IMAGE_CONTENT_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
}
_TEXT_EXTENSIONS = {".txt"}
_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB


# ---------------------------------------------------------------------------
# Argument parsing helpers
# ---------------------------------------------------------------------------


def parse_schedule_arg(value: str) -> tuple[str, list[Path]]:
    """Split ``NAME=path[,path...]`` into the owner name and file paths."""
    name, separator, paths = value.partition("=")
    name = name.strip()
    if not separator or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=path[,path], got {value!r}")
    files = [Path(p.strip()) for p in paths.split(",") if p.strip()]
    if not files:
        raise argparse.ArgumentTypeError(f"no files given for {name!r}")
    return name, files


def parse_day_arg(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}") from exc


def load_lineup(path: Path) -> ReferenceLineup:
    """Read a YAML list of ``{artist, stage, start}`` lineup entries."""
    with open(path) as f:
        entries = yaml.safe_load(f) or []
    if not isinstance(entries, list):
        raise FestmeetError(f"{path} must contain a list of lineup entries")
    return ReferenceLineup(entries)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def _clock(candidate_time) -> str:  # noqa: ANN001
    return candidate_time.strftime("%H:%M")


def format_text_output(reports: list[IngestionReport], candidates: list[MeetupCandidate]) -> str:
    lines: list[str] = []
    sep = "=" * 60

    lines.append(sep)
    lines.append("  festmeet — Meetup Report")
    lines.append(sep)
    lines.append("")

    lines.append("SCHEDULES")
    lines.append("-" * 40)
    for report in reports:
        lines.append(f"  {report.owner_name}: {len(report.performances)} set(s)")
        for performance in report.performances:
            lines.append(
                f"    {_clock(performance.start)}  {performance.artist} @ {performance.stage}"
            )
        for outcome in report.outcomes:
            if outcome.error:
                lines.append(f"    ! {outcome.source}: {outcome.error}")
            elif outcome.extracted_count == 0:
                lines.append(f"    ! {outcome.source}: {outcome.message}")
    lines.append("")

    lines.append("MEETUP CANDIDATES")
    lines.append("-" * 40)
    if not candidates:
        lines.append("  No meetup times found.")
    for rank, candidate in enumerate(candidates, start=1):
        label = "recommended" if candidate.is_recommended else "free time"
        lines.append(
            f"  {rank}. {_clock(candidate.start)}-{_clock(candidate.end)}  [{label}]"
            f"  {', '.join(sorted(candidate.participants))}"
        )
        if candidate.anchor_artist:
            lines.append(f"     before {candidate.anchor_artist} @ {candidate.anchor_stage}")
    lines.append("")
    return "\n".join(lines)


def format_json_output(reports: list[IngestionReport], candidates: list[MeetupCandidate]) -> str:
    output = {
        "schedules": [
            {
                "owner_name": report.owner_name,
                "performances": [p.model_dump(mode="json") for p in report.performances],
                "outcomes": [o.model_dump(mode="json") for o in report.outcomes],
            }
            for report in reports
        ],
        "candidates": [
            {
                **candidate.model_dump(mode="json", exclude={"participants", "attendees"}),
                "participants": sorted(candidate.participants),
                "attendees": sorted(candidate.attendees),
            }
            for candidate in candidates
        ],
    }
    return json.dumps(output, indent=2, default=str)


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


def _read_sources(files: list[Path]) -> tuple[list[ScheduleImage], list[tuple[str, str]]]:
    images: list[ScheduleImage] = []
    texts: list[tuple[str, str]] = []
    for path in files:
        if not path.exists():
            raise FestmeetError(f"File not found: {path}")
        suffix = path.suffix.lower()
        if suffix in _TEXT_EXTENSIONS:
            texts.append((path.name, path.read_text(encoding="utf-8")))
            continue
        if suffix not in _IMAGE_CONTENT_TYPES:
            allowed = sorted({*_IMAGE_CONTENT_TYPES, *_TEXT_EXTENSIONS})
            raise FestmeetError(f"Unsupported file type: {suffix}. Allowed: {', '.join(allowed)}")
        data = path.read_bytes()
        if len(data) > _MAX_FILE_SIZE:
            raise FestmeetError(
                f"File too large: {path.name} is {len(data):,} bytes. Maximum: {_MAX_FILE_SIZE:,} bytes."
            )
        images.append(ScheduleImage.from_bytes(data, path.name, _IMAGE_CONTENT_TYPES[suffix]))
    return images, texts


async def ingest_schedule(
    ingestion: ScheduleIngestionPipeline,
    owner_name: str,
    files: list[Path],
    nominal_day: date | None,
) -> IngestionReport:
    """Ingest one person's text sources, then their screenshots."""
    images, texts = _read_sources(files)
    report = await ingestion.ingest_text(owner_name, texts, nominal_day=nominal_day)
    if not images:
        return report
    image_report = await ingestion.ingest_images(
        owner_name, images, existing=report.performances, nominal_day=nominal_day,
    )
    return IngestionReport(
        owner_name=owner_name,
        performances=image_report.performances,
        outcomes=[*report.outcomes, *image_report.outcomes],
    )


async def _run(args: argparse.Namespace, config: dict) -> int:
    lineup = load_lineup(Path(args.lineup)) if args.lineup else None
    services = build_services(config, reference_lineup=lineup)
    ingestion: ScheduleIngestionPipeline = services["ingestion"]

    needs_recognition = any(
        path.suffix.lower() in _IMAGE_CONTENT_TYPES and path.exists()
        for _, files in args.schedules
        for path in files
    )
    if needs_recognition and not services["recognition_service"].get_available_providers():
        raise ProviderUnavailableError(
            "No text recognition engine is available. Install Tesseract or pass .txt files."
        )

    reports = [
        await ingest_schedule(ingestion, owner_name, files, args.day)
        for owner_name, files in args.schedules
    ]
    schedules = [
        Schedule(owner_name=report.owner_name, performances=report.performances)
        for report in reports
    ]
    candidates = find_shared_gaps(schedules, services["policy"])

    text = (
        format_json_output(reports, candidates)
        if args.json_output
        else format_text_output(reports, candidates)
    )
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        print(f"Results written to: {args.output}", file=sys.stderr)
    else:
        print(text)
    return 0


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def logging_options(args: argparse.Namespace, config: dict) -> dict:
    """Log level and environment from config; ``--quiet`` and ``--json`` cap output at warnings."""
    app_section = config.get("app") or {}
    logging_section = config.get("logging") or {}
    level = str(logging_section.get("level") or "INFO")
    if args.quiet or args.json_output:
        level = "WARNING"
    return {"log_level": level, "app_env": app_section.get("env")}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m festmeet.cli.meetups",
        description=(
            "Read festival schedule screenshots for a group and propose "
            "times and places to meet up."
        ),
    )
    parser.add_argument(
        "--schedule",
        dest="schedules",
        action="append",
        type=parse_schedule_arg,
        required=True,
        metavar="NAME=PATH[,PATH]",
        help="One person's schedule files. Repeat for each person.",
    )
    parser.add_argument(
        "--day",
        type=parse_day_arg,
        default=None,
        help="Festival date clock readings belong to (YYYY-MM-DD). Defaults to today.",
    )
    parser.add_argument(
        "--lineup",
        default=None,
        help="YAML list of known lineup entries used to correct recognized names.",
    )
    parser.add_argument(
        "--config",
        default="config/config.yaml",
        help="Path to the YAML configuration file.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output results as JSON instead of a formatted report.",
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Write results to a file instead of stdout.",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log warnings and errors.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, configure logging and run.  Returns the exit code."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
        # Logs go to stderr so stdout carries only the report.
        configure_logging(**logging_options(args, config), stream=sys.stderr)
        return asyncio.run(_run(args, config))
    except FestmeetError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
