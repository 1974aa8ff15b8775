"""Unit tests for the meetup CLI, festmeet.cli.meetups."""

from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from PIL import Image

from festmeet.cli.meetups import (
    build_parser,
    format_json_output,
    format_text_output,
    ingest_schedule,
    load_lineup,
    logging_options,
    main,
    parse_day_arg,
    parse_schedule_arg,
)
from festmeet.models.ingestion import ImageOutcome, IngestionReport
from festmeet.models.meetup import MeetupCandidate
from festmeet.models.performance import Performance
from festmeet.pipeline.ingestion import ScheduleIngestionPipeline
from festmeet.utils.errors import FestmeetError
from tests.conftest import at

_WOOLI_TEXT = "Wooli\n8:00 PM\nCyberian Stage\n"


@pytest.fixture
def config_path(project_root: Path) -> Path:
    return project_root / "config" / "config.yaml"


@pytest.fixture(autouse=True)
def _keep_logging_configuration():
    """Stop main() from rebinding log output to the captured stderr."""
    with patch("festmeet.cli.meetups.configure_logging") as mock:
        yield mock


def _report(owner: str, *performances: Performance, outcomes: list[ImageOutcome] | None = None) -> IngestionReport:
    return IngestionReport(owner_name=owner, performances=list(performances), outcomes=outcomes or [])


def _wooli_candidate() -> MeetupCandidate:
    return MeetupCandidate(
        start=at(19, 45),
        end=at(20),
        participants=frozenset({"Sam", "Alex"}),
        is_recommended=True,
        anchor_artist="Wooli",
        anchor_stage="Cyberian Stage",
        attendees=frozenset({"Sam", "Alex"}),
    )


# ======================================================================
# Argument parsing
# ======================================================================


class TestArgumentParsing:
    def test_schedule_arg(self) -> None:
        name, files = parse_schedule_arg("Alex=alex-1.png, alex-2.png")
        assert name == "Alex"
        assert files == [Path("alex-1.png"), Path("alex-2.png")]

    @pytest.mark.parametrize("value", ["alex.png", "=alex.png", "Alex=", "Alex= , "])
    def test_malformed_schedule_arg(self, value: str) -> None:
        with pytest.raises(argparse.ArgumentTypeError):
            parse_schedule_arg(value)

    def test_day_arg(self) -> None:
        assert parse_day_arg("2025-05-16") == date(2025, 5, 16)

    def test_malformed_day_arg(self) -> None:
        with pytest.raises(argparse.ArgumentTypeError):
            parse_day_arg("16/05/2025")

    def test_parser_collects_schedules(self) -> None:
        args = build_parser().parse_args(
            ["--schedule", "Alex=a.png", "--schedule", "Sam=s.txt", "--json", "-q"]
        )
        assert [name for name, _ in args.schedules] == ["Alex", "Sam"]
        assert args.json_output is True
        assert args.quiet is True
        assert args.day is None

    def test_logging_options_from_config(self) -> None:
        args = build_parser().parse_args(["--schedule", "Alex=a.txt"])
        config = {"app": {"env": "production"}, "logging": {"level": "DEBUG"}}
        assert logging_options(args, config) == {"log_level": "DEBUG", "app_env": "production"}

    @pytest.mark.parametrize("flag", ["--quiet", "--json"])
    def test_logging_options_capped_at_warning(self, flag: str) -> None:
        args = build_parser().parse_args(["--schedule", "Alex=a.txt", flag])
        assert logging_options(args, {"logging": {"level": "DEBUG"}})["log_level"] == "WARNING"

    def test_logging_options_defaults(self) -> None:
        args = build_parser().parse_args(["--schedule", "Alex=a.txt"])
        assert logging_options(args, {}) == {"log_level": "INFO", "app_env": None}

    def test_parser_requires_a_schedule(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestLoadLineup:
    def test_yaml_list(self, tmp_path: Path) -> None:
        path = tmp_path / "lineup.yaml"
        path.write_text(
            "- artist: Wooli\n  stage: Cyberian Stage\n  start: '20:00'\n"
            "- artist: Level Up\n  stage: Forbidden Stage\n"
        )
        lineup = load_lineup(path)
        assert len(lineup) == 2

    def test_non_list_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "lineup.yaml"
        path.write_text("artist: Wooli\n")
        with pytest.raises(FestmeetError):
            load_lineup(path)


# ======================================================================
# Formatting
# ======================================================================


class TestFormatTextOutput:
    def test_full_report(self) -> None:
        wooli = Performance(artist="Wooli", stage="Cyberian Stage", start=at(20))
        reports = [
            _report("Alex", wooli, outcomes=[ImageOutcome(source="alex.png", extracted_count=1)]),
            _report(
                "Sam",
                wooli,
                outcomes=[
                    ImageOutcome(source="sam-1.png", error="[tesseract] Tesseract recognition failed"),
                    ImageOutcome(source="sam-2.png", message="No valid set times could be extracted"),
                ],
            ),
        ]

        text = format_text_output(reports, [_wooli_candidate()])

        assert "Alex: 1 set(s)" in text
        assert "20:00  Wooli @ Cyberian Stage" in text
        assert "! sam-1.png: [tesseract] Tesseract recognition failed" in text
        assert "! sam-2.png: No valid set times could be extracted" in text
        assert "1. 19:45-20:00  [recommended]  Alex, Sam" in text
        assert "before Wooli @ Cyberian Stage" in text

    def test_no_candidates(self) -> None:
        text = format_text_output([_report("Alex")], [])
        assert "No meetup times found." in text

    def test_general_candidate_label(self) -> None:
        candidate = MeetupCandidate(
            start=at(15, 30), end=at(16, 30), participants=frozenset({"Alex", "Sam"}), is_recommended=False,
        )
        text = format_text_output([], [candidate])
        assert "15:30-16:30  [free time]" in text
        assert "before" not in text


class TestFormatJsonOutput:
    def test_structure(self) -> None:
        wooli = Performance(artist="Wooli", stage="Cyberian Stage", start=at(20))
        data = json.loads(format_json_output([_report("Alex", wooli)], [_wooli_candidate()]))

        assert data["schedules"][0]["owner_name"] == "Alex"
        assert data["schedules"][0]["performances"][0]["artist"] == "Wooli"
        candidate = data["candidates"][0]
        assert candidate["participants"] == ["Alex", "Sam"]
        assert candidate["attendees"] == ["Alex", "Sam"]
        assert candidate["is_recommended"] is True
        assert candidate["start"] == "2025-05-16T19:45:00"


# ======================================================================
# Ingestion of one person's files
# ======================================================================


class TestIngestSchedule:
    @pytest.mark.asyncio
    async def test_text_then_images(self, tmp_path: Path) -> None:
        text_file = tmp_path / "alex.txt"
        text_file.write_text(_WOOLI_TEXT)
        image_file = tmp_path / "alex.png"
        Image.new("RGB", (100, 100), (0, 0, 0)).save(str(image_file), format="PNG")

        wooli = Performance(artist="Wooli", stage="Cyberian Stage", start=at(20))
        level_up = Performance(artist="Level Up", stage="Forbidden Stage", start=at(17, 30))
        ingestion = MagicMock(spec=ScheduleIngestionPipeline)
        ingestion.ingest_text = AsyncMock(
            return_value=_report("Alex", wooli, outcomes=[ImageOutcome(source="alex.txt", extracted_count=1)])
        )
        ingestion.ingest_images = AsyncMock(
            return_value=_report("Alex", level_up, wooli, outcomes=[ImageOutcome(source="alex.png", extracted_count=1)])
        )

        report = await ingest_schedule(ingestion, "Alex", [text_file, image_file], date(2025, 5, 16))

        ingestion.ingest_text.assert_awaited_once_with(
            "Alex", [("alex.txt", _WOOLI_TEXT)], nominal_day=date(2025, 5, 16),
        )
        _, kwargs = ingestion.ingest_images.call_args
        assert kwargs["existing"] == [wooli]
        assert [p.artist for p in report.performances] == ["Level Up", "Wooli"]
        assert [o.source for o in report.outcomes] == ["alex.txt", "alex.png"]

    @pytest.mark.asyncio
    async def test_text_only_skips_recognition(self, tmp_path: Path) -> None:
        text_file = tmp_path / "alex.txt"
        text_file.write_text(_WOOLI_TEXT)
        ingestion = MagicMock(spec=ScheduleIngestionPipeline)
        ingestion.ingest_text = AsyncMock(return_value=_report("Alex"))
        ingestion.ingest_images = AsyncMock()

        await ingest_schedule(ingestion, "Alex", [text_file], None)

        ingestion.ingest_images.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path: Path) -> None:
        ingestion = MagicMock(spec=ScheduleIngestionPipeline)
        with pytest.raises(FestmeetError, match="File not found"):
            await ingest_schedule(ingestion, "Alex", [tmp_path / "missing.png"], None)

    @pytest.mark.asyncio
    async def test_unsupported_extension(self, tmp_path: Path) -> None:
        bad_file = tmp_path / "alex.bmp"
        bad_file.write_bytes(b"\x00" * 100)
        ingestion = MagicMock(spec=ScheduleIngestionPipeline)
        with pytest.raises(FestmeetError, match="Unsupported file type"):
            await ingest_schedule(ingestion, "Alex", [bad_file], None)

    @pytest.mark.asyncio
    async def test_file_too_large(self, tmp_path: Path) -> None:
        big_file = tmp_path / "alex.png"
        big_file.write_bytes(b"\x00" * (10 * 1024 * 1024 + 1))
        ingestion = MagicMock(spec=ScheduleIngestionPipeline)
        with pytest.raises(FestmeetError, match="File too large"):
            await ingest_schedule(ingestion, "Alex", [big_file], None)


# ======================================================================
# main()
# ======================================================================


class TestMain:
    def test_text_schedules_report(
        self, tmp_path: Path, config_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        (tmp_path / "alex.txt").write_text(_WOOLI_TEXT)
        (tmp_path / "sam.txt").write_text(_WOOLI_TEXT)

        exit_code = main(
            [
                "--schedule", f"Alex={tmp_path / 'alex.txt'}",
                "--schedule", f"Sam={tmp_path / 'sam.txt'}",
                "--day", "2025-05-16",
                "--config", str(config_path),
            ]
        )

        out = capsys.readouterr().out
        assert exit_code == 0
        assert "1. 19:45-20:00  [recommended]  Alex, Sam" in out
        assert "before Wooli @ Cyberian Stage" in out

    def test_json_to_file(self, tmp_path: Path, config_path: Path) -> None:
        (tmp_path / "alex.txt").write_text(_WOOLI_TEXT)
        (tmp_path / "sam.txt").write_text(_WOOLI_TEXT)
        output_path = tmp_path / "meetups.json"

        exit_code = main(
            [
                "--schedule", f"Alex={tmp_path / 'alex.txt'}",
                "--schedule", f"Sam={tmp_path / 'sam.txt'}",
                "--day", "2025-05-16",
                "--config", str(config_path),
                "--json",
                "-o", str(output_path),
            ]
        )

        assert exit_code == 0
        data = json.loads(output_path.read_text())
        assert [s["owner_name"] for s in data["schedules"]] == ["Alex", "Sam"]
        assert data["candidates"][0]["anchor_artist"] == "Wooli"

    def test_lineup_corrects_names(
        self, tmp_path: Path, config_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        (tmp_path / "alex.txt").write_text("Nobodies Kinq\n2:00 PM\nCyberian Stage\n")
        lineup = tmp_path / "lineup.yaml"
        lineup.write_text("- artist: Nobodies King\n  stage: Cyberian Stage\n")

        exit_code = main(
            [
                "--schedule", f"Alex={tmp_path / 'alex.txt'}",
                "--day", "2025-05-16",
                "--lineup", str(lineup),
                "--config", str(config_path),
            ]
        )

        assert exit_code == 0
        assert "14:00  Nobodies King @ Cyberian Stage" in capsys.readouterr().out

    def test_missing_file_exit_code(
        self, tmp_path: Path, config_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        exit_code = main(
            ["--schedule", f"Alex={tmp_path / 'missing.png'}", "--config", str(config_path)]
        )
        assert exit_code == 1
        assert "File not found" in capsys.readouterr().err

    def test_images_without_recognition_engine(
        self, tmp_path: Path, config_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        image_file = tmp_path / "alex.png"
        Image.new("RGB", (100, 100), (0, 0, 0)).save(str(image_file), format="PNG")

        with patch(
            "festmeet.services.recognition_service.RecognitionService.get_available_providers",
            return_value=[],
        ):
            exit_code = main(["--schedule", f"Alex={image_file}", "--config", str(config_path)])

        assert exit_code == 1
        assert "No text recognition engine is available" in capsys.readouterr().err

    def test_log_level_read_from_config(
        self, tmp_path: Path, _keep_logging_configuration: MagicMock,
    ) -> None:
        (tmp_path / "alex.txt").write_text(_WOOLI_TEXT)
        config_file = tmp_path / "config.yaml"
        config_file.write_text("app:\n  env: development\nlogging:\n  level: DEBUG\n")

        exit_code = main(
            ["--schedule", f"Alex={tmp_path / 'alex.txt'}", "--config", str(config_file)]
        )

        assert exit_code == 0
        _, kwargs = _keep_logging_configuration.call_args
        assert kwargs["log_level"] == "DEBUG"
        assert kwargs["stream"] is sys.stderr
