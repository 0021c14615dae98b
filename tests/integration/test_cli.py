"""Integration test: CLI subcommands end to end."""

import json
from datetime import datetime
from pathlib import Path

import pytest

from cuidly.core.db import init_db, insert_job, save_subscription
from cuidly.core.schemas import FamilyLookup, SubscriptionPlan, SubscriptionSnapshot
from main import main, parse_args

EXAMPLE_INPUT = Path(__file__).resolve().parents[2] / "config" / "match.example.json"


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    path = tmp_path / "settings.yaml"
    path.write_text(f"database:\n  path: {tmp_path / 'cli.db'}\n")
    return path


class TestParseArgs:
    def test_subcommand_required(self) -> None:
        with pytest.raises(SystemExit):
            parse_args([])

    def test_match_flags(self) -> None:
        args = parse_args(["match", "--input", "x.json", "--limit", "5", "-v"])
        assert args.command == "match"
        assert args.limit == 5
        assert args.verbose is True
        assert args.config is None


class TestPlansCommand:
    def test_prints_every_plan(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["plans"])
        data = json.loads(capsys.readouterr().out)
        assert set(data) == {p.value for p in SubscriptionPlan}
        assert data["FAMILY_FREE"]["features"]["max_conversations_per_job"] == 1
        assert data["NANNY_PRO"]["displayName"] == "Babá Pro"


class TestMatchCommand:
    def test_ranks_example(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["match", "--input", str(EXAMPLE_INPUT), "--include-ineligible"])
        data = json.loads(capsys.readouterr().out)
        assert [row["nannyId"] for row in data] == [3, 5]
        assert data[0]["isEligible"] is True
        assert data[1]["isEligible"] is False
        assert data[1]["eliminationReasons"]

    def test_eligible_only_by_default(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["match", "--input", str(EXAMPLE_INPUT)])
        data = json.loads(capsys.readouterr().out)
        assert [row["nannyId"] for row in data] == [3]

    def test_missing_input(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc:
            main(["match", "--input", str(tmp_path / "nope.json")])
        assert exc.value.code == 1
        assert capsys.readouterr().err.startswith("Error:")


class TestGatesCommand:
    def test_family_gates(self, settings_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        conn = init_db(settings_file.parent / "cli.db")
        save_subscription(
            conn,
            SubscriptionSnapshot(
                lookup=FamilyLookup(id=7),
                plan=SubscriptionPlan.FAMILY_FREE,
                current_period_start=datetime(2026, 10, 1),
                current_period_end=datetime(2026, 11, 1),
            ),
        )
        job_id = insert_job(conn, 7)
        conn.close()

        main([
            "gates", "--config", str(settings_file),
            "--family-id", "7", "--job-id", str(job_id), "--recipient-id", "3",
        ])
        data = json.loads(capsys.readouterr().out)
        assert data["plan"] == "FAMILY_FREE"
        assert data["canCreateJob"]["canCreate"] is False
        assert data["canUseBoost"]["code"] == "BOOST_NOT_INCLUDED"
        assert data["profileViews"]["isUnlimited"] is True
        assert data["jobExpiration"]["isExpired"] is False
        assert data["canStartConversation"]["canStart"] is True

    def test_lookup_required(
        self, settings_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit) as exc:
            main(["gates", "--config", str(settings_file)])
        assert exc.value.code == 1
        assert "nanny_id or a family_id" in capsys.readouterr().err
