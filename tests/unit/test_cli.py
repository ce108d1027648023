"""Tests for the command line entry point."""

from __future__ import annotations

import json

import pytest


@pytest.fixture
def run_cli(tmp_path, capsys, monkeypatch):
    """Run the CLI against a temporary database and return (code, stdout)."""
    from jobtrail.__main__ import main

    monkeypatch.delenv("DEFAULT_USER", raising=False)
    db_path = tmp_path / "cli.db"

    def _run(*args: str) -> tuple[int, str]:
        capsys.readouterr()
        code = main(["--db", str(db_path), "--log-level", "WARNING", *args])
        return code, capsys.readouterr().out

    return _run


def test_cli_without_command_prints_help(capsys) -> None:
    from jobtrail.__main__ import main

    assert main([]) == 0
    assert "usage" in capsys.readouterr().out.lower()


def test_cli_parser_supports_subcommands() -> None:
    from jobtrail.__main__ import create_parser

    parser = create_parser()

    parsed = parser.parse_args(["logs", "--entity-type", "network", "--limit", "5"])
    assert parsed.command == "logs"
    assert parsed.entity_type == "network"
    assert parsed.limit == 5

    parsed = parser.parse_args(["contact", "add", "--name", "Ann", "--from-application"])
    assert parsed.contact_cmd == "add"
    assert parsed.from_application is True


def test_cli_add_and_list_applications(run_cli) -> None:
    code, out = run_cli(
        "app", "add", "--company", "Acme", "--role", "Engineer",
        "--date-applied", "2025-03-01", "--source", "referral",
    )
    assert code == 0
    created = json.loads(out)
    assert created["company"] == "Acme"
    assert created["user_id"] == "local"

    code, out = run_cli("app", "list")
    assert code == 0
    assert [a["id"] for a in json.loads(out)] == [created["id"]]


def test_cli_duplicate_application_exit_code(run_cli) -> None:
    args = ("app", "add", "--company", "Acme", "--role", "Engineer", "--date-applied", "2025-03-01")
    assert run_cli(*args)[0] == 0

    code, _ = run_cli(*args)
    assert code == 2


def test_cli_update_logs_and_note(run_cli) -> None:
    _, out = run_cli(
        "app", "add", "--company", "Acme", "--role", "Engineer", "--date-applied", "2025-03-01"
    )
    app_id = json.loads(out)["id"]

    code, out = run_cli("app", "update", app_id, "--status", "screening")
    assert code == 0
    assert json.loads(out)["status"] == "screening"

    code, out = run_cli("logs", "--entity-id", app_id)
    logs = json.loads(out)
    assert [entry["summary"] for entry in logs] == [
        "Status changed from applied to screening",
        "Added Acme - Engineer to applications",
    ]

    code, out = run_cli("note", logs[0]["id"], "Recruiter called")
    assert code == 0
    assert json.loads(out)["user_note"] == "Recruiter called"


def test_cli_users_are_isolated(run_cli) -> None:
    _, out = run_cli(
        "--user", "alice", "app", "add", "--company", "Acme", "--role", "Engineer",
        "--date-applied", "2025-03-01",
    )
    app_id = json.loads(out)["id"]

    code, _ = run_cli("--user", "bob", "app", "delete", app_id)
    assert code == 1

    _, out = run_cli("--user", "bob", "logs")
    assert json.loads(out) == []


def test_cli_stats_and_streak(run_cli) -> None:
    run_cli("app", "add", "--company", "Acme", "--role", "Engineer", "--date-applied", "2025-03-01")
    run_cli("contact", "add", "--name", "Ann Lee", "--met-at", "meetup")

    code, out = run_cli("stats")
    assert code == 0
    stats = json.loads(out)
    assert stats["total"] == 1
    assert stats["by_status"] == {"applied": 1}

    _, out = run_cli("network-stats")
    assert json.loads(out)["by_met_at"] == {"meetup": 1}

    _, out = run_cli("streak")
    assert json.loads(out)["longest_streak"] == 1


def test_cli_invalid_date_exit_code(run_cli) -> None:
    code, _ = run_cli(
        "app", "add", "--company", "Acme", "--role", "Engineer", "--date-applied", "soon"
    )
    assert code == 1
