"""
Tests for the pwsentry command-line interface.
"""

import pytest
from click.testing import CliRunner

from pwsentry import __version__
from pwsentry.cli import main


@pytest.fixture
def runner(monkeypatch, tmp_path):
    monkeypatch.setenv("PWSENTRY_SQLITE_PATH", str(tmp_path / "cli.db"))
    monkeypatch.setenv("PWSENTRY_BCRYPT_ROUNDS", "4")
    return CliRunner()


def test_version(runner):
    result = runner.invoke(main, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_config_shows_settings(runner):
    result = runner.invoke(main, ["config"])

    assert result.exit_code == 0
    assert "range_api_url" in result.output
    assert "history_limit" in result.output


def test_db_init_creates_database(runner, tmp_path):
    result = runner.invoke(main, ["db", "init"])

    assert result.exit_code == 0
    assert (tmp_path / "cli.db").exists()


def test_history_record(runner, tmp_path):
    runner.invoke(main, ["db", "init"])

    result = runner.invoke(
        main,
        ["history", "record", "acct-1", "--reason", "admin_reset"],
        input="brand-New-Secret-1\nbrand-New-Secret-1\n",
    )

    assert result.exit_code == 0
    assert "Recorded password change" in result.output


def test_history_record_without_database_fails(runner):
    result = runner.invoke(
        main,
        ["history", "record", "acct-1"],
        input="brand-New-Secret-1\nbrand-New-Secret-1\n",
    )

    assert result.exit_code == 1
