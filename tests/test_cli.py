"""Admin CLI tests — exit codes and messages.

The database helpers are swapped for fakes; UserService itself is
covered in test_user_service.py.
"""

import pytest
from click.testing import CliRunner

from authgate.cli import main as cli


@pytest.fixture()
def runner():
    return CliRunner()


@pytest.fixture()
def known_users(monkeypatch):
    users = {"alice@example.com": "old-hash"}

    async def fake_reset(email, new_password):
        if email not in users:
            return False
        users[email] = new_password
        return True

    async def fake_create(email, password, name):
        if email in users:
            return False
        users[email] = password
        return True

    monkeypatch.setattr(cli, "_reset_password", fake_reset)
    monkeypatch.setattr(cli, "_create_admin", fake_create)
    return users


def test_reset_password_success(runner, known_users):
    result = runner.invoke(cli.main, ["reset-password", "alice@example.com", "n3w"])
    assert result.exit_code == 0
    assert "Password updated successfully for alice@example.com" in result.output
    assert known_users["alice@example.com"] == "n3w"


def test_reset_password_unknown_user(runner, known_users):
    result = runner.invoke(cli.main, ["reset-password", "bob@example.com", "n3w"])
    assert result.exit_code == 1
    assert "User not found: bob@example.com" in result.output


def test_reset_password_usage(runner, known_users):
    result = runner.invoke(cli.main, ["reset-password", "alice@example.com"])
    assert result.exit_code == 2
    assert "Usage" in result.output


def test_create_admin(runner, known_users):
    result = runner.invoke(cli.main, ["create-admin", "root@example.com", "pw", "--name", "Root"])
    assert result.exit_code == 0
    assert "root@example.com" in known_users


def test_create_admin_duplicate(runner, known_users):
    result = runner.invoke(cli.main, ["create-admin", "alice@example.com", "pw"])
    assert result.exit_code == 1
    assert "already exists" in result.output
