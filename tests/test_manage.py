#!/usr/bin/env python3
"""Tests for the passuser-manage CLI."""

import json
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "tools"))

from passuser import manage


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "users.db")


def run(db_path, *args):
    return manage.main(["--db-path", db_path, *args])


class TestCommands:
    def test_no_command_prints_help(self, capsys):
        assert manage.main([]) == 1
        assert "usage" in capsys.readouterr().out

    def test_add_and_verify(self, db_path, capsys):
        assert run(db_path, "add-user", "--username", "owl", "--password", "password123") == 0
        assert "User registered: owl" in capsys.readouterr().out

        assert run(db_path, "verify", "--username", "owl", "--password", "password123") == 0
        assert run(db_path, "verify", "--username", "owl", "--password", "wrongpass") == 1
        assert "Invalid username or password" in capsys.readouterr().err

    def test_add_duplicate(self, db_path, capsys):
        run(db_path, "add-user", "--username", "owl", "--password", "password123")
        assert run(db_path, "add-user", "--username", "owl", "--password", "password123") == 1
        assert "already exists" in capsys.readouterr().err

    def test_add_invalid_username(self, db_path, capsys):
        assert run(db_path, "add-user", "--username", "o", "--password", "password123") == 1
        assert "username must be at least 2 characters" in capsys.readouterr().err

    def test_password_prompt(self, db_path):
        with patch("passuser.manage.getpass.getpass", return_value="prompted1") as prompt:
            assert run(db_path, "add-user", "--username", "owl") == 0
        prompt.assert_called_once()
        assert run(db_path, "verify", "--username", "owl", "--password", "prompted1") == 0

    def test_set_password(self, db_path, capsys):
        run(db_path, "add-user", "--username", "owl", "--password", "password123")
        assert run(db_path, "set-password", "--username", "owl", "--password", "newpass1") == 0
        assert run(db_path, "verify", "--username", "owl", "--password", "newpass1") == 0
        assert run(db_path, "verify", "--username", "owl", "--password", "password123") == 1

    def test_set_password_unknown_user(self, db_path, capsys):
        assert run(db_path, "set-password", "--username", "ghost", "--password", "newpass1") == 1
        assert "not found" in capsys.readouterr().err

    def test_realms_are_separate(self, db_path):
        run(db_path, "--realm", "staff", "add-user", "--username", "owl", "--password", "password123")
        assert run(db_path, "verify", "--username", "owl", "--password", "password123") == 1
        assert run(
            db_path, "--realm", "staff", "verify", "--username", "owl", "--password", "password123"
        ) == 0

    def test_show_list_remove(self, db_path, capsys):
        run(db_path, "add-user", "--username", "owl", "--password", "password123")
        run(db_path, "--realm", "staff", "add-user", "--username", "hawk", "--password", "password123")
        capsys.readouterr()

        assert run(db_path, "show", "--username", "owl") == 0
        out = capsys.readouterr().out
        assert "Username: owl" in out
        assert "$2b$" not in out

        assert run(db_path, "list-users") == 0
        out = capsys.readouterr().out
        assert "owl" in out and "hawk" not in out

        assert run(db_path, "list-users", "--all-realms") == 0
        out = capsys.readouterr().out
        assert "owl" in out and "hawk" in out

        assert run(db_path, "remove-user", "--username", "owl") == 0
        assert run(db_path, "remove-user", "--username", "owl") == 1
        assert run(db_path, "show", "--username", "owl") == 1


class TestSettings:
    def test_env_overrides_config(self, tmp_path, monkeypatch):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"db_path": "from-config.db", "realm": "cfg"}))
        monkeypatch.setenv(manage.DB_PATH_ENV, "from-env.db")
        monkeypatch.delenv(manage.REALM_ENV, raising=False)

        args = manage.build_parser().parse_args(["--config", str(config), "list-users"])
        assert manage.resolve_settings(args) == {"db_path": "from-env.db", "realm": "cfg"}

    def test_flag_overrides_env(self, monkeypatch):
        monkeypatch.setenv(manage.DB_PATH_ENV, "from-env.db")
        monkeypatch.setenv(manage.REALM_ENV, "env-realm")

        args = manage.build_parser().parse_args(
            ["--db-path", "flag.db", "--realm", "flag-realm", "list-users"]
        )
        assert manage.resolve_settings(args) == {"db_path": "flag.db", "realm": "flag-realm"}

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv(manage.DB_PATH_ENV, raising=False)
        monkeypatch.delenv(manage.REALM_ENV, raising=False)

        args = manage.build_parser().parse_args(["list-users"])
        assert manage.resolve_settings(args) == {
            "db_path": ".passuser/users.db",
            "realm": "_default",
        }

    def test_missing_config(self, tmp_path, capsys):
        code = manage.main(["--config", str(tmp_path / "nope.json"), "list-users"])
        assert code == 1
        assert "Config not found" in capsys.readouterr().err
