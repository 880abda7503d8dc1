"""Tests for the file-receiver command line."""

import json
from unittest.mock import MagicMock, patch

import pytest

from file_receiver import cli
from file_receiver.client.bridge_client import BridgeClientError


def test_config_set_persists_settings(tmp_path, capsys):
    settings_path = tmp_path / "settings.json"
    code = cli.main(
        ["--settings", str(settings_path), "config", "--set", "menu_name=Orders", "--set", "extension_enabled=yes"]
    )
    assert code == 0
    shown = json.loads(capsys.readouterr().out)
    assert shown["menu_name"] == "Orders"
    assert shown["extension_enabled"] is True
    assert json.loads(settings_path.read_text(encoding="utf-8"))["menu_name"] == "Orders"


def test_config_reports_missing_fields(tmp_path, capsys):
    cli.main(["--settings", str(tmp_path / "s.json"), "config"])
    assert "Missing mandatory fields: Menu Name" in capsys.readouterr().err


def test_config_rejects_unknown_key(tmp_path):
    with pytest.raises(SystemExit):
        cli.main(["--settings", str(tmp_path / "s.json"), "config", "--set", "colour=blue"])


def test_send_uses_stored_defaults(tmp_path, capsys):
    settings_path = tmp_path / "settings.json"
    cli.main(["--settings", str(settings_path), "config", "--set", "folder_path=Features", "--set", "project_directory=/src/App"])
    capsys.readouterr()
    source = tmp_path / "Login.feature"
    source.write_text("Feature: Login", encoding="utf-8")

    client = MagicMock()
    client.send_file.return_value = "File added successfully"
    with patch.object(cli, "BridgeClient", return_value=client) as factory:
        code = cli.main(["--settings", str(settings_path), "send", str(source), "--base64"])

    assert code == 0
    factory.assert_called_once_with("http://localhost:8080/")
    args, kwargs = client.send_file.call_args
    assert args == ("Login.feature", b"Feature: Login")
    assert kwargs == {"folder_path": "Features", "project_directory": "/src/App"}
    assert "File added successfully" in capsys.readouterr().out


def test_send_reports_bridge_errors(tmp_path, capsys):
    source = tmp_path / "a.txt"
    source.write_text("x", encoding="utf-8")
    client = MagicMock()
    client.send_file.side_effect = BridgeClientError("Invalid folder path", status_code=400)
    with patch.object(cli, "BridgeClient", return_value=client):
        code = cli.main(["--settings", str(tmp_path / "s.json"), "send", str(source), "--folder", "../x"])
    assert code == 2
    assert "Error: Invalid folder path" in capsys.readouterr().err


def test_projects_prints_json(tmp_path, capsys):
    client = MagicMock()
    client.list_projects.return_value = [{"name": "App", "directory": "/src/App", "fullName": "/src/App/App.csproj"}]
    with patch.object(cli, "BridgeClient", return_value=client) as factory:
        assert cli.main(["--settings", str(tmp_path / "s.json"), "--url", "http://127.0.0.1:9000/", "projects"]) == 0
    factory.assert_called_once_with("http://127.0.0.1:9000/")
    assert json.loads(capsys.readouterr().out)["projects"][0]["name"] == "App"


def test_serve_port_flag_ignores_bad_env_port(monkeypatch):
    from file_receiver import service

    monkeypatch.setenv("BRIDGE_PORT", "eighty")
    fake = MagicMock()
    fake.return_value.serve_forever.return_value = True
    monkeypatch.setattr(service, "FileReceiverService", fake)

    assert cli.main(["serve", "--port", "9"]) == 0
    settings = fake.call_args[0][0]
    assert settings.port == 9


def test_serve_reports_bad_env_port(monkeypatch, capsys):
    from file_receiver import service

    monkeypatch.setenv("BRIDGE_PORT", "eighty")
    fake = MagicMock()
    monkeypatch.setattr(service, "FileReceiverService", fake)

    with pytest.raises(SystemExit) as info:
        cli.main(["serve"])
    assert info.value.code == 2
    assert "BRIDGE_PORT must be an integer, got 'eighty'" in capsys.readouterr().err
    fake.assert_not_called()
