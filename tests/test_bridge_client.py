"""Tests for the HTTP client used by the CLI."""

import base64
import json
from unittest.mock import MagicMock

import pytest
import requests

from file_receiver.client.bridge_client import BridgeClient, BridgeClientError


def _response(status=200, payload=None, text=""):
    response = requests.Response()
    response.status_code = status
    response.reason = "OK" if status < 400 else "Error"
    if payload is not None:
        response._content = json.dumps(payload).encode("utf-8")
    else:
        response._content = text.encode("utf-8")
    response.encoding = "utf-8"
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


def test_list_projects(session):
    session.request.return_value = _response(payload={"projects": [{"name": "App", "directory": "/p", "fullName": "/p/App.csproj"}]})
    client = BridgeClient("http://localhost:8080", session=session)

    assert client.list_projects()[0]["name"] == "App"
    method, url = session.request.call_args[0]
    assert (method, url) == ("GET", "http://localhost:8080/projects")


def test_list_folders_passes_project(session):
    session.request.return_value = _response(payload={"folders": [{"name": "Project Root", "path": ""}]})
    client = BridgeClient(session=session)

    client.list_folders("  C:/src/App ")
    assert session.request.call_args[1]["params"] == {"project": "C:/src/App"}

    client.list_folders(None)
    assert session.request.call_args[1]["params"] is None


def test_send_file_omits_blank_fields(session):
    session.request.return_value = _response(text="File added successfully")
    client = BridgeClient(session=session)

    assert client.send_file("a.feature", "Feature: x", folder_path="  ", project_directory="") == "File added successfully"
    body = session.request.call_args[1]["json"]
    assert body == {"fileName": "a.feature", "content": "Feature: x"}


def test_send_bytes_are_base64_encoded(session):
    session.request.return_value = _response(text="File added successfully")
    client = BridgeClient(session=session)

    client.send_file("logo.png", b"\x89PNG\r\n", folder_path="Assets")
    body = session.request.call_args[1]["json"]
    assert base64.b64decode(body["content"]) == b"\x89PNG\r\n"
    assert body["folderPath"] == "Assets"


def test_send_text_as_base64_on_request(session):
    session.request.return_value = _response(text="File added successfully")
    BridgeClient(session=session).send_file("Foo.txt", "hello", encode_base64=True)
    assert session.request.call_args[1]["json"]["content"] == "aGVsbG8="


def test_error_message_comes_from_json_body(session):
    session.request.return_value = _response(status=404, payload={"error": "No solution is open"})
    with pytest.raises(BridgeClientError) as info:
        BridgeClient(session=session).list_projects()
    assert str(info.value) == "No solution is open"
    assert info.value.status_code == 404


def test_plain_text_error(session):
    session.request.return_value = _response(status=400, text="Invalid folder path")
    with pytest.raises(BridgeClientError, match="Invalid folder path"):
        BridgeClient(session=session).send_file("a", "b", folder_path="../x")


def test_connection_error_names_the_bridge(session):
    session.request.side_effect = requests.ConnectionError("refused")
    with pytest.raises(BridgeClientError, match="Check if the bridge is running on http://localhost:8080/"):
        BridgeClient(session=session).list_projects()
