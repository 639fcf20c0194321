from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from userstore import config, handler
from userstore.dispatcher import Dispatcher
from userstore.main import app
from userstore.stores.memory import MemoryRecordStore


@pytest.fixture
def memory_backend(monkeypatch):
    monkeypatch.setenv("STORE_BACKEND", "memory")
    monkeypatch.setenv("JSON_LOGS", "false")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    config.get_settings.cache_clear()
    handler.get_dispatcher.cache_clear()
    yield
    config.get_settings.cache_clear()
    handler.get_dispatcher.cache_clear()


def test_create_dispatcher_wires_configured_store(test_settings):
    dispatcher = handler.create_dispatcher(test_settings)

    assert isinstance(dispatcher, Dispatcher)
    assert isinstance(dispatcher.orchestrator.store, MemoryRecordStore)


def test_lambda_handler_reuses_one_dispatcher(memory_backend):
    create = {"body": json.dumps({"action": "addUser", "userId": "u1", "userData": {"name": "Jane"}})}
    fetch = {"body": json.dumps({"action": "getUser", "userId": "u1"})}

    assert handler.lambda_handler(create, None)["statusCode"] == 201
    response = handler.lambda_handler(fetch, None)

    assert response["statusCode"] == 200
    assert json.loads(response["body"])["user"]["name"] == "Jane"
    assert handler.get_dispatcher() is handler.get_dispatcher()


def test_cli_info_shows_backend(memory_backend):
    result = CliRunner().invoke(app, ["info"])

    assert result.exit_code == 0
    assert "backend=memory" in result.output


def test_cli_add_renders_record(memory_backend):
    result = CliRunner().invoke(app, ["add", "user123", "--data", '{"name": "John", "email": "JOHN@EXAMPLE.COM"}'])

    assert result.exit_code == 0
    assert "john@example.com" in result.output


def test_cli_reports_domain_errors(memory_backend):
    result = CliRunner().invoke(app, ["get", "nobody"])

    assert result.exit_code == 1
    assert "User not found" in result.output


def test_cli_rejects_non_object_data(memory_backend):
    result = CliRunner().invoke(app, ["update", "user123", "--data", "[1, 2]"])

    assert result.exit_code != 0


def test_cli_invoke_runs_event_through_dispatcher(memory_backend, tmp_path: Path):
    event_file = tmp_path / "event.json"
    event_file.write_text(json.dumps({"body": json.dumps({"action": "bogus"})}), encoding="utf-8")

    result = CliRunner().invoke(app, ["invoke", str(event_file)])

    assert result.exit_code == 0
    assert "HTTP 400" in result.output
    assert "Invalid action" in result.output
