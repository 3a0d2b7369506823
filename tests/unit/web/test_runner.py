"""Tests for the uvicorn runner."""

import copy

from mongomock_motor import AsyncMongoMockClient
from uvicorn.config import LOGGING_CONFIG

from notevault.app import App
from notevault.web import runner


def test_run_server_leaves_uvicorn_defaults_untouched(config, monkeypatch):
    """Test that the customised log config is a copy and uvicorn's global stays as shipped."""
    original = copy.deepcopy(LOGGING_CONFIG)
    captured = {}

    def fake_run(app, **kwargs):
        captured.update(kwargs)

    monkeypatch.setattr(runner.uvicorn, "run", fake_run)
    runner.run_server(App(config, mongo_client=AsyncMongoMockClient()), config)

    assert LOGGING_CONFIG == original
    log_config = captured["log_config"]
    assert log_config["handlers"]["access"]["filters"] == ["share_tokens"]
    assert log_config["filters"]["share_tokens"]["()"] == "notevault.logging.ShareTokenFilter"
    assert captured["port"] == config.port
