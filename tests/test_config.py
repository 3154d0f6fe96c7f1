# tests/test_config.py
"""Tests for environment-driven configuration."""

import importlib

import tool_state_sync.config as config


class TestConfigDefaults:
    def test_documented_defaults(self, monkeypatch):
        for var in (
            "TOOL_STATE_DEBOUNCE_MS",
            "TOOL_STATE_OVERSIZE_BYTES",
            "TOOL_STATE_RECENT_LIMIT",
            "TOOL_STATE_DB_PATH",
        ):
            monkeypatch.delenv(var, raising=False)
        monkeypatch.setattr("dotenv.load_dotenv", lambda *a, **k: False)
        reloaded = importlib.reload(config)
        try:
            assert reloaded.DEFAULT_DEBOUNCE_MS == 1000
            assert reloaded.OVERSIZE_THRESHOLD_BYTES == 2048
            assert reloaded.RECENT_TOOLS_LIMIT == 10
            assert reloaded.PREVIEW_MAX_LENGTH == 100
            assert reloaded.DEFAULT_DB_PATH is None
        finally:
            monkeypatch.undo()
            importlib.reload(config)

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("TOOL_STATE_DEBOUNCE_MS", "250")
        monkeypatch.setenv("TOOL_STATE_OVERSIZE_BYTES", "4096")
        monkeypatch.setenv("TOOL_STATE_DB_PATH", "/tmp/history.db")
        reloaded = importlib.reload(config)
        try:
            assert reloaded.DEFAULT_DEBOUNCE_MS == 250
            assert reloaded.OVERSIZE_THRESHOLD_BYTES == 4096
            assert reloaded.DEFAULT_DB_PATH == "/tmp/history.db"
        finally:
            monkeypatch.undo()
            importlib.reload(config)
