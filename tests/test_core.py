"""Tests for shared skill plumbing: config, errors, CLI runner, clock."""

import asyncio
import json
import os
import re
import sys
import tempfile
from datetime import date

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from core.cli import EXIT_FAILURE, EXIT_OK, SkillArgumentParser, execute, str2bool
from core.clock import short_date, utc_timestamp
from core.config import CamelModel, ChromeConfig, ConfigLoader
from core.errors import ArgumentError, BrowserError, ConfigError, DocumentError, ErrorCategory
from core.files import write_json
import main as dispatcher


class TestChromeConfig:
    """Browser configuration defaults and overrides."""

    def test_default_config(self):
        config = ChromeConfig()

        assert config.headless is True
        assert config.timeout == 30000
        assert config.viewport_width == 1920
        assert config.monitoring.interval == 300
        assert config.monitoring.checks == 1
        assert config.monitoring.output == "dashboard_status.json"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("BROWSER_HEADLESS", "false")
        monkeypatch.setenv("BROWSER_EXECUTABLE_PATH", "/usr/bin/chromium")

        config = ChromeConfig.from_env(timeout=5000)

        assert config.headless is False
        assert config.executable_path == "/usr/bin/chromium"
        assert config.timeout == 5000

    def test_camel_case_keys_accepted(self):
        config = ChromeConfig.model_validate({"viewportWidth": 800, "userAgent": "bot", "unknownKey": 1})

        assert config.viewport_width == 800
        assert config.user_agent == "bot"


class TestConfigLoader:
    """YAML/JSON config loading."""

    @pytest.fixture
    def config_dir(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with open(os.path.join(tmpdir, "chrome.yaml"), "w") as f:
                f.write("""
headless: false
timeout: 10000
monitoring:
  interval: 60
  checks: 4
""")
            with open(os.path.join(tmpdir, "broken.json"), "w") as f:
                f.write("{not json")
            yield tmpdir

    def test_load_yaml_chrome_config(self, config_dir):
        config = ConfigLoader().load_chrome_config(os.path.join(config_dir, "chrome.yaml"))

        assert config.headless is False
        assert config.timeout == 10000
        assert config.monitoring.interval == 60
        assert config.monitoring.checks == 4

    def test_cli_overrides_beat_file(self, config_dir):
        config = ConfigLoader().load_chrome_config(
            os.path.join(config_dir, "chrome.yaml"),
            headless=True,
            timeout=None,
            monitoring={"checks": 2, "interval": None, "output": "out.json"},
        )

        assert config.headless is True
        assert config.timeout == 10000
        assert config.monitoring.checks == 2
        assert config.monitoring.interval == 60
        assert config.monitoring.output == "out.json"

    @pytest.mark.parametrize("monitoring, overrides", [
        ({"checks": 0}, {}),
        ({"interval": -5}, {}),
        ({}, {"timeout": 5}),
    ])
    def test_cli_overrides_are_validated(self, monitoring, overrides):
        with pytest.raises(ConfigError):
            ConfigLoader().load_chrome_config(monitoring=monitoring, **overrides)

    def test_missing_file(self, config_dir):
        with pytest.raises(ConfigError) as exc:
            ConfigLoader().load_file(os.path.join(config_dir, "nope.json"))
        assert exc.value.category == ErrorCategory.CONFIG

    def test_invalid_json(self, config_dir):
        with pytest.raises(ConfigError, match="Invalid JSON"):
            ConfigLoader().load_file(os.path.join(config_dir, "broken.json"))

    def test_validation_error_wrapped(self, config_dir):
        class Needs(CamelModel):
            count: int

        path = os.path.join(config_dir, "needs.json")
        write_json(path, {"count": "many"})

        with pytest.raises(ConfigError, match="Invalid Needs"):
            ConfigLoader().load_model(path, Needs)

    def test_numbers_accepted_as_text(self, config_dir):
        class Labels(CamelModel):
            labels: list[str]
            value: str

        path = os.path.join(config_dir, "labels.json")
        write_json(path, {"labels": [2021, 2022], "value": 42})

        loaded = ConfigLoader().load_model(path, Labels)

        assert loaded.labels == ["2021", "2022"]
        assert loaded.value == "42"


class TestErrors:
    """Error hierarchy serialization."""

    def test_error_serialization(self):
        error = BrowserError("Element not found", selector="#btn", url="https://example.com")

        data = error.to_dict()
        assert data["type"] == "BrowserError"
        assert data["message"] == "Element not found"
        assert data["category"] == "external"
        assert data["context"] == {"selector": "#btn", "url": "https://example.com"}

    def test_none_context_dropped(self):
        data = DocumentError("Workbook not found").to_dict()
        assert data["context"] == {}
        assert data["category"] == "validation"

    def test_argument_category(self):
        assert ArgumentError("missing", argument="--input").to_dict()["context"] == {"argument": "--input"}


class TestExecute:
    """CLI runner exit codes."""

    def test_success(self):
        assert execute(lambda: {"ok": True}, skill="test") == EXIT_OK

    def test_int_result_is_exit_code(self):
        assert execute(lambda: EXIT_FAILURE, skill="test") == EXIT_FAILURE

    def test_coroutine_is_awaited(self):
        calls = []

        async def body():
            await asyncio.sleep(0)
            calls.append("ran")

        assert execute(body, skill="test") == EXIT_OK
        assert calls == ["ran"]

    def test_skill_error_returns_failure(self):
        def body():
            raise DocumentError("bad file", path="x.xlsx")

        assert execute(body, skill="test") == EXIT_FAILURE

    def test_unexpected_error_returns_failure(self):
        def body():
            raise KeyError("surprise")

        assert execute(body, skill="test") == EXIT_FAILURE

    def test_parser_error_exits_one(self):
        parser = SkillArgumentParser(prog="demo")
        parser.add_argument("--url", required=True)

        with pytest.raises(SystemExit) as exc:
            parser.parse_args([])
        assert exc.value.code == EXIT_FAILURE

    @pytest.mark.parametrize("value,expected", [("true", True), ("False", False), ("1", True), ("no", False)])
    def test_str2bool(self, value, expected):
        assert str2bool(value) is expected


class TestDispatcher:
    """cowork-skills entry point."""

    def test_help_lists_skills(self, capsys):
        assert dispatcher.main(["--help"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "monitor-dashboard" in out
        assert "merge-pdfs" in out

    def test_unknown_skill(self):
        assert dispatcher.main(["make-coffee"]) == EXIT_FAILURE

    def test_no_arguments(self):
        assert dispatcher.main([]) == EXIT_FAILURE

    def test_skill_help_exits_zero(self):
        assert dispatcher.main(["csv-to-excel", "--help"]) == EXIT_OK

    def test_skill_missing_arguments(self):
        assert dispatcher.main(["merge-pdfs"]) == EXIT_FAILURE


class TestClock:
    """Timestamp helpers."""

    def test_utc_timestamp_format(self):
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", utc_timestamp())

    def test_short_date(self):
        assert short_date(date(2024, 3, 7)) == "3/7/2024"

    def test_write_json_creates_parent(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_json(os.path.join(tmpdir, "nested", "out.json"), {"when": date(2024, 1, 2)})
            assert json.loads(path.read_text()) == {"when": "2024-01-02"}
