"""Tests for structlog setup and component-bound loggers."""

from __future__ import annotations

import json
from collections.abc import Iterator

import pytest
import structlog

from gwpolicy.models.config import ResolutionMode
from gwpolicy.observability.logging import configure_from_env, get_logger, setup_logging


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    yield
    structlog.reset_defaults()


class TestSetupLogging:
    def test_json_lines_go_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging(level="info", fmt="json")

        get_logger("graph.model").info("node_added", node="Gateway::prod/gw")

        captured = capsys.readouterr()
        assert captured.out == ""
        record = json.loads(captured.err.strip())
        assert record["event"] == "node_added"
        assert record["component"] == "gwpolicy.graph.model"
        assert record["level"] == "info"
        assert "ts" in record

    def test_level_filters_lower_records(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging(level="warning")

        logger = get_logger("discovery")
        logger.info("dropped")
        logger.warning("kept")

        lines = capsys.readouterr().err.strip().splitlines()
        assert [json.loads(line)["event"] for line in lines] == ["kept"]

    def test_console_format_is_not_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging(fmt="console")

        get_logger("discovery").warning("policy_dropped", policy="prod/orphan")

        err = capsys.readouterr().err
        assert "policy_dropped" in err
        assert "gwpolicy.discovery" in err
        with pytest.raises(json.JSONDecodeError):
            json.loads(err.strip())


class TestConfigureFromEnv:
    def test_applies_level_and_format(self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
        monkeypatch.setenv("GWPOLICY_LOG_LEVEL", "error")
        monkeypatch.setenv("GWPOLICY_LOG_FORMAT", "console")
        monkeypatch.setenv("GWPOLICY_RESOLUTION_MODE", "best_effort")

        config = configure_from_env()

        logger = get_logger("discovery")
        logger.warning("filtered_out")
        logger.error("merge_conflict")
        err = capsys.readouterr().err
        assert "filtered_out" not in err
        assert "merge_conflict" in err
        assert not err.lstrip().startswith("{")
        assert config.resolution.mode == ResolutionMode.BEST_EFFORT

    def test_invalid_level_is_rejected_before_configuring(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GWPOLICY_LOG_LEVEL", "loud")
        with pytest.raises(ValueError, match="Invalid log level"):
            configure_from_env()
