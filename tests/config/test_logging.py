"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging

import pytest
import structlog

from chaosselect.config.logging import configure_logging


class TestConfigureLogging:
    def test_verbose_enables_debug(self) -> None:
        configure_logging(verbose=True, log_json=False)
        assert logging.getLogger("chaosselect").level == logging.DEBUG
        assert logging.getLogger().level == logging.WARNING

    def test_non_verbose_sets_warning(self) -> None:
        configure_logging(verbose=False, log_json=False)
        assert logging.getLogger("chaosselect").level == logging.WARNING

    def test_json_mode_output(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        log = structlog.get_logger("chaosselect.test")
        log.warning("json test", pods=3)
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "json test"
        assert parsed["pods"] == 3
        assert parsed["level"] == "warning"
        assert parsed["logger"] == "chaosselect.test"
        assert "timestamp" in parsed

    def test_stdlib_module_logger_gets_structured_fields(
        self, capfd: pytest.CaptureFixture[str]
    ) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("chaosselect.services.selector").debug("Selected %d pods", 4)
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "Selected 4 pods"
        assert parsed["level"] == "debug"
        assert parsed["logger"] == "chaosselect.services.selector"

    def test_bound_contextvars_are_merged(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        with structlog.contextvars.bound_contextvars(op="select_pods"):
            logging.getLogger("chaosselect.services.selector").warning("Pod x/y is not found")
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["op"] == "select_pods"

    def test_debug_hidden_without_verbose(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=False, log_json=True)
        logging.getLogger("chaosselect.services.selector").debug("noise")
        logging.getLogger("other.library").info("noise")
        assert capfd.readouterr().err == ""

    def test_idempotent_calls(self) -> None:
        """Multiple configure_logging calls don't stack handlers."""
        configure_logging(verbose=True, log_json=False)
        configure_logging(verbose=True, log_json=True)
        assert len(logging.getLogger().handlers) == 1
