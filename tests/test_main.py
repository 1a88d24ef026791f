import logging

import pytest

from unfuddle_slack import main as main_module
from unfuddle_slack.models import CycleReport


class StubOrchestrator:
    report = CycleReport()

    def __init__(self, config):
        self.config = config

    def run_cycle(self):
        return self.report


def test_configuration_error_exits_1(monkeypatch):
    def broken_config(env_file=None):
        raise ValueError("Missing required environment variables: SLACK_WEBHOOK_URL")

    monkeypatch.setattr(main_module, "load_config", broken_config)

    assert main_module.main(["--once"]) == 1


def test_once_exit_code_follows_cycle_report(monkeypatch, app_config):
    monkeypatch.setattr(main_module, "load_config", lambda env_file=None: app_config)
    monkeypatch.setattr(main_module, "SyncOrchestrator", StubOrchestrator)

    StubOrchestrator.report = CycleReport()
    assert main_module.main(["--once"]) == 0

    StubOrchestrator.report = CycleReport(error="Error response from Unfuddle: 500")
    assert main_module.main(["--once"]) == 1


@pytest.mark.parametrize("value, expected", [
    ("0", logging.DEBUG),
    ("1", logging.INFO),
    ("2", logging.WARNING),
    ("3", logging.ERROR),
    ("4", logging.CRITICAL),
    ("debug", logging.DEBUG),
    ("WARNING", logging.WARNING),
    ("bogus", logging.INFO),
])
def test_resolve_log_level(value, expected):
    assert main_module.resolve_log_level(value) == expected
