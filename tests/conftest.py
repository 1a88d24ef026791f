"""Shared fixtures and fakes."""

from datetime import datetime, timezone

import pytest

from unfuddle_slack.config import (
    AppConfig,
    DatabaseConfig,
    SchedulerConfig,
    SlackConfig,
    UnfuddleConfig,
)
from unfuddle_slack.db import SQLiteParams
from unfuddle_slack.models import ActivityItem, EventKind
from unfuddle_slack.slack_notifier import DeliveryError, NotificationSink

BASE_URL = "https://acme.unfuddle.com"
PROJECT_ID = "42"


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def make_ticket(item_id, created_at, number=1, summary="Ticket created"):
    return ActivityItem(
        id=str(item_id),
        kind=EventKind.TICKET,
        created_at=created_at,
        summary=summary,
        description="desc",
        record_type="Ticket",
        ticket_number=str(number),
        ticket_summary=f"Ticket {number}",
        ticket_description=f"Body of ticket {number}",
    )


class FakeSink(NotificationSink):
    """Records notifications; fails on the given 1-indexed call numbers."""

    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.calls = 0
        self.sent = []

    def send(self, notification):
        self.calls += 1
        if self.calls in self.fail_on:
            raise DeliveryError(f"webhook rejected call {self.calls}")
        self.sent.append(notification)


class FakeFetcher:
    """Returns canned items and records the arguments of every fetch."""

    def __init__(self, items=None, error=None):
        self.items = list(items or [])
        self.error = error
        self.calls = []

    def fetch(self, cursor, limit, project_id):
        self.calls.append((cursor, limit, project_id))
        if self.error is not None:
            raise self.error
        return list(self.items)


class FakeResponse:
    def __init__(self, status_code=200, payload=None, json_error=None):
        self.status_code = status_code
        self._payload = payload
        self._json_error = json_error

    def json(self):
        if self._json_error is not None:
            raise self._json_error
        return self._payload


class FakeSession:
    """Minimal stand-in for requests.Session."""

    def __init__(self, response=None, error=None):
        self.response = response or FakeResponse(payload=[])
        self.error = error
        self.auth = None
        self.requests = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.requests.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def unfuddle_config():
    return UnfuddleConfig(
        subdomain="acme",
        project_id=PROJECT_ID,
        username="bot",
        password="secret",
        max_results=25,
    )


@pytest.fixture
def db_params(tmp_path):
    return SQLiteParams(path=str(tmp_path / "cursor.db"))


@pytest.fixture
def app_config(unfuddle_config, db_params):
    return AppConfig(
        log_level="DEBUG",
        database=DatabaseConfig(params=db_params),
        unfuddle=unfuddle_config,
        slack=SlackConfig(webhook_url="https://hooks.slack.test/T000/B000/XXX", channel="#dev"),
        scheduler=SchedulerConfig(poll_interval_seconds=60),
    )

