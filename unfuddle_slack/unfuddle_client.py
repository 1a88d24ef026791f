"""Unfuddle API client for fetching project activity."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import requests

from .config import UnfuddleConfig
from .models import ActivityItem, EventKind

logger = logging.getLogger(__name__)

START_DATE_FORMAT = "%a, %d %b %Y %H:%M:%S UTC"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


class FetchError(Exception):
    """Raised when the activity feed cannot be retrieved."""

    def __init__(self, status_code: Optional[int], message: str = ""):
        self.status_code = status_code
        super().__init__(message or f"Error response from Unfuddle: {status_code}")


def format_start_date(instant: datetime) -> str:
    """Format an instant the way the activity endpoint expects start_date."""
    return instant.astimezone(timezone.utc).strftime(START_DATE_FORMAT)


def parse_timestamp(value: str) -> datetime:
    """Parse an Unfuddle ISO 8601 timestamp into an aware UTC datetime."""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        # offsets without a colon, e.g. 2024-01-01T00:00:05+0000
        parsed = datetime.strptime(value, TIMESTAMP_FORMAT)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _str_or_none(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def parse_activity_item(record: Dict[str, Any]) -> ActivityItem:
    """
    Decode one activity record.

    Kind-specific payloads live under ``record[<type>]``, e.g.
    ``record.ticket`` or ``record.changeset``; missing fields decode as None.

    Raises:
        ValueError: If created_at is missing or malformed.
    """
    record_type = record.get("record_type")
    kind = EventKind.from_record_type(record_type)
    payload = record.get("record") or {}

    created_at_raw = record.get("created_at")
    if not created_at_raw:
        raise ValueError(f"Activity item {record.get('id')} has no created_at")

    fields: Dict[str, Any] = {}
    if kind is EventKind.TICKET:
        ticket = payload.get("ticket") or {}
        fields = {
            "ticket_number": _str_or_none(ticket.get("number")),
            "ticket_summary": ticket.get("summary"),
            "ticket_description": ticket.get("description"),
        }
    elif kind is EventKind.COMMENT:
        comment = payload.get("comment") or {}
        fields = {
            "ticket_number": _str_or_none(record.get("ticket_number")),
            "ticket_summary": record.get("ticket_summary"),
            "comment_id": _str_or_none(comment.get("id")),
            "comment_body": comment.get("body"),
        }
    elif kind is EventKind.CHANGESET:
        changeset = payload.get("changeset") or {}
        fields = {
            "revision": _str_or_none(changeset.get("revision")),
            "commit_message": changeset.get("message"),
            "repository_id": _str_or_none(changeset.get("repository_id")),
            "repository_title": record.get("repository_title"),
        }

    return ActivityItem(
        id=str(record.get("id", "")),
        kind=kind,
        created_at=parse_timestamp(created_at_raw),
        summary=record.get("summary") or "",
        description=record.get("description"),
        record_type=record_type,
        **fields,
    )


class ActivityFetcher:
    """Reads one page of project activity from Unfuddle."""

    def __init__(self, config: UnfuddleConfig, session: Optional[requests.Session] = None):
        """
        Args:
            config: Unfuddle configuration.
            session: HTTP session to reuse; a new one is created if omitted.
        """
        self.config = config
        self.session = session or requests.Session()
        self.session.auth = (config.username, config.password)

    def activity_url(self, project_id: str) -> str:
        return f"{self.config.base_url}/api/v1/projects/{project_id}/activity.json"

    def fetch(self, cursor: datetime, limit: int, project_id: str) -> List[ActivityItem]:
        """
        Fetch activity created at or after ``cursor`` plus the boundary pad.

        Items are returned in the order the API sent them. Only one page of at
        most ``limit`` items is requested; anything newer arrives next cycle.

        Raises:
            FetchError: On a transport failure, a non-200 response or a body
                that is not a list of activity records.
        """
        start_date = format_start_date(cursor + timedelta(seconds=self.config.boundary_pad_seconds))
        url = self.activity_url(project_id)
        params = {"limit": limit, "start_date": start_date}
        logger.debug(f"uri = {url} params = {params}")

        try:
            response = self.session.get(
                url,
                params=params,
                headers={"Accept": "application/json"},
                timeout=self.config.timeout_seconds,
            )
        except requests.RequestException as e:
            raise FetchError(None, f"Error contacting Unfuddle: {e}") from e

        if response.status_code != 200:
            raise FetchError(response.status_code)

        try:
            records = response.json()
        except ValueError as e:
            raise FetchError(response.status_code, f"Unfuddle returned invalid JSON: {e}") from e
        if not isinstance(records, list):
            raise FetchError(
                response.status_code,
                f"Expected a JSON array of activity items, got {type(records).__name__}",
            )

        try:
            items = [parse_activity_item(record) for record in records]
        except (AttributeError, TypeError, ValueError) as e:
            raise FetchError(response.status_code, f"Malformed activity item: {e}") from e

        logger.info(
            f"Unfuddle activity successfully retrieved (start_time = \"{start_date}\"): "
            f"{len(items)} new items."
        )
        logger.debug(f"activity_items = {items!r}")
        return items
