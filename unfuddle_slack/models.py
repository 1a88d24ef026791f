"""Data models for activity items and notifications."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class EventKind(str, Enum):
    """Kind of an Unfuddle activity record, keyed by its record_type."""
    TICKET = "Ticket"
    COMMENT = "Comment"
    CHANGESET = "Changeset"
    UNKNOWN = "Unknown"

    @classmethod
    def from_record_type(cls, record_type: Optional[str]) -> "EventKind":
        for kind in (cls.TICKET, cls.COMMENT, cls.CHANGESET):
            if record_type == kind.value:
                return kind
        return cls.UNKNOWN


@dataclass(frozen=True)
class ActivityItem:
    """Represents one Unfuddle activity record."""
    id: str
    kind: EventKind
    created_at: datetime  # timezone-aware
    summary: str
    description: Optional[str] = None
    record_type: Optional[str] = None  # raw tag as received
    # Ticket / Comment
    ticket_number: Optional[str] = None
    ticket_summary: Optional[str] = None
    ticket_description: Optional[str] = None
    comment_id: Optional[str] = None
    comment_body: Optional[str] = None
    # Changeset
    revision: Optional[str] = None
    commit_message: Optional[str] = None
    repository_id: Optional[str] = None
    repository_title: Optional[str] = None


@dataclass(frozen=True)
class Attachment:
    """A Slack message attachment."""
    fallback: str
    title: str
    title_link: str
    text: Optional[str]
    color: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fallback": self.fallback,
            "title": self.title,
            "title_link": self.title_link,
            "text": self.text,
            "color": self.color,
        }


@dataclass(frozen=True)
class Notification:
    """Chat-formatted representation of an activity item."""
    text: str
    attachments: List[Attachment] = field(default_factory=list)


@dataclass
class DeliveryResult:
    """Outcome of delivering a sorted batch of activity items."""
    delivered_count: int
    new_cursor: datetime
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class CycleReport:
    """Summary of one sync cycle."""
    cursor_before: Optional[datetime] = None
    cursor_after: Optional[datetime] = None
    fetched_count: int = 0
    delivered_count: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
