"""Formats Unfuddle activity items as Slack notifications."""

from .models import ActivityItem, Attachment, EventKind, Notification

ATTACHMENT_COLOR = "#ccc"


def ticket_url(base_url: str, project_id: str, number: str) -> str:
    return f"{base_url}/projects/{project_id}/tickets/by_number/{number}"


def changeset_url(base_url: str, repository_id: str, revision: str) -> str:
    return f"{base_url}/a#/repositories/{repository_id}/commit?commit={revision}"


def normalize(item: ActivityItem, base_url: str, project_id: str) -> Notification:
    """
    Map an activity item to a Slack notification.

    Tickets and comments are titled ``#<number>: <ticket summary>`` and link to
    the ticket (comments additionally to the comment anchor). Changesets are
    titled ``<repository> - <revision>`` and link to the commit. Any other kind
    yields a notification with the item's summary and no attachment.

    Args:
        item: Activity item to format.
        base_url: Unfuddle account URL, e.g. ``https://acme.unfuddle.com``.
        project_id: Unfuddle project identifier.

    Returns:
        The notification; never raises for an unknown kind.
    """
    if item.kind is EventKind.TICKET:
        title = f"#{item.ticket_number}: {item.ticket_summary}"
        body = item.ticket_description if item.ticket_description is not None else item.description
        attachment = Attachment(
            fallback=title,
            title=title,
            title_link=ticket_url(base_url, project_id, item.ticket_number),
            text=body,
            color=ATTACHMENT_COLOR,
        )
    elif item.kind is EventKind.COMMENT:
        title = f"#{item.ticket_number}: {item.ticket_summary}"
        link = ticket_url(base_url, project_id, item.ticket_number)
        attachment = Attachment(
            fallback=title,
            title=title,
            title_link=f"{link}#comment-{item.comment_id}",
            text=item.comment_body,
            color=ATTACHMENT_COLOR,
        )
    elif item.kind is EventKind.CHANGESET:
        title = f"{item.repository_title} - {item.revision}"
        attachment = Attachment(
            fallback=title,
            title=title,
            title_link=changeset_url(base_url, item.repository_id, item.revision),
            text=item.commit_message,
            color=ATTACHMENT_COLOR,
        )
    else:
        return Notification(text=item.summary, attachments=[])

    return Notification(text=item.summary, attachments=[attachment])
