"""One synchronization cycle: Unfuddle activity to Slack."""

import logging
from datetime import datetime
from typing import Callable, Optional

from .config import AppConfig
from .db import CursorStore, StorageError, open_connection
from .delivery import deliver, sort_items
from .models import CycleReport
from .slack_notifier import NotificationSink, SlackWebhookSink
from .unfuddle_client import ActivityFetcher, FetchError

logger = logging.getLogger(__name__)


class SyncOrchestrator:
    """Loads the cursor, fetches, delivers, and persists the advanced cursor."""

    def __init__(
        self,
        config: AppConfig,
        fetcher: Optional[ActivityFetcher] = None,
        sink: Optional[NotificationSink] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.config = config
        self.fetcher = fetcher or ActivityFetcher(config.unfuddle)
        self.sink = sink or SlackWebhookSink(config.slack)
        self.clock = clock

    def run_cycle(self) -> CycleReport:
        """
        Run one cycle.

        Storage and fetch failures abort the cycle and are reported in the
        returned report; the persisted cursor is left as it was. A delivery
        failure still persists the progress made before it.
        """
        report = CycleReport()
        unfuddle = self.config.unfuddle

        try:
            with open_connection(self.config.database.params) as conn:
                store = CursorStore(conn, self.config.database.params, clock=self.clock)
                store.ensure_schema()
                cursor = store.load()
                report.cursor_before = cursor
                report.cursor_after = cursor

                try:
                    items = self.fetcher.fetch(cursor, unfuddle.max_results, unfuddle.project_id)
                except FetchError as e:
                    logger.error(f"Error response from Unfuddle, aborting the rest of the job: {e}")
                    report.error = str(e)
                    return report
                report.fetched_count = len(items)

                items = sort_items(items)
                logger.info("Activity items sorted by date ascending.")

                result = deliver(items, self.sink, cursor, unfuddle.base_url, unfuddle.project_id)
                report.delivered_count = result.delivered_count
                logger.info(f"Total {result.delivered_count} pings to Slack.")
                if result.error is not None:
                    report.error = str(result.error)

                if result.new_cursor > cursor:
                    store.save(result.new_cursor)
                    report.cursor_after = result.new_cursor
                else:
                    logger.info("No activity items delivered; sync time left unchanged.")
        except StorageError as e:
            logger.error(f"Database error, aborting the rest of the job: {e}")
            report.error = str(e)

        return report
