"""
Work-log fetcher: the worker loop of the pipeline.

Each worker pulls issue ids from the shared work queue, pages through that issue's work logs,
sums the seconds logged by the target author inside the window and pushes one PerIssueTotal
per issue with a nonzero sum.
"""

import logging
import threading
from datetime import datetime
from typing import Any, Dict, Optional

from ingest.jira import JiraClient
from models import PerIssueTotal, TimeWindow, WorklogEntry
from worklog.barrier import CompletionBarrier
from worklog.pager import Pager
from worklog.queues import ClosableQueue, QueueClosed

logger = logging.getLogger(__name__)

# Jira reports e.g. 2021-01-17T12:34:56.000+0000; the fraction is optional
STARTED_FORMATS = ("%Y-%m-%dT%H:%M:%S.%f%z", "%Y-%m-%dT%H:%M:%S%z")


def parse_started(value: Any) -> datetime:
    """Parse a worklog 'started' timestamp into an aware datetime. Raises ValueError."""
    if not isinstance(value, str):
        raise ValueError(f"started is not a string: {value!r}")
    for fmt in STARTED_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise ValueError(f"unrecognised worklog start {value!r}")


def entry_matches(author_id: str, started: datetime, target_id: str, window: TimeWindow) -> bool:
    return author_id == target_id and window.contains(started)


def parse_entry(raw: Dict[str, Any]) -> WorklogEntry:
    """Build a WorklogEntry from a raw worklog. Raises ValueError on a bad shape, start or duration."""
    if not isinstance(raw, dict):
        raise ValueError(f"worklog is not an object: {type(raw).__name__}")
    author = raw.get('author') or {}
    if not isinstance(author, dict):
        raise ValueError(f"worklog author is not an object: {author!r}")
    author_id = author.get('accountId') or ''
    if not isinstance(author_id, str):
        raise ValueError(f"bad author accountId {author_id!r}")
    started = parse_started(raw.get('started'))
    seconds = raw.get('timeSpentSeconds') or 0
    if not isinstance(seconds, int) or seconds < 0:
        raise ValueError(f"bad timeSpentSeconds {seconds!r}")
    return WorklogEntry(author_id, started, seconds)


def entry_seconds(raw: Dict[str, Any], target_id: str, window: TimeWindow, issue_id: str = '') -> int:
    """Seconds one raw worklog contributes: 0 unless it matches author and window.

    An unparsable entry is logged and counts as 0.
    """
    try:
        entry = parse_entry(raw)
    except ValueError as exc:
        logger.warning("skipping worklog on issue %s: %s", issue_id, exc)
        return 0
    if not entry_matches(entry.author_id, entry.started, target_id, window):
        return 0
    return entry.seconds


class Cancelled(Exception):
    """The pipeline was cancelled while this worker had an issue in flight."""


class WorklogFetcher:
    """One worker. run() loops until the work queue is closed and drained, then signals the barrier."""

    def __init__(
        self,
        client: JiraClient,
        target_id: str,
        window: TimeWindow,
        work: ClosableQueue,
        results: ClosableQueue,
        barrier: CompletionBarrier,
        cancel: Optional[threading.Event] = None,
        name: str = 'worker',
    ):
        self.client = client
        self.target_id = target_id
        self.window = window
        self.work = work
        self.results = results
        self.barrier = barrier
        self.cancel = cancel or threading.Event()
        self.name = name
        self.processed = 0

    def issue_total(self, issue_id: str) -> int:
        """Sum of matching seconds over every page of issue_id's work logs."""
        pager = Pager(
            lambda start_at, max_results: self.client.worklog_page(issue_id, start_at, max_results),
            'worklogs',
            description=f"issue {issue_id} worklogs",
        )
        total = 0
        for items in pager.pages():
            if self.cancel.is_set():
                raise Cancelled(issue_id)
            for raw in items:
                total += entry_seconds(raw, self.target_id, self.window, issue_id)
        return total

    def run(self):
        try:
            for issue_id in self.work:
                if self.cancel.is_set():
                    break
                total = self.issue_total(issue_id)
                self.processed += 1
                logger.debug("%s: issue %s -> %ds", self.name, issue_id, total)
                if total:
                    self.results.put(PerIssueTotal(issue_id, total))
        except (Cancelled, QueueClosed):
            logger.debug("%s stopped early after %d issue(s)", self.name, self.processed)
        finally:
            self.barrier.done()
