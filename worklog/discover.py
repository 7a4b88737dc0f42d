"""
Issue discovery: stream the ids of every issue the target user has logged work on.
"""

import logging
import threading
from datetime import date
from typing import Optional

from ingest.jira import JiraClient, issue_ids
from worklog.pager import Pager
from worklog.queues import ClosableQueue, QueueClosed

logger = logging.getLogger(__name__)


def build_jql(account_id: str, lo: Optional[date] = None, hi: Optional[date] = None) -> str:
    """JQL for issues carrying work logged by account_id between lo and hi (inclusive days).

    Worklogs are not returned by search, so this only narrows the set of issues to inspect.
    """
    jql = f'worklogAuthor = "{account_id}"'
    if lo is not None:
        jql += f' AND worklogDate >= "{lo.isoformat()}"'
    if hi is not None:
        jql += f' AND worklogDate <= "{hi.isoformat()}"'
    return jql


class IssueDiscoverer:
    """Producer side of the pipeline. Always closes the work queue when run() returns."""

    def __init__(self, client: JiraClient, jql: str, work: ClosableQueue, cancel: Optional[threading.Event] = None):
        self.client = client
        self.jql = jql
        self.work = work
        self.cancel = cancel or threading.Event()
        self.discovered = 0

    def run(self):
        pager = Pager(
            lambda start_at, max_results: self.client.search_page(self.jql, start_at, max_results),
            'issues',
            description='issue search',
        )
        try:
            for items in pager.pages():
                for issue_id in issue_ids(items):
                    if self.cancel.is_set():
                        logger.debug("discovery cancelled after %d issue(s)", self.discovered)
                        return
                    self.work.put(issue_id)
                    self.discovered += 1
        except QueueClosed:
            logger.debug("work queue closed under discovery after %d issue(s)", self.discovered)
        finally:
            self.work.close()
        logger.debug("discovered %d issue(s) in %d page(s)", self.discovered, pager.pages_fetched)
