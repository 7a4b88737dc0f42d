"""
Fan-out/fan-in pipeline that totals a user's work logs across every matching issue.

    discoverer --> work queue --> W x WorklogFetcher --> result queue --> Aggregator
                                         |
                              CompletionBarrier --> coordinator closes result queue

The first failure in any thread cancels the run: both queues are closed, the remaining threads
stop at their next check and run() raises PipelineError instead of returning a partial total.
"""

import logging
import threading
from typing import List, Optional

from ingest.jira import JiraClient
from models import AggregateResult, TimeWindow
from worklog.barrier import CompletionBarrier
from worklog.discover import IssueDiscoverer, build_jql
from worklog.fetch import WorklogFetcher
from worklog.queues import ClosableQueue
from worklog.window import discovery_dates

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 20
WORK_QUEUE_SIZE = 50


class PipelineError(RuntimeError):
    """A discoverer or worker failed; the cause is chained."""


class PipelineContext:
    """Everything the pipeline needs, resolved up front and shared read-only by every thread."""

    def __init__(self, client: JiraClient, target_id: str, window: TimeWindow, workers: int = DEFAULT_WORKERS, caller_tz: str = ''):
        if workers <= 0:
            raise ValueError("workers must be > 0")
        self.client = client
        self.target_id = target_id
        self.window = window
        self.workers = workers
        self.caller_tz = caller_tz

    def jql(self) -> str:
        lo, hi = discovery_dates(self.window, self.caller_tz)
        return build_jql(self.target_id, lo, hi)


class Aggregator:
    """Fold PerIssueTotal values off the result queue until it is closed."""

    def __init__(self, results: ClosableQueue):
        self.results = results

    def drain(self) -> AggregateResult:
        result = AggregateResult()
        for item in self.results:
            result.add(item)
        return result


class WorklogPipeline:
    def __init__(self, context: PipelineContext, work_queue_size: int = WORK_QUEUE_SIZE):
        self.context = context
        self.work = ClosableQueue(work_queue_size)
        self.results = ClosableQueue(context.workers)
        self.barrier = CompletionBarrier()
        self.cancel = threading.Event()
        self._error: Optional[BaseException] = None
        self._error_lock = threading.Lock()

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    def abort(self, exc: Optional[BaseException] = None):
        """Record the first failure, then stop every thread and unblock the aggregator."""
        with self._error_lock:
            if exc is not None and self._error is None:
                self._error = exc
        self.cancel.set()
        self.work.close()
        self.results.close()

    def _guarded(self, name: str, target):
        def runner():
            try:
                target()
            except Exception as exc:
                logger.error("%s failed: %s", name, exc)
                self.abort(exc)
        return runner

    def _coordinate(self):
        self.barrier.wait()
        self.results.close()

    def _threads(self) -> List[threading.Thread]:
        ctx = self.context
        discoverer = IssueDiscoverer(ctx.client, ctx.jql(), self.work, self.cancel)
        threads = [threading.Thread(target=self._guarded('discoverer', discoverer.run), name='jiratime-discoverer', daemon=True)]
        self.barrier.add(ctx.workers)
        for i in range(ctx.workers):
            name = f"worker-{i}"
            fetcher = WorklogFetcher(ctx.client, ctx.target_id, ctx.window, self.work, self.results, self.barrier, self.cancel, name=name)
            threads.append(threading.Thread(target=self._guarded(name, fetcher.run), name=f"jiratime-{name}", daemon=True))
        threads.append(threading.Thread(target=self._coordinate, name='jiratime-coordinator', daemon=True))
        return threads

    def run(self) -> AggregateResult:
        """Run discovery, the worker pool and aggregation. Raises PipelineError on any failure."""
        threads = self._threads()
        for t in threads:
            t.start()
        try:
            result = Aggregator(self.results).drain()
        except BaseException:
            # KeyboardInterrupt in the driving thread
            self.abort()
            raise
        for t in threads:
            t.join()
        if self._error is not None:
            raise PipelineError(f"work-log query failed: {self._error}") from self._error
        logger.debug("aggregated %d issue total(s): %ds", result.issues, result.total_seconds)
        return result


def total_worklog_seconds(context: PipelineContext) -> AggregateResult:
    return WorklogPipeline(context).run()
