import sys
import os
import threading

import pytest

# Add project root to sys.path so tests can import top-level modules like 'worklog', 'ingest', 'report', etc.
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from ingest.jira import JiraError  # noqa: E402
from models import UserInfo  # noqa: E402


def worklog(author, started, seconds):
    return {'author': {'accountId': author}, 'started': started, 'timeSpentSeconds': seconds}


class FakeJira:
    """In-memory stand-in for JiraClient serving offset-paginated search and worklog pages.

    page_size is the server-side clamp applied to every request's maxResults.
    """

    def __init__(self, worklogs=None, issues=None, page_size=100, caller=None, users=None, fail_issues=()):
        self.worklogs = worklogs or {}
        self.issues = list(issues) if issues is not None else list(self.worklogs)
        self.page_size = page_size
        self.caller = caller or UserInfo('caller-id', 'me@example.com', 'Me', 'UTC')
        self.users = users or {}
        self.fail_issues = set(fail_issues)
        self.jql = []
        self.worklog_calls = []
        self.closed = False
        self._lock = threading.Lock()

    def _page(self, key, items, start_at, max_results):
        size = min(max_results, self.page_size)
        return {'startAt': start_at, 'maxResults': size, 'total': len(items), key: items[start_at:start_at + size]}

    def search_page(self, jql, start_at=0, max_results=100):
        with self._lock:
            self.jql.append(jql)
        return self._page('issues', [{'id': i} for i in self.issues], start_at, max_results)

    def worklog_page(self, issue_id, start_at=0, max_results=100):
        with self._lock:
            self.worklog_calls.append((issue_id, start_at))
        if issue_id in self.fail_issues:
            raise JiraError(f"Jira returned 404 for issue {issue_id}", status=404)
        return self._page('worklogs', self.worklogs.get(issue_id, []), start_at, max_results)

    def myself(self):
        return self.caller

    def find_user(self, query):
        if query not in self.users:
            raise JiraError(f"Could not determine AccountID for {query}")
        return self.users[query]

    def close(self):
        self.closed = True


@pytest.fixture
def make_jira():
    return FakeJira


@pytest.fixture
def wl():
    return worklog
