"""
Jira REST v3 client used by the work-log pipeline.
One authenticated requests.Session is shared by the discoverer and every worker thread.
"""

import logging
from typing import List, Dict, Any, Optional
import requests

from models import UserInfo

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
# maxResults is capped at 100 by the v3 search and worklog endpoints
MAX_PAGE_SIZE = 100


class JiraError(RuntimeError):
    """Transport, HTTP or decode failure talking to Jira."""

    def __init__(self, message: str, status: Optional[int] = None, url: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.url = url


class JiraAuthError(JiraError):
    """The configured credentials were rejected (401/403)."""


class JiraClient:
    """Minimal Jira client for the handful of read-only endpoints jiratime needs.

    base_url is the full API root, e.g. https://example.atlassian.net/rest/api/3
    """

    def __init__(self, base_url: str, username: str, token: str, timeout: float = DEFAULT_TIMEOUT, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.username = username
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.auth = (username, token)
        self.session.headers.update({"Accept": "application/json"})

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET base_url + path and return the decoded JSON body.

        Every failure (connection error, non-200 status, undecodable body) raises JiraError.
        """
        url = f"{self.base_url}{path}"
        logger.debug("GET %s %s", url, params)
        try:
            resp = self.session.get(url, params=params or {}, timeout=self.timeout)
        except requests.RequestException as exc:
            raise JiraError(f"Request to {url} failed: {exc}", url=url) from exc

        status = resp.status_code
        if status in (401, 403):
            raise JiraAuthError(f"Jira rejected credentials for {self.username} ({status})", status=status, url=url)
        if status != 200:
            raise JiraError(f"Jira returned {status} for {url}: {resp.text[:200]}", status=status, url=url)
        try:
            return resp.json()
        except ValueError as exc:
            raise JiraError(f"Failed to decode response body from {url}: {exc}", status=status, url=url) from exc

    def myself(self) -> UserInfo:
        """Return the account used to authenticate."""
        data = self.get_json("/myself")
        if not isinstance(data, dict) or not data.get('accountId'):
            raise JiraAuthError(f"Could not determine AccountID for {self.username}")
        return UserInfo.from_raw(data)

    def find_user(self, query: str) -> UserInfo:
        """Look up a user by email address. The first match wins."""
        data = self.get_json("/user/search", params={"query": query})
        if not isinstance(data, list) or not data or not data[0].get('accountId'):
            raise JiraError(f"Could not determine AccountID for {query}")
        user = UserInfo.from_raw(data[0])
        if not user.email_address:
            # email is hidden for users with restrictive profile visibility
            user.email_address = query
        return user

    def search_page(self, jql: str, start_at: int = 0, max_results: int = MAX_PAGE_SIZE) -> Dict[str, Any]:
        """One page of issue search results, issue ids only."""
        params = {"jql": jql, "fields": "id", "startAt": start_at, "maxResults": max_results}
        return self.get_json("/search", params=params)

    def worklog_page(self, issue_id: str, start_at: int = 0, max_results: int = MAX_PAGE_SIZE) -> Dict[str, Any]:
        """One page of work-log entries for an issue."""
        params = {"startAt": start_at, "maxResults": max_results}
        return self.get_json(f"/issue/{issue_id}/worklog", params=params)


def issue_ids(page_items: List[Dict[str, Any]]) -> List[str]:
    return [str(item.get('id')) for item in page_items if item.get('id') is not None]
