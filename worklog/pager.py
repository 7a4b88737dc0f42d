"""
Offset-based pagination shared by issue discovery and work-log fetching.

Jira pages carry ``startAt``, ``maxResults`` and ``total``. The server may clamp the
requested page size, so the loop advances by the page size the server reports and stops
once fewer than that many items remain (``total - startAt < maxResults``).
"""

import logging
from typing import Any, Callable, Dict, Iterator, List

from ingest.jira import JiraError, MAX_PAGE_SIZE

logger = logging.getLogger(__name__)

FetchPage = Callable[[int, int], Dict[str, Any]]


def _int_field(page: Dict[str, Any], key: str) -> int:
    value = page.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise JiraError(f"Page is missing integer field '{key}' (got {value!r})")
    return value


class Pager:
    """Iterate the pages of an offset+limit endpoint.

    fetch_page(start_at, max_results) performs one round-trip and returns the decoded JSON page;
    items_key names the list inside it ('issues', 'worklogs').
    """

    def __init__(self, fetch_page: FetchPage, items_key: str, page_size: int = MAX_PAGE_SIZE, description: str = ''):
        if page_size <= 0:
            raise ValueError("page_size must be > 0")
        self.fetch_page = fetch_page
        self.items_key = items_key
        self.page_size = page_size
        self.description = description or items_key
        self.pages_fetched = 0

    def pages(self) -> Iterator[List[Any]]:
        """Yield the item list of each page, in order. Raises JiraError on a malformed page."""
        offset = 0
        while True:
            page = self.fetch_page(offset, self.page_size)
            if not isinstance(page, dict):
                raise JiraError(f"Unexpected page payload for {self.description}: {type(page).__name__}")
            items = page.get(self.items_key)
            if items is None:
                items = []
            if not isinstance(items, list):
                raise JiraError(f"'{self.items_key}' is not a list in page for {self.description}")
            total = _int_field(page, 'total')
            max_results = _int_field(page, 'maxResults')
            start_at = page.get('startAt', offset)
            if not isinstance(start_at, int) or isinstance(start_at, bool):
                start_at = offset
            if start_at != offset:
                raise JiraError(f"Server returned page at {start_at}, requested {offset} for {self.description}")
            self.pages_fetched += 1
            logger.debug("%s: page at %d, %d item(s), total %d", self.description, start_at, len(items), total)

            yield items

            # an empty collection may come back with maxResults=0
            if total - start_at < max_results or start_at >= total:
                return
            if max_results <= 0:
                raise JiraError(f"Server reported maxResults={max_results} with {total - start_at} item(s) left for {self.description}")
            next_offset = start_at + max_results
            if next_offset <= offset:
                raise JiraError(f"Pagination did not advance past {offset} for {self.description}")
            offset = next_offset

    def __iter__(self) -> Iterator[Any]:
        """Flatten pages into individual items."""
        for items in self.pages():
            yield from items
