"""
Pagination module walking cursor-linked pages of a list request
"""

import logging
from enum import Enum
from collections import deque
from typing import Any, Callable, Deque, Iterator, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .request import ApiRequest
    from .responses import Page


class PaginationState(Enum):
    """States of a PaginatingIterator"""
    NEED_FETCH = "need_fetch"
    HAS_BUFFERED = "has_buffered"
    EXHAUSTED = "exhausted"


class PaginatingIterator(Iterator[Any]):
    """
    Lazy, forward-only iterator over every item of a cursor-paginated list

    No request is made until the first item is asked for. Each page's `after`
    cursor is used verbatim to request the next page; a page without a cursor
    ends the sequence. Pages that come back empty but still carry a cursor are
    skipped over rather than ending iteration early.

    Single pass only: the listed data may change between fetches, so replaying
    would not be faithful. Not safe to share between threads.
    """

    def __init__(self, request: "ApiRequest",
                 fetch_page: Callable[["ApiRequest", Optional[str]], "Page"]):
        """
        Args:
            request: List request to paginate
            fetch_page: Fetches the page after a cursor (None for the first page)
        """
        self.request = request
        self.fetch_page = fetch_page
        self.state = PaginationState.NEED_FETCH
        # A cursor already on the request is where iteration starts
        self.next_cursor: Optional[str] = request.query_params.get('after')
        self.pages_fetched = 0
        self._buffer: Deque[Any] = deque()
        self.logger = logging.getLogger(__name__)

    def __iter__(self) -> "PaginatingIterator":
        return self

    def __next__(self) -> Any:
        while True:
            if self.state is PaginationState.HAS_BUFFERED:
                item = self._buffer.popleft()
                if not self._buffer:
                    self.state = self._state_after_buffer()
                return item

            if self.state is PaginationState.NEED_FETCH:
                self._load_page()
                continue

            raise StopIteration

    def _load_page(self) -> None:
        page = self.fetch_page(self.request, self.next_cursor)
        self.pages_fetched += 1
        self._buffer.extend(page.items)
        self.next_cursor = page.after

        self.logger.debug(
            f"Fetched page {self.pages_fetched} of {self.request.path_template} "
            f"with {len(page.items)} item(s), next cursor {self.next_cursor!r}"
        )

        if self._buffer:
            self.state = PaginationState.HAS_BUFFERED
        else:
            self.state = self._state_after_buffer()

    def _state_after_buffer(self) -> PaginationState:
        if self.next_cursor is None:
            return PaginationState.EXHAUSTED
        return PaginationState.NEED_FETCH
