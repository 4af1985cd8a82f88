"""Lazy offset pagination over a single-page fetch primitive.

``paginate`` turns ``fetch_page(PageOptions) -> Page[T]`` into one stream of
every item across all pages.  A page is requested only once the consumer has
pulled every item of the previous one, and the cancellation token is polled
before each fetch and before each yielded item, so a cancel issued while the
consumer is processing an item takes effect before the next item, even in the
middle of a page.
"""

from __future__ import annotations

from typing import AsyncIterator, Awaitable, Callable, Optional, TypeVar

from xsoar_client.application.cancellation import CancellationToken
from xsoar_client.application.schemas.pagination import Page, PageOptions

T = TypeVar("T")

PageFetcher = Callable[[PageOptions], Awaitable[Page[T]]]


async def paginate(
    fetch_page: PageFetcher[T],
    *,
    page_size: Optional[int] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> AsyncIterator[T]:
    """Yield every item reachable through *fetch_page*, one page at a time.

    Errors raised by *fetch_page* end the stream; items of a failed page are
    never exposed.  Stopping the iteration stops further fetches.
    """
    options = PageOptions(offset=0, limit=page_size or 0)

    while True:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        page = await fetch_page(options)

        for item in page.items:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()
            yield item

        if not page.has_more or not page.items or page.next_offset <= options.offset:
            # A page that cannot move the offset forward would repeat forever.
            return

        options = PageOptions(offset=page.next_offset, limit=options.limit)
