import inspect
from collections.abc import AsyncIterator, Awaitable, Callable, Iterator
from contextlib import aclosing
from typing import Any

from ._logging import logger, redact_token
from .config import Disabled, PaginationContract
from .exceptions import CallbackError, PaginationError, StopPagination, handle_source_errors
from .pagination import Page, TraversalCursor
from .query import Evaluator, asearch, evaluate, result_key_expression, search
from .serializer import decode_token, encode_token
from .tokens import TokenTracker

PageCallback = Callable[[Page], "Awaitable[Any] | Any"]


class _Traversal:
    """
    State shared by the sync and async paginators.

    A traversal is bound to one set of initial parameters and one contract. Pages
    are fetched on demand and the traversal is single-pass: once terminal, it never
    calls the source again.
    """

    def __init__(
        self,
        source: Callable[[dict[str, Any]], Any],
        params: dict[str, Any] | None = None,
        contract: PaginationContract | None = None,
        *,
        operation_name: str | None = None,
        page_size: int | None = None,
        limit_key: str | None = None,
        result_key: str | list[str] | None = None,
        starting_token: str | None = None,
        evaluator: Evaluator = evaluate,
    ) -> None:
        self.source = source
        self.params = dict(params or {})
        self.contract: PaginationContract = contract if contract is not None else Disabled()
        self.operation_name = operation_name or getattr(source, "operation_name", None)
        self.page_size = page_size
        self.limit_key = limit_key
        self.result_key = result_key

        self.cursor = TraversalCursor()
        self.request_count = 0

        self._evaluate = evaluator
        self._tracker = TokenTracker(self.contract, evaluator)
        self._overlay: dict[str, Any] = decode_token(starting_token) if starting_token else {}
        self._last_yielded = -1

    # --- STATE ---

    @property
    def next_token(self) -> dict[str, Any] | None:
        """Token parameters that the next request would carry (None if there are none)."""
        return self._tracker.next_token

    @property
    def resume_token(self) -> str | None:
        """
        Opaque string for resuming this traversal later via ``starting_token``.

        Returns None when the last page carried no token.
        """
        token = self.next_token
        return encode_token(token) if token else None

    @property
    def terminal(self) -> bool:
        return self.cursor.terminal

    def stop(self) -> None:
        """Marks the traversal terminal: no further page will be fetched."""
        self.cursor.terminal = True

    # --- INTERNALS ---

    def _next_params(self) -> dict[str, Any]:
        params = {**self.params, **self._overlay}
        if self.page_size is not None and self.limit_key:
            params[self.limit_key] = self.page_size
        return params

    def _log_fetch(self) -> None:
        logger.debug(
            "Fetching page",
            extra={
                "operation": self.operation_name,
                "sequence": self.cursor.sequence_number + 1,
                "has_token": bool(self._overlay),
                "token_hash": redact_token(self._overlay or None),
            },
        )

    def _record(self, page: Page) -> None:
        self.request_count += 1
        # Decide first: a page whose tokens cannot be read never becomes current
        decision = self._tracker.observe(page)
        self.cursor.move_to(page)
        self._overlay = decision.overlay
        if not decision.proceed:
            self.cursor.terminal = True
            logger.info(
                "Pagination complete",
                extra={"operation": self.operation_name, "pages": self.request_count},
            )

    def _log_start(self) -> None:
        logger.info(
            "Starting paginated traversal",
            extra={
                "operation": self.operation_name,
                "contract": type(self.contract).__name__,
                "has_token": bool(self._overlay),
            },
        )

    def _unyielded(self) -> bool:
        return self.cursor.started and self.cursor.sequence_number > self._last_yielded

    def _check_not_stopped(self) -> None:
        if self.cursor.terminal and not self.cursor.started:
            raise PaginationError("Traversal was stopped before any page was fetched")


class Paginator(_Traversal):
    """
    Forward-only, synchronous page iterator.

    Iterating yields ``(sequence_number, page)`` pairs; each new page is requested
    only when the consumer moves past the previous one.

    Usage:
        paginator = Paginator(source, {"TableName": "users"}, Tokenized(...))
        for number, page in paginator:
            ...
    """

    def current(self) -> Page:
        """
        Returns the current page, fetching the first page on first use.

        Raises:
            PaginationError: If the traversal was stopped before its first fetch
        """
        self._check_not_stopped()
        if not self.cursor.started:
            self._fetch()
        assert self.cursor.current_page is not None
        return self.cursor.current_page

    def advance(self) -> None:
        """Fetches the next page. Does nothing once the traversal is terminal."""
        if self.cursor.terminal:
            return
        self._fetch()

    def pages(self) -> Iterator[tuple[int, Page]]:
        """Yields ``(sequence_number, page)`` from the current position until terminal."""
        while True:
            if not self.cursor.started:
                if self.cursor.terminal:
                    return
                self._fetch()
            if self._unyielded():
                self._last_yielded = self.cursor.sequence_number
                assert self.cursor.current_page is not None
                yield self.cursor.sequence_number, self.cursor.current_page
            if self.cursor.terminal:
                return
            self._fetch()

    def __iter__(self) -> Iterator[tuple[int, Page]]:
        return self.pages()

    def search(self, expression: str, limit: int | None = None) -> Iterator[Any]:
        """
        Lazily yields the flattened matches of a JMESPath expression across pages.

        Args:
            expression: JMESPath expression applied to each page
            limit: Stop the whole traversal after this many items

        Usage:
            for name in paginator.search("TableNames[]", limit=25):
                ...
        """
        return search(self, expression, limit, evaluator=self._evaluate)

    def items(self, limit: int | None = None) -> Iterator[Any]:
        """Yields the items under the paginator's ``result_key`` across pages."""
        if not self.result_key:
            raise ValueError("No result_key is configured for this paginator")
        return self.search(result_key_expression(self.result_key), limit)

    def _fetch(self) -> Page:
        if not self.cursor.started:
            self._log_start()
        params = self._next_params()
        self._log_fetch()
        try:
            with handle_source_errors(self.operation_name):
                page: Page = self.source(params)
            self._record(page)
        except Exception:
            # Failures end the traversal; the failed request is never re-sent
            self.stop()
            raise
        return page


class AsyncPaginator(_Traversal):
    """
    Asynchronous paginator.

    Pages are fetched by awaiting the source one call at a time. ``each()`` hands
    every page to a callback and, when the callback returns an awaitable, waits for it
    to settle before the next page is requested, so callbacks never overlap and no
    page is fetched while a callback is still in flight.

    Usage:
        paginator = AsyncPaginator(source, {"Bucket": "foo"}, contract)
        last_page = await paginator.each(handle_page)
    """

    async def current(self) -> Page:
        self._check_not_stopped()
        if not self.cursor.started:
            await self._fetch()
        assert self.cursor.current_page is not None
        return self.cursor.current_page

    async def advance(self) -> None:
        if self.cursor.terminal:
            return
        await self._fetch()

    async def pages(self) -> AsyncIterator[tuple[int, Page]]:
        while True:
            if not self.cursor.started:
                if self.cursor.terminal:
                    return
                await self._fetch()
            if self._unyielded():
                self._last_yielded = self.cursor.sequence_number
                assert self.cursor.current_page is not None
                yield self.cursor.sequence_number, self.cursor.current_page
            if self.cursor.terminal:
                return
            await self._fetch()

    def __aiter__(self) -> AsyncIterator[tuple[int, Page]]:
        return self.pages()

    async def each(self, callback: PageCallback) -> Page | None:
        """
        Runs ``callback`` on every page, in order.

        The callback may return an awaitable (or be a coroutine function); it is
        awaited before pagination continues. Raising StopPagination from the callback
        ends the traversal successfully.

        Returns:
            The last page fetched (the stopping page on early stop). On a traversal
            that is already terminal this is its last fetched page, or None if no
            page was ever fetched.

        Raises:
            PageFetchError: If fetching a page fails
            CallbackError: If the callback or its awaitable fails
        """
        last_page: Page | None = self.cursor.current_page
        async with aclosing(self.pages()) as pages:
            async for sequence_number, page in pages:
                last_page = page
                try:
                    result = callback(page)
                    if inspect.isawaitable(result):
                        await result
                except StopPagination:
                    logger.warning(
                        "Pagination stopped by callback",
                        extra={"operation": self.operation_name, "sequence": sequence_number},
                    )
                    self.stop()
                    return page
                except Exception as e:
                    self.stop()
                    raise CallbackError(
                        f"Callback failed on page {sequence_number}: {e!s}",
                        sequence_number=sequence_number,
                        original_error=e,
                    ) from e
        return last_page

    def search(self, expression: str, limit: int | None = None) -> AsyncIterator[Any]:
        """Async counterpart of :meth:`Paginator.search`."""
        return asearch(self, expression, limit, evaluator=self._evaluate)

    def items(self, limit: int | None = None) -> AsyncIterator[Any]:
        if not self.result_key:
            raise ValueError("No result_key is configured for this paginator")
        return self.search(result_key_expression(self.result_key), limit)

    async def _fetch(self) -> Page:
        if not self.cursor.started:
            self._log_start()
        params = self._next_params()
        self._log_fetch()
        try:
            with handle_source_errors(self.operation_name):
                page = self.source(params)
                if inspect.isawaitable(page):
                    page = await page
            self._record(page)
        except Exception:
            self.stop()
            raise
        return page
