from collections.abc import AsyncIterator, Callable, Iterator
from contextlib import aclosing
from typing import TYPE_CHECKING, Any

import jmespath
from jmespath.exceptions import JMESPathError

from ._logging import logger
from .exceptions import QueryEvaluationError
from .pagination import Page

if TYPE_CHECKING:
    from .paginator import AsyncPaginator, Paginator

Evaluator = Callable[[str, Page], Any]


def evaluate(expression: str, page: Page) -> Any:
    """
    Applies a JMESPath expression to a page.

    Returns None when nothing matches. jmespath keeps its own cache of compiled
    expressions, so repeated calls with the same expression are cheap.

    Raises:
        QueryEvaluationError: If the expression does not parse or fails at runtime
    """
    try:
        return jmespath.search(expression, page)
    except JMESPathError as e:
        raise QueryEvaluationError(expression, original_error=e) from e


def apply_evaluator(evaluator: Evaluator, expression: str, page: Page) -> Any:
    """Runs a (possibly user-supplied) evaluator, normalizing its failures."""
    try:
        return evaluator(expression, page)
    except QueryEvaluationError:
        raise
    except Exception as e:
        raise QueryEvaluationError(expression, original_error=e) from e


def flatten(value: Any) -> list[Any]:
    """
    Turns one page's search result into the items to emit.

    - list/tuple: each element, in order
    - None or empty list: nothing
    - anything else: the value itself, once
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def search(
    paginator: "Paginator",
    expression: str,
    limit: int | None = None,
    evaluator: Evaluator = evaluate,
) -> Iterator[Any]:
    """
    Lazily yields the flattened results of ``expression`` across all pages.

    A page is fetched only once every item extracted from the previous one has been
    consumed. When ``limit`` items have been produced the paginator itself is
    stopped, so no further page is ever requested.

    Usage:
        for name in search(paginator, "TableNames[]", limit=10):
            ...
    """
    if limit is not None and limit <= 0:
        return

    count = 0
    for sequence_number, page in paginator:
        values = flatten(apply_evaluator(evaluator, expression, page))
        logger.debug(
            "Search matched page",
            extra={"sequence": sequence_number, "expression": expression, "matches": len(values)},
        )
        for value in values:
            yield value
            count += 1
            if limit is not None and count >= limit:
                paginator.stop()
                return


async def asearch(
    paginator: "AsyncPaginator",
    expression: str,
    limit: int | None = None,
    evaluator: Evaluator = evaluate,
) -> AsyncIterator[Any]:
    """Async counterpart of :func:`search`, driven by an AsyncPaginator."""
    if limit is not None and limit <= 0:
        return

    count = 0
    async with aclosing(paginator.pages()) as pages:
        async for sequence_number, page in pages:
            values = flatten(apply_evaluator(evaluator, expression, page))
            logger.debug(
                "Search matched page",
                extra={
                    "sequence": sequence_number,
                    "expression": expression,
                    "matches": len(values),
                },
            )
            for value in values:
                yield value
                count += 1
                if limit is not None and count >= limit:
                    paginator.stop()
                    return


def result_key_expression(result_key: str | list[str] | tuple[str, ...]) -> str:
    """
    Builds the expression that selects a paginator's result items.

    Several result keys (botocore allows a list) are concatenated per page. Only
    list-valued keys contribute items; scalar aggregates such as DynamoDB's
    ``Count``/``ScannedCount`` are left out.
    """
    if isinstance(result_key, str):
        return result_key
    keys = list(result_key)
    if len(keys) == 1:
        return keys[0]
    return "[" + ", ".join(keys) + "][?type(@) == 'array'][]"
