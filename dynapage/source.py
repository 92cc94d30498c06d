"""
Page sources: the one-call-one-page operations a paginator drives.

Anything callable as ``source(params) -> page`` (or ``-> awaitable page``) works;
the adapters here bind a boto3 client operation to that shape.
"""

import asyncio
import inspect
from collections.abc import Awaitable
from typing import Any, Protocol

import boto3
from botocore import xform_name

from .pagination import Page


class PageSource(Protocol):
    def __call__(self, params: dict[str, Any]) -> Page: ...


class AsyncPageSource(Protocol):
    def __call__(self, params: dict[str, Any]) -> Awaitable[Page]: ...


class ClientPageSource:
    """
    Invokes one operation of a boto3 client per page.

    Usage:
        source = ClientPageSource(boto3.client("dynamodb"), "ListTables")
        page = source({"Limit": 10})
    """

    def __init__(self, client: Any, operation_name: str) -> None:
        self.client = client
        self.operation_name = operation_name
        # "ListTables" -> "list_tables"; snake_case input is left untouched
        self.method_name = xform_name(operation_name)

    @classmethod
    def for_service(
        cls, service_name: str, operation_name: str, **client_kwargs: Any
    ) -> "ClientPageSource":
        """
        Builds the boto3 client as well.

        Usage:
            source = ClientPageSource.for_service("s3", "ListObjects", region_name="eu-west-1")
        """
        return cls(boto3.client(service_name, **client_kwargs), operation_name)

    def __call__(self, params: dict[str, Any]) -> Page:
        method = getattr(self.client, self.method_name)
        response: Page = method(**params)
        return response

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.operation_name!r})"


class AsyncClientPageSource(ClientPageSource):
    """
    Async flavour of :class:`ClientPageSource`.

    Coroutine methods (aiobotocore-style clients) are awaited directly. A blocking
    boto3 call is run in a worker thread; the paginator still awaits each call before
    issuing the next, so requests never overlap.
    """

    async def __call__(self, params: dict[str, Any]) -> Page:  # type: ignore[override]
        method = getattr(self.client, self.method_name)
        if inspect.iscoroutinefunction(method):
            response: Page = await method(**params)
            return response
        return await asyncio.to_thread(method, **params)
