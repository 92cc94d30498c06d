from collections.abc import Mapping
from functools import lru_cache
from typing import Any

from botocore.client import BaseClient

from ._logging import logger
from .config import PaginatorConfig, coerce_config, merge_config, resolve_contract
from .paginator import AsyncPaginator, Paginator
from .registry import ContractRegistry, get_registry
from .source import AsyncClientPageSource, ClientPageSource


@lru_cache(maxsize=32)
def _botocore_registry(service_name: str, api_version: str | None) -> ContractRegistry:
    return ContractRegistry.from_botocore(service_name, api_version=api_version)


def _default_config(
    client: Any, operation_name: str, registry: ContractRegistry | None
) -> PaginatorConfig | None:
    """
    Finds the default contract for an operation.

    Lookup order: explicit registry, context-local registry, then (for real botocore
    clients only) the paginator model botocore ships for the client's service.
    """
    if registry is None:
        registry = get_registry()
    if registry is not None:
        return registry.lookup(operation_name)

    if isinstance(client, BaseClient):
        service_model = client.meta.service_model
        return _botocore_registry(service_model.service_name, service_model.api_version).lookup(
            operation_name
        )
    return None


def _build_kwargs(
    client: Any,
    operation_name: str,
    config: Any,
    registry: ContractRegistry | None,
) -> dict[str, Any]:
    default = _default_config(client, operation_name, registry)
    if isinstance(config, (PaginatorConfig, Mapping)) or config is None:
        options = merge_config(coerce_config(config), default)
    else:
        # Already-canonical contract: limit/result keys can still come from the default
        options = default or PaginatorConfig()

    contract = resolve_contract(config, default)
    logger.debug(
        "Resolved pagination contract",
        extra={
            "operation": operation_name,
            "contract": type(contract).__name__,
            "has_default": default is not None,
        },
    )
    return {
        "contract": contract,
        "limit_key": options.limit_key,
        "result_key": options.result_key,
    }


def get_paginator(
    client: Any,
    operation_name: str,
    params: dict[str, Any] | None = None,
    config: Any = None,
    *,
    registry: ContractRegistry | None = None,
    page_size: int | None = None,
    starting_token: str | None = None,
) -> Paginator:
    """
    Creates a synchronous paginator for a client operation.

    Args:
        client: A boto3 client, or any callable ``source(params) -> page``
        operation_name: API operation name, e.g. "ListTables"
        params: Parameters sent with every request
        config: Pagination overrides (dict, PaginatorConfig, or a resolved contract);
                keys left out fall back to the registry's default for the operation
        registry: Registry to consult for defaults (context-local one otherwise)
        page_size: Sent as the contract's ``limit_key`` on every request
        starting_token: A ``resume_token`` from an earlier paginator

    Usage:
        paginator = get_paginator(client, "ListTables", {}, {"output_token": None})
        for table in paginator.search("TableNames[]"):
            ...
    """
    source = ClientPageSource(client, operation_name) if _is_client(client) else client
    return Paginator(
        source,
        params,
        operation_name=operation_name,
        page_size=page_size,
        starting_token=starting_token,
        **_build_kwargs(client, operation_name, config, registry),
    )


def get_async_paginator(
    client: Any,
    operation_name: str,
    params: dict[str, Any] | None = None,
    config: Any = None,
    *,
    registry: ContractRegistry | None = None,
    page_size: int | None = None,
    starting_token: str | None = None,
) -> AsyncPaginator:
    """
    Creates an asynchronous paginator for a client operation.

    Same arguments as :func:`get_paginator`. Blocking boto3 clients are driven from
    a worker thread, one request at a time.
    """
    source = AsyncClientPageSource(client, operation_name) if _is_client(client) else client
    return AsyncPaginator(
        source,
        params,
        operation_name=operation_name,
        page_size=page_size,
        starting_token=starting_token,
        **_build_kwargs(client, operation_name, config, registry),
    )


def _is_client(candidate: Any) -> bool:
    """boto3 clients expose ``meta.service_model``; plain page sources do not."""
    meta = getattr(candidate, "meta", None)
    return meta is not None and hasattr(meta, "service_model")
