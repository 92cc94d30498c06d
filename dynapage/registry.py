"""
Default pagination contracts, keyed by operation name.

The registry is consulted only for the keys a caller leaves out when asking for a
paginator. It can be filled by hand or from the paginator models botocore ships
with each service (``paginators-1.json``).
"""

from collections.abc import Generator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

import botocore.session

from ._logging import logger
from .config import PaginatorConfig, coerce_config


class ContractRegistry:
    """Maps operation names (``ListTables``) to their default PaginatorConfig."""

    def __init__(self, configs: Mapping[str, "PaginatorConfig | Mapping[str, Any]"] | None = None):
        self._configs: dict[str, PaginatorConfig] = {}
        for operation_name, config in (configs or {}).items():
            self.register(operation_name, config)

    def register(
        self, operation_name: str, config: "PaginatorConfig | Mapping[str, Any]"
    ) -> None:
        self._configs[operation_name] = coerce_config(config)

    def lookup(self, operation_name: str) -> PaginatorConfig | None:
        return self._configs.get(operation_name)

    def __contains__(self, operation_name: object) -> bool:
        return operation_name in self._configs

    def __len__(self) -> int:
        return len(self._configs)

    @classmethod
    def from_botocore(
        cls,
        service_name: str,
        session: botocore.session.Session | None = None,
        api_version: str | None = None,
    ) -> "ContractRegistry":
        """
        Builds a registry from botocore's bundled paginator model for a service.

        Args:
            service_name: botocore service name, e.g. "dynamodb" or "s3"
            session: Optional botocore session (a fresh one is created otherwise)
            api_version: Optional API version of the service model

        Usage:
            registry = ContractRegistry.from_botocore("dynamodb")
            registry.lookup("ListTables")
        """
        session = session or botocore.session.get_session()
        service_model = session.get_service_model(service_name, api_version)
        paginator_model = session.get_paginator_model(service_name, api_version)

        configs: dict[str, Mapping[str, Any]] = {}
        for operation_name in service_model.operation_names:
            try:
                configs[operation_name] = paginator_model.get_paginator(operation_name)
            except ValueError:
                # botocore's answer for an operation that is not paginated
                continue

        logger.debug(
            "Loaded paginator model",
            extra={"service": service_name, "operations": len(configs)},
        )
        return cls(configs)


_registry_context: ContextVar[ContractRegistry | None] = ContextVar(
    "dynapage_registry", default=None
)
_global_registry: ContractRegistry | None = None


def get_registry() -> ContractRegistry | None:
    """Returns the context-local registry, falling back to the global default."""
    # 1. Check ContextVar (Thread-safe/Async-safe override)
    ctx_registry = _registry_context.get()
    if ctx_registry is not None:
        return ctx_registry

    # 2. Global default (may be None: no defaults at all)
    return _global_registry


def set_registry(registry: ContractRegistry | None) -> None:
    """Sets the process-wide default registry."""
    global _global_registry
    _global_registry = registry


@contextmanager
def using_registry(registry: ContractRegistry) -> Generator[None, None, None]:
    """
    Context manager to scope a registry to a block of code.
    Thread-safe and Async-safe using contextvars.

    Usage:
        with using_registry(ContractRegistry.from_botocore("s3")):
            get_paginator(client, "ListObjects", {"Bucket": "foo"})
    """
    token = _registry_context.set(registry)
    try:
        yield
    finally:
        _registry_context.reset(token)
