from .client import get_async_paginator, get_paginator
from .config import (
    Disabled,
    Flagged,
    PaginationContract,
    PaginatorConfig,
    Tokenized,
    resolve_contract,
)
from .exceptions import (
    AccessDeniedError,
    CallbackError,
    InvalidTokenError,
    PageFetchError,
    PaginationError,
    QueryEvaluationError,
    ResourceNotFoundError,
    StopPagination,
    ThrottlingError,
)
from .pagination import Continuation, TraversalCursor
from .paginator import AsyncPaginator, Paginator
from .query import evaluate
from .registry import ContractRegistry, get_registry, set_registry, using_registry
from .serializer import decode_token, encode_token
from .source import AsyncClientPageSource, ClientPageSource
from .tokens import TokenTracker

__all__ = [
    "get_paginator",
    "get_async_paginator",
    "Paginator",
    "AsyncPaginator",
    "TokenTracker",
    "Continuation",
    "TraversalCursor",
    # Contracts
    "PaginatorConfig",
    "PaginationContract",
    "Disabled",
    "Tokenized",
    "Flagged",
    "resolve_contract",
    # Registry
    "ContractRegistry",
    "get_registry",
    "set_registry",
    "using_registry",
    # Sources
    "ClientPageSource",
    "AsyncClientPageSource",
    # Query and tokens
    "evaluate",
    "encode_token",
    "decode_token",
    # Exceptions
    "PaginationError",
    "PageFetchError",
    "ThrottlingError",
    "ResourceNotFoundError",
    "AccessDeniedError",
    "InvalidTokenError",
    "CallbackError",
    "QueryEvaluationError",
    "StopPagination",  # Control signal raised from each() callbacks
]
