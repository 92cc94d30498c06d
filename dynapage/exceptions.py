from collections.abc import Generator
from contextlib import contextmanager

from botocore.exceptions import ClientError


class PaginationError(Exception):
    """Base exception for all dynapage errors."""

    def __init__(self, message: str, original_error: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class PageFetchError(PaginationError):
    """Raised when the page source fails to produce a page."""

    def __init__(
        self,
        message: str,
        operation_name: str | None = None,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.operation_name = operation_name


class ThrottlingError(PageFetchError):
    """Raised when the service throttles a page request."""


class ResourceNotFoundError(PageFetchError):
    """Raised when the paginated resource (table, bucket, ...) does not exist."""


class AccessDeniedError(PageFetchError):
    """Raised when the caller is not allowed to invoke the operation."""


class InvalidTokenError(PageFetchError):
    """Raised when a continuation token is rejected by the service or cannot be decoded."""


class CallbackError(PaginationError):
    """Raised when a per-page callback (or the awaitable it returned) fails."""

    def __init__(
        self,
        message: str,
        sequence_number: int | None = None,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.sequence_number = sequence_number


class QueryEvaluationError(PaginationError):
    """Raised when a search expression cannot be compiled or evaluated against a page."""

    def __init__(self, expression: str, original_error: BaseException | None = None) -> None:
        msg = f"Failed to evaluate expression '{expression}'"
        if original_error is not None:
            msg += f": {original_error}"
        super().__init__(msg, original_error)
        self.expression = expression


class StopPagination(Exception):  # noqa: N818
    """
    Raised from inside an ``each()`` callback to end the traversal early.

    This is a control signal, not a failure: the traversal completes successfully
    with the page whose callback raised it.
    """


_THROTTLING_CODES = (
    "Throttling",
    "ThrottlingException",
    "ProvisionedThroughputExceededException",
    "RequestLimitExceeded",
    "TooManyRequestsException",
)
_NOT_FOUND_CODES = ("ResourceNotFoundException", "NoSuchBucket")
_ACCESS_DENIED_CODES = ("AccessDenied", "AccessDeniedException", "UnauthorizedOperation")
_INVALID_TOKEN_CODES = (
    "InvalidNextTokenException",
    "InvalidPaginationToken",
    "ExpiredNextTokenException",
)


@contextmanager
def handle_source_errors(operation_name: str | None = None) -> Generator[None, None, None]:
    """
    Context manager that wraps a single page fetch and raises the appropriate
    PageFetchError subclass.

    botocore ClientErrors are mapped by error code; any other exception becomes a
    plain PageFetchError. PaginationErrors raised by the source pass through as-is.

    Args:
        operation_name: Optional operation name for better error messages

    Usage:
        with handle_source_errors(operation_name="ListTables"):
            page = source(params)
    """
    try:
        yield
    except PaginationError:
        raise
    except ClientError as e:
        error_code = e.response.get("Error", {}).get("Code", "Unknown")
        error_message = e.response.get("Error", {}).get("Message", str(e))

        if error_code in _THROTTLING_CODES:
            raise ThrottlingError(error_message, operation_name, original_error=e) from e

        if error_code in _NOT_FOUND_CODES:
            raise ResourceNotFoundError(error_message, operation_name, original_error=e) from e

        if error_code in _ACCESS_DENIED_CODES:
            raise AccessDeniedError(error_message, operation_name, original_error=e) from e

        if error_code in _INVALID_TOKEN_CODES:
            raise InvalidTokenError(error_message, operation_name, original_error=e) from e

        # Unknown error: wrap in generic PageFetchError
        raise PageFetchError(
            f"Page fetch failed ({error_code}): {error_message}",
            operation_name,
            original_error=e,
        ) from e
    except Exception as e:
        raise PageFetchError(
            f"Page fetch failed for {operation_name or 'operation'}: {e!s}",
            operation_name,
            original_error=e,
        ) from e
