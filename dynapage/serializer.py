import base64
import binascii
import json
from decimal import Decimal
from typing import Any

from .exceptions import InvalidTokenError


class TokenSerializer:
    """
    Converts a paginator's next-token overlay to an opaque string and back.

    Architectural Note:
    -------------------
    A resume token is what an API backend hands to its frontend so a later request
    can continue where this one stopped. Token values are whatever the service
    returned: plain strings for most operations, but whole key maps for DynamoDB's
    LastEvaluatedKey, which may hold Decimals (boto3 resource layer) or bytes (B
    attributes). JSON has no type for either, so they are tagged on the way out and
    restored on the way in, then the JSON document is base64-encoded.
    """

    _DECIMAL_TAG = "__decimal__"
    _BYTES_TAG = "__bytes__"

    def encode(self, token: dict[str, Any]) -> str:
        """
        Encodes a token overlay.

        Input:  {"ExclusiveStartKey": {"pk": {"S": "a"}}, "Limit": Decimal("5")}
        Output: "eyJFeGNsdXNpdmVTdGFydEtleSI6..."
        """
        document = json.dumps(self._prepare(token), sort_keys=True, separators=(",", ":"))
        return base64.urlsafe_b64encode(document.encode("utf-8")).decode("ascii")

    def decode(self, encoded: str) -> dict[str, Any]:
        """
        Decodes a string produced by :meth:`encode`.

        Raises:
            InvalidTokenError: If the string is not a token this serializer produced
        """
        try:
            document = base64.urlsafe_b64decode(encoded.encode("ascii"))
            data = json.loads(document.decode("utf-8"))
        except (binascii.Error, UnicodeError, ValueError) as e:
            raise InvalidTokenError(
                f"Invalid resume token: {e!s}", original_error=e
            ) from e

        if not isinstance(data, dict):
            raise InvalidTokenError("Invalid resume token: expected an object")
        result = self._restore(data)
        assert isinstance(result, dict)
        return result

    def _prepare(self, value: Any) -> Any:
        """Recursively tags JSON-incompatible values."""
        if isinstance(value, Decimal):
            return {self._DECIMAL_TAG: str(value)}
        if isinstance(value, (bytes, bytearray)):
            return {self._BYTES_TAG: base64.b64encode(bytes(value)).decode("ascii")}
        if isinstance(value, (set, frozenset)):
            return [self._prepare(v) for v in sorted(value, key=repr)]
        if isinstance(value, (list, tuple)):
            return [self._prepare(v) for v in value]
        if isinstance(value, dict):
            return {k: self._prepare(v) for k, v in value.items()}
        return value

    def _restore(self, value: Any) -> Any:
        """Recursively restores tagged values."""
        if isinstance(value, list):
            return [self._restore(v) for v in value]
        if isinstance(value, dict):
            if len(value) == 1 and self._DECIMAL_TAG in value:
                return Decimal(value[self._DECIMAL_TAG])
            if len(value) == 1 and self._BYTES_TAG in value:
                return base64.b64decode(value[self._BYTES_TAG])
            return {k: self._restore(v) for k, v in value.items()}
        return value


_serializer = TokenSerializer()


def encode_token(token: dict[str, Any]) -> str:
    return _serializer.encode(token)


def decode_token(encoded: str) -> dict[str, Any]:
    return _serializer.decode(encoded)
