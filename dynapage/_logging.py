import hashlib
import logging
from typing import Any

# Create the library logger
logger = logging.getLogger("dynapage")

# Add NullHandler to prevent "No handlers could be found" warnings
# if the application doesn't configure logging.
logger.addHandler(logging.NullHandler())


def redact_token(token: dict[str, Any] | str | None) -> str | None:
    """
    Redacts pagination tokens for logging.

    Continuation tokens often embed key values (DynamoDB's LastEvaluatedKey is the
    primary key of the last item read). The values are hashed so records can still
    be correlated across pages without leaking the cursor itself.
    """
    if token is None:
        return None
    try:
        if isinstance(token, dict):
            # Sort keys so the same token always hashes to the same string
            redacted = {}
            for k in sorted(token):
                val_str = str(token[k]).encode("utf-8")
                redacted[k] = hashlib.sha256(val_str).hexdigest()[:8]
            return str(redacted)
        else:
            return hashlib.sha256(str(token).encode("utf-8")).hexdigest()[:8]
    except Exception:
        return "<redaction_failed>"
