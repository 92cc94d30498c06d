from typing import Any

from ._logging import logger, redact_token
from .config import Disabled, Flagged, PaginationContract, Tokenized
from .pagination import STOP, Continuation, Page
from .query import Evaluator, apply_evaluator, evaluate


def is_absent(value: Any) -> bool:
    """A token counts as absent when missing, null, or an empty string."""
    return value is None or value == ""


class TokenTracker:
    """
    Decides, page by page, whether a traversal continues and with which tokens.

    One tracker belongs to exactly one traversal. ``next_token`` holds the parameter
    overlay computed from the most recent page: it only ever contains the fields that
    were present on that page, and is None when the page carried no token at all.
    """

    def __init__(self, contract: PaginationContract, evaluator: Evaluator = evaluate) -> None:
        self.contract = contract
        self._evaluate = evaluator
        self.next_token: dict[str, Any] | None = None

    def observe(self, page: Page) -> Continuation:
        decision = self._decide(page)
        self.next_token = dict(decision.overlay) or None
        logger.debug(
            "Continuation decided",
            extra={
                "proceed": decision.proceed,
                "has_token": decision.has_token,
                "token_hash": redact_token(self.next_token),
            },
        )
        return decision

    def _decide(self, page: Page) -> Continuation:
        contract = self.contract

        if isinstance(contract, Disabled):
            return STOP

        if isinstance(contract, Tokenized):
            return self._from_tokens(contract, page)

        if isinstance(contract, Flagged):
            flag = self._read(contract.continue_field, page)
            if contract.tokenized is None:
                # The flag is the only authority: absent means there is nothing more
                if not flag:
                    return STOP
                return Continuation(proceed=True)
            # An explicit "stop" wins over any token on the page
            if flag is not None and not flag:
                return STOP
            return self._from_tokens(contract.tokenized, page)

        raise TypeError(f"Unknown pagination contract: {contract!r}")

    def _from_tokens(self, tokenized: Tokenized, page: Page) -> Continuation:
        overlay: dict[str, Any] = {}
        for input_field, output_field in tokenized.pairs():
            value = self._read(output_field, page)
            if not is_absent(value):
                overlay[input_field] = value
        if not overlay:
            return STOP
        return Continuation(proceed=True, overlay=overlay)

    def _read(self, expression: str, page: Page) -> Any:
        # Plain field names are looked up directly; anything else is an expression
        # such as botocore's "NextMarker || Contents[-1].Key"
        if expression in page:
            return page[expression]
        return apply_evaluator(self._evaluate, expression, page)
