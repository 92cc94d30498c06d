"""
Value types shared by the traversal strategies.

A ``Continuation`` is the outcome of observing one page; a ``TraversalCursor`` is the
position of a traversal in the page stream.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

Page = Mapping[str, Any]


@dataclass(frozen=True)
class Continuation:
    """
    Decision taken after a page has been observed.

    Attributes:
        proceed: Whether another page should be fetched
        overlay: Parameters to merge into the next request (the next token)
    """

    proceed: bool
    overlay: dict[str, Any] = field(default_factory=dict)

    @property
    def has_token(self) -> bool:
        """Returns True if the next request carries at least one token parameter."""
        return bool(self.overlay)


STOP = Continuation(proceed=False)


@dataclass
class TraversalCursor:
    """
    Position of a traversal.

    Attributes:
        sequence_number: Index of the current page (-1 before the first fetch)
        current_page: Most recently fetched page, None before the first fetch
        terminal: True once no further page will be fetched
    """

    sequence_number: int = -1
    current_page: Page | None = None
    terminal: bool = False

    @property
    def started(self) -> bool:
        return self.sequence_number >= 0

    def move_to(self, page: Page) -> None:
        self.sequence_number += 1
        self.current_page = page
