import logging

import pytest

from dynapage._logging import redact_token
from dynapage.config import Tokenized
from dynapage.exceptions import StopPagination
from dynapage.paginator import AsyncPaginator, Paginator
from tests.helpers.sources import AsyncScriptedSource, ScriptedSource

SINGLE = Tokenized(("NextToken",), ("LastToken",))


def test_logging_lifecycle(table_pages, caplog):
    """Verify that logging occurs at expected levels during a traversal."""
    caplog.set_level(logging.DEBUG, logger="dynapage")

    list(Paginator(ScriptedSource(table_pages), {}, SINGLE))

    assert "Starting paginated traversal" in caplog.text  # INFO
    assert "Fetching page" in caplog.text  # DEBUG
    assert "Continuation decided" in caplog.text  # DEBUG
    assert "Pagination complete" in caplog.text  # INFO

    # Records carry structured context rather than formatted strings
    fetches = [r for r in caplog.records if r.getMessage() == "Fetching page"]
    assert [r.sequence for r in fetches] == [0, 1, 2]
    assert all(r.operation == "ListTables" for r in fetches)
    assert [r.has_token for r in fetches] == [False, True, True]


def test_tokens_are_never_logged_in_clear(caplog):
    """Verify that raw token values never reach the log output."""
    caplog.set_level(logging.DEBUG, logger="dynapage")
    pages = [{"LastToken": "secret-cursor-value"}, {}]

    list(Paginator(ScriptedSource(pages), {}, SINGLE))

    assert "secret-cursor-value" not in caplog.text
    for record in caplog.records:
        assert "secret-cursor-value" not in str(getattr(record, "token_hash", ""))


@pytest.mark.asyncio
async def test_early_stop_is_logged_as_warning(table_pages, caplog):
    """Verify that a callback-requested stop is logged at WARNING."""
    caplog.set_level(logging.DEBUG, logger="dynapage")

    def callback(page):
        raise StopPagination()

    await AsyncPaginator(AsyncScriptedSource(table_pages), {}, SINGLE).each(callback)

    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert [r.getMessage() for r in warnings] == ["Pagination stopped by callback"]
    assert warnings[0].sequence == 0


class TestRedactToken:
    def test_none(self):
        """Test that None is passed through."""
        assert redact_token(None) is None

    def test_string_is_hashed(self):
        """Test that string tokens are replaced by a short hash."""
        redacted = redact_token("abc")
        assert redacted != "abc"
        assert len(redacted) == 8

    def test_dict_keeps_keys_and_hashes_values(self):
        """Test that dict tokens keep their keys but not their values."""
        redacted = redact_token({"NextToken": "abc"})
        assert "NextToken" in redacted
        assert "abc" not in redacted

    def test_deterministic(self):
        """Test that key order does not change the redacted form."""
        assert redact_token({"a": 1, "b": 2}) == redact_token({"b": 2, "a": 1})
