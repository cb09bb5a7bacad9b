"""
Unit tests for shared logging processors.
"""

import pytest
import structlog

from shared.logging import (
    add_correlation_context,
    clear_context,
    configure_logging,
    set_collection_context,
    set_request_id,
)


class TestLoggingContext:
    """Test cases for log correlation and timestamps."""

    @pytest.fixture(autouse=True)
    def reset_context(self):
        """Clear context variables around each test."""
        clear_context()
        yield
        clear_context()

    def test_correlation_ids(self):
        """Test request and collection ids are added to events."""
        set_request_id("req-1")
        set_collection_context("col-7")

        event = add_correlation_context(None, "info", {"event": "Rule compiled"})

        assert event["request_id"] == "req-1"
        assert event["collection_id"] == "col-7"

    def test_no_collection_bound(self):
        """Test events carry no collection id unless one is bound."""
        set_collection_context(None)

        event = add_correlation_context(None, "info", {"event": "Rule compiled"})

        assert "collection_id" not in event

    def test_timestamp_stays_iso(self):
        """Test the processor chain keeps the ISO timestamp."""
        configure_logging("collections")
        processors = structlog.get_config()["processors"]
        start = next(
            index for index, processor in enumerate(processors)
            if isinstance(processor, structlog.processors.TimeStamper)
        )

        event = {"event": "HTTP request", "logger": "collections.service"}
        for processor in processors[start:-1]:
            event = processor(None, "info", event)

        assert isinstance(event["timestamp"], str)
        assert "T" in event["timestamp"]
        assert event["service"] == "collections"
