"""Tests for status normalization and tracking."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from ogda_sdk.core.exceptions import DisperserConnectionError
from ogda_sdk.core.types import BlobState, BlobStatus
from ogda_sdk.da.status import BlobStatusTracker, normalize_status, poll_until_final


class TestNormalizeStatus:
    """Test the status mapping."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("PROCESSING", BlobState.PENDING),
            ("processing", BlobState.PENDING),
            ("gathering-signatures", BlobState.PENDING),
            ("CONFIRMED", BlobState.CONFIRMED),
            (" Finalized ", BlobState.CONFIRMED),
            ("FAILED", BlobState.FAILED),
            ("INSUFFICIENT_SIGNATURES", BlobState.FAILED),
            ("SOMETHING_NEW", BlobState.UNKNOWN),
            ("", BlobState.UNKNOWN),
            (None, BlobState.UNKNOWN),
            (BlobState.CONFIRMED, BlobState.CONFIRMED),
        ],
    )
    def test_mapping_is_total(self, raw, expected):
        """Every input maps to a BlobState."""
        assert normalize_status(raw) is expected


def tracker_with(*statuses):
    client = MagicMock()
    client.get_status = AsyncMock(side_effect=list(statuses))
    return BlobStatusTracker(client), client


class TestBlobStatusTracker:
    """Test tracker queries."""

    @pytest.mark.asyncio
    async def test_every_call_queries_remote(self):
        """Statuses are never cached."""
        tracker, client = tracker_with(
            BlobStatus(BlobState.PENDING), BlobStatus(BlobState.CONFIRMED)
        )
        assert (await tracker.status("req-1")).status is BlobState.PENDING
        assert (await tracker.status("req-1")).status is BlobState.CONFIRMED
        assert client.get_status.await_count == 2

    @pytest.mark.asyncio
    async def test_errors_propagate(self):
        """Query failures are raised to the caller."""
        tracker, _ = tracker_with(DisperserConnectionError("down"))
        with pytest.raises(DisperserConnectionError):
            await tracker.status("req-1")


class TestPollUntilFinal:
    """Test polling."""

    @pytest.mark.asyncio
    async def test_stops_at_final_state(self):
        """Polling stops once the blob is confirmed."""
        tracker, client = tracker_with(
            BlobStatus(BlobState.PENDING),
            BlobStatus(BlobState.PENDING),
            BlobStatus(BlobState.CONFIRMED, "batch 7"),
        )
        sleep = AsyncMock()

        status = await poll_until_final(tracker, "req-1", interval=0.5, max_attempts=10, sleep=sleep)

        assert status.status is BlobState.CONFIRMED
        assert client.get_status.await_count == 3
        assert sleep.await_count == 2
        sleep.assert_awaited_with(0.5)

    @pytest.mark.asyncio
    async def test_returns_last_status_when_attempts_run_out(self):
        """The last observed status is returned when never final."""
        tracker, _ = tracker_with(BlobStatus(BlobState.PENDING), BlobStatus(BlobState.UNKNOWN))
        sleep = AsyncMock()

        status = await poll_until_final(tracker, "req-1", max_attempts=2, sleep=sleep)

        assert status.status is BlobState.UNKNOWN
        assert sleep.await_count == 1
