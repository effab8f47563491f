"""Tests for the DA service."""

import json

import pytest

from conftest import unreachable
from ogda_sdk.core.exceptions import (
    BatchSubmissionError,
    ChunkPlanningError,
    DisperserConnectionError,
    EmptyBlobError,
    RemoteError,
)
from ogda_sdk.core.types import BlobState, BoundedParallel
from ogda_sdk.da.service import DAService
from ogda_sdk.utils.config import BlobPolicy
from ogda_sdk.utils.hashing import keccak256_hex


def games(count):
    return [{"gameId": f"game-{i}", "winner": "0xabc", "score": i} for i in range(count)]


def sent(transport):
    return [json.loads(data) for data, _ in transport.dispersed]


@pytest.fixture
def service(client):
    return DAService(client)


class TestSubmitBlob:
    """Test single blob submission."""

    @pytest.mark.asyncio
    async def test_receipt(self, service, transport):
        """The receipt carries both reference and content hashes."""
        receipt = await service.submit_blob({"hello": "da"})

        assert receipt.request_id == "req-0"
        assert receipt.blob_hash == keccak256_hex("req-0")
        assert receipt.data_root == keccak256_hex(b'{"hello":"da"}')
        assert receipt.status is BlobState.PENDING
        assert receipt.to_dict()["blobHash"] == receipt.blob_hash

    @pytest.mark.asyncio
    async def test_status_failure_falls_back_to_pending(self, service, transport):
        """A failing status query still returns a receipt."""
        transport.status_error = RemoteError("no status")
        receipt = await service.submit_blob(b"data")
        assert receipt.status is BlobState.PENDING
        assert receipt.status_info is None

    @pytest.mark.asyncio
    async def test_quorum_override(self, client, transport):
        """Per-call quorum numbers override the service default."""
        service = DAService(client, quorum_numbers=[0])
        await service.submit_blob(b"a")
        await service.submit_blob(b"b", quorum_numbers=[1, 2])
        assert [quorums for _, quorums in transport.dispersed] == [(0,), (1, 2)]

    @pytest.mark.asyncio
    async def test_empty_blob(self, service, transport):
        """Empty blobs are rejected before any network call."""
        with pytest.raises(EmptyBlobError):
            await service.submit_blob("")
        assert transport.opened == 0

    @pytest.mark.asyncio
    async def test_unreachable(self, service, transport):
        """Connection errors propagate for a single blob."""
        transport.disperse_hook = unreachable
        with pytest.raises(DisperserConnectionError):
            await service.submit_blob(b"data")


class TestSubmitGameHistoryBatch:
    """Test game history submission."""

    @pytest.mark.asyncio
    async def test_small_batch_single_blob(self, service, transport):
        """A small batch goes out as one blob without chunk metadata."""
        summary = await service.submit_game_history_batch(games(5))

        assert summary.success
        assert summary.total_chunks == 1
        assert summary.request_id == "req-0"
        assert summary.blob_hash == keccak256_hex("req-0")
        blob = sent(transport)[0]
        assert blob["type"] == "game_history_batch"
        assert blob["totalGames"] == 5
        assert "chunkIndex" not in blob
        assert "totalChunks" not in blob

    @pytest.mark.asyncio
    async def test_large_batch_chunked(self, service, transport):
        """250 games split into 3 chunks sharing a timestamp."""
        records = games(250)
        summary = await service.submit_game_history_batch(records, batch_size=100, mode=BoundedParallel(2))

        assert summary.success
        assert summary.total_chunks == 3
        assert summary.successful_chunks == 3
        assert len(summary.blob_hashes) == 3
        assert summary.request_id is None

        blobs = sorted(sent(transport), key=lambda blob: blob["chunkIndex"])
        assert [blob["chunkIndex"] for blob in blobs] == [0, 1, 2]
        assert {blob["totalChunks"] for blob in blobs} == {3}
        assert [blob["totalGames"] for blob in blobs] == [100, 100, 50]
        assert len({blob["timestamp"] for blob in blobs}) == 1
        assert [game for blob in blobs for game in blob["games"]] == records

    @pytest.mark.asyncio
    async def test_byte_bound(self, service, transport):
        """Every chunk fits the byte bound including its envelope."""
        bound = 1000
        summary = await service.submit_game_history_batch(games(60), max_chunk_bytes=bound)

        assert summary.total_chunks > 1
        assert all(len(data) <= bound for data, _ in transport.dispersed)

    @pytest.mark.asyncio
    async def test_partial_failure_reported(self, service, transport):
        """One failed chunk is reported, not raised."""
        def fail_second(data, call_number):
            if call_number == 1:
                raise RemoteError("rejected")

        transport.disperse_hook = fail_second
        summary = await service.submit_game_history_batch(games(30), batch_size=10)

        assert summary.success is False
        assert summary.successful_chunks == 2
        assert summary.failed_chunks == 1
        assert len(summary.blob_hashes) == 2
        assert summary.to_dict()["results"][1]["ok"] is False

    @pytest.mark.asyncio
    async def test_all_chunks_fail_validation(self, client, transport):
        """A size limit nothing fits raises with the outcome attached."""
        service = DAService(client, policy=BlobPolicy(max_blob_size=50))

        with pytest.raises(BatchSubmissionError) as exc_info:
            await service.submit_game_history_batch(games(4), batch_size=2)

        assert exc_info.value.outcome.failed_chunks == 2
        assert transport.dispersed == []

    @pytest.mark.asyncio
    async def test_all_chunks_unreachable_is_reported(self, service, transport):
        """Connection failures are reported in the summary."""
        transport.disperse_hook = unreachable
        summary = await service.submit_game_history_batch(games(4), batch_size=2)
        assert summary.failed_chunks == 2
        assert summary.blob_hashes == []

    @pytest.mark.asyncio
    async def test_empty_batch(self, service):
        """An empty batch cannot be submitted."""
        with pytest.raises(ChunkPlanningError):
            await service.submit_game_history_batch([])

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bounds", [{"batch_size": 0}, {"max_chunk_bytes": 0}])
    async def test_explicit_zero_bound_rejected(self, service, transport, bounds):
        """A zero bound is an error, not a request for the default."""
        with pytest.raises(ChunkPlanningError):
            await service.submit_game_history_batch(games(3), **bounds)
        assert transport.dispersed == []

    @pytest.mark.asyncio
    async def test_unserializable_game(self, service, transport):
        """Games the JSON encoder cannot send abort before any submission."""
        with pytest.raises(ChunkPlanningError):
            await service.submit_game_history_batch([{"gameId": "g0"}, b"\x00raw"])
        assert transport.dispersed == []


class TestOtherOperations:
    """Test single results, retrieval and availability."""

    @pytest.mark.asyncio
    async def test_submit_game_result(self, service, transport):
        """A single game is wrapped in a game_result envelope."""
        await service.submit_game_result({"gameId": "g1"})
        blob = sent(transport)[0]
        assert blob["type"] == "game_result"
        assert blob["game"] == {"gameId": "g1"}
        assert blob["version"] == "1.0"

    @pytest.mark.asyncio
    async def test_retrieve_formats(self, service, transport):
        """Retrieved blobs are decoded as JSON, text or bytes."""
        transport.blobs.update({"json": b'{"a":1}', "text": b"plain", "raw": b"\xff\x00"})

        as_json = await service.retrieve_blob("json")
        as_text = await service.retrieve_blob("text")
        as_bytes = await service.retrieve_blob("raw")

        assert (as_json.format, as_json.payload) == ("json", {"a": 1})
        assert (as_text.format, as_text.payload) == ("string", "plain")
        assert (as_bytes.format, as_bytes.payload) == ("bytes", None)
        assert as_bytes.data_size == 2

    @pytest.mark.asyncio
    async def test_retrieve_requires_hash(self, service):
        """An empty reference is rejected."""
        with pytest.raises(ValueError):
            await service.retrieve_blob("")

    @pytest.mark.asyncio
    async def test_get_status(self, service, transport):
        """Status queries are normalized."""
        transport.statuses["req-5"] = ("FAILED", "insufficient signatures")
        status = await service.get_status("req-5")
        assert status.status is BlobState.FAILED

    @pytest.mark.asyncio
    async def test_check_availability(self, service, transport):
        """Availability never raises."""
        assert await service.check_availability() is True

        await service.close()
        transport.probe_error = DisperserConnectionError("down")
        assert await service.check_availability() is False


class TestFromEnv:
    """Test environment construction."""

    def test_from_env(self, monkeypatch):
        """Environment settings reach the client and retry policy."""
        monkeypatch.setenv("OGDA_CLIENT_URL", "http://da.example:7000")
        monkeypatch.setenv("OGDA_MAX_RETRIES", "1")
        monkeypatch.setenv("OGDA_GAME_BATCH_SIZE", "20")

        service = DAService.from_env("testnet")

        assert service.client.endpoint == "da.example:7000"
        assert service.retry_policy.max_attempts == 2
        assert service.game_config.batch_size == 20
