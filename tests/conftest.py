"""Shared fixtures: an in-memory disperser transport."""

import asyncio
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

from ogda_sdk.core.exceptions import DisperserConnectionError, NotFoundError
from ogda_sdk.da.client import DisperserClient
from ogda_sdk.da.transport import DisperserTransport


class FakeTransport(DisperserTransport):
    """Records calls and answers from in-memory state.

    ``disperse_hook`` is called with ``(data, call_number)`` before a blob is
    accepted; raising from it fails that call.
    """

    def __init__(self, endpoint: str = "fake:51001"):
        self.endpoint = endpoint
        self.opened = 0
        self.probed = 0
        self.closed = 0
        self.probe_error: Optional[Exception] = None
        self.disperse_hook: Optional[Callable[[bytes, int], Any]] = None
        self.status_error: Optional[Exception] = None
        self.statuses: Dict[str, Tuple[str, str]] = {}
        self.blobs: Dict[str, bytes] = {}
        self.dispersed: List[Tuple[bytes, Tuple[int, ...]]] = []
        self.delay = 0.0
        self.in_flight = 0
        self.max_in_flight = 0

    async def open(self) -> None:
        self.opened += 1

    async def probe(self, timeout: float) -> None:
        self.probed += 1
        if self.probe_error is not None:
            raise self.probe_error

    async def disperse_blob(self, data, quorum_numbers, timeout=None):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            call_number = len(self.dispersed)
            self.dispersed.append((bytes(data), tuple(quorum_numbers)))
            if self.disperse_hook is not None:
                self.disperse_hook(bytes(data), call_number)
            request_id = f"req-{call_number}"
            self.blobs[request_id] = bytes(data)
            return "PROCESSING", request_id
        finally:
            self.in_flight -= 1

    async def retrieve_blob(self, batch_header_hash, blob_index, timeout=None):
        if batch_header_hash not in self.blobs:
            raise NotFoundError(batch_header_hash, blob_index)
        return self.blobs[batch_header_hash]

    async def get_blob_status(self, request_id, timeout=None):
        if self.status_error is not None:
            raise self.status_error
        return self.statuses.get(request_id, ("PROCESSING", ""))

    async def close(self) -> None:
        self.closed += 1


def unreachable(data: bytes, call_number: int) -> None:
    raise DisperserConnectionError("Cannot connect to DA client at fake:51001")


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def client(transport) -> DisperserClient:
    return DisperserClient(transport=transport, connect_timeout=1.0, request_timeout=5.0)
