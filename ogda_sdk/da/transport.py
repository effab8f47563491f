"""Wire transports for the disperser client.

A transport turns the three disperser operations into network calls and maps
every failure onto the SDK taxonomy:

- endpoint unreachable / refused -> ``DisperserConnectionError``
- deadline exceeded              -> ``DisperserTimeoutError``
- request rejected by the remote -> ``RemoteError`` (``NotFoundError`` on retrieval)

Transports hold no retry or reconnect logic; that belongs to the client and
the submitter.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence, Tuple
import asyncio

import grpc
import httpx

from ..core.exceptions import (
    DisperserConnectionError,
    DisperserTimeoutError,
    NotFoundError,
    RemoteError,
    ValidationError,
)
from ..core.types import to_json
from ..utils.config import parse_endpoint
from ..utils.logger import get_logger
from . import proto

logger = get_logger("da.transport")

_CONNECTION_CODES = (grpc.StatusCode.UNAVAILABLE, grpc.StatusCode.CANCELLED)


class DisperserTransport(ABC):
    """Base class for disperser transports."""

    endpoint: str = ""

    @abstractmethod
    async def open(self) -> None:
        """Allocate the underlying connection. Must not block on the network."""
        pass

    @abstractmethod
    async def probe(self, timeout: float) -> None:
        """Check the endpoint is reachable.

        Raises:
            DisperserConnectionError: If the endpoint does not answer in time
        """
        pass

    @abstractmethod
    async def disperse_blob(
        self,
        data: bytes,
        quorum_numbers: Sequence[int],
        timeout: Optional[float] = None,
    ) -> Tuple[str, str]:
        """Submit a blob.

        Returns:
            ``(result, request_id)`` as reported by the disperser
        """
        pass

    @abstractmethod
    async def retrieve_blob(
        self,
        batch_header_hash: str,
        blob_index: int,
        timeout: Optional[float] = None,
    ) -> bytes:
        """Fetch blob bytes by batch reference."""
        pass

    @abstractmethod
    async def get_blob_status(
        self,
        request_id: str,
        timeout: Optional[float] = None,
    ) -> Tuple[str, str]:
        """Query a submission.

        Returns:
            ``(status, info)`` raw strings as reported by the disperser
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the connection. Safe to call more than once."""
        pass


class GrpcDisperserTransport(DisperserTransport):
    """gRPC transport for a DA client node (``disperser.Disperser`` service).

    One channel is shared by all calls; gRPC multiplexes concurrent requests
    over it, so in-flight chunk submissions do not need external locking.
    """

    def __init__(
        self,
        host: str,
        port: int,
        options: Optional[Sequence[Tuple[str, Any]]] = None,
    ):
        self.host = host
        self.port = port
        self.endpoint = f"{host}:{port}"
        self._options = list(options or [])
        self._channel: Optional[grpc.aio.Channel] = None

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "GrpcDisperserTransport":
        """Create from a DA client URL such as ``http://localhost:51001``."""
        host, port = parse_endpoint(url)
        return cls(host, port, **kwargs)

    async def open(self) -> None:
        if self._channel is not None:
            return
        # Plaintext channel; the DA client node is expected on a trusted network
        channel = grpc.aio.insecure_channel(self.endpoint, options=self._options)
        self._disperse = channel.unary_unary(
            proto.DISPERSE_BLOB,
            request_serializer=proto.DisperseBlobRequest.SerializeToString,
            response_deserializer=proto.DisperseBlobReply.FromString,
        )
        self._retrieve = channel.unary_unary(
            proto.RETRIEVE_BLOB,
            request_serializer=proto.RetrieveBlobRequest.SerializeToString,
            response_deserializer=proto.RetrieveBlobReply.FromString,
        )
        self._status = channel.unary_unary(
            proto.GET_BLOB_STATUS,
            request_serializer=proto.BlobStatusRequest.SerializeToString,
            response_deserializer=proto.BlobStatusReply.FromString,
        )
        self._channel = channel

    def _require_channel(self) -> grpc.aio.Channel:
        if self._channel is None:
            raise DisperserConnectionError(
                f"Transport to {self.endpoint} is not open",
                details={"endpoint": self.endpoint},
            )
        return self._channel

    async def probe(self, timeout: float) -> None:
        channel = self._require_channel()
        try:
            await asyncio.wait_for(channel.channel_ready(), timeout=timeout)
        except asyncio.TimeoutError:
            raise DisperserConnectionError(
                f"Failed to connect to DA client at {self.endpoint}: connection timeout after {timeout}s",
                details={"endpoint": self.endpoint},
            )

    def _translate(self, error: grpc.aio.AioRpcError, operation: str) -> Exception:
        code = error.code()
        message = error.details() or code.name
        details = {"endpoint": self.endpoint, "grpc_code": code.name, "operation": operation}
        if code == grpc.StatusCode.DEADLINE_EXCEEDED:
            return DisperserTimeoutError(f"{operation} timed out: {message}", details=details)
        if code in _CONNECTION_CODES:
            return DisperserConnectionError(
                f"Cannot connect to DA client at {self.endpoint}: {message}", details=details
            )
        return RemoteError(f"{operation} failed: {message}", remote_code=code.name, details=details)

    async def disperse_blob(self, data, quorum_numbers, timeout=None):
        self._require_channel()
        request = proto.DisperseBlobRequest(data=data, custom_quorum_numbers=list(quorum_numbers))
        try:
            reply = await self._disperse(request, timeout=timeout)
        except grpc.aio.AioRpcError as e:
            raise self._translate(e, "DisperseBlob") from e
        return reply.result, reply.request_id

    async def retrieve_blob(self, batch_header_hash, blob_index, timeout=None):
        self._require_channel()
        request = proto.RetrieveBlobRequest(batch_header_hash=batch_header_hash, blob_index=blob_index)
        try:
            reply = await self._retrieve(request, timeout=timeout)
        except grpc.aio.AioRpcError as e:
            if e.code() == grpc.StatusCode.NOT_FOUND:
                raise NotFoundError(
                    batch_header_hash, blob_index, remote_code=e.code().name
                ) from e
            raise self._translate(e, "RetrieveBlob") from e
        return bytes(reply.data)

    async def get_blob_status(self, request_id, timeout=None):
        self._require_channel()
        try:
            reply = await self._status(proto.BlobStatusRequest(request_id=request_id), timeout=timeout)
        except grpc.aio.AioRpcError as e:
            raise self._translate(e, "GetBlobStatus") from e
        return reply.status, reply.info

    async def close(self) -> None:
        channel, self._channel = self._channel, None
        if channel is not None:
            await channel.close()


class HttpGatewayTransport(DisperserTransport):
    """Transport for a DA client exposed through the JSON HTTP gateway.

    The gateway wraps a DA client node behind three routes:

    - ``POST /api/og-da/submit``   ``{"data": str, "options": {...}}``
    - ``GET  /api/og-da/retrieve`` ``?hash=...&blobIndex=...``
    - ``GET  /api/og-da/status``   node availability

    Payloads travel as JSON strings, so only UTF-8 blobs can be submitted.
    The gateway has no per-request status route; ``get_blob_status`` raises
    ``RemoteError`` with ``remote_code="UNIMPLEMENTED"``.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 60.0,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint = base_url.rstrip("/")
        self.timeout = timeout
        self._headers = headers or {}
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    async def open(self) -> None:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.endpoint,
                timeout=self.timeout,
                headers=self._headers,
                transport=self._transport,
            )

    @property
    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            raise DisperserConnectionError(
                f"Transport to {self.endpoint} is not open",
                details={"endpoint": self.endpoint},
            )
        return self._http_client

    async def _request(self, method: str, path: str, timeout: Optional[float] = None, **kwargs) -> httpx.Response:
        if timeout is not None:
            kwargs["timeout"] = timeout
        try:
            return await self.http_client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise DisperserTimeoutError(
                f"{method} {path} timed out: {e}", details={"endpoint": self.endpoint}
            ) from e
        except httpx.TransportError as e:
            raise DisperserConnectionError(
                f"Cannot connect to DA gateway at {self.endpoint}: {e}",
                details={"endpoint": self.endpoint},
            ) from e

    def _json(self, response: httpx.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError as e:
            raise RemoteError(
                f"Invalid gateway response ({response.status_code})",
                remote_code=str(response.status_code),
            ) from e
        if not isinstance(body, dict):
            raise RemoteError("Invalid gateway response body", remote_code=str(response.status_code))
        return body

    def _raise_for_body(self, response: httpx.Response, body: Dict[str, Any]) -> None:
        if response.status_code == 503:
            raise DisperserConnectionError(
                body.get("error") or "DA gateway cannot reach the DA client",
                details={"endpoint": self.endpoint, "http_status": 503},
            )
        if response.is_error or not body.get("success", False):
            raise RemoteError(
                body.get("error") or f"Gateway request failed ({response.status_code})",
                remote_code=str(response.status_code),
            )

    async def probe(self, timeout: float) -> None:
        response = await self._request("GET", "/api/og-da/status", timeout=timeout)
        if response.is_error:
            raise DisperserConnectionError(
                f"DA gateway at {self.endpoint} answered the status check with HTTP {response.status_code}",
                details={"endpoint": self.endpoint, "http_status": response.status_code},
            )
        try:
            body = self._json(response)
        except RemoteError as e:
            raise DisperserConnectionError(
                f"DA gateway at {self.endpoint} returned an invalid status response",
                details={"endpoint": self.endpoint, "http_status": response.status_code},
            ) from e
        if not body.get("available"):
            raise DisperserConnectionError(
                body.get("error") or f"DA client behind {self.endpoint} is not available",
                details={"endpoint": self.endpoint},
            )

    async def disperse_blob(self, data, quorum_numbers, timeout=None):
        try:
            text = bytes(data).decode("utf-8")
        except UnicodeDecodeError as e:
            raise ValidationError("HTTP gateway only accepts UTF-8 payloads") from e
        response = await self._request(
            "POST",
            "/api/og-da/submit",
            timeout=timeout,
            json={"data": text, "options": {"customQuorumNumbers": list(quorum_numbers)}},
        )
        body = self._json(response)
        self._raise_for_body(response, body)
        return str(body.get("result", "")), str(body["requestId"])

    async def retrieve_blob(self, batch_header_hash, blob_index, timeout=None):
        response = await self._request(
            "GET",
            "/api/og-da/retrieve",
            timeout=timeout,
            params={"hash": batch_header_hash, "blobIndex": blob_index},
        )
        body = self._json(response)
        if response.status_code == 404:
            raise NotFoundError(batch_header_hash, blob_index, remote_code="404")
        self._raise_for_body(response, body)
        data = body.get("data")
        if body.get("format") == "json":
            return to_json(data).encode("utf-8")
        return str(data if data is not None else "").encode("utf-8")

    async def get_blob_status(self, request_id, timeout=None):
        raise RemoteError(
            "HTTP gateway does not expose per-request blob status",
            remote_code="UNIMPLEMENTED",
        )

    async def close(self) -> None:
        client, self._http_client = self._http_client, None
        if client is not None:
            await client.aclose()
