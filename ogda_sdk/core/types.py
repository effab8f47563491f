"""Type definitions for the SDK."""
from typing import Optional, Dict, Any, List, Tuple, Union, Sequence
from dataclasses import dataclass, field
from enum import Enum
import json
import time


GAME_HISTORY_BATCH_TYPE = "game_history_batch"
GAME_RESULT_TYPE = "game_result"
ENVELOPE_VERSION = "1.0"


def now_ms() -> int:
    """Current wall-clock time in milliseconds."""
    return int(time.time() * 1000)


def to_json(obj: Any) -> str:
    """Compact JSON encoding used for everything sent to the disperser."""
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)


class BlobState(Enum):
    """Blob lifecycle state as observed by the client."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"
    UNKNOWN = "unknown"

    @property
    def is_final(self) -> bool:
        return self in (BlobState.CONFIRMED, BlobState.FAILED)


@dataclass(frozen=True)
class DisperseRequest:
    """Blob submission request. Immutable once constructed."""
    data: bytes
    quorum_numbers: Tuple[int, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "data", bytes(self.data))
        object.__setattr__(self, "quorum_numbers", tuple(int(q) for q in self.quorum_numbers))


@dataclass
class DisperseResult:
    """Disperser reply to a blob submission.

    ``request_id`` is an opaque token; never parse it.
    """
    request_id: str
    result: str
    blob_size: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "requestId": self.request_id,
            "result": self.result,
            "blobSize": self.blob_size,
        }


@dataclass
class BlobStatus:
    """Point-in-time status snapshot of a submitted blob."""
    status: BlobState
    info: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"status": self.status.value, "info": self.info}


@dataclass
class GameHistoryBatch:
    """Envelope for a (possibly chunked) batch of game records.

    ``chunk_index`` and ``total_chunks`` are only set when the logical batch
    was split; they are omitted from the serialized form otherwise.
    """
    games: List[Any]
    timestamp: int = field(default_factory=now_ms)
    total_games: Optional[int] = None
    chunk_index: Optional[int] = None
    total_chunks: Optional[int] = None
    version: str = ENVELOPE_VERSION
    type: str = GAME_HISTORY_BATCH_TYPE

    def __post_init__(self):
        self.games = list(self.games)
        if self.total_games is None:
            self.total_games = len(self.games)
        if self.total_games != len(self.games):
            raise ValueError(
                f"total_games ({self.total_games}) does not match number of games ({len(self.games)})"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire dictionary (camelCase keys)."""
        data: Dict[str, Any] = {
            "type": self.type,
            "timestamp": self.timestamp,
            "games": self.games,
            "totalGames": self.total_games,
        }
        if self.chunk_index is not None:
            data["chunkIndex"] = self.chunk_index
        if self.total_chunks is not None:
            data["totalChunks"] = self.total_chunks
        data["version"] = self.version
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameHistoryBatch":
        """Create from the wire dictionary."""
        return cls(
            games=data.get("games", []),
            timestamp=data.get("timestamp", 0),
            total_games=data.get("totalGames"),
            chunk_index=data.get("chunkIndex"),
            total_chunks=data.get("totalChunks"),
            version=data.get("version", ENVELOPE_VERSION),
            type=data.get("type", GAME_HISTORY_BATCH_TYPE),
        )

    def encode(self) -> bytes:
        """Serialize to UTF-8 JSON bytes."""
        return to_json(self.to_dict()).encode("utf-8")


@dataclass
class Chunk:
    """One bounded slice of a logical batch, in original record order."""
    records: List[Any]
    chunk_index: int
    total_chunks: int
    byte_size: int = 0

    def __len__(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class ChunkOk:
    """Successful chunk submission."""
    chunk_index: int
    result: DisperseResult
    status: BlobStatus
    attempts: int = 1

    @property
    def ok(self) -> bool:
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chunkIndex": self.chunk_index,
            "ok": True,
            "attempts": self.attempts,
            "result": self.result.to_dict(),
            "status": self.status.to_dict(),
        }


@dataclass(frozen=True)
class ChunkErr:
    """Failed chunk submission; ``cause`` is the exception that ended it."""
    chunk_index: int
    cause: BaseException
    attempts: int = 1

    @property
    def ok(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chunkIndex": self.chunk_index,
            "ok": False,
            "attempts": self.attempts,
            "error": type(self.cause).__name__,
            "message": str(self.cause),
        }


ChunkSubmissionOutcome = Union[ChunkOk, ChunkErr]


@dataclass
class BatchOutcome:
    """Aggregated result of submitting a sequence of chunks.

    A batch with some failed and some successful chunks is a partial
    failure: it is reported here, not raised.
    """
    outcomes: List[ChunkSubmissionOutcome] = field(default_factory=list)

    @property
    def successful_chunks(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.ok)

    @property
    def failed_chunks(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.ok)

    @property
    def total_chunks(self) -> int:
        return len(self.outcomes)

    @property
    def success(self) -> bool:
        return self.failed_chunks == 0

    @property
    def is_partial_failure(self) -> bool:
        return 0 < self.failed_chunks < self.total_chunks

    def results(self) -> List[DisperseResult]:
        """Disperse results of the successful chunks, in chunk order."""
        return [outcome.result for outcome in self.outcomes if isinstance(outcome, ChunkOk)]

    def failures(self) -> List[ChunkErr]:
        """Failed outcomes, in chunk order."""
        return [outcome for outcome in self.outcomes if isinstance(outcome, ChunkErr)]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "success": self.success,
            "totalChunks": self.total_chunks,
            "successfulChunks": self.successful_chunks,
            "failedChunks": self.failed_chunks,
            "outcomes": [outcome.to_dict() for outcome in self.outcomes],
        }


@dataclass(frozen=True)
class Sequential:
    """Submit chunks one at a time, in order."""


@dataclass(frozen=True)
class BoundedParallel:
    """Submit chunks in windows of ``concurrency`` concurrent requests."""
    concurrency: int = 3

    def __post_init__(self):
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {self.concurrency}")


SubmissionMode = Union[Sequential, BoundedParallel]


@dataclass
class SubmissionReceipt:
    """Caller-facing receipt for one submitted blob.

    ``blob_hash`` is keccak256 of the request id string. It is a reference
    token only and does not commit to the blob content; ``data_root`` is the
    keccak256 of the submitted bytes.
    """
    request_id: str
    blob_hash: str
    data_root: str
    result: str
    blob_size: int
    status: BlobState = BlobState.PENDING
    status_info: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "success": True,
            "requestId": self.request_id,
            "blobHash": self.blob_hash,
            "dataRoot": self.data_root,
            "result": self.result,
            "blobSize": self.blob_size,
            "status": self.status.value,
            "statusInfo": self.status_info,
        }


@dataclass
class BatchSubmissionSummary:
    """Downstream result of a game history submission.

    Single-blob submissions fill ``request_id``/``blob_hash``; chunked ones
    fill ``total_chunks`` and ``blob_hashes`` (one per successful chunk).
    """
    success: bool
    successful_chunks: int
    failed_chunks: int
    total_games: int
    blob_hashes: List[str] = field(default_factory=list)
    request_id: Optional[str] = None
    blob_hash: Optional[str] = None
    total_chunks: Optional[int] = None
    outcome: Optional[BatchOutcome] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data: Dict[str, Any] = {
            "success": self.success,
            "successfulChunks": self.successful_chunks,
            "failedChunks": self.failed_chunks,
            "blobHashes": list(self.blob_hashes),
            "totalGames": self.total_games,
        }
        if self.request_id is not None:
            data["requestId"] = self.request_id
        if self.blob_hash is not None:
            data["blobHash"] = self.blob_hash
        if self.total_chunks is not None:
            data["totalChunks"] = self.total_chunks
        if self.outcome is not None:
            data["results"] = [outcome.to_dict() for outcome in self.outcome.outcomes]
        return data


@dataclass
class RetrievedBlob:
    """Blob bytes fetched back from the disperser."""
    batch_header_hash: str
    blob_index: int
    data: bytes
    payload: Any = None
    format: str = "bytes"

    @property
    def data_size(self) -> int:
        return len(self.data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "batchHeaderHash": self.batch_header_hash,
            "blobIndex": self.blob_index,
            "data": self.payload,
            "dataSize": self.data_size,
            "format": self.format,
        }


def flatten_chunks(chunks: Sequence[Chunk]) -> List[Any]:
    """Concatenate chunk records back into one ordered list."""
    records: List[Any] = []
    for chunk in chunks:
        records.extend(chunk.records)
    return records
