"""Chunk planning for large record batches.

Records are packed greedily, in order, into chunks bounded by both a record
count and a serialized byte size. A record that alone exceeds the byte bound
still gets its own chunk: data is never dropped here, the oversized chunk is
rejected later by the size validator and only that chunk fails.
"""
from typing import Any, Callable, Iterable, List, Tuple

from ..core.exceptions import ChunkPlanningError
from ..core.types import Chunk, to_json
from ..utils.logger import get_logger

logger = get_logger("da.planner")

# "[" and "]" of a bare JSON array
JSON_ARRAY_OVERHEAD = 2


def json_record_size(record: Any) -> int:
    """Serialized size of one record inside a JSON array.

    Raises:
        TypeError: If the record is not JSON-serializable (bytes included)
    """
    return len(to_json(record).encode("utf-8"))


class ChunkPlanner:
    """Split an ordered record sequence into size-bounded chunks.

    Args:
        record_size: Returns the serialized size of a single record in bytes
        envelope_overhead: Bytes the surrounding envelope adds to every chunk
            (an empty record list included). Records inside one chunk are
            assumed to be joined by a one-byte separator, as in JSON.
    """

    def __init__(
        self,
        record_size: Callable[[Any], int] = json_record_size,
        envelope_overhead: int = JSON_ARRAY_OVERHEAD,
    ):
        if envelope_overhead < 0:
            raise ValueError("envelope_overhead must be >= 0")
        self.record_size = record_size
        self.envelope_overhead = envelope_overhead

    def plan(
        self,
        records: Iterable[Any],
        max_records_per_chunk: int,
        max_bytes_per_chunk: int,
    ) -> List[Chunk]:
        """Plan chunks for ``records``.

        Args:
            records: Ordered records to split
            max_records_per_chunk: Upper bound on records per chunk
            max_bytes_per_chunk: Upper bound on serialized chunk size

        Returns:
            Ordered chunks; ``total_chunks`` is the same on every chunk

        Raises:
            ChunkPlanningError: If ``records`` is empty, a bound is not positive
                or a record cannot be sized
        """
        records = list(records)
        if not records:
            raise ChunkPlanningError("Cannot plan chunks for an empty record sequence")
        if max_records_per_chunk < 1:
            raise ChunkPlanningError(f"max_records_per_chunk must be >= 1, got {max_records_per_chunk}")
        if max_bytes_per_chunk < 1:
            raise ChunkPlanningError(f"max_bytes_per_chunk must be >= 1, got {max_bytes_per_chunk}")

        groups: List[Tuple[List[Any], int]] = []
        current: List[Any] = []
        current_bytes = self.envelope_overhead

        for position, record in enumerate(records):
            try:
                size = self.record_size(record)
            except (TypeError, ValueError) as e:
                raise ChunkPlanningError(
                    f"Record {position} cannot be serialized: {e}",
                    details={"position": position},
                ) from e
            projected = current_bytes + size + (1 if current else 0)
            if current and (
                len(current) + 1 > max_records_per_chunk or projected > max_bytes_per_chunk
            ):
                groups.append((current, current_bytes))
                current = []
                projected = self.envelope_overhead + size
            if not current and projected > max_bytes_per_chunk:
                logger.warning(
                    f"Record for chunk {len(groups)} serializes to {size} bytes, "
                    f"over the {max_bytes_per_chunk} byte chunk bound; planning it alone"
                )
            current.append(record)
            current_bytes = projected

        groups.append((current, current_bytes))

        total = len(groups)
        chunks = [
            Chunk(records=group, chunk_index=index, total_chunks=total, byte_size=size)
            for index, (group, size) in enumerate(groups)
        ]
        if total > 1:
            logger.info(f"Planned {len(records)} records into {total} chunks")
        return chunks


def plan_chunks(
    records: Iterable[Any],
    max_records_per_chunk: int,
    max_bytes_per_chunk: int,
) -> List[Chunk]:
    """Plan chunks with the default JSON sizing."""
    return ChunkPlanner().plan(records, max_records_per_chunk, max_bytes_per_chunk)
