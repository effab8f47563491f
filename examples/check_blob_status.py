"""
Blob Status Example
Submits one blob and polls until it is confirmed or failed.

Pass a batch header hash as the first argument to read a blob back instead:
    python examples/check_blob_status.py 0x<batch_header_hash> [blob_index]
"""
import asyncio
import sys

from ogda_sdk import DAService
from ogda_sdk.da.status import poll_until_final
from ogda_sdk.utils.config import load_env

load_env()


async def submit_and_poll(service: DAService):
    receipt = await service.submit_blob({"message": "hello from ogda_sdk"})
    print(f"✅ Submitted: {receipt.request_id}")
    print(f"   Data root: {receipt.data_root}")

    status = await poll_until_final(service.tracker, receipt.request_id, interval=5.0, max_attempts=24)
    print(f"📋 Last status: {status.status.value} {status.info}")


async def retrieve(service: DAService, batch_header_hash: str, blob_index: int):
    blob = await service.retrieve_blob(batch_header_hash, blob_index)
    print(f"📦 Retrieved {blob.data_size} bytes as {blob.format}: {blob.payload}")


async def main():
    async with DAService.from_env() as service:
        if len(sys.argv) > 1:
            index = int(sys.argv[2]) if len(sys.argv) > 2 else 0
            await retrieve(service, sys.argv[1], index)
        else:
            await submit_and_poll(service)


if __name__ == "__main__":
    asyncio.run(main())
