"""
Game History Submission Example
Demonstrates chunked submission of a large batch of game results to 0G DA.
"""
import asyncio
import random

from ogda_sdk import BoundedParallel, DAService
from ogda_sdk.utils.config import load_env

# Load OGDA_* settings from .env file
load_env()


def make_games(count: int):
    return [
        {
            "gameId": f"game-{i}",
            "players": ["0xA11ce", "0xB0b"],
            "winner": random.choice(["0xA11ce", "0xB0b"]),
            "moves": random.randint(10, 80),
        }
        for i in range(count)
    ]


async def main():
    print("=" * 60)
    print("🚀 OG DA - Game History Batch Example")
    print("=" * 60)

    async with DAService.from_env() as service:
        print("\n📋 Step 1: Checking DA client availability...")
        if not await service.check_availability():
            print("❌ DA client is not reachable; start it or set OGDA_CLIENT_URL")
            return
        print("✅ DA client available")

        print("\n📋 Step 2: Submitting 250 games (3 concurrent chunks)...")
        summary = await service.submit_game_history_batch(make_games(250), mode=BoundedParallel(3))
        print(f"✅ {summary.successful_chunks}/{summary.total_chunks} chunks submitted")

        for result in summary.to_dict()["results"]:
            if result["ok"]:
                print(f"   Chunk {result['chunkIndex']}: {result['result']['requestId']} ({result['status']['status']})")
            else:
                print(f"   Chunk {result['chunkIndex']}: FAILED {result['error']}: {result['message']}")

        # blobHash identifies the submission; it is not a hash of the data
        for blob_hash in summary.blob_hashes:
            print(f"   Reference: {blob_hash}")


if __name__ == "__main__":
    asyncio.run(main())
