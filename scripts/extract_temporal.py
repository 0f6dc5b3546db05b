#!/usr/bin/env python3
"""Extract temporal metadata for one video or for every embedded video."""

import argparse
import asyncio

from app.core.dependencies import get_neo4j_repository, get_temporal_indexer
from app.core.logging import setup_logging


async def main(video_id=None):
    setup_logging()

    async for repository in get_neo4j_repository():
        indexer = await get_temporal_indexer(repository)
        if video_id is None:
            result = await indexer.extract_all()
        else:
            result = await indexer.extract_for_video(
                video_id,
                on_progress=lambda done, total: print(f"  [{done}/{total}] chunks"),
            )
        print(f"✓ Extracted: {result.extracted}, skipped: {result.skipped}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--video-id", type=int, default=None)
    args = parser.parse_args()
    asyncio.run(main(video_id=args.video_id))
