#!/usr/bin/env python3
"""Rebuild the chunk similarity graph for the whole corpus.

Ctrl-C stops the run after the video currently being processed.
"""

import argparse
import asyncio
import signal

from app.core.dependencies import get_graph_builder, get_neo4j_repository
from app.core.logging import setup_logging


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Minimum cosine similarity for an edge (defaults to SIMILARITY_THRESHOLD)",
    )
    return parser.parse_args()


async def main(threshold=None):
    """Run the backfill and print a summary."""
    setup_logging()
    stop_requested = False

    def request_stop(*_):
        nonlocal stop_requested
        if not stop_requested:
            print("\nStopping after the current video...")
        stop_requested = True

    signal.signal(signal.SIGINT, request_stop)

    def show_progress(done: int, total: int) -> None:
        print(f"  [{done}/{total}] videos")

    async for repository in get_neo4j_repository():
        graph_builder = await get_graph_builder(repository)
        print("Rebuilding similarity graph\n" + "=" * 50)

        report = await graph_builder.backfill(
            threshold=threshold,
            on_progress=show_progress,
            should_stop=lambda: stop_requested,
        )

        print("\n" + "=" * 50)
        print(f"Deleted relationships:  {report.deleted}")
        print(f"Videos processed:       {report.videos_processed}/{report.videos_total}")
        print(f"Videos failed:          {report.videos_failed}")
        print(f"Relationships created:  {report.relationships_created}")
        print(f"Relationships skipped:  {report.relationships_skipped}")
        for video_id, error in report.failures.items():
            print(f"  ✗ video {video_id}: {error}")
        if report.cancelled:
            print("Backfill was cancelled; the graph is incomplete.")


if __name__ == "__main__":
    args = parse_args()
    asyncio.run(main(threshold=args.threshold))
