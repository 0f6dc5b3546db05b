#!/usr/bin/env python3
"""Script to initialize the database with sample data."""

import asyncio
from datetime import datetime, timezone

from app.core.dependencies import (
    get_embedding_service,
    get_graph_builder,
    get_neo4j_repository,
    get_temporal_indexer,
)
from app.core.logging import setup_logging
from app.domain import Chunk, Video

SAMPLE_VIDEOS = [
    {
        "video": Video(
            id=1,
            title="React 18 Concurrent Rendering Explained",
            channel="Frontend Weekly",
            youtube_id="r18concurrent",
            published_at=datetime(2022, 4, 2, tzinfo=timezone.utc),
        ),
        "chunks": [
            (0.0, 45.0, "React 18 was released in March 2022 and ships concurrent rendering by default."),
            (45.0, 90.0, "Transitions let you mark state updates as non-urgent so typing stays responsive."),
            (90.0, 140.0, "Automatic batching now groups updates inside promises and timeouts as well."),
        ],
    },
    {
        "video": Video(
            id=2,
            title="Upgrading a Django Project",
            channel="Backend Notes",
            youtube_id="djangoupgrade",
            published_at=datetime(2023, 12, 5, tzinfo=timezone.utc),
        ),
        "chunks": [
            (0.0, 60.0, "Django 5.0 update brings field groups and simplified form rendering."),
            (60.0, 120.0, "Run the test suite with deprecation warnings enabled before upgrading."),
            (120.0, 180.0, "Python 3.12 support landed in the 2023 release as well."),
        ],
    },
    {
        "video": Video(
            id=3,
            title="State Management Without the Boilerplate",
            channel="Frontend Weekly",
            youtube_id="statemgmt",
            published_at=datetime(2024, 6, 18, tzinfo=timezone.utc),
        ),
        "chunks": [
            (0.0, 50.0, "Most apps only need local component state and a little context."),
            (50.0, 110.0, "Concurrent rendering in React changes how external stores must subscribe."),
            (110.0, 170.0, "Batching state updates avoids extra renders when several values change."),
        ],
    },
]


async def main():
    """Initialize database with sample data."""
    setup_logging()
    print("Initializing database with sample data\n" + "=" * 50)

    async for repository in get_neo4j_repository():
        print(f"\n✓ Connected to Neo4j at {repository.uri}")

        embedding_service = await get_embedding_service()
        graph_builder = await get_graph_builder(repository)
        temporal_indexer = await get_temporal_indexer(repository)

        print(f"\nLoading {len(SAMPLE_VIDEOS)} sample videos...")
        chunk_id = 1
        for i, sample in enumerate(SAMPLE_VIDEOS, 1):
            video = sample["video"]
            print(f"\n[{i}/{len(SAMPLE_VIDEOS)}] {video.title}...")
            await repository.create_video(video)

            texts = [content for _, _, content in sample["chunks"]]
            embeddings = await embedding_service.generate_embeddings(texts)
            for (start, end, content), embedding in zip(sample["chunks"], embeddings):
                await repository.create_chunk(
                    Chunk(
                        id=chunk_id,
                        video_id=video.id,
                        content=content,
                        start_time=start,
                        end_time=end,
                        embedding=embedding,
                    )
                )
                chunk_id += 1
            print(f"  ✓ Stored {len(texts)} chunks")

        print("\nBuilding similarity graph...")
        report = await graph_builder.backfill()
        print(f"✓ Created {report.relationships_created} relationships")

        print("\nExtracting temporal metadata...")
        temporal = await temporal_indexer.extract_all()
        print(f"✓ {temporal.extracted} chunks with temporal signals")

        stats = await repository.get_graph_stats()
        print("\nGraph Statistics:")
        print(f"  Videos: {stats.total_videos}")
        print(f"  Chunks: {stats.total_chunks} ({stats.embedded_chunks} embedded)")
        print(f"  Relationships: {stats.total_relationships}")
        print(f"  Average degree: {stats.avg_degree:.2f}")

    print("\n" + "=" * 50)
    print("Initialization complete!")


if __name__ == "__main__":
    asyncio.run(main())
