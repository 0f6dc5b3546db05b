"""Aggregation of chunk-level hits into video-level results."""

from app.domain import EvidenceChunk, SearchResult, VideoResult


def _evidence(result: SearchResult) -> EvidenceChunk:
    return EvidenceChunk(
        chunk_id=result.chunk_id,
        content=result.content,
        start_time=result.start_time,
        end_time=result.end_time,
        similarity=result.similarity,
    )


def aggregate_by_video(
    chunks: list[SearchResult], max_evidence: int = 3
) -> list[VideoResult]:
    """Collapse ranked chunk hits into one result per video.

    The video score is its best chunk score, so a single strong hit outranks
    many weak ones. Videos with equal scores keep the order in which they first
    appear in ``chunks``. Each result carries at most ``max_evidence`` of its
    highest scoring chunks. The input list is not modified.
    """
    groups: dict[int, list[SearchResult]] = {}
    for chunk in chunks:
        groups.setdefault(chunk.video_id, []).append(chunk)

    videos = []
    for video_id, hits in groups.items():
        # sorted() is stable, so equal scores stay in input order
        ranked = sorted(hits, key=lambda hit: -hit.similarity)
        best = ranked[0]
        videos.append(
            VideoResult(
                video_id=video_id,
                youtube_id=best.youtube_id,
                title=best.video_title,
                channel=best.channel,
                thumbnail=best.thumbnail,
                published_at=best.published_at,
                score=best.similarity,
                matched_chunks=len(hits),
                best_chunk=_evidence(best),
                chunks=[_evidence(hit) for hit in ranked[:max_evidence]],
            )
        )

    videos.sort(key=lambda video: -video.score)
    return videos
