"""Tests for video-level aggregation."""

import pytest

from app.services.aggregator import aggregate_by_video


class TestAggregateByVideo:
    """Test collapsing chunk hits into video results."""

    def test_max_score_not_sum(self, make_result):
        hits = [
            make_result(1, 10, 0.9),
            make_result(2, 20, 0.5),
            make_result(3, 10, 0.3),
        ]

        videos = aggregate_by_video(hits)

        assert [video.video_id for video in videos] == [10, 20]
        assert videos[0].score == 0.9
        assert videos[0].matched_chunks == 2
        assert videos[1].score == 0.5

    def test_many_weak_chunks_do_not_beat_one_strong(self, make_result):
        hits = [make_result(i, 1, 0.3) for i in range(1, 6)] + [make_result(9, 2, 0.8)]

        videos = aggregate_by_video(hits)

        assert videos[0].video_id == 2

    def test_ties_keep_input_order(self, make_result):
        hits = [make_result(1, 30, 0.7), make_result(2, 10, 0.7), make_result(3, 20, 0.7)]

        videos = aggregate_by_video(hits)

        assert [video.video_id for video in videos] == [30, 10, 20]

    def test_evidence_capped_and_sorted(self, make_result):
        hits = [
            make_result(1, 1, 0.4),
            make_result(2, 1, 0.8),
            make_result(3, 1, 0.6),
            make_result(4, 1, 0.2),
        ]

        video = aggregate_by_video(hits, max_evidence=3)[0]

        assert [chunk.chunk_id for chunk in video.chunks] == [2, 3, 1]
        assert video.best_chunk.chunk_id == 2
        assert video.matched_chunks == 4

    def test_video_metadata_from_hits(self, make_result):
        video = aggregate_by_video([make_result(1, 7, 0.5)])[0]

        assert video.title == "Video 7"
        assert video.best_chunk.content == "chunk 1"

    def test_empty_input(self):
        assert aggregate_by_video([]) == []

    def test_input_not_mutated(self, make_result):
        hits = [make_result(1, 1, 0.2), make_result(2, 1, 0.9)]
        before = [hit.model_dump() for hit in hits]

        aggregate_by_video(hits)

        assert [hit.model_dump() for hit in hits] == before

    @pytest.mark.parametrize("max_evidence", [1, 2])
    def test_max_evidence_parameter(self, make_result, max_evidence):
        hits = [make_result(i, 1, i / 10) for i in range(1, 5)]

        video = aggregate_by_video(hits, max_evidence=max_evidence)[0]

        assert len(video.chunks) == max_evidence
