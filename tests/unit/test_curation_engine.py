"""
Tests for pathfinder/services/curation_engine.py

The reasoning service is mocked; its output is treated as untrusted and
every test checks what survives the merge against the candidate batch.
"""

import json
import random
from unittest.mock import MagicMock

import pytest

from pathfinder.models.curation_output import CurationOutput
from pathfinder.models.messages import create_user_message
from pathfinder.services.curation_engine import CurationEngine, merge_curation
from shared.services.llm_service import LLMServiceError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _video(video_id: str, order: int = 1, **overrides) -> dict:
    video = {
        "video_id": video_id,
        "order": order,
        "quality_score": 8,
        "difficulty": "beginner",
        "concepts_covered": ["basics"],
        "learning_outcomes": ["You'll learn the basics"],
        "prerequisites": [],
        "why_recommended": "Clear explanations",
    }
    video.update(overrides)
    return video


def _stage(number: int, video_ids, name: str = None) -> dict:
    return {
        "stage_name": name or f"Stage {number}",
        "stage_number": number,
        "description": f"Stage {number} description",
        "videos": [_video(video_id, order) for order, video_id in enumerate(video_ids, start=1)],
    }


def _output(*stages, **overrides) -> dict:
    output = {
        "summary": "A path from zero to a first project.",
        "estimated_total_time": "about 2 hours",
        "completion_goals": ["Build a small app"],
        "stages": list(stages),
    }
    output.update(overrides)
    return output


def _make_engine(response_text: str):
    llm = MagicMock()
    llm.call.return_value = {"output_text": response_text, "reasoning": None}
    return CurationEngine(llm), llm


def _ids(path) -> list:
    return [video.video_id for stage in path.stages for video in stage.videos]


# ===========================================================================
# curate
# ===========================================================================

class TestCurate:

    def test_unknown_ids_are_dropped(self, sample_candidates):
        raw = _output(
            _stage(1, ["vid0", "vid1", "vid2", "made-up-1", "made-up-2"]),
            _stage(2, ["vid3", "vid4", "vid5", "vid6", "made-up-3"]),
        )
        engine, _ = _make_engine(json.dumps(raw))

        path = engine.curate(sample_candidates, "python", "beginner", "project")

        assert path is not None
        assert path.total_videos == 7
        assert _ids(path) == ["vid0", "vid1", "vid2", "vid3", "vid4", "vid5", "vid6"]
        assert path.topic == "python"
        assert path.user_level == "beginner"
        assert path.user_goal == "project"

    def test_malformed_output_returns_none(self, sample_candidates):
        engine, _ = _make_engine("{not valid json")
        assert engine.curate(sample_candidates, "python", "beginner", "project") is None

    def test_no_json_returns_none(self, sample_candidates):
        engine, _ = _make_engine("Sorry, I can't help with that.")
        assert engine.curate(sample_candidates, "python", "beginner", "project") is None

    def test_schema_violation_rejects_whole_output(self, sample_candidates):
        raw = _output(_stage(1, ["vid0"]))
        raw["stages"][0]["videos"][0]["quality_score"] = 15
        engine, _ = _make_engine(json.dumps(raw))

        assert engine.curate(sample_candidates, "python", "beginner", "project") is None

    def test_every_id_unknown_returns_none(self, sample_candidates):
        engine, _ = _make_engine(json.dumps(_output(_stage(1, ["x", "y"]))))
        assert engine.curate(sample_candidates, "python", "beginner", "project") is None

    def test_code_fenced_output_accepted(self, sample_candidates):
        text = "```json\n" + json.dumps(_output(_stage(1, ["vid0", "vid1"]))) + "\n```"
        engine, _ = _make_engine(text)

        path = engine.curate(sample_candidates, "python", "beginner", "project")
        assert _ids(path) == ["vid0", "vid1"]

    def test_no_candidates_skips_service(self):
        engine, llm = _make_engine("{}")
        assert engine.curate([], "python", "beginner", "project") is None
        llm.call.assert_not_called()

    def test_no_service_configured(self, sample_candidates):
        assert CurationEngine(None).curate(sample_candidates, "python", "beginner", "project") is None

    def test_service_error_returns_none(self, sample_candidates):
        llm = MagicMock()
        llm.call.side_effect = LLMServiceError("timeout")

        assert CurationEngine(llm).curate(sample_candidates, "python", "beginner", "project") is None
        assert llm.call.call_count == 1

    def test_prompt_and_schema_sent(self, sample_candidates):
        engine, llm = _make_engine(json.dumps(_output(_stage(1, ["vid0"]))))
        history = [create_user_message("python for a beginner please")]

        engine.curate(sample_candidates, "python", "beginner", "project", history=history)

        args, kwargs = llm.call.call_args
        prompt = args[0]
        assert "Topic: python" in prompt
        assert "[ID: vid9]" in prompt
        assert "python for a beginner please" in prompt
        assert kwargs["json_mode"] is True
        assert kwargs["schema_name"] == "CurationOutput"
        assert kwargs["json_schema"]["additionalProperties"] is False


# ===========================================================================
# merge_curation
# ===========================================================================

class TestMergeCuration:

    def _merge(self, raw: dict, candidates):
        return merge_curation(CurationOutput.model_validate(raw), candidates, "python", "beginner", "project")

    def test_duplicates_keep_first_occurrence(self, sample_candidates):
        path = self._merge(_output(_stage(1, ["vid0", "vid1"]), _stage(2, ["vid1", "vid2"])), sample_candidates)

        assert _ids(path) == ["vid0", "vid1", "vid2"]
        assert [v.video_id for v in path.stages[1].videos] == ["vid2"]

    def test_empty_stages_dropped_and_renumbered(self, sample_candidates):
        path = self._merge(
            _output(_stage(1, ["vid0"]), _stage(2, ["ghost"]), _stage(3, ["vid1"], name="Projects")),
            sample_candidates,
        )

        assert [s.stage_number for s in path.stages] == [1, 2]
        assert path.stages[1].stage_name == "Projects"

    def test_stages_and_videos_sorted_then_renumbered(self, sample_candidates):
        first = _stage(2, [])
        first["videos"] = [_video("vid3", order=5), _video("vid2", order=2)]
        second = _stage(1, ["vid0"])

        path = self._merge(_output(first, second), sample_candidates)

        assert _ids(path) == ["vid0", "vid2", "vid3"]
        assert [v.order for v in path.stages[1].videos] == [1, 2]

    def test_title_and_duration_come_from_candidates(self, sample_candidates):
        raw = _output(_stage(1, ["vid0"]))
        raw["stages"][0]["videos"][0]["title"] = "Invented title"
        raw["stages"][0]["videos"][0]["estimated_time"] = "3 hours"

        video = self._merge(raw, sample_candidates).stages[0].videos[0]

        assert video.title == "Video vid0"
        assert video.estimated_time == "10:00"

    def test_missing_reason_gets_default(self, sample_candidates):
        raw = _output(_stage(1, ["vid0"]))
        raw["stages"][0]["videos"][0]["why_recommended"] = ""

        video = self._merge(raw, sample_candidates).stages[0].videos[0]
        assert video.why_recommended == "Relevant to your learning goals"

    def test_total_time_summed_from_candidates(self, sample_candidates):
        path = self._merge(_output(_stage(1, [f"vid{i}" for i in range(7)])), sample_candidates)
        assert path.estimated_total_time == "1 hour 10 minutes"

    def test_unknown_duration_falls_back_to_service_estimate(self, candidate_factory):
        candidates = [candidate_factory("a"), candidate_factory("b", duration=None)]
        path = self._merge(_output(_stage(1, ["a", "b"])), candidates)
        assert path.estimated_total_time == "about 2 hours"

    def test_unknown_duration_without_estimate(self, candidate_factory):
        candidates = [candidate_factory("a", duration=None)]
        path = self._merge(_output(_stage(1, ["a"]), estimated_total_time=None), candidates)
        assert path.estimated_total_time == "Unknown"
        assert path.stages[0].videos[0].estimated_time == "Unknown"

    def test_random_outputs_only_reference_candidates(self, sample_candidates):
        rng = random.Random(7)
        known = [c.id for c in sample_candidates]
        pool = known + ["fake-1", "fake-2", "fake-3"]

        for _ in range(50):
            stages = [
                _stage(number, [rng.choice(pool) for _ in range(rng.randint(0, 6))])
                for number in range(1, rng.randint(2, 5))
            ]
            path = self._merge(_output(*stages), sample_candidates)
            if path is None:
                continue

            ids = _ids(path)
            assert set(ids) <= set(known)
            assert len(ids) == len(set(ids))
            assert path.total_videos == len(ids)
            assert all(stage.videos for stage in path.stages)
            assert [s.stage_number for s in path.stages] == list(range(1, len(path.stages) + 1))
