"""
Curation Engine

Turns raw search candidates plus resolved slots into a staged LearningPath
using the reasoning service. The service output is untrusted:

1. It is decoded strictly against CurationOutput; any structural problem
   rejects the whole response.
2. It is merged against the candidate batch: unknown ids and repeated ids
   are dropped, titles and durations come from the candidates, stages and
   videos are renumbered, empty stages are removed and totals recomputed.

Any failure yields None, and the caller shows the raw candidates instead.
"""

import json
import logging
import time
from typing import Optional

from pathfinder.exceptions import CurationOutputError
from pathfinder.models.curation_output import CurationOutput
from pathfinder.models.learning_path import LearningPath, LearningStage, SearchCandidate, VideoAnalysis
from pathfinder.models.messages import Message
from pathfinder.prompts.curation_prompts import build_curation_prompt
from pathfinder.utils.formatting import sum_duration_labels
from pathfinder.utils.schema_utils import decode_model_output, get_strict_schema
from shared.services.llm_service import LLMService, LLMServiceError
from shared.utils.constants import UNKNOWN_TOTAL_TIME

logger = logging.getLogger("pathfinder.curation")

DEFAULT_WHY_RECOMMENDED = "Relevant to your learning goals"


def merge_curation(
    output: CurationOutput,
    candidates: list[SearchCandidate],
    topic: str,
    level: str,
    goal: str,
) -> Optional[LearningPath]:
    """
    Validate decoded service output against the candidate batch.

    Returns None when no video survives.
    """
    by_id = {candidate.id: candidate for candidate in candidates}
    seen: set[str] = set()
    stages: list[LearningStage] = []
    unknown_ids: list[str] = []
    duplicate_ids: list[str] = []
    empty_stages = 0

    for raw_stage in sorted(output.stages, key=lambda stage: stage.stage_number):
        videos: list[VideoAnalysis] = []
        for raw_video in sorted(raw_stage.videos, key=lambda video: video.order):
            candidate = by_id.get(raw_video.video_id)
            if candidate is None:
                unknown_ids.append(raw_video.video_id)
                continue
            if candidate.id in seen:
                duplicate_ids.append(candidate.id)
                continue
            seen.add(candidate.id)

            videos.append(VideoAnalysis(
                video_id=candidate.id,
                title=candidate.title,
                quality_score=raw_video.quality_score,
                difficulty=raw_video.difficulty,
                concepts_covered=raw_video.concepts_covered,
                learning_outcomes=raw_video.learning_outcomes,
                prerequisites=raw_video.prerequisites,
                why_recommended=raw_video.why_recommended or DEFAULT_WHY_RECOMMENDED,
                estimated_time=candidate.duration_label or "Unknown",
                order=len(videos) + 1,
            ))

        if not videos:
            empty_stages += 1
            continue

        stages.append(LearningStage(
            stage_name=raw_stage.stage_name,
            stage_number=len(stages) + 1,
            description=raw_stage.description,
            videos=videos,
        ))

    if unknown_ids or duplicate_ids or empty_stages:
        logger.warning(json.dumps({
            "step": "CURATION_MERGE",
            "unknown_ids": unknown_ids,
            "duplicate_ids": duplicate_ids,
            "empty_stages_dropped": empty_stages,
        }))

    if not stages:
        return None

    matched = [by_id[video.video_id] for stage in stages for video in stage.videos]
    estimated_total_time = (
        sum_duration_labels([candidate.duration_label for candidate in matched])
        or output.estimated_total_time
        or UNKNOWN_TOTAL_TIME
    )

    return LearningPath(
        topic=topic,
        user_level=level,
        user_goal=goal,
        total_videos=len(matched),
        estimated_total_time=estimated_total_time,
        stages=stages,
        completion_goals=output.completion_goals,
        summary=output.summary,
    )


class CurationEngine:
    """Builds learning paths from search candidates. Never raises to the caller."""

    def __init__(self, llm_service: Optional[LLMService]):
        self.llm = llm_service
        self._schema = get_strict_schema(CurationOutput)

    def curate(
        self,
        candidates: list[SearchCandidate],
        topic: str,
        level: str,
        goal: str,
        history: Optional[list[Message]] = None,
    ) -> Optional[LearningPath]:
        """
        Curate candidates into a learning path.

        Returns:
            A LearningPath with at least one non-empty stage, or None when there
            are no candidates, the service is unavailable, its output is invalid,
            or every candidate was excluded
        """
        if not candidates:
            return None

        if self.llm is None:
            logger.warning("Curation skipped: no reasoning service configured")
            return None

        start_time = time.time()
        prompt = build_curation_prompt(candidates, topic, level, goal, history)

        try:
            response = self.llm.call(
                prompt,
                json_mode=True,
                json_schema=self._schema,
                schema_name="CurationOutput",
            )
            output = decode_model_output(response["output_text"], CurationOutput)
        except LLMServiceError as e:
            logger.warning(f"Curation unavailable, falling back to raw results: {e}")
            return None
        except CurationOutputError as e:
            logger.warning(f"Curation output rejected, falling back to raw results: {e.message}")
            return None

        path = merge_curation(output, candidates, topic, level, goal)
        if path is None:
            logger.warning("Curation excluded every candidate, falling back to raw results")
            return None

        logger.info(json.dumps({
            "step": "CURATION",
            "status": "complete",
            "candidates": len(candidates),
            "stages": len(path.stages),
            "total_videos": path.total_videos,
            "duration_ms": int((time.time() - start_time) * 1000),
        }))
        return path
