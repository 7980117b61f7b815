"""
Curation Prompts

Request sent to the reasoning service to turn raw search candidates into a
staged learning path.
"""

from typing import Optional

from pathfinder.models.learning_path import SearchCandidate
from pathfinder.models.messages import Message
from pathfinder.prompts.templates import PromptTemplate
from shared.utils.constants import (
    CURATION_DESCRIPTION_MAX_CHARS,
    CURATION_HISTORY_MESSAGES,
    CURATION_MAX_STAGES,
    CURATION_MAX_VIDEOS,
    CURATION_MIN_STAGES,
    CURATION_MIN_VIDEOS,
)


CURATION_PROMPT = PromptTemplate(
    """You are an expert educational curator. Analyze these YouTube tutorial videos and create a structured learning path.

USER CONTEXT:
- Topic: {topic}
- Current Level: {level}
- Learning Goal: {goal}
{conversation}
VIDEOS TO ANALYZE:
{videos}

TASK: Create a personalized learning curriculum. Return ONLY valid JSON in this exact format:

{{
  "summary": "Brief 1-2 sentence description of this learning path",
  "estimated_total_time": "X hours Y minutes",
  "completion_goals": [
    "What the learner will be able to do after completing",
    "Another skill they'll gain"
  ],
  "stages": [
    {{
      "stage_name": "Foundations",
      "stage_number": 1,
      "description": "Brief description of this stage",
      "videos": [
        {{
          "video_id": "abc123",
          "order": 1,
          "quality_score": 7,
          "difficulty": "beginner",
          "concepts_covered": ["concept1", "concept2"],
          "learning_outcomes": ["You'll learn X", "You'll understand Y"],
          "prerequisites": [],
          "why_recommended": "Clear explanations at a good pace for beginners"
        }}
      ]
    }}
  ]
}}

RULES:
1. Only use video_id values from the list above, exactly as written
2. Only include videos that are actually educational and relevant to the topic
3. Exclude spam, unrelated or low-quality videos entirely
4. Order videos from easiest to hardest within each stage
5. Group into {min_stages}-{max_stages} stages, e.g. Foundations, Core Skills, and optionally Advanced or Projects
6. Each video should build on concepts from previous videos
7. Be honest about quality_score (1-10): not every video deserves a 9 or 10
8. difficulty must be one of: beginner, intermediate, advanced
9. Include {min_videos}-{max_videos} videos in total (quality over quantity); never list a video twice

Return ONLY the JSON, no markdown code blocks or explanations.""",
    name="curation",
    defaults={
        "min_stages": CURATION_MIN_STAGES,
        "max_stages": CURATION_MAX_STAGES,
        "min_videos": CURATION_MIN_VIDEOS,
        "max_videos": CURATION_MAX_VIDEOS,
    },
)


def format_candidates(candidates: list[SearchCandidate]) -> str:
    """One numbered block per candidate, descriptions truncated."""
    blocks = []
    for index, candidate in enumerate(candidates, start=1):
        description = candidate.description[:CURATION_DESCRIPTION_MAX_CHARS]
        if len(candidate.description) > CURATION_DESCRIPTION_MAX_CHARS:
            description += "..."
        blocks.append(
            f'{index}. [ID: {candidate.id}] "{candidate.title}" by {candidate.channel_label or "Unknown channel"}'
            f" | {candidate.duration_label or 'Unknown'} | {candidate.view_count_label or 'Unknown views'}\n"
            f"   Description: {description}"
        )
    return "\n\n".join(blocks)


def format_conversation(history: Optional[list[Message]]) -> str:
    """Recent conversation as extra context, or an empty string."""
    if not history:
        return ""
    recent = history[-CURATION_HISTORY_MESSAGES:]
    lines = [f"- {message.role}: {message.content}" for message in recent]
    return "\nRECENT CONVERSATION:\n" + "\n".join(lines) + "\n"


def build_curation_prompt(
    candidates: list[SearchCandidate],
    topic: str,
    level: str,
    goal: str,
    history: Optional[list[Message]] = None,
) -> str:
    return CURATION_PROMPT.render(
        topic=topic,
        level=level,
        goal=goal,
        conversation=format_conversation(history),
        videos=format_candidates(candidates),
    )
