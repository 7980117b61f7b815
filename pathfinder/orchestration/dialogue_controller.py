"""
Dialogue Controller

State machine that turns one utterance plus the current conversation state
into the next state and either a clarifying question or a search signal.

Stages: greeting -> got_topic -> got_level -> ready_to_search -> results.
Slots are asked for one at a time in the order topic, skill level, goal.
Every question is re-asked at most once before a default is applied.
"""

import logging
from typing import Literal, Optional
from pydantic import BaseModel, Field

from pathfinder.exceptions import StateTransitionError
from pathfinder.models.conversation_state import (
    ConversationState,
    GotLevelState,
    GotTopicState,
    GreetingState,
    ReadyToSearchState,
    ResultsState,
)
from pathfinder.models.learning_path import LearningGoal, SkillLevel
from pathfinder.models.messages import create_user_message
from pathfinder.prompts import dialogue_prompts as prompts
from pathfinder.services.intent_extractor import (
    IntentSignals,
    clean_free_text,
    extract_intent,
    extract_known_subject,
    is_unclear,
    significant_tokens,
)
from pathfinder.utils.text_utils import has_content, sanitize_input
from shared.utils.constants import (
    DEFAULT_GOAL,
    DEFAULT_SKILL_LEVEL,
    GOAL_QUERY_MODIFIERS,
    LEVEL_QUERY_MODIFIERS,
    MAX_REPROMPTS,
    NEW_TOPIC_MIN_TOKEN_LENGTH,
    NEW_TOPIC_MIN_TOKENS,
)

logger = logging.getLogger("pathfinder.dialogue")


class TurnDecision(BaseModel):
    """Outcome of one turn."""
    state: ConversationState
    prompt: str = Field(description="Reply text for the user")
    action: Literal["ask", "search", "none"] = Field(
        description="ask: a question was asked; search: run search_query; none: state unchanged"
    )
    search_query: Optional[str] = None

    @property
    def should_search(self) -> bool:
        return self.action == "search"


def build_search_query(
    topic: str,
    skill_level: SkillLevel,
    goal: LearningGoal,
    refinement: Optional[str] = None,
) -> str:
    """Deterministic query from resolved slots."""
    parts = [topic]
    if refinement:
        parts.append(refinement)
    parts.append("tutorial")
    parts.append(LEVEL_QUERY_MODIFIERS[skill_level])
    parts.append(GOAL_QUERY_MODIFIERS[goal])
    return " ".join(parts)


def is_new_topic(stored_topic: str, signals: IntentSignals) -> bool:
    """
    Decide whether an utterance after results starts an unrelated topic.

    Follow-up words always keep the current topic. Otherwise the utterance
    must share no significant word with the stored topic and either carry
    enough significant words of its own or name a different known subject.
    """
    if signals.follow_up:
        return False

    stored = significant_tokens(stored_topic, NEW_TOPIC_MIN_TOKEN_LENGTH)
    incoming = significant_tokens(signals.text, NEW_TOPIC_MIN_TOKEN_LENGTH)
    if stored & incoming:
        return False

    if len(incoming) >= NEW_TOPIC_MIN_TOKENS:
        return True

    known = extract_known_subject(signals.text)
    if known is None or known == stored_topic:
        return False
    return not (significant_tokens(known, 1) & significant_tokens(stored_topic, 1))


class DialogueController:
    """Pure state machine; no I/O. The caller stores state and runs searches."""

    def __init__(self, max_message_length: int = 2000):
        self.max_message_length = max_message_length

    def handle_turn(self, state: ConversationState, utterance: str) -> TurnDecision:
        text = sanitize_input(utterance)
        if not self._is_usable(state, text):
            logger.info(f"Ignoring unusable input for {state.conversation_id} ({len(text)} chars)")
            return TurnDecision(state=state, prompt=prompts.NEUTRAL_REPROMPT, action="none")

        signals = extract_intent(text)

        if signals.reset and state.stage != "greeting":
            logger.info(f"Conversation {state.conversation_id} reset from {state.stage}")
            new_state = self._advance(GreetingState, state, text)
            return TurnDecision(state=new_state, prompt=prompts.RESTART, action="ask")

        if isinstance(state, GreetingState):
            return self._on_greeting(state, signals)
        if isinstance(state, GotTopicState):
            return self._on_got_topic(state, signals)
        if isinstance(state, GotLevelState):
            return self._on_got_level(state, signals)
        return self._on_results(state, signals)

    def mark_results(self, state: ConversationState, query: str, candidate_count: int) -> ResultsState:
        """Record a completed search. Only valid once every slot is resolved."""
        if not isinstance(state, (ReadyToSearchState, ResultsState)):
            raise StateTransitionError(state.stage, "results", "slots are not resolved")

        return ResultsState(
            **state.carry(),
            topic=state.topic,
            skill_level=state.skill_level,
            goal=state.goal,
            refinement=state.refinement,
            last_query=query,
            candidate_count=candidate_count,
        )

    # ─── Stage handlers ───────────────────────────────────────────────

    def _on_greeting(self, state: GreetingState, signals: IntentSignals) -> TurnDecision:
        if signals.reset and (state.skill_level or state.goal):
            new_state = self._advance(GreetingState, state, signals.text)
            return TurnDecision(state=new_state, prompt=prompts.RESTART, action="ask")

        if signals.greeting or signals.reset:
            return TurnDecision(state=state, prompt=prompts.WELCOME, action="none")

        level = signals.skill_level or state.skill_level
        goal = signals.goal or state.goal

        # A hedge only names a topic when it mentions a known subject.
        topic = extract_known_subject(signals.text) if signals.unclear else signals.topic

        if topic is None:
            if not signals.has_slot:
                return TurnDecision(state=state, prompt=prompts.NEUTRAL_REPROMPT, action="none")
            # Level or goal before any topic: hold it and ask for the topic.
            new_state = self._advance(GreetingState, state, signals.text, skill_level=level, goal=goal)
            return TurnDecision(state=new_state, prompt=prompts.ASK_TOPIC, action="ask")

        return self._after_topic(
            state, signals, topic, prompts.ASK_LEVEL.render(topic=topic), level=level, goal=goal,
        )

    def _on_got_topic(self, state: GotTopicState, signals: IntentSignals) -> TurnDecision:
        goal = signals.goal or state.goal

        if signals.skill_level:
            return self._after_level(state, signals, state.topic, signals.skill_level, goal)

        if signals.unclear or state.reprompts >= MAX_REPROMPTS:
            logger.info(f"Defaulting skill level to {DEFAULT_SKILL_LEVEL} for {state.conversation_id}")
            return self._after_level(state, signals, state.topic, DEFAULT_SKILL_LEVEL, goal)

        new_state = self._advance(
            GotTopicState, state, signals.text,
            topic=state.topic, goal=goal, reprompts=state.reprompts + 1,
        )
        return TurnDecision(
            state=new_state, prompt=prompts.ASK_LEVEL_AGAIN.render(topic=state.topic), action="ask"
        )

    def _on_got_level(self, state: GotLevelState, signals: IntentSignals) -> TurnDecision:
        level = signals.skill_level or state.skill_level

        if signals.goal:
            return self._ready(state, signals, state.topic, level, signals.goal)

        if signals.unclear or state.reprompts >= MAX_REPROMPTS:
            logger.info(f"Defaulting goal to {DEFAULT_GOAL} for {state.conversation_id}")
            return self._ready(state, signals, state.topic, level, DEFAULT_GOAL)

        new_state = self._advance(
            GotLevelState, state, signals.text,
            topic=state.topic, skill_level=level, reprompts=state.reprompts + 1,
        )
        prompt = prompts.ASK_GOAL.render(level=level) if signals.skill_level else prompts.ASK_GOAL_AGAIN.render()
        return TurnDecision(state=new_state, prompt=prompt, action="ask")

    def _on_results(self, state, signals: IntentSignals) -> TurnDecision:
        if is_new_topic(state.topic, signals):
            topic = signals.topic or clean_free_text(signals.text) or signals.text.lower()
            logger.info(f"New topic '{topic}' replaces '{state.topic}' in {state.conversation_id}")
            return self._after_topic(state, signals, topic, prompts.NEW_TOPIC.render(topic=topic))

        level = signals.skill_level or state.skill_level
        goal = signals.goal or state.goal

        if signals.has_slot or signals.unclear:
            return self._ready(state, signals, state.topic, level, goal, state.refinement)

        refinement = self._refinement(signals.text, state.topic) or state.refinement
        return self._ready(
            state, signals, state.topic, level, goal, refinement,
            prompt=prompts.REFINING.render(topic=state.topic),
        )

    # ─── Transitions ──────────────────────────────────────────────────

    def _after_topic(
        self,
        state,
        signals: IntentSignals,
        topic: str,
        ask_prompt: str,
        level: Optional[SkillLevel] = None,
        goal: Optional[LearningGoal] = None,
    ) -> TurnDecision:
        """Topic just resolved; take level and goal from the same utterance if present."""
        level = level or signals.skill_level
        goal = goal or signals.goal
        if level:
            return self._after_level(state, signals, topic, level, goal)

        new_state = self._advance(GotTopicState, state, signals.text, topic=topic, goal=goal)
        return TurnDecision(state=new_state, prompt=ask_prompt, action="ask")

    def _after_level(
        self,
        state,
        signals: IntentSignals,
        topic: str,
        level: SkillLevel,
        goal: Optional[LearningGoal],
    ) -> TurnDecision:
        if goal:
            return self._ready(state, signals, topic, level, goal)

        new_state = self._advance(GotLevelState, state, signals.text, topic=topic, skill_level=level)
        return TurnDecision(state=new_state, prompt=prompts.ASK_GOAL.render(level=level), action="ask")

    def _ready(
        self,
        state,
        signals: IntentSignals,
        topic: str,
        level: SkillLevel,
        goal: LearningGoal,
        refinement: Optional[str] = None,
        prompt: Optional[str] = None,
    ) -> TurnDecision:
        new_state = self._advance(
            ReadyToSearchState, state, signals.text,
            topic=topic, skill_level=level, goal=goal, refinement=refinement,
        )
        return TurnDecision(
            state=new_state,
            prompt=prompt or prompts.SEARCHING.render(level=level, topic=topic),
            action="search",
            search_query=build_search_query(topic, level, goal, refinement),
        )

    def _is_usable(self, state: ConversationState, text: str) -> bool:
        if not text or len(text) > self.max_message_length:
            return False
        if has_content(text):
            return True
        # A bare "?" still answers a pending level or goal question.
        return isinstance(state, (GotTopicState, GotLevelState)) and is_unclear(text)

    @staticmethod
    def _advance(state_cls, state: ConversationState, text: str, **slots):
        new_state = state_cls(**state.carry(), **slots)
        new_state.add_message(create_user_message(text))
        return new_state

    @staticmethod
    def _refinement(text: str, topic: str) -> Optional[str]:
        remainder = clean_free_text(text, extra_phrases=(topic,))
        return remainder if len(remainder) >= 3 else None
