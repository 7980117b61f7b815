"""
Chat Service

Runs one chat turn end to end:

    load state -> dialogue controller -> (search -> curation) -> save state

Turns of one conversation are serialized through the session store lock.
Search failures leave the stored state untouched so the same answer can be
sent again; curation failures fall back to the raw search results.
"""

import logging
import uuid
from typing import Optional

from pathfinder.exceptions import SearchProviderError
from pathfinder.models.conversation_state import ConversationState, create_conversation
from pathfinder.models.learning_path import LearningPath, SearchCandidate
from pathfinder.models.messages import create_assistant_message
from pathfinder.orchestration.dialogue_controller import DialogueController, TurnDecision
from pathfinder.prompts import dialogue_prompts as prompts
from pathfinder.services.curation_engine import CurationEngine
from pathfinder.services.search_gateway import YouTubeSearchGateway
from pathfinder.services.session_store import SessionStore
from pathfinder.utils.formatting import render_learning_path_text
from shared.models.schemas import ChatMessageResponse, ConversationStateResponse
from shared.repositories.chat_history_repository import ChatHistoryRepository
from shared.utils.exceptions import ConversationNotFoundException

logger = logging.getLogger("pathfinder.chat")


def new_conversation_id() -> str:
    return f"conv_{uuid.uuid4().hex[:12]}"


class ChatService:
    """Caller-facing turn interface."""

    def __init__(
        self,
        store: SessionStore,
        search_gateway: YouTubeSearchGateway,
        curation_engine: CurationEngine,
        controller: Optional[DialogueController] = None,
        history_repo: Optional[ChatHistoryRepository] = None,
        max_results: int = 15,
    ):
        self.store = store
        self.search_gateway = search_gateway
        self.curation_engine = curation_engine
        self.controller = controller or DialogueController()
        self.history_repo = history_repo
        self.max_results = max_results

    def handle_message(
        self,
        conversation_id: Optional[str],
        text: str,
        user_id: Optional[str] = None,
    ) -> ChatMessageResponse:
        """
        Process one utterance.

        Args:
            conversation_id: Existing conversation, or None to start one
            text: What the user typed
            user_id: Signed-in user, if any; enables chat history

        Returns:
            ChatMessageResponse with the reply and, after a search, either a
            learning path or the raw tutorials
        """
        conversation_id = conversation_id or new_conversation_id()

        with self.store.lock(conversation_id):
            state = self.store.get(conversation_id) or create_conversation(conversation_id)
            decision = self.controller.handle_turn(state, text)

            if decision.action == "none":
                return ChatMessageResponse(prompt_text=decision.prompt, conversation_id=conversation_id)

            if not decision.should_search:
                self._save(decision.state, decision.prompt)
                return ChatMessageResponse(prompt_text=decision.prompt, conversation_id=conversation_id)

            return self._search_turn(decision, user_id)

    def get_conversation(self, conversation_id: str) -> ConversationStateResponse:
        """Stored state of a conversation; raises ConversationNotFoundException when missing or expired."""
        state = self.store.get(conversation_id)
        if state is None:
            raise ConversationNotFoundException(conversation_id)

        return ConversationStateResponse(
            conversation_id=state.conversation_id,
            stage=state.stage,
            topic=getattr(state, "topic", None),
            skill_level=getattr(state, "skill_level", None),
            goal=getattr(state, "goal", None),
            history=state.history,
        )

    def reset_conversation(self, conversation_id: str) -> bool:
        with self.store.lock(conversation_id):
            return self.store.delete(conversation_id)

    def _search_turn(self, decision: TurnDecision, user_id: Optional[str]) -> ChatMessageResponse:
        state = decision.state
        query = decision.search_query

        try:
            candidates = self.search_gateway.search(query, self.max_results)
        except SearchProviderError as e:
            logger.warning(f"Search failed for {state.conversation_id}, keeping previous state: {e.message}")
            return ChatMessageResponse(
                prompt_text=f"{decision.prompt}\n\n{prompts.SEARCH_FAILED}",
                conversation_id=state.conversation_id,
            )

        results_state = self.controller.mark_results(state, query, len(candidates))

        if not candidates:
            prompt = f"{decision.prompt}\n\n{prompts.NO_RESULTS.render(topic=state.topic)}"
            self._save(results_state, prompt)
            return ChatMessageResponse(prompt_text=prompt, conversation_id=state.conversation_id)

        path = self.curation_engine.curate(
            candidates, state.topic, state.skill_level, state.goal, history=state.history
        )

        if path is not None:
            prompt = "\n\n".join([
                decision.prompt,
                prompts.PATH_READY.render(topic=state.topic),
                render_learning_path_text(path),
            ])
            response = ChatMessageResponse(
                prompt_text=prompt, conversation_id=state.conversation_id, learning_path=path
            )
        else:
            prompt = f"{decision.prompt}\n\n{prompts.RAW_RESULTS.render(topic=state.topic)}"
            response = ChatMessageResponse(
                prompt_text=prompt, conversation_id=state.conversation_id, tutorials=candidates
            )

        self._save(results_state, prompt)
        if user_id:
            self._record_history(user_id, results_state, query, path, candidates)
        return response

    def _save(self, state: ConversationState, prompt: str) -> None:
        state.add_message(create_assistant_message(prompt))
        self.store.put(state.conversation_id, state)

    def _record_history(
        self,
        user_id: str,
        state: ConversationState,
        query: str,
        path: Optional[LearningPath],
        candidates: list[SearchCandidate],
    ) -> None:
        """Best effort; a failure here never fails the turn."""
        if self.history_repo is None:
            return

        payload = {
            "topic": state.topic,
            "level": state.skill_level,
            "goal": state.goal,
            "query": query,
            "result_count": len(candidates),
            "learning_path": {
                "total_videos": path.total_videos,
                "stages": len(path.stages),
                "summary": path.summary,
            } if path else None,
        }
        try:
            self.history_repo.add(user_id, state.conversation_id, payload)
        except Exception as e:
            logger.error(f"Failed to save chat history for user {user_id}: {e}")
