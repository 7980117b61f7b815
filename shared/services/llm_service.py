"""
LLM Service: centralized interface for reasoning-service calls.

Routes calls to the configured provider (Google Gemini or OpenAI). Every call
is a single bounded attempt: a chat turn waits on it, so failures are surfaced
immediately and the caller falls back instead of retrying.
"""

import json
import time
from typing import Dict, Any, Optional
from openai import OpenAI, OpenAIError
from google import genai
from google.genai import types
import logging

logger = logging.getLogger(__name__)


class LLMService:
    """
    Service for making LLM API calls with structured logging and error wrapping.

    Both `provider` and `model_id` are required; they come from Settings.
    """

    def __init__(
        self,
        api_key: str,
        *,
        provider: str,
        model_id: str,
        timeout: int = 60,
        temperature: float = 0.4,
    ):
        if not api_key:
            raise LLMServiceError(f"API key for provider '{provider}' not configured")

        self.provider = provider
        self.model_id = model_id
        self.timeout = timeout
        self.temperature = temperature

        if provider == "google":
            # HttpOptions.timeout is in milliseconds
            self.client = genai.Client(
                api_key=api_key, http_options=types.HttpOptions(timeout=timeout * 1000)
            )
        elif provider == "openai":
            self.client = OpenAI(api_key=api_key, timeout=timeout)
        else:
            raise LLMServiceError(f"Unsupported LLM provider: {provider}")

    # ─── Primary entry point ───────────────────────────────────────────

    def call(
        self,
        prompt: str,
        json_mode: bool = True,
        json_schema: Optional[Dict[str, Any]] = None,
        schema_name: str = "response",
    ) -> Dict[str, Any]:
        """
        Generic LLM call. Routes to the configured provider.

        Always returns: {output_text: str, reasoning: str|None}
        """
        if self.provider == "google":
            text = self._call_gemini(prompt, json_mode=json_mode)
        else:
            text = self._call_chat_completions(
                prompt, json_mode=json_mode, json_schema=json_schema, schema_name=schema_name
            )
        return {"output_text": text or "", "reasoning": None}

    # ─── OpenAI Chat Completions API ──────────────────────────────────

    def _call_chat_completions(
        self,
        prompt: str,
        max_tokens: int = 4096,
        json_mode: bool = True,
        json_schema: Optional[Dict[str, Any]] = None,
        schema_name: str = "response",
    ) -> str:
        """Call OpenAI Chat Completions API. Returns raw text."""
        logger.info(json.dumps({
            "step": "LLM_CALL",
            "status": "starting",
            "model": self.model_id,
            "params": {
                "json_mode": json_mode,
                "has_schema": json_schema is not None,
                "schema_name": schema_name if json_schema else None,
            }
        }))

        def _api_call():
            kwargs = {
                "model": self.model_id,
                "messages": [{"role": "user", "content": prompt}],
                "max_completion_tokens": max_tokens,
                "temperature": self.temperature,
                "timeout": self.timeout,
            }
            if json_schema:
                kwargs["response_format"] = {
                    "type": "json_schema",
                    "json_schema": {"name": schema_name, "schema": json_schema, "strict": True},
                }
            elif json_mode:
                kwargs["response_format"] = {"type": "json_object"}
            response = self.client.chat.completions.create(**kwargs)
            return response.choices[0].message.content

        return self._execute(_api_call, self.model_id)

    # ─── Gemini ───────────────────────────────────────────────────────

    def _call_gemini(self, prompt: str, json_mode: bool = True) -> str:
        """Call Google Gemini. Returns raw text."""
        logger.info(json.dumps({
            "step": "LLM_CALL",
            "status": "starting",
            "model": self.model_id,
            "params": {"temperature": self.temperature, "json_mode": json_mode}
        }))

        def _api_call():
            config = {"temperature": self.temperature}
            if json_mode:
                config["response_mime_type"] = "application/json"
            response = self.client.models.generate_content(
                model=self.model_id, contents=prompt, config=config
            )
            return response.text

        return self._execute(_api_call, f"Gemini-{self.model_id}")

    # ─── Helpers ──────────────────────────────────────────────────────

    def _execute(self, api_call_fn, model_name: str) -> Any:
        """Execute a single API call, logging its outcome."""
        start_time = time.time()
        try:
            result = api_call_fn()
        except OpenAIError as e:
            self._log_failure(model_name, e, start_time)
            raise LLMServiceError(f"{model_name} API error: {str(e)}") from e
        except Exception as e:
            self._log_failure(model_name, e, start_time)
            raise LLMServiceError(f"{model_name} unexpected error: {str(e)}") from e

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(json.dumps({
            "step": "LLM_CALL",
            "status": "complete",
            "model": model_name,
            "output": {"response_length": len(str(result)) if result else 0},
            "duration_ms": duration_ms,
        }))
        return result

    @staticmethod
    def _log_failure(model_name: str, error: Exception, start_time: float) -> None:
        logger.error(json.dumps({
            "step": "LLM_CALL",
            "status": "failed",
            "model": model_name,
            "error": str(error),
            "duration_ms": int((time.time() - start_time) * 1000),
        }))


class LLMServiceError(Exception):
    """Custom exception for LLM service errors"""
    pass


def build_llm_service(settings) -> Optional[LLMService]:
    """Create the LLM service from settings, or None when no key is configured."""
    if not settings.llm_api_key:
        logger.warning(f"No API key for LLM provider '{settings.llm_provider}'; curation disabled")
        return None
    return LLMService(
        settings.llm_api_key,
        provider=settings.llm_provider,
        model_id=settings.llm_model,
        timeout=settings.llm_timeout_seconds,
    )
