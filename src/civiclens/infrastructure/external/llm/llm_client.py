"""
LLM client.
Single entry point for every model call made by CivicLens: image analysis,
fingerprinting, location naming and analytics answers.
Primary model and optional fallback are read from settings.
"""
import json
from typing import Any, Dict, List, Optional

import litellm

from civiclens.common.config.settings import settings
from civiclens.common.exceptions.workflow_errors import LLMUnavailableError
from civiclens.common.logging.logger import log_info, log_warning, log_error

litellm.suppress_debug_info = True


def image_message(photo_data_uri: str, prompt: str) -> List[Dict[str, Any]]:
    """Build a single user message carrying one image plus its instruction."""
    return [{
        "role": "user",
        "content": [
            {"type": "image_url", "image_url": {"url": photo_data_uri}},
            {"type": "text", "text": prompt},
        ],
    }]


def parse_json_reply(text: Optional[str]) -> Dict[str, Any]:
    """
    Decode a JSON object reply, tolerating a markdown code fence around it.

    Raises:
        ValueError: If the reply is empty or not a JSON object.
    """
    if not text or not text.strip():
        raise ValueError("Empty model reply")
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.strip("`")
        if cleaned.lower().startswith("json"):
            cleaned = cleaned[4:]
    data = json.loads(cleaned)
    if not isinstance(data, dict):
        raise ValueError("Model reply is not a JSON object")
    return data


class LLMClient:
    def __init__(self, primary_model: Optional[str] = None, fallback_model: Optional[str] = None,
                 timeout: Optional[int] = None):
        self.primary_model = primary_model or settings.LLM_PRIMARY_MODEL
        self.fallback_model = fallback_model if fallback_model is not None else settings.LLM_FALLBACK_MODEL
        self.timeout = timeout or settings.LLM_TIMEOUT

    def _models(self) -> List[str]:
        return [m for m in (self.primary_model, self.fallback_model) if m]

    async def complete(self, messages: List[Dict[str, Any]], temperature: Optional[float] = None,
                       json_mode: bool = False, max_tokens: int = 1024) -> str:
        """
        Call the primary model, falling back to the secondary one on any error.
        Returns the reply text.

        Raises:
            LLMUnavailableError: If every configured model fails.
        """
        kwargs: Dict[str, Any] = {
            "messages": messages,
            "temperature": settings.LLM_TEMPERATURE if temperature is None else temperature,
            "max_tokens": max_tokens,
            "timeout": self.timeout,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        last_error: Optional[Exception] = None
        for model in self._models():
            try:
                response = await litellm.acompletion(model=model, **kwargs)
                content = response.choices[0].message.content or ""
                log_info("LLM call succeeded", extra={"model": model, "chars": len(content)})
                return content
            except litellm.RateLimitError as e:
                log_warning("LLM rate limit hit", extra={"model": model})
                last_error = e
            except litellm.AuthenticationError as e:
                log_warning("LLM authentication error", extra={"model": model})
                last_error = e
            except Exception as e:
                log_warning("LLM call failed", extra={"model": model, "error": f"{type(e).__name__}: {e}"})
                last_error = e

        log_error("All LLM providers failed", extra={"models": self._models(), "error": str(last_error)})
        raise LLMUnavailableError(f"All LLM providers failed. Last error: {last_error}")

    async def complete_json(self, messages: List[Dict[str, Any]], **kwargs) -> Dict[str, Any]:
        """
        Like `complete` but decodes a JSON object reply.

        Raises:
            LLMUnavailableError: If every configured model fails.
            ValueError: If the reply is not a JSON object.
        """
        text = await self.complete(messages, json_mode=True, **kwargs)
        return parse_json_reply(text)


llm_client = LLMClient()


def get_llm_client() -> LLMClient:
    return llm_client
