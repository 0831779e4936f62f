"""Concrete provider gateways and the configuration-driven factory."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from config import LlmRoute, Settings, route_from_settings

from .llm_gateway import LlmGateway, LlmGatewayError, _response_json

logger = logging.getLogger(__name__)

JSON_SYSTEM_PROMPT = "You are an interview assistant. Reply with a single valid JSON object and nothing else."


class OllamaGateway(LlmGateway):
    """Local Ollama server using the native ``/api/generate`` endpoint."""

    async def _complete(self, prompt: str, options: Dict[str, Any]) -> str:
        payload = {
            "model": self.route.model,
            "prompt": prompt,
            "stream": False,
            "format": "json",
            "options": options,
        }
        response = await self._post(f"{self.route.base_url}/api/generate", payload, self._headers())
        data = _response_json(response)
        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str):
            raise LlmGatewayError("ollama response missing content")
        return text

    async def _list_models(self) -> List[str]:
        response = await self._get(f"{self.route.base_url}/api/tags")
        data = _response_json(response)
        models = data.get("models") if isinstance(data, dict) else None
        return [str(item.get("name", "")) for item in models or [] if isinstance(item, dict)]

    def _model_listed(self, names: List[str]) -> bool:
        # Tags come back as "llama3.2:3b", "llama3.2:latest", ... so match on the family.
        family = self.route.model.split(":")[0]
        return any(family in name for name in names)

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        headers.update(self.route.extra_headers)
        return headers


class GroqGateway(LlmGateway):
    """Hosted OpenAI-compatible chat completions (Groq)."""

    async def _complete(self, prompt: str, options: Dict[str, Any]) -> str:
        payload: Dict[str, Any] = {
            "model": self.route.model,
            "messages": [
                {"role": "system", "content": JSON_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "response_format": {"type": "json_object"},
        }
        for key in ("temperature", "top_p"):
            if key in options:
                payload[key] = options[key]
        response = await self._post(f"{self.route.base_url}/chat/completions", payload, self._headers())
        return _chat_content(_response_json(response))

    async def _list_models(self) -> List[str]:
        response = await self._get(f"{self.route.base_url}/models", self._headers())
        data = _response_json(response)
        models = data.get("data") if isinstance(data, dict) else None
        return [str(item.get("id", "")) for item in models or [] if isinstance(item, dict)]

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.route.api_key:
            headers["Authorization"] = f"Bearer {self.route.api_key}"
        headers.update(self.route.extra_headers)
        return headers


def _chat_content(data: Any) -> str:  # Extract message content from a chat completion
    if isinstance(data, dict):
        choices = data.get("choices")
        if isinstance(choices, list) and choices:
            message = choices[0].get("message") if isinstance(choices[0], dict) else None
            content = message.get("content") if isinstance(message, dict) else None
            if isinstance(content, str):
                return content
    raise LlmGatewayError("groq response missing content")


_GATEWAYS = {"ollama": OllamaGateway, "groq": GroqGateway}


def gateway_for_route(route: LlmRoute, *, client: Optional[httpx.AsyncClient] = None) -> LlmGateway:
    return _GATEWAYS[route.provider](route, client=client)


def build_gateway(cfg: Settings, *, client: Optional[httpx.AsyncClient] = None) -> LlmGateway:
    """Return the gateway selected by configuration (Groq when a key is set)."""

    route = route_from_settings(cfg)
    logger.info("LLM provider selected: %s", route.name)
    return gateway_for_route(route, client=client)


__all__ = ["GroqGateway", "OllamaGateway", "build_gateway", "gateway_for_route"]
