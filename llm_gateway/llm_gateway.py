from __future__ import annotations  # LLM request gateway module

import abc
import asyncio
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from config import LlmRoute

from .schemas import GeneratedEvaluation, GeneratedQuestion, GeneratedReport


logger = logging.getLogger(__name__)  # Module logger setup

QUESTION_TEMPERATURE = 0.8
EVALUATION_TEMPERATURE = 0.6
REPORT_TEMPERATURE = 0.7
DEFAULT_OPTIONS: Dict[str, float] = {"temperature": 0.7, "top_p": 0.9}

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_TRAILING_OBJ_RE = re.compile(r",\s*}")
_TRAILING_ARR_RE = re.compile(r",\s*]")


class LlmGatewayError(RuntimeError):  # Base gateway error
    pass


class ProviderUnavailableError(LlmGatewayError):  # Provider refused the connection
    pass


class ProviderTimeoutError(LlmGatewayError):  # Provider did not answer in time
    pass


class RateLimitedError(LlmGatewayError):  # Provider throttled the request
    pass


class InvalidResponseError(LlmGatewayError):  # Output could not be recovered as JSON
    pass


class SchemaValidationError(LlmGatewayError):  # JSON parsed but had the wrong shape
    def __init__(self, message: str, problems: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.problems = list(problems or [])


@dataclass
class GenerationResult:  # Parsed provider output
    data: Dict[str, Any]
    raw: str
    success: bool = True


@dataclass
class ConnectionStatus:  # Discovery probe outcome
    connected: bool
    model: str
    available: bool
    error: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "connected": self.connected,
            "model": self.model,
            "available": self.available,
        }
        if self.error:
            payload["error"] = self.error
        return payload


T = TypeVar("T", bound=BaseModel)


def extract_json(text: Optional[str]) -> Dict[str, Any]:
    """Recover a JSON object from raw model text.

    Tries, in order: the whole text, the contents of a markdown fence, the
    outermost ``{...}`` span, and that span with control characters and
    trailing commas removed.
    """

    if not text or not text.strip():
        raise InvalidResponseError("Empty response from provider")

    parsed = _loads_object(text)
    if parsed is not None:
        return parsed

    fence = _FENCE_RE.search(text)
    if fence:
        parsed = _loads_object(fence.group(1).strip())
        if parsed is not None:
            return parsed

    span = _OBJECT_RE.search(text)
    if span:
        candidate = span.group(0)
        parsed = _loads_object(candidate)
        if parsed is not None:
            return parsed
        cleaned = _CONTROL_RE.sub("", candidate)
        cleaned = _TRAILING_OBJ_RE.sub("}", cleaned)
        cleaned = _TRAILING_ARR_RE.sub("]", cleaned)
        parsed = _loads_object(cleaned)
        if parsed is not None:
            return parsed
        logger.error("Failed to parse extracted JSON: %s", _truncate(candidate, 500))
        raise InvalidResponseError("Invalid JSON in provider response")

    logger.error("No valid JSON found in response: %s", _truncate(text, 500))
    raise InvalidResponseError("No JSON found in provider response")


class LlmGateway(abc.ABC):
    """Shared retry, recovery and validation logic over one provider route.

    Subclasses only know how to send a prompt and how to list models.
    """

    def __init__(
        self,
        route: LlmRoute,
        *,
        client: Optional[httpx.AsyncClient] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.route = route
        self._client = client
        self._sleep = sleep

    @property
    def model(self) -> str:
        return self.route.model

    @property
    def provider(self) -> str:
        return self.route.provider

    @abc.abstractmethod
    async def _complete(self, prompt: str, options: Dict[str, Any]) -> str:
        """Send ``prompt`` and return the raw generated text."""

    @abc.abstractmethod
    async def _list_models(self) -> List[str]:
        """Return model identifiers advertised by the provider."""

    def _model_listed(self, names: List[str]) -> bool:
        return self.route.model in names

    async def test_connection(self) -> ConnectionStatus:
        try:
            names = await self._list_models()
        except Exception as exc:  # noqa: BLE001
            logger.error("%s connection test failed: %s", self.provider, exc)
            return ConnectionStatus(connected=False, model=self.model, available=False, error=str(exc))
        return ConnectionStatus(connected=True, model=self.model, available=self._model_listed(names))

    async def generate(self, prompt: str, options: Optional[Dict[str, Any]] = None) -> GenerationResult:
        merged = dict(DEFAULT_OPTIONS)
        if options:
            merged.update(options)
        attempts = self.route.max_retries + 1
        preview = _truncate(_preview(prompt), 120)
        logger.info(
            "LLM request start route=%s attempts=%d preview=%s",
            self.route.name,
            attempts,
            preview,
        )
        attempt = 0
        throttled = 0
        while True:
            attempt += 1
            logger.info("LLM request send route=%s attempt=%d/%d", self.route.name, attempt, attempts)
            try:
                raw = await self._complete(prompt, merged)
            except RateLimitedError:
                throttled += 1
                if throttled > self.route.rate_limit_retries:
                    logger.error("LLM rate limit persisted after %d retries", throttled - 1)
                    raise
                delay = self.route.backoff_s * throttled
                logger.warning("LLM rate limited, retrying in %.1fs", delay)
                attempt -= 1
                await self._sleep(delay)
                continue
            try:
                data = extract_json(raw)
            except InvalidResponseError as exc:
                if attempt < attempts:
                    logger.warning("JSON parse failed on attempt %d, retrying: %s", attempt, exc)
                    continue
                logger.error("LLM output unusable after %d attempts", attempt)
                raise
            logger.info("LLM request done route=%s attempt=%d", self.route.name, attempt)
            return GenerationResult(data=data, raw=raw)

    async def generate_question(self, prompt: str) -> GeneratedQuestion:
        result = await self.generate(prompt, {"temperature": QUESTION_TEMPERATURE})
        return _validate(GeneratedQuestion, result.data, "question")

    async def evaluate_answer(self, prompt: str) -> GeneratedEvaluation:
        result = await self.generate(prompt, {"temperature": EVALUATION_TEMPERATURE})
        return _validate(GeneratedEvaluation, result.data, "evaluation")

    async def generate_report(self, prompt: str) -> GeneratedReport:
        result = await self.generate(prompt, {"temperature": REPORT_TEMPERATURE})
        return _validate(GeneratedReport, result.data, "report")

    async def _post(self, url: str, payload: Dict[str, Any], headers: Dict[str, str]) -> httpx.Response:
        return await self._send("POST", url, json=payload, headers=headers, timeout=self.route.timeout_s)

    async def _get(self, url: str, headers: Optional[Dict[str, str]] = None) -> httpx.Response:
        return await self._send("GET", url, headers=headers or {}, timeout=self.route.discovery_timeout_s)

    async def _send(self, method: str, url: str, *, timeout: float, **kwargs: Any) -> httpx.Response:
        try:
            if self._client is not None:
                response = await self._client.request(method, url, timeout=timeout, **kwargs)
            else:
                async with httpx.AsyncClient(timeout=timeout) as client:
                    response = await client.request(method, url, **kwargs)
        except httpx.ConnectError as exc:
            logger.error("LLM transport failure: %s", exc)
            raise ProviderUnavailableError(
                f"Cannot connect to {self.provider}. Make sure the provider is running."
            ) from exc
        except httpx.TimeoutException as exc:
            logger.error("LLM request timed out after %.0fs", timeout)
            raise ProviderTimeoutError(
                f"{self.provider} request timed out. The model might be too slow."
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("LLM transport failure: %s", exc)
            raise LlmGatewayError(f"{self.provider} transport failed: {exc}") from exc
        if response.status_code == 429:
            raise RateLimitedError(f"{self.provider} rate limit exceeded")
        if response.status_code >= 400:
            logger.error("LLM error status: %s", response.status_code)
            raise LlmGatewayError(f"{self.provider} returned status {response.status_code}")
        return response


def _validate(schema: Type[T], data: Dict[str, Any], label: str) -> T:  # Check the parsed object against a schema
    try:
        return schema.model_validate(data)
    except ValidationError as exc:
        problems = [
            f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
            for err in exc.errors()
        ]
        logger.error("Invalid %s format from provider: %s", label, "; ".join(problems))
        raise SchemaValidationError(
            f"Invalid {label} format from provider: {'; '.join(problems)}",
            problems,
        ) from exc


def _response_json(response: httpx.Response) -> Any:  # Decode provider envelope
    try:
        return response.json()
    except json.JSONDecodeError as exc:
        logger.error("Invalid JSON payload from provider: %s", exc)
        raise LlmGatewayError("Provider payload was not JSON") from exc


def _loads_object(text: str) -> Optional[Dict[str, Any]]:
    try:
        value = json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return None
    return value if isinstance(value, dict) else None


def _preview(prompt: str) -> str:  # First non-empty line for logging
    for line in prompt.splitlines():
        if line.strip():
            return line.strip()
    return ""


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."
