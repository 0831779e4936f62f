from __future__ import annotations  # Re-export llm_gateway public API

from .llm_gateway import (
    ConnectionStatus,
    GenerationResult,
    InvalidResponseError,
    LlmGateway,
    LlmGatewayError,
    ProviderTimeoutError,
    ProviderUnavailableError,
    RateLimitedError,
    SchemaValidationError,
    extract_json,
)
from .providers import GroqGateway, OllamaGateway, build_gateway, gateway_for_route
from .schemas import CamelModel, CategoryScores, GeneratedEvaluation, GeneratedQuestion, GeneratedReport

__all__ = [
    "CamelModel",
    "CategoryScores",
    "ConnectionStatus",
    "GeneratedEvaluation",
    "GeneratedQuestion",
    "GeneratedReport",
    "GenerationResult",
    "GroqGateway",
    "InvalidResponseError",
    "LlmGateway",
    "LlmGatewayError",
    "OllamaGateway",
    "ProviderTimeoutError",
    "ProviderUnavailableError",
    "RateLimitedError",
    "SchemaValidationError",
    "build_gateway",
    "extract_json",
    "gateway_for_route",
]
