"""
Parse AI Core - Gemini Developer API Integration.

Uses Gemini Developer API (API key) through the google-genai SDK.

The model configuration is an explicit object built once during application
initialization (ModelConfig.from_settings) and handed to whoever needs it.
Nothing here reads the environment at import time.
"""

import logging
from dataclasses import dataclass
from typing import Any

from parseai.config import Settings, get_settings
from parseai.exceptions import ExternalServiceException, ModelNotConfiguredException

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelConfig:
    """Snapshot of the model credentials and call parameters."""

    api_key: str = ""
    model: str = "gemini-2.5-flash"
    max_output_tokens: int = 4096
    analysis_max_output_tokens: int = 1024

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ModelConfig":
        settings = settings or get_settings()
        return cls(
            api_key=settings.gemini.api_key.strip(),
            model=settings.gemini.model,
            max_output_tokens=settings.gemini.max_output_tokens,
            analysis_max_output_tokens=settings.gemini.analysis_max_output_tokens,
        )


def is_configured(config: ModelConfig) -> bool:
    """True when credentials are present (live mode), False for heuristic mode."""
    return bool(config.api_key)


def create_gemini_client(config: ModelConfig):
    """
    Build a Gemini client from an explicit configuration.

    Raises:
        ModelNotConfiguredException: If no API key is configured
        ExternalServiceException: If the SDK rejects the configuration
    """
    if not is_configured(config):
        raise ModelNotConfiguredException()

    from google import genai

    try:
        client = genai.Client(api_key=config.api_key)
    except Exception as e:
        logger.error(f"Failed to initialize Gemini client: {e}")
        raise ExternalServiceException("Gemini", str(e))

    logger.info(f"Gemini client initialized (model={config.model})")
    return client


def build_contents(history: list[dict[str, str]], user_message: str) -> list[Any]:
    """
    Convert role/content pairs plus the new message into Gemini contents.

    Gemini names the assistant role "model".
    """
    from google.genai import types

    contents = []
    for message in history:
        role = "model" if message["role"] == "assistant" else "user"
        contents.append(
            types.Content(role=role, parts=[types.Part.from_text(text=message["content"])])
        )
    contents.append(types.Content(role="user", parts=[types.Part.from_text(text=user_message)]))
    return contents


def collect_text(response: Any) -> str:
    """Join every text part of the first candidate with newlines."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return getattr(response, "text", None) or ""

    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    texts = [part.text for part in parts if getattr(part, "text", None)]
    return "\n".join(texts)


async def generate_chat(
    client: Any,
    config: ModelConfig,
    system_prompt: str,
    history: list[dict[str, str]],
    user_message: str,
) -> str:
    """
    Run one chat turn against Gemini and return the concatenated text.

    Raises:
        ExternalServiceException: If the API call fails
    """
    from google.genai import types

    try:
        response = await client.aio.models.generate_content(
            model=config.model,
            contents=build_contents(history, user_message),
            config=types.GenerateContentConfig(
                system_instruction=system_prompt,
                max_output_tokens=config.max_output_tokens,
            ),
        )
    except Exception as e:
        logger.error(f"Gemini chat generation failed: {e}")
        raise ExternalServiceException("Gemini", str(e))

    return collect_text(response)


async def generate_text(client: Any, config: ModelConfig, prompt: str) -> str:
    """
    Single-prompt generation used for short document analyses.

    Raises:
        ExternalServiceException: If the API call fails
    """
    from google.genai import types

    try:
        response = await client.aio.models.generate_content(
            model=config.model,
            contents=prompt,
            config=types.GenerateContentConfig(
                max_output_tokens=config.analysis_max_output_tokens,
            ),
        )
    except Exception as e:
        logger.error(f"Gemini generation failed: {e}")
        raise ExternalServiceException("Gemini", str(e))

    return collect_text(response)
