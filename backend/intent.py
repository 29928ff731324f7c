"""
Language model boundary.

One request per user submission, no retries. Failures come back as
ServiceError values rather than exceptions so the caller can show the
message and let the user try again.
"""
import json
import logging
from datetime import date
from typing import Any, Optional, Union

import anthropic

from config import config
from models import ApplyView, CaptureTask, CaptureTaskBatch, IntentRequest, ScreenName, ServiceError
from normalizer import normalize
from prompts import SYSTEM_PROMPT

logger = logging.getLogger(__name__)

PLACEHOLDER_API_KEYS = {"your-api-key-here"}

_client: Optional[anthropic.AsyncAnthropic] = None


def get_client() -> anthropic.AsyncAnthropic:
    global _client
    if _client is None:
        _client = anthropic.AsyncAnthropic(api_key=config["anthropic_api_key"])
    return _client


def api_key_configured() -> bool:
    api_key = config["anthropic_api_key"]
    return bool(api_key) and api_key not in PLACEHOLDER_API_KEYS


def strip_code_fence(text: str) -> str:
    """Remove a surrounding ```json ... ``` block if the model added one."""
    text = text.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        lines = lines[1:]  # Remove first line (```json)
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]  # Remove last line (```)
        text = "\n".join(lines)
    return text


def decode_response_text(text: Optional[str]) -> Any:
    """Parsed JSON value of the model reply, or a ServiceError."""
    if not text or not text.strip():
        return ServiceError(
            kind="unavailable",
            message="The language model returned an empty response. Please try again.",
        )
    try:
        return json.loads(strip_code_fence(text))
    except (ValueError, RecursionError):
        # ValueError covers JSONDecodeError and oversized integer literals
        logger.warning("Failed to parse model reply as JSON: %r", text)
        return ServiceError(
            kind="malformed",
            message="AI returned invalid response format. Please try again.",
        )


def _api_error_message(error: anthropic.APIError) -> str:
    if isinstance(error, anthropic.AuthenticationError):
        return "Language model authentication failed. Check that ANTHROPIC_API_KEY is valid."
    if isinstance(error, anthropic.RateLimitError):
        return "Language model rate limit reached. Please wait a moment and try again."
    if isinstance(error, anthropic.APIConnectionError):
        return "Could not reach the language model service. Please try again."
    return f"API error: {error}"


async def request_intent(
    request: IntentRequest,
    client: Optional[anthropic.AsyncAnthropic] = None,
    today: Optional[date] = None,
) -> Any:
    """Ask the model to interpret free text; returns its parsed JSON or a ServiceError."""
    if client is None:
        if not api_key_configured():
            return ServiceError(kind="unavailable", message="API key not configured")
        client = get_client()

    today = today or date.today()
    screen = request.view_context or ScreenName.MASTER
    system_prompt = SYSTEM_PROMPT.format(today=today.isoformat(), view_context=screen.value)

    try:
        response = await client.messages.create(
            model=config["model"],
            max_tokens=config["max_tokens"],
            temperature=config["temperature"],
            system=system_prompt,
            messages=[{"role": "user", "content": request.free_text}],
        )
    except anthropic.APIError as e:
        logger.error("Language model request failed: %s", e)
        return ServiceError(kind="unavailable", message=_api_error_message(e))

    ai_text = "".join(getattr(block, "text", "") for block in (response.content or []))
    logger.debug("Model response: %s", ai_text)
    return decode_response_text(ai_text)


async def interpret(
    request: IntentRequest,
    client: Optional[anthropic.AsyncAnthropic] = None,
    today: Optional[date] = None,
) -> Union[CaptureTask, CaptureTaskBatch, ApplyView, ServiceError]:
    """Free text to command: one model request, then normalization."""
    raw = await request_intent(request, client, today)
    if isinstance(raw, ServiceError):
        return raw
    return normalize(raw, request.free_text, request.view_context, today)
