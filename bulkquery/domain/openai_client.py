import importlib
import importlib.util
import logging
import os
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


def get_openai_client():
    """
    Return an OpenAI client, or None when the package is missing or no API key
    is configured. Callers treat None as "no model available" and fall back to
    their local behavior.
    """
    if importlib.util.find_spec("openai") is None:
        logger.warning("OpenAI: openai package not installed; using local fallbacks")
        return None
    if not os.getenv("OPENAI_API_KEY"):
        logger.info("OpenAI: OPENAI_API_KEY is not set; using local fallbacks")
        return None
    openai_mod = importlib.import_module("openai")
    return openai_mod.OpenAI()


def complete(
    client: Any,
    model: str,
    messages: List[Dict[str, str]],
    *,
    json_mode: bool = False,
    temperature: float = 0.2,
) -> str:
    """Run one chat completion and return the first choice's text."""
    kwargs: Dict[str, Any] = {
        "model": model,
        "messages": messages,
        "temperature": temperature,
    }
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}
    resp = client.chat.completions.create(**kwargs)
    logger.info("OpenAI: received response with %d choice(s) (model=%s)", len(resp.choices), model)
    content: Optional[str] = resp.choices[0].message.content if resp.choices else None
    return content or ""
