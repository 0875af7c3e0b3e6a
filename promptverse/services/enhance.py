from __future__ import annotations

import logging
from typing import Callable, Optional

from promptverse.app.config import settings
from promptverse.services.errors import EnhancementError
from promptverse.services.gemini_client import GeminiClient

logger = logging.getLogger(__name__)

ART_DIRECTOR_INSTRUCTION = """You are an expert AI Art Director. Your goal is to take simple user ideas and expand them into highly detailed, professional image generation prompts suitable for models like Midjourney v6 or Stable Diffusion XL.
Focus on:
1. Lighting (e.g., volumetric, cinematic, studio).
2. Style (e.g., cyberpunk, oil painting, unreal engine 5 render).
3. Camera details (e.g., 85mm lens, f/1.8, bokeh).
4. Composition.

Return ONLY the prompt text. No "Here is the prompt" prefixes. Keep it under 150 words."""


def _default_client() -> GeminiClient:
    api_key = settings.GEMINI_API_KEY.get_secret_value() if settings.GEMINI_API_KEY else ""
    return GeminiClient(api_key=api_key, model_name=settings.GEMINI_MODEL)


def enhance_prompt(
    base_idea: str,
    client_factory: Optional[Callable[[], GeminiClient]] = None,
) -> str:
    """Expand a short idea into a full image prompt; one error type for any failure."""
    idea = (base_idea or "").strip()
    if not idea:
        raise ValueError("Idea cannot be empty.")

    factory = client_factory or _default_client
    try:
        client = factory()
        text = client.generate_content(
            f'Enhance this idea into a full image prompt: "{idea}"',
            ART_DIRECTOR_INSTRUCTION,
            temperature=0.7,
        )
    except EnhancementError:
        raise
    except Exception as exc:
        logger.exception("enhance.failed")
        raise EnhancementError("Could not enhance the prompt right now.") from exc

    return (text or "").strip() or base_idea
