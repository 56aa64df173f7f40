"""Unified LLM Router — dual-provider abstraction for OpenAI + Gemini.

Routes LLM calls to OpenAI GPT or Google Gemini based on model prefix:
  - gpt-*    → OpenAI Responses API
  - gemini-* → Google GenAI SDK

Two entry points share one response format:
  - `llm_call()`        text-only prompt (follow-up Q&A)
  - `llm_vision_call()` prompt plus data-URL images (defect classification)
"""

import base64
import logging
import re
import time
from dataclasses import dataclass
from typing import Optional

from corrosionbot.api_keys import api_keys_manager, provider_for_model

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<b64>;base64)?,(?P<data>.*)$", re.DOTALL)


@dataclass
class LLMResult:
    text: str
    input_tokens: int = 0
    output_tokens: int = 0
    duration_s: float = 0.0
    error: Optional[str] = None


def decode_data_url(data_url: str) -> tuple[str, bytes]:
    """Split a `data:<mime>;base64,<payload>` URL into (mime_type, raw bytes).

    Raises:
        ValueError: If the string is not a data URL.
    """
    match = _DATA_URL_RE.match(data_url or "")
    if not match:
        raise ValueError("Image is not a data URL")
    mime_type = match.group("mime") or "image/jpeg"
    payload = match.group("data")
    if match.group("b64"):
        return mime_type, base64.b64decode(payload)
    return mime_type, payload.encode("utf-8")


def _call_gemini(
    model: str,
    system_prompt: Optional[str],
    user_prompt: str,
    images: list[str],
    json_mode: bool,
    temperature: float,
    max_output_tokens: Optional[int],
) -> LLMResult:
    from google import genai
    from google.genai import types

    api_key = api_keys_manager.get_key("gemini")
    if not api_key:
        return LLMResult(text="", error="GEMINI_API_KEY not set")

    client = genai.Client(api_key=api_key)
    t0 = time.time()

    config_kwargs: dict = {}
    if system_prompt:
        config_kwargs["system_instruction"] = system_prompt
    if json_mode:
        config_kwargs["response_mime_type"] = "application/json"
    config_kwargs["temperature"] = temperature
    if max_output_tokens:
        config_kwargs["max_output_tokens"] = max_output_tokens

    try:
        parts = [types.Part.from_text(text=user_prompt)]
        for data_url in images:
            mime_type, data = decode_data_url(data_url)
            parts.append(types.Part.from_bytes(data=data, mime_type=mime_type))

        response = client.models.generate_content(
            model=model,
            contents=[types.Content(role="user", parts=parts)],
            config=types.GenerateContentConfig(**config_kwargs),
        )

        text = response.text or ""
        usage = getattr(response, "usage_metadata", None)
        input_tokens = getattr(usage, "prompt_token_count", 0) if usage else 0
        output_tokens = getattr(usage, "candidates_token_count", 0) if usage else 0

        return LLMResult(
            text=text,
            input_tokens=input_tokens or 0,
            output_tokens=output_tokens or 0,
            duration_s=round(time.time() - t0, 2),
        )
    except Exception as e:
        logger.error(f"Gemini API error ({model}): {e}")
        return LLMResult(
            text="",
            error=str(e),
            duration_s=round(time.time() - t0, 2),
        )


def _call_openai(
    model: str,
    system_prompt: Optional[str],
    user_prompt: str,
    images: list[str],
    json_mode: bool,
    temperature: float,
    max_output_tokens: Optional[int],
) -> LLMResult:
    from openai import OpenAI

    api_key = api_keys_manager.get_key("openai")
    if not api_key:
        return LLMResult(text="", error="OPENAI_API_KEY not set")

    client = OpenAI(api_key=api_key)
    t0 = time.time()

    content: list[dict] = [{"type": "input_text", "text": user_prompt}]
    for data_url in images:
        content.append({"type": "input_image", "image_url": data_url})

    kwargs: dict = {
        "model": model,
        "input": [{"role": "user", "content": content}],
        "temperature": temperature,
    }
    if system_prompt:
        kwargs["instructions"] = system_prompt
    if json_mode:
        kwargs["text"] = {"format": {"type": "json_object"}}
    if max_output_tokens:
        kwargs["max_output_tokens"] = max_output_tokens

    try:
        response = client.responses.create(**kwargs)

        text = response.output_text or ""
        usage = getattr(response, "usage", None)
        input_tokens = getattr(usage, "input_tokens", 0) if usage else 0
        output_tokens = getattr(usage, "output_tokens", 0) if usage else 0

        return LLMResult(
            text=text,
            input_tokens=input_tokens or 0,
            output_tokens=output_tokens or 0,
            duration_s=round(time.time() - t0, 2),
        )
    except Exception as e:
        logger.error(f"OpenAI API error ({model}): {e}")
        return LLMResult(
            text="",
            error=str(e),
            duration_s=round(time.time() - t0, 2),
        )


def _route(model: str, system_prompt, user_prompt, images, json_mode, temperature, max_output_tokens) -> LLMResult:
    if provider_for_model(model) == "openai":
        result = _call_openai(model, system_prompt, user_prompt, images, json_mode, temperature, max_output_tokens)
    else:
        result = _call_gemini(model, system_prompt, user_prompt, images, json_mode, temperature, max_output_tokens)
    logger.info(
        f"LLM call model={model} images={len(images)} "
        f"tokens={result.input_tokens}/{result.output_tokens} in {result.duration_s}s"
    )
    return result


def llm_call(
    model: str,
    user_prompt: str,
    system_prompt: Optional[str] = None,
    json_mode: bool = True,
    temperature: float = 0.0,
    max_output_tokens: Optional[int] = None,
) -> LLMResult:
    """Route a text-only LLM call to the appropriate provider based on model name."""
    return _route(model, system_prompt, user_prompt, [], json_mode, temperature, max_output_tokens)


def llm_vision_call(
    model: str,
    user_prompt: str,
    images: list[str],
    system_prompt: Optional[str] = None,
    json_mode: bool = True,
    temperature: float = 0.0,
    max_output_tokens: Optional[int] = None,
) -> LLMResult:
    """Route a prompt plus data-URL images to the appropriate provider."""
    return _route(model, system_prompt, user_prompt, list(images), json_mode, temperature, max_output_tokens)
