import json
import os
from typing import Any, Dict, List, Optional, Sequence

import httpx

from .constants import MAX_ERROR_CHARS


DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o"
DEFAULT_TIMEOUT_SECONDS = 60.0


def truncate(text: str, max_chars: int = MAX_ERROR_CHARS) -> str:
    value = (text or "").strip()
    if len(value) <= max_chars:
        return value
    return value[: max_chars - 3] + "..."


def get_api_key() -> str:
    api_key = os.getenv("OPENAI_API_KEY", "").strip()
    if not api_key:
        raise RuntimeError(
            "OpenAI API key is not configured. Please set OPENAI_API_KEY environment variable."
        )
    return api_key


def base_url() -> str:
    return os.getenv("OPENAI_BASE_URL", DEFAULT_BASE_URL).strip() or DEFAULT_BASE_URL


def timeout_seconds() -> float:
    return float(os.getenv("PITCHY_LLM_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS)))


def _model_name() -> str:
    return os.getenv("PITCHY_CHAT_MODEL", DEFAULT_MODEL).strip() or DEFAULT_MODEL


def _auth_headers() -> Dict[str, str]:
    return {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {get_api_key()}",
    }


def _extract_content(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, list):
        parts: List[str] = []
        for item in value:
            if isinstance(item, dict):
                text = item.get("text")
                if text:
                    parts.append(str(text))
        return "\n".join(parts).strip()
    return str(value or "").strip()


def _error_detail(response: httpx.Response) -> str:
    try:
        error_payload = response.json()
    except ValueError:
        return response.text or ""
    if isinstance(error_payload, dict):
        error = error_payload.get("error")
        if isinstance(error, dict):
            return str(error.get("message") or "")
        if error:
            return str(error)
    return ""


def request_chat_completion(
    messages: Sequence[Dict[str, str]],
    *,
    temperature: float = 0.3,
    max_tokens: int = 500,
    presence_penalty: Optional[float] = None,
    frequency_penalty: Optional[float] = None,
) -> str:
    payload: Dict[str, Any] = {
        "model": _model_name(),
        "messages": [{"role": message["role"], "content": message["content"]} for message in messages],
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    if presence_penalty is not None:
        payload["presence_penalty"] = presence_penalty
    if frequency_penalty is not None:
        payload["frequency_penalty"] = frequency_penalty

    headers = _auth_headers()
    timeout = timeout_seconds()
    endpoint = base_url().rstrip("/") + "/chat/completions"

    try:
        response = httpx.post(endpoint, headers=headers, json=payload, timeout=timeout)
    except httpx.TimeoutException as exc:
        raise RuntimeError(f"Chat completion timed out after {int(timeout)} seconds.") from exc
    except httpx.HTTPError as exc:
        raise RuntimeError(f"Failed to call chat completion API: {exc}") from exc

    if response.status_code >= 400:
        detail = truncate(_error_detail(response) or "Unknown provider error")
        raise RuntimeError(f"Chat completion error {response.status_code}: {detail}")

    try:
        body = response.json()
    except json.JSONDecodeError as exc:
        raise RuntimeError("Chat completion API returned a non-JSON HTTP response.") from exc

    choices = body.get("choices") if isinstance(body, dict) else None
    if not choices:
        raise RuntimeError("Chat completion response did not contain choices.")

    first_choice = choices[0] if isinstance(choices, list) else None
    message = first_choice.get("message") if isinstance(first_choice, dict) else None
    content = _extract_content(message.get("content") if isinstance(message, dict) else "")
    if not content:
        raise RuntimeError("No response content received from the chat completion API.")
    return content
