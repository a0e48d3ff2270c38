import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Any

import httpx


logger = logging.getLogger(__name__)

_TRANSIENT_STATUSES = {408, 429, 500, 502, 503, 504}


class AIClientError(RuntimeError):
    pass


class AIClientTimeout(AIClientError):
    pass


class AIClientHTTPError(AIClientError):
    def __init__(self, *, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class GeminiMeta:
    model: str
    latency_ms: int
    status_code: int | None
    retries: int


def _safe_truncate(s: str, n: int = 800) -> str:
    s = s or ""
    if len(s) <= n:
        return s
    return s[:n] + "…"


def _first_candidate_text(data: dict[str, Any]) -> str:
    # { candidates: [ { content: { parts: [ { text: "..." } ] } } ], ... }
    return (
        (data.get("candidates") or [{}])[0]
        .get("content", {})
        .get("parts", [{}])[0]
        .get("text", "")
    )


async def gemini_generate_content(
    *,
    api_key: str,
    base_url: str,
    api_version: str = "v1",
    model: str,
    user_text: str,
    system_text: str | None = None,
    temperature: float = 0.4,
    timeout_s: float = 20.0,
    max_retries: int = 0,
    log_payloads: bool = False,
) -> tuple[str, GeminiMeta]:
    """
    Calls the Gemini Generative Language API (API key auth) and returns the model text.

    Endpoint:
      POST {base_url}/{api_version}/models/{model}:generateContent
    Auth:
      x-goog-api-key: {api_key}
    """
    if not api_key:
        raise AIClientError("Missing GEMINI_API_KEY")
    if not model:
        raise AIClientError("Missing GEMINI_MODEL")
    api_v = (api_version or "v1").strip().lstrip("/")
    base = (base_url or "").rstrip("/")
    model_path = model.strip()
    if model_path.startswith("models/"):
        model_path = model_path[len("models/") :]
    url = f"{base}/{api_v}/models/{model_path}:generateContent"

    # The system prompt is inlined; some API versions reject systemInstruction.
    effective_user = user_text or ""
    if system_text:
        effective_user = f"{system_text.strip()}\n\n{effective_user}"
    body = {
        "contents": [{"role": "user", "parts": [{"text": effective_user}]}],
        "generationConfig": {"temperature": float(temperature)},
    }
    headers = {
        "x-goog-api-key": api_key,
        "content-type": "application/json",
    }

    start = time.perf_counter()
    for attempt in range(max_retries + 1):
        try:
            async with httpx.AsyncClient(timeout=timeout_s) as client:
                if log_payloads:
                    logger.info(
                        "Gemini request model=%s url=%s body=%s",
                        model,
                        url,
                        _safe_truncate(json.dumps(body, ensure_ascii=False)),
                    )
                r = await client.post(url, json=body, headers=headers)
        except (httpx.ReadTimeout, httpx.ConnectTimeout, httpx.PoolTimeout):
            if attempt < max_retries:
                await asyncio.sleep(0.5 * (2**attempt))
                continue
            raise AIClientTimeout("Gemini request timed out") from None
        except httpx.RequestError as e:
            if attempt < max_retries:
                await asyncio.sleep(0.5 * (2**attempt))
                continue
            raise AIClientError(f"Gemini request failed: {type(e).__name__}") from e

        if r.status_code >= 400:
            if r.status_code in _TRANSIENT_STATUSES and attempt < max_retries:
                backoff = 0.5 * (2**attempt)
                logger.warning("Gemini HTTP %s; retrying in %.1fs", r.status_code, backoff)
                await asyncio.sleep(backoff)
                continue
            raise AIClientHTTPError(status_code=r.status_code, message=_safe_truncate(r.text, 1000))

        meta = GeminiMeta(
            model=model,
            latency_ms=int((time.perf_counter() - start) * 1000),
            status_code=r.status_code,
            retries=attempt,
        )
        logger.info(
            "Gemini ok model=%s status=%s latency_ms=%s retries=%s",
            meta.model,
            meta.status_code,
            meta.latency_ms,
            meta.retries,
        )
        return (_first_candidate_text(r.json() or {}) or "").strip(), meta

    raise AIClientError("Gemini request failed")
