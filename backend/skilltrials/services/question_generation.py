import json
import logging
import re
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..config import (
    AI_LOG_PAYLOADS,
    AI_MAX_RETRIES,
    AI_TIMEOUT_S,
    GEMINI_API_KEY,
    GEMINI_API_VERSION,
    GEMINI_BASE_URL,
    GEMINI_MODEL,
)
from ..models.job import Job
from ..schemas.ai_question import GeneratedQuestion
from ..utils.error_handlers import AIServiceError, get_error_message
from .ai_client import AIClientError, gemini_generate_content
from .ai_prompts import question_generation_system_prompt, question_generation_user_prompt


logger = logging.getLogger(__name__)

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")


def extract_first_json_object(text: str) -> dict:
    """
    Pull the first JSON object out of a model reply, tolerating code fences
    and surrounding prose.
    """
    raw = _FENCE_RE.sub("", (text or "").strip())
    if not raw:
        raise ValueError("Empty AI response")

    try:
        obj = json.loads(raw)
        if isinstance(obj, dict):
            return obj
    except json.JSONDecodeError:
        pass

    m = _JSON_OBJECT_RE.search(raw)
    if not m:
        raise ValueError("No JSON object found in AI response")
    obj = json.loads(m.group(0))
    if not isinstance(obj, dict):
        raise ValueError("AI response JSON is not an object")
    return obj


def parse_generated_questions(payload: dict) -> tuple[list[GeneratedQuestion], list[str]]:
    """Validate each question on its own; malformed ones are dropped with a warning."""
    questions: list[GeneratedQuestion] = []
    warnings: list[str] = []
    for idx, item in enumerate(payload.get("questions") or []):
        try:
            questions.append(GeneratedQuestion.model_validate(item))
        except PydanticValidationError as e:
            warnings.append(f"question {idx + 1} dropped: {e.errors()[0].get('msg', 'invalid')}")
    return questions, warnings


async def generate_questions(*, job: Job, count: int, difficulty: str | None) -> dict[str, Any]:
    """
    Ask Gemini for `count` multiple-choice questions for a job. Nothing is
    persisted; the company reviews and saves them through POST /question.
    """
    if not GEMINI_API_KEY:
        raise AIServiceError(get_error_message("ai_unavailable"), status_code=503)

    try:
        raw_text, meta = await gemini_generate_content(
            api_key=GEMINI_API_KEY,
            base_url=GEMINI_BASE_URL,
            api_version=GEMINI_API_VERSION,
            model=GEMINI_MODEL,
            user_text=question_generation_user_prompt(
                job_title=job.title,
                job_description=job.description or "",
                count=count,
                difficulty=difficulty,
            ),
            system_text=question_generation_system_prompt(),
            timeout_s=AI_TIMEOUT_S,
            max_retries=AI_MAX_RETRIES,
            log_payloads=AI_LOG_PAYLOADS,
        )
    except AIClientError as e:
        logger.error("Question generation failed for job %s: %s", job.id, e)
        raise AIServiceError(get_error_message("ai_failed"), status_code=502) from e

    try:
        payload = extract_first_json_object(raw_text)
    except ValueError as e:
        logger.error("Unparseable AI reply for job %s: %s", job.id, e)
        raise AIServiceError(get_error_message("ai_failed"), status_code=502) from e

    questions, warnings = parse_generated_questions(payload)
    if not questions:
        raise AIServiceError(get_error_message("ai_failed"), status_code=502)

    return {
        "questions": [q.model_dump() for q in questions[:count]],
        "warnings": warnings,
        "model": meta.model,
        "latency_ms": meta.latency_ms,
    }
