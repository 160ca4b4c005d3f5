from __future__ import annotations

import asyncio
import logging
import time

from pydantic import ValidationError

from resume_enricher.ai.errors import EnrichmentTimeout
from resume_enricher.ai.factory import get_ai_client
from resume_enricher.ai.prompt import build_extraction_prompt
from resume_enricher.ai.types import AIClient
from resume_enricher.core.config import settings
from resume_enricher.schemas.applicant import ExtractedResume
from resume_enricher.services.json_recovery import recover

logger = logging.getLogger(__name__)


def to_extracted_resume(value: object) -> ExtractedResume | None:
    """Map a recovered JSON value onto the record shape; ``None`` means no data."""
    if not isinstance(value, dict) or not value:
        return None
    try:
        return ExtractedResume.model_validate(value)
    except ValidationError as exc:
        logger.warning("enrich_record_invalid errors=%s", exc.error_count())
        return None


async def _generate(client: AIClient, raw_text: str) -> str:
    return await client.generate(build_extraction_prompt(raw_text))


async def enrich(
    raw_text: str,
    *,
    client: AIClient | None = None,
    timeout_s: float | None = None,
) -> ExtractedResume | None:
    """Extract a structured record from resume text.

    Raises ``UpstreamCallFailed`` (or a subclass) when the model endpoint
    cannot be reached or answers with an unusable envelope. Malformed model
    output never raises; it yields ``None``.
    """
    started = time.perf_counter()
    ai_client = client or get_ai_client()
    deadline = settings.enrich_timeout_s if timeout_s is None else timeout_s

    try:
        if deadline and deadline > 0:
            text = await asyncio.wait_for(_generate(ai_client, raw_text), timeout=deadline)
        else:
            text = await _generate(ai_client, raw_text)
    except asyncio.TimeoutError as exc:
        logger.warning("enrich_timeout timeout_s=%s", deadline)
        raise EnrichmentTimeout(f"Resume enrichment timed out after {deadline}s") from exc

    record = to_extracted_resume(recover(text))
    logger.info(
        "enrich_done input_len=%s output_len=%s extracted=%s latency_ms=%s",
        len(raw_text),
        len(text),
        record is not None,
        int((time.perf_counter() - started) * 1000),
    )
    return record
