import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status

from resume_enricher.ai.errors import EnrichmentTimeout, UpstreamCallFailed
from resume_enricher.core.applicant_store import (
    ApplicantValidationError,
    save_applicant,
    search_applicants,
)
from resume_enricher.core.encryption import DecryptionError, decrypt_data, encrypt_data
from resume_enricher.core.rate_limit import rate_limit
from resume_enricher.core.security import require_bearer_token
from resume_enricher.schemas.applicant import (
    ApplicantOut,
    EnrichRequest,
    EnrichResponse,
    SearchRequest,
)
from resume_enricher.services.enrich_service import enrich

logger = logging.getLogger(__name__)

router = APIRouter()


def _raise_upstream_http_error(exc: UpstreamCallFailed) -> None:
    status_code = (
        status.HTTP_504_GATEWAY_TIMEOUT
        if isinstance(exc, EnrichmentTimeout)
        else status.HTTP_502_BAD_GATEWAY
    )
    raise HTTPException(
        status_code=status_code,
        detail={
            "error": "Error processing resume with Gemini",
            "details": str(exc),
            "code": exc.code,
        },
    ) from exc


@router.post("/enrich", response_model=EnrichResponse)
@rate_limit()
async def enrich_resume(
    request: Request,
    payload: EnrichRequest,
    _claims: dict[str, Any] = Depends(require_bearer_token),
):
    _ = request
    raw_text = (payload.raw_text or "").strip()
    if not raw_text:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing raw_text in request body",
        )

    try:
        record = await enrich(raw_text)
    except UpstreamCallFailed as exc:
        logger.warning("enrich_upstream_failed code=%s status=%s", exc.code, exc.status_code)
        _raise_upstream_http_error(exc)

    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No data extracted from raw text",
        )

    try:
        save_applicant(record)
    except ApplicantValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Validation Error", "details": str(exc)},
        ) from exc

    return EnrichResponse(message="Applicant data saved successfully")


@router.post("/search", response_model=list[ApplicantOut])
@rate_limit()
async def search_resume(
    request: Request,
    payload: SearchRequest,
    _claims: dict[str, Any] = Depends(require_bearer_token),
):
    _ = request
    if not payload.name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing name in request body",
        )
    try:
        name = decrypt_data(payload.name)
    except DecryptionError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Unable to decrypt name",
        ) from exc

    applicants = search_applicants(str(name))
    if not applicants:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No matching records found",
        )

    return [
        {**applicant, "name": encrypt_data(applicant["name"]), "email": encrypt_data(applicant["email"])}
        for applicant in applicants
    ]
