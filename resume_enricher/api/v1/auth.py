from fastapi import APIRouter, HTTPException, Request, status

from resume_enricher.core.rate_limit import rate_limit
from resume_enricher.core.security import create_access_token, credentials_match
from resume_enricher.schemas.applicant import LoginRequest, LoginResponse

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
@rate_limit()
async def login(request: Request, payload: LoginRequest):
    _ = request
    if not payload.username or not payload.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing username or password",
        )
    if not credentials_match(payload.username, payload.password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )
    return LoginResponse(JWT=create_access_token(payload.username))
