import logging

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi import _rate_limit_exceeded_handler
import sentry_sdk

from resume_enricher.api.v1.health import router as health_router
from resume_enricher.api.v1.auth import router as auth_router
from resume_enricher.api.v1.resume import router as resume_router
from resume_enricher.core.rate_limit import limiter
from resume_enricher.core.config import settings
from resume_enricher.core.lifespan import lifespan

logging.basicConfig(level=settings.log_level, format="%(message)s")
# httpx logs full request URLs at INFO and the Gemini key travels in the query string.
logging.getLogger("httpx").setLevel(logging.WARNING)
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn)

app = FastAPI(title="Resume Enrichment API", version="0.1.0", lifespan=lifespan)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

app.include_router(health_router, prefix="/v1", tags=["Health"])
app.include_router(auth_router, prefix="/api/auth", tags=["Auth"])
app.include_router(resume_router, prefix="/api/resume", tags=["Resume"])
