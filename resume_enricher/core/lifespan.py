from contextlib import asynccontextmanager
import logging

from resume_enricher.ai.factory import close_ai_client
from resume_enricher.core.applicant_store import init_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    init_store()
    logger.info("applicant_store_ready")
    try:
        yield
    finally:
        await close_ai_client()
