from functools import lru_cache

from resume_enricher.ai.types import AIClient

from resume_enricher.ai.providers.gemini_provider import GeminiProvider


@lru_cache(maxsize=1)
def get_ai_client() -> AIClient:
    return GeminiProvider()


async def close_ai_client() -> None:
    if get_ai_client.cache_info().currsize == 0:
        return
    client = get_ai_client()
    get_ai_client.cache_clear()
    await client.aclose()
