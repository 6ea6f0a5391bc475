from functools import lru_cache

from fastapi import Depends

from recruitment_hub.core.config import Settings, get_settings
from recruitment_hub.core.rate_limit import RateLimiter
from recruitment_hub.pipeline.orchestrator import BatchOrchestrator
from recruitment_hub.pipeline.state import ScreeningController
from recruitment_hub.services.llm import LLMProvider, build_llm_provider


@lru_cache(maxsize=1)
def get_controller() -> ScreeningController:
    return ScreeningController()


@lru_cache(maxsize=1)
def get_llm_provider() -> LLMProvider:
    return build_llm_provider(get_settings())


@lru_cache(maxsize=1)
def get_rate_limiter() -> RateLimiter:
    return RateLimiter(get_settings())


def get_orchestrator(
    llm_provider: LLMProvider = Depends(get_llm_provider),
    settings: Settings = Depends(get_settings),
) -> BatchOrchestrator:
    return BatchOrchestrator(llm_provider, batch_size=settings.batch_size)
