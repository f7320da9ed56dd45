import logging

from ats_engine.ai.config import SUPPORTED_PROVIDERS, load_ai_config
from ats_engine.ai.providers.openai_provider import OpenAIProvider
from ats_engine.ai.types import LLMClient
from ats_engine.core.config import settings
from ats_engine.core.errors import LLMError

logger = logging.getLogger(__name__)


def llm_configured() -> bool:
    if not settings.llm_enabled:
        return False
    cfg = load_ai_config()
    return cfg.provider in SUPPORTED_PROVIDERS and bool(cfg.api_key)


def get_llm_client(*, for_judge: bool = False) -> LLMClient:
    if not settings.llm_enabled:
        raise LLMError("Language model is disabled.", code="LLM_DISABLED")

    cfg = load_ai_config()
    if cfg.provider not in SUPPORTED_PROVIDERS:
        raise LLMError(f"Unsupported AI_PROVIDER='{cfg.provider}'", code="LLM_DISABLED")
    if not cfg.api_key:
        raise LLMError("OPENAI_API_KEY is missing", code="LLM_DISABLED")

    model = cfg.model_for(for_judge=for_judge)
    logger.debug("llm_client_created provider=%s model=%s judge=%s", cfg.provider, model, for_judge)
    return OpenAIProvider(
        model=model,
        api_key=cfg.api_key,
        base_url=cfg.base_url,
        max_retries=cfg.max_retries,
    )
