import os
from dataclasses import dataclass
from typing import Optional

SUPPORTED_PROVIDERS = ("openai",)


@dataclass(frozen=True)
class AIConfig:
    provider: str
    model: str
    judge_model: str
    api_key: str
    base_url: Optional[str]
    max_retries: int

    def model_for(self, *, for_judge: bool) -> str:
        return self.judge_model if for_judge else self.model


def _placeholder(value: str) -> bool:
    lower = value.lower()
    return lower.startswith(("your_", "replace_")) or lower in {"changeme", "todo"}


def load_ai_config() -> AIConfig:
    model = os.getenv("AI_MODEL", "gpt-4o-mini").strip()
    api_key = (os.getenv("OPENAI_API_KEY") or "").strip()
    try:
        max_retries = int(os.getenv("OPENAI_MAX_RETRIES", "2"))
    except ValueError:
        max_retries = 2
    return AIConfig(
        provider=os.getenv("AI_PROVIDER", "openai").strip().lower(),
        model=model,
        judge_model=(os.getenv("AI_JUDGE_MODEL") or model).strip(),
        api_key="" if _placeholder(api_key) else api_key,
        base_url=(os.getenv("OPENAI_BASE_URL") or "").strip() or None,
        max_retries=max(0, max_retries),
    )
