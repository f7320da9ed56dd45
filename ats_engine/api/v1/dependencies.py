from __future__ import annotations

from ats_engine.ai.factory import get_llm_client
from ats_engine.ai.types import LLMClient


def llm_client() -> LLMClient:
    return get_llm_client()


def judge_client() -> LLMClient:
    return get_llm_client(for_judge=True)
