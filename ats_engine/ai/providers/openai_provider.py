from __future__ import annotations

import json
from typing import Any, Optional, Sequence

from openai import AsyncOpenAI

from ats_engine.ai.types import ChatMessage
from ats_engine.core.errors import LLMError


class OpenAIProvider:
    def __init__(
        self,
        model: str,
        api_key: str,
        base_url: Optional[str] = None,
        max_retries: int = 2,
    ):
        self.model = model
        key = (api_key or "").strip()
        if not key:
            raise LLMError("OPENAI_API_KEY is missing", code="LLM_DISABLED")

        # No client-side timeout here; the pipeline guard owns the deadline.
        self._client = AsyncOpenAI(
            api_key=key,
            base_url=base_url,
            max_retries=max_retries,
        )

    async def complete_json(
        self,
        messages: Sequence[ChatMessage],
        *,
        temperature: float = 0.2,
        max_tokens: int = 1500,
    ) -> dict[str, Any]:
        payload = [{"role": m.role, "content": m.content} for m in messages]
        response = await self._client.chat.completions.create(
            model=self.model,
            messages=payload,
            temperature=temperature,
            response_format={"type": "json_object"},
            max_tokens=max_tokens,
        )
        content = response.choices[0].message.content if response.choices else ""
        if not content:
            raise LLMError("Language model returned an empty response.", code="LLM_EMPTY_RESPONSE")
        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as exc:
            raise LLMError("Language model returned invalid JSON.", code="LLM_INVALID_RESPONSE") from exc
        if not isinstance(parsed, dict):
            raise LLMError("Language model returned a non-object JSON payload.", code="LLM_INVALID_RESPONSE")
        return parsed
