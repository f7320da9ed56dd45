from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Protocol, Sequence

Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class ChatMessage:
    role: Role
    content: str


class LLMClient(Protocol):
    """Language-understanding collaborator returning one JSON object per call."""

    model: str

    async def complete_json(
        self,
        messages: Sequence[ChatMessage],
        *,
        temperature: float = 0.2,
        max_tokens: int = 1500,
    ) -> dict[str, Any]: ...
