"""Timeout-guarded JSON completions against the language-understanding collaborator.

Every call goes through :func:`with_timeout`. The guard uses ``asyncio.wait_for``,
so the awaiting coroutine is cancelled when the deadline passes. Whatever the SDK
already sent to the provider may keep running remotely; the caller simply stops
waiting and receives :class:`LLMTimeoutError`.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from typing import Any, Awaitable, TypeVar

from ats_engine.ai.types import ChatMessage, LLMClient
from ats_engine.core.config import settings
from ats_engine.core.errors import LLMError, LLMTimeoutError, PipelineError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_timeout(awaitable: Awaitable[T], *, timeout_s: float | None = None, task: str = "llm") -> T:
    limit = settings.llm_timeout_s if timeout_s is None else timeout_s
    try:
        return await asyncio.wait_for(awaitable, timeout=limit)
    except asyncio.TimeoutError as exc:
        raise LLMTimeoutError(f"{task} timed out after {limit:g}s", code="LLM_TIMEOUT") from exc


def _log_run(*, run_id: str, task: str, model: str, status: str, started: float, error_code: str | None = None) -> None:
    latency_ms = int((time.perf_counter() - started) * 1000)
    if status == "success":
        logger.info("llm_run run_id=%s task=%s model=%s status=%s latency_ms=%s", run_id, task, model, status, latency_ms)
    else:
        logger.warning(
            "llm_run run_id=%s task=%s model=%s status=%s error_code=%s latency_ms=%s",
            run_id,
            task,
            model,
            status,
            error_code,
            latency_ms,
        )


async def json_completion(
    client: LLMClient,
    *,
    system_prompt: str,
    user_prompt: str,
    task: str,
    temperature: float = 0.2,
    max_tokens: int = 1500,
    timeout_s: float | None = None,
) -> dict[str, Any]:
    """Run one JSON completion; raises LLMTimeoutError or LLMError, never returns None."""
    run_id = uuid.uuid4().hex
    started = time.perf_counter()
    model = getattr(client, "model", "unknown")
    messages = [
        ChatMessage(role="system", content=system_prompt),
        ChatMessage(role="user", content=user_prompt),
    ]
    try:
        payload = await with_timeout(
            client.complete_json(messages, temperature=temperature, max_tokens=max_tokens),
            timeout_s=timeout_s,
            task=task,
        )
    except LLMTimeoutError:
        _log_run(run_id=run_id, task=task, model=model, status="timeout", started=started, error_code="LLM_TIMEOUT")
        raise
    except PipelineError as exc:
        _log_run(run_id=run_id, task=task, model=model, status="error", started=started, error_code=exc.code)
        raise
    except Exception as exc:  # noqa: BLE001 - provider SDK errors are normalized here
        _log_run(run_id=run_id, task=task, model=model, status="error", started=started, error_code="LLM_ERROR")
        raise LLMError(f"{task} failed: {exc}", code="LLM_ERROR") from exc

    if not isinstance(payload, dict):
        _log_run(run_id=run_id, task=task, model=model, status="invalid", started=started, error_code="LLM_INVALID_RESPONSE")
        raise LLMError(f"{task} returned a non-object payload", code="LLM_INVALID_RESPONSE")

    _log_run(run_id=run_id, task=task, model=model, status="success", started=started)
    return payload


def truncate(text: str, limit: int) -> str:
    value = text or ""
    return value if len(value) <= limit else value[:limit]
