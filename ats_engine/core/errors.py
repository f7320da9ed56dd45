from __future__ import annotations

from typing import Any


class PipelineError(RuntimeError):
    """Base error carrying a stable machine-readable code."""

    default_code = "PIPELINE_ERROR"

    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


class ValidationError(PipelineError):
    default_code = "VALIDATION_ERROR"


class ComputationError(PipelineError):
    default_code = "COMPUTATION_ERROR"


class AggregationError(PipelineError):
    default_code = "AGGREGATION_ERROR"


class LLMError(PipelineError):
    default_code = "LLM_ERROR"


class LLMTimeoutError(LLMError):
    default_code = "LLM_TIMEOUT"


class ExtractionError(PipelineError):
    default_code = "EXTRACTION_ERROR"


class ExtractionTimeoutError(ExtractionError):
    default_code = "EXTRACTION_TIMEOUT"


class GenerationError(PipelineError):
    default_code = "GENERATION_ERROR"


class GenerationTimeoutError(GenerationError):
    default_code = "GENERATION_TIMEOUT"


class JudgeError(PipelineError):
    default_code = "JUDGE_ERROR"


class JudgeTimeoutError(JudgeError):
    default_code = "JUDGE_TIMEOUT"


def is_timeout(exc: BaseException) -> bool:
    return isinstance(exc, (LLMTimeoutError, ExtractionTimeoutError, GenerationTimeoutError, JudgeTimeoutError))
