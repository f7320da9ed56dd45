from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ats_engine.core.errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_payload(model: type[ModelT], payload: Any, *, task: str) -> ModelT:
    """Validate collaborator JSON into a strict model before it enters the core."""
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ())) or "payload"
        raise ValidationError(
            f"{task} response does not match the expected schema at '{location}': {first.get('msg', 'invalid')}",
            code="SCHEMA_MISMATCH",
        ) from exc
