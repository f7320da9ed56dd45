from fastapi import APIRouter, Depends, Request

from ats_engine.ai.types import LLMClient
from ats_engine.api.v1.dependencies import judge_client, llm_client
from ats_engine.core.rate_limit import rate_limit
from ats_engine.core.security import require_api_key
from ats_engine.schemas.api import OptimizationResponse, ResumeRequest
from ats_engine.services.pipeline import optimize_resume

router = APIRouter()


@router.post("/suggestions", response_model=OptimizationResponse)
@rate_limit()
async def suggestions(
    request: Request,
    payload: ResumeRequest,
    _: None = Depends(require_api_key),
    client: LLMClient = Depends(llm_client),
    reviewer: LLMClient = Depends(judge_client),
):
    _ = request
    return await optimize_resume(payload, client=client, judge_client=reviewer)
