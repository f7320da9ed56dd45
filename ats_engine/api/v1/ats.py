from fastapi import APIRouter, Depends, Request

from ats_engine.ai.types import LLMClient
from ats_engine.api.v1.dependencies import llm_client
from ats_engine.core.rate_limit import rate_limit
from ats_engine.core.security import require_api_key
from ats_engine.schemas.api import ResumeAnalysis, ResumeRequest
from ats_engine.services.pipeline import analyze_resume

router = APIRouter()


@router.post("/ats/score", response_model=ResumeAnalysis)
@rate_limit()
async def ats_score(
    request: Request,
    payload: ResumeRequest,
    _: None = Depends(require_api_key),
    client: LLMClient = Depends(llm_client),
):
    _ = request
    return await analyze_resume(payload, client=client)
