from fastapi import APIRouter

from ats_engine.ai.factory import llm_configured
from ats_engine.scoring import ALGORITHM_VERSION

router = APIRouter()


@router.get("/health", summary="Health Check", description="Check the health status of the application.")
async def health_check():
    return {"status": "healthy", "llm_configured": llm_configured(), "algorithm_version": ALGORITHM_VERSION}
