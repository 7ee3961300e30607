"""
Service endpoints
=================

GET /        -- banner
GET /health  -- simple health check
"""

from fastapi import APIRouter

from greenbharat.api.schemas import StatusResponse

router = APIRouter(tags=["admin"])


@router.get("/", response_model=StatusResponse, summary="Service banner")
async def root():
    return StatusResponse(status="GreenBharat backend running")


@router.get("/health", response_model=StatusResponse, summary="Health check")
async def health():
    return StatusResponse()
