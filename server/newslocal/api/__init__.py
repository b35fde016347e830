from fastapi import APIRouter

from newslocal.api import search
from newslocal.schemas.common import StatusResponse

api_router = APIRouter()


@api_router.get("/health", response_model=StatusResponse, tags=["health"])
def api_health_check() -> StatusResponse:
    """Health check endpoint for monitoring and load balancers."""
    return StatusResponse(status="ok")


api_router.include_router(search.router, prefix="/search", tags=["search"])
