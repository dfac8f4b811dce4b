"""
Health check route.
"""
from fastapi import APIRouter

router = APIRouter()


@router.get("/health")
async def health_check():
    """Liveness probe for load balancers and uptime checks."""
    return {"status": "healthy", "service": "conatus"}
