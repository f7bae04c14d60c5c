"""
Main API router that includes all endpoint routers
"""

from fastapi import APIRouter
from app.api.endpoints import auth, dashboard, members, hunts, points, quota

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(dashboard.router, prefix="/ld", tags=["Dashboard"])
api_router.include_router(members.router, prefix="/ld", tags=["Members"])
api_router.include_router(hunts.router, prefix="/ld", tags=["Hunts"])
api_router.include_router(points.router, prefix="/ld", tags=["Points"])
api_router.include_router(quota.router, prefix="/ld", tags=["Harvest Quota"])
