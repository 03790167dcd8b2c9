from fastapi import APIRouter
from app.routers import evaluations, exclusions, overrides, periods, self_evaluations

# Centralized API router hub
# Routers are aggregated here and main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(periods.router)
api_router.include_router(evaluations.router)
api_router.include_router(self_evaluations.router)
api_router.include_router(overrides.router)
api_router.include_router(exclusions.router)
