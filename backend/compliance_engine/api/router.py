"""Main API router — combines all endpoint routers."""

from fastapi import APIRouter

from compliance_engine.api.health import router as health_router
from compliance_engine.api.validation import router as validation_router

api_router = APIRouter()

# Health check
api_router.include_router(health_router, tags=["Health"])

# Validation, history, reports and plugins
api_router.include_router(validation_router, tags=["Validation"])
