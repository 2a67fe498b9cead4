"""API v1 routes."""

from fastapi import APIRouter

from chartcalc.api.v1 import formulas, health

router = APIRouter()

router.include_router(health.router, tags=["health"])
router.include_router(formulas.router, tags=["formulas"])
