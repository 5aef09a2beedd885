"""Route aggregation for the assessor web application."""

from fastapi import APIRouter

from . import attempt, violation

router = APIRouter()
router.include_router(attempt.router)
router.include_router(violation.router)
