"""
API routers module.
"""
from app.api.calculations import router as calculations_router
from app.api.reports import router as reports_router
from app.api.validations import router as validations_router

__all__ = [
    "calculations_router",
    "reports_router",
    "validations_router",
]
