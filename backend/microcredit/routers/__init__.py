"""Microcredit Assessment Core - API Routers"""
from .assessment import router as assessment_router

__all__ = [
    "assessment_router",
]
