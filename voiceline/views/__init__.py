"""Pydantic schemas used as views in the MVC architecture."""

from .common import ErrorResponse, HealthResponse
from .voice import AnalysisResponse, PersistFailureResponse

__all__ = [
    "AnalysisResponse",
    "ErrorResponse",
    "HealthResponse",
    "PersistFailureResponse",
]
