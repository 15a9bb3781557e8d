"""API Pydantic models."""
from app.api.models.errors import ErrorCodes, ErrorDetail, ErrorResponse, error_detail
from app.api.models.requests import AnalyzeRequest, SiteSignalsModel
from app.api.models.responses import AnalysisResult, HealthResponse, JobResponse

__all__ = [
    "AnalyzeRequest",
    "SiteSignalsModel",
    "JobResponse",
    "AnalysisResult",
    "HealthResponse",
    "ErrorResponse",
    "ErrorDetail",
    "ErrorCodes",
    "error_detail",
]
