"""Business services for phpscope."""

from phpscope.services.analysis_service import AnalysisResult, AnalysisService

__all__ = [
    "AnalysisResult",
    "AnalysisService",
]
