"""
Reporting Module
"""
from .errors import (
    AnalyticsIngestError,
    ClientUnavailableError,
    MissingTargetError,
    ProviderError,
    ResponseShapeError,
)
from .reporter import AnalyticsReporter, FlatRecord, ReportRequest, flatten_response

__all__ = [
    "AnalyticsIngestError",
    "ClientUnavailableError",
    "MissingTargetError",
    "ProviderError",
    "ResponseShapeError",
    "AnalyticsReporter",
    "FlatRecord",
    "ReportRequest",
    "flatten_response",
]
