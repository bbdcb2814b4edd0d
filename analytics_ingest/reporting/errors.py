"""
Reporting Errors
"""


class AnalyticsIngestError(Exception):
    """Base class for analytics ingestion errors"""


class ClientUnavailableError(AnalyticsIngestError):
    """The Data API client could not be built, e.g. missing credentials"""


class MissingTargetError(AnalyticsIngestError):
    """No GA4 property id is configured"""


class ProviderError(AnalyticsIngestError):
    """The Data API call failed or returned an unusable response"""


class ResponseShapeError(ProviderError):
    """A response row does not match the requested dimensions or metrics"""
