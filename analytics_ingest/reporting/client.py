"""
Google Analytics Data API client construction.
"""

from pathlib import Path
from typing import Union

import structlog
from google.analytics.data_v1beta import BetaAnalyticsDataClient
from google.oauth2 import service_account

from analytics_ingest.reporting.errors import ClientUnavailableError

logger = structlog.get_logger(__name__)

SCOPES = ["https://www.googleapis.com/auth/analytics.readonly"]


def create_data_client(credentials_path: Union[str, Path]) -> BetaAnalyticsDataClient:
    """
    Build a Data API client from a service account credentials file.

    Raises:
        ClientUnavailableError: If the file is missing or unusable
    """
    path = Path(credentials_path)
    if not path.is_file():
        raise ClientUnavailableError(f"The api credentials file is not found: {path}")

    try:
        credentials = service_account.Credentials.from_service_account_file(
            str(path), scopes=SCOPES
        )
    except (ValueError, OSError) as e:
        raise ClientUnavailableError(f"Invalid api credentials file {path}: {e}") from e

    logger.debug("Analytics data client created", credentials_path=str(path))
    return BetaAnalyticsDataClient(credentials=credentials)
