"""
Google Analytics Reporter

Runs dimension/metric reports against the GA4 Data API and flattens the
columnar response into one record per row.

Records are keyed by the requested dimension and metric names, with values
left as the strings the API returns. Reports lag real traffic by 24-48 hours,
so recent date ranges can legitimately come back empty.

Available dimension and metric names:
https://developers.google.com/analytics/devguides/reporting/data/v1/api-schema
"""

from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, List, Optional, Sequence, Union

import structlog
from google.analytics.data_v1beta import BetaAnalyticsDataClient
from google.analytics.data_v1beta.types import (
    DateRange,
    Dimension,
    Metric,
    RunReportRequest,
    RunReportResponse,
)
from google.api_core.exceptions import GoogleAPIError

from analytics_ingest.config import AnalyticsSettings
from analytics_ingest.reporting.client import create_data_client
from analytics_ingest.reporting.errors import (
    ClientUnavailableError,
    MissingTargetError,
    ProviderError,
    ResponseShapeError,
)

logger = structlog.get_logger(__name__)

# GA date strings such as "yesterday" and "7daysAgo" are passed through
DateArg = Union[date, str]
FlatRecord = Dict[str, str]
ClientFactory = Callable[[str], BetaAnalyticsDataClient]


# =============================================================================
# REPORT SHAPES
# =============================================================================

ACTIVE_USERS_DIMENSIONS = ["date"]
ACTIVE_USERS_METRICS = ["activeUsers"]

PAGE_VIEWS_DIMENSIONS = ["pagePath", "pageTitle"]
PAGE_VIEWS_METRICS = ["screenPageViews", "activeUsers"]


@dataclass
class ReportRequest:
    """One report query: a date range plus ordered dimension and metric names"""
    start_date: DateArg
    end_date: DateArg
    dimension_names: List[str]
    metric_names: List[str]


def _format_date(value: DateArg) -> str:
    if isinstance(value, date):
        return value.isoformat()
    return value


def flatten_response(request: ReportRequest, response: RunReportResponse) -> List[FlatRecord]:
    """
    Convert response rows into flat records.

    Values are mapped positionally: the i-th dimension value of a row belongs
    to the i-th requested dimension name, and likewise for metrics.

    Raises:
        ResponseShapeError: If a row carries a different number of values
            than names were requested
    """
    records: List[FlatRecord] = []

    for index, row in enumerate(response.rows):
        dimension_values = row.dimension_values
        metric_values = row.metric_values

        if len(dimension_values) != len(request.dimension_names):
            raise ResponseShapeError(
                f"Row {index} has {len(dimension_values)} dimension values, "
                f"expected {len(request.dimension_names)}"
            )
        if len(metric_values) != len(request.metric_names):
            raise ResponseShapeError(
                f"Row {index} has {len(metric_values)} metric values, "
                f"expected {len(request.metric_names)}"
            )

        record: FlatRecord = {}
        for name, value in zip(request.dimension_names, dimension_values):
            record[name] = value.value
        for name, value in zip(request.metric_names, metric_values):
            record[name] = value.value
        records.append(record)

    return records


class AnalyticsReporter:
    """
    Fetches reports for a single GA4 property.

    A client is built from the credentials file on every call unless one is
    supplied up front.

    Example:
        reporter = AnalyticsReporter(get_settings().analytics)
        rows = reporter.get_page_views("2024-05-01", "2024-05-01")
    """

    def __init__(
        self,
        settings: AnalyticsSettings,
        client: Optional[BetaAnalyticsDataClient] = None,
        client_factory: ClientFactory = create_data_client,
    ):
        self.settings = settings
        self._client = client
        self._client_factory = client_factory

    def _get_client(self) -> BetaAnalyticsDataClient:
        if self._client is not None:
            return self._client
        return self._client_factory(self.settings.credentials_path)

    def _require_property(self) -> str:
        if not self.settings.property_id:
            raise MissingTargetError("GoogleAnalytics property_id is not found")
        return self.settings.property_name

    def build_request(
        self,
        start_date: DateArg,
        end_date: DateArg,
        dimension_names: Sequence[str],
        metric_names: Sequence[str],
    ) -> ReportRequest:
        """Build a report request; no validation is applied"""
        return ReportRequest(
            start_date=start_date,
            end_date=end_date,
            dimension_names=list(dimension_names),
            metric_names=list(metric_names),
        )

    def execute(self, request: ReportRequest) -> Optional[List[FlatRecord]]:
        """
        Run one report and flatten its rows.

        Returns:
            Records in provider row order (empty when there is no data), or
            None when no client or property id is available

        Raises:
            ProviderError: If the API call fails or the response is malformed
        """
        try:
            client = self._get_client()
        except ClientUnavailableError as e:
            logger.error("GoogleAnalytics API initialization failed", error=str(e))
            return None

        try:
            property_name = self._require_property()
        except MissingTargetError as e:
            logger.error(str(e))
            return None

        api_request = RunReportRequest(
            property=property_name,
            date_ranges=[
                DateRange(
                    start_date=_format_date(request.start_date),
                    end_date=_format_date(request.end_date),
                )
            ],
            dimensions=[Dimension(name=name) for name in request.dimension_names],
            metrics=[Metric(name=name) for name in request.metric_names],
        )

        try:
            response = client.run_report(api_request)
        except GoogleAPIError as e:
            raise ProviderError(f"runReport failed for {property_name}: {e}") from e

        records = flatten_response(request, response)
        logger.info(
            "Fetched analytics report",
            property=property_name,
            start_date=_format_date(request.start_date),
            end_date=_format_date(request.end_date),
            dimensions=request.dimension_names,
            metrics=request.metric_names,
            rows=len(records),
        )
        return records

    def get_active_users(self, start_date: DateArg, end_date: DateArg) -> Optional[List[FlatRecord]]:
        """Active users per day in the date range"""
        return self.execute(
            self.build_request(start_date, end_date, ACTIVE_USERS_DIMENSIONS, ACTIVE_USERS_METRICS)
        )

    def get_page_views(self, start_date: DateArg, end_date: DateArg) -> Optional[List[FlatRecord]]:
        """Page views and active users per page over the date range"""
        return self.execute(
            self.build_request(start_date, end_date, PAGE_VIEWS_DIMENSIONS, PAGE_VIEWS_METRICS)
        )
