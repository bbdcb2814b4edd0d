"""
Test Suite Configuration
"""
from datetime import datetime
from typing import Generator, List, Optional, Sequence, Tuple

import pytest
from google.analytics.data_v1beta.types import (
    DimensionValue,
    MetricValue,
    Row,
    RunReportResponse,
)
from sqlalchemy import Engine

from analytics_ingest.config import AnalyticsSettings, get_settings
from analytics_ingest.database import PageViewStore, close_database, create_tables, init_database


class FakeDataClient:
    """Stands in for BetaAnalyticsDataClient and records every request"""

    def __init__(self, response: Optional[RunReportResponse] = None, error: Optional[Exception] = None):
        self.response = response if response is not None else RunReportResponse()
        self.error = error
        self.requests = []

    def run_report(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.response


def build_response(rows: Sequence[Tuple[Sequence[str], Sequence[str]]]) -> RunReportResponse:
    """Build a RunReportResponse from (dimension_values, metric_values) pairs"""
    return RunReportResponse(
        rows=[
            Row(
                dimension_values=[DimensionValue(value=value) for value in dimensions],
                metric_values=[MetricValue(value=value) for value in metrics],
            )
            for dimensions, metrics in rows
        ]
    )


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator:
    """Reload settings from the environment for every test"""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def database() -> Generator[Engine, None, None]:
    """In-memory SQLite database with all tables created"""
    engine = init_database("sqlite://")
    create_tables()
    yield engine
    close_database()


@pytest.fixture
def store(database) -> PageViewStore:
    return PageViewStore()


@pytest.fixture
def analytics_settings(tmp_path) -> AnalyticsSettings:
    """Settings with a property id and a credentials path that does not exist"""
    return AnalyticsSettings(
        property_id="123456789",
        credentials_path=str(tmp_path / "google_application_credentials.json"),
    )


@pytest.fixture
def fake_client_class():
    return FakeDataClient


@pytest.fixture
def make_response():
    return build_response


@pytest.fixture
def page_view_response() -> RunReportResponse:
    """Five rows shaped like the page view report"""
    return build_response([
        (["/", "Home"], ["2100", "350"]),
        (["/floorguide", "Floor Guide"], ["1950", "240"]),
        (["/search", "Search"], ["1520", "120"]),
        (["/search?category=2", "Search"], ["1430", "70"]),
        (["/contact", "Contact"], ["42", "7"]),
    ])


@pytest.fixture
def fixed_clock():
    now = datetime(2024, 5, 2, 3, 15, 30, 123456)
    return lambda: now
