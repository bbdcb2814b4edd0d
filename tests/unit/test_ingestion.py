"""
Unit Tests - Page View Ingestion
"""
import random
from datetime import date, datetime

import pytest
from google.api_core.exceptions import ServiceUnavailable
from sqlalchemy import select

from analytics_ingest.data import PageViewGenerator
from analytics_ingest.database import AnalyticsPageView, get_db
from analytics_ingest.ingestion import PageViewIngestor, to_page_view_rows
from analytics_ingest.reporting import AnalyticsReporter, ProviderError


def stored_rows(analytics_date):
    with get_db() as db:
        stmt = (
            select(AnalyticsPageView)
            .where(AnalyticsPageView.analytics_date == analytics_date)
            .order_by(AnalyticsPageView.id)
        )
        return db.execute(stmt).scalars().all()


@pytest.fixture
def make_ingestor(analytics_settings, store, fake_client_class, fixed_clock):
    """Build an ingestor whose reporter answers with the given response"""
    def _make(response=None, client=None, reporter=None):
        if reporter is None:
            client = client or fake_client_class(response)
            reporter = AnalyticsReporter(analytics_settings, client=client)
        return PageViewIngestor(
            reporter,
            store,
            generator=PageViewGenerator(rng=random.Random(7)),
            clock=fixed_clock,
        )
    return _make


class TestToPageViewRows:
    """Tests for to_page_view_rows"""

    def test_maps_and_casts_report_fields(self):
        """Test report strings become integer columns"""
        now = datetime(2024, 5, 2, 3, 15, 30)
        records = [
            {"pagePath": "/home", "pageTitle": "Home", "screenPageViews": "42", "activeUsers": "7"},
        ]

        rows = to_page_view_rows(records, date(2024, 5, 1), now)

        assert rows == [{
            "page_path": "/home",
            "pageviews": 42,
            "users": 7,
            "analytics_date": date(2024, 5, 1),
            "created_at": now,
            "updated_at": now,
        }]

    def test_accepts_generated_integers(self):
        """Test generator output with int metrics"""
        now = datetime(2024, 5, 2)
        records = [{"pagePath": "/", "screenPageViews": 2100, "activeUsers": 350}]

        rows = to_page_view_rows(records, date(2024, 5, 1), now)

        assert rows[0]["pageviews"] == 2100
        assert rows[0]["users"] == 350

    def test_missing_field(self):
        """Test records without a mapped field are rejected"""
        with pytest.raises(ValueError):
            to_page_view_rows([{"pagePath": "/", "activeUsers": "3"}], date(2024, 5, 1), datetime(2024, 5, 2))

    def test_non_numeric_metric(self):
        """Test a metric that is not an integer is rejected"""
        records = [{"pagePath": "/", "screenPageViews": "n/a", "activeUsers": "3"}]

        with pytest.raises(ValueError):
            to_page_view_rows(records, date(2024, 5, 1), datetime(2024, 5, 2))


class TestIngestPageViews:
    """Tests for PageViewIngestor.ingest_page_views"""

    def test_writes_one_row_per_record(self, make_ingestor, page_view_response, fake_client_class):
        """Test a successful ingestion"""
        client = fake_client_class(page_view_response)
        ingestor = make_ingestor(client=client)

        assert ingestor.ingest_page_views("2024-04-25", "2024-05-01") is True

        rows = stored_rows(date(2024, 5, 1))
        assert [row.page_path for row in rows] == [
            "/", "/floorguide", "/search", "/search?category=2", "/contact",
        ]
        assert rows[-1].pageviews == 42
        assert rows[-1].users == 7
        assert client.requests[0].date_ranges[0].start_date == "2024-04-25"
        assert client.requests[0].date_ranges[0].end_date == "2024-05-01"

    def test_timestamps_are_identical(self, make_ingestor, page_view_response):
        """Test created_at and updated_at share one second-precision time"""
        ingestor = make_ingestor(page_view_response)

        ingestor.ingest_page_views(date(2024, 5, 1), date(2024, 5, 1))

        expected = datetime(2024, 5, 2, 3, 15, 30)
        for row in stored_rows(date(2024, 5, 1)):
            assert row.created_at == expected
            assert row.updated_at == expected

    def test_empty_report(self, make_ingestor, store):
        """Test no rows means no write"""
        ingestor = make_ingestor()

        assert ingestor.ingest_page_views("2024-05-01", "2024-05-01") is False
        assert store.count_for_date(date(2024, 5, 1)) == 0

    def test_missing_credentials(self, analytics_settings, store, make_ingestor):
        """Test a missing credentials file fails without a write"""
        ingestor = make_ingestor(reporter=AnalyticsReporter(analytics_settings))

        assert ingestor.ingest_page_views("2024-05-01", "2024-05-01") is False
        assert store.count_for_date(date(2024, 5, 1)) == 0

    def test_duplicate_date_is_rejected(self, make_ingestor, page_view_response, store):
        """Test a second run for the same end date writes nothing"""
        ingestor = make_ingestor(page_view_response)

        assert ingestor.ingest_page_views("2024-05-01", "2024-05-01") is True
        assert ingestor.ingest_page_views("2024-05-01", "2024-05-01") is False

        assert store.count_for_date(date(2024, 5, 1)) == 5

    def test_existing_demo_rows_block_ingestion(self, make_ingestor, page_view_response, store):
        """Test prior rows for the date leave the count unchanged"""
        ingestor = make_ingestor(page_view_response)
        ingestor.ingest_demo_page_views(date(2024, 5, 1))
        before = store.count_for_date(date(2024, 5, 1))

        assert ingestor.ingest_page_views("2024-05-01", "2024-05-01") is False
        assert store.count_for_date(date(2024, 5, 1)) == before == 6

    def test_other_dates_are_not_blocked(self, make_ingestor, page_view_response, store):
        """Test the guard only looks at the end date"""
        ingestor = make_ingestor(page_view_response)
        ingestor.ingest_demo_page_views(date(2024, 4, 30))

        assert ingestor.ingest_page_views("2024-04-30", "2024-05-01") is True
        assert store.count_for_date(date(2024, 5, 1)) == 5

    def test_provider_error_propagates(self, make_ingestor, fake_client_class, store):
        """Test API failures reach the caller and nothing is written"""
        ingestor = make_ingestor(client=fake_client_class(error=ServiceUnavailable("down")))

        with pytest.raises(ProviderError):
            ingestor.ingest_page_views("2024-05-01", "2024-05-01")
        assert store.count_for_date(date(2024, 5, 1)) == 0

    def test_relative_end_date_is_rejected(self, make_ingestor, page_view_response, fake_client_class):
        """Test a GA relative date cannot be the stored analytics date"""
        client = fake_client_class(page_view_response)
        ingestor = make_ingestor(client=client)

        with pytest.raises(ValueError):
            ingestor.ingest_page_views("7daysAgo", "yesterday")
        assert client.requests == []

    def test_non_numeric_metric_writes_nothing(self, make_ingestor, make_response, store):
        """Test one bad metric value fails the whole batch"""
        response = make_response([
            (["/", "Home"], ["2100", "350"]),
            (["/search", "Search"], ["n/a", "120"]),
        ])
        ingestor = make_ingestor(response)

        with pytest.raises(ValueError):
            ingestor.ingest_page_views("2024-05-01", "2024-05-01")
        assert store.count_for_date(date(2024, 5, 1)) == 0


class TestDemoIngestion:
    """Tests for demo ingestion"""

    def test_demo_writes_six_rows(self, make_ingestor, store):
        """Test one demo batch per call"""
        ingestor = make_ingestor()

        assert ingestor.ingest_demo_page_views("2024-05-01") is True

        rows = stored_rows(date(2024, 5, 1))
        assert len(rows) == 6
        assert rows[0].page_path == "/"
        assert 2000 <= rows[0].pageviews <= 2300

    def test_demo_skips_duplicate_guard(self, make_ingestor, store):
        """Test repeated demo calls each write a batch"""
        ingestor = make_ingestor()

        ingestor.ingest_demo_page_views(date(2024, 5, 1))
        ingestor.ingest_demo_page_views(date(2024, 5, 1))

        assert store.count_for_date(date(2024, 5, 1)) == 12

    def test_demo_history(self, make_ingestor, store):
        """Test seeding the days before today"""
        ingestor = make_ingestor()

        dates = ingestor.ingest_demo_history(days=3, today=date(2024, 5, 4))

        assert dates == [date(2024, 5, 1), date(2024, 5, 2), date(2024, 5, 3)]
        for day in dates:
            assert store.count_for_date(day) == 6
        assert store.count_for_date(date(2024, 5, 4)) == 0
