"""
Page View Ingestion

Loads page view reports into the analytics_page_views table.
Supports:
- Live ingestion from Google Analytics with a per-date duplicate guard
- Demo ingestion from synthetic data
- Bulk demo seeding over a range of past days

Every write is a single batch: a date is either fully ingested or untouched.
"""

from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import polars as pl
import structlog

from analytics_ingest.data.generators import DEFAULT_HISTORY_DAYS, PageViewGenerator
from analytics_ingest.database.store import PageViewStore
from analytics_ingest.reporting.reporter import AnalyticsReporter, DateArg

logger = structlog.get_logger(__name__)

# Report fields and the columns they are stored in
FIELD_COLUMNS = {
    "pagePath": "page_path",
    "screenPageViews": "pageviews",
    "activeUsers": "users",
}


def _as_date(value: Union[date, str]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def to_page_view_rows(
    records: Sequence[Dict[str, Any]],
    analytics_date: date,
    now: datetime,
) -> List[Dict[str, Any]]:
    """
    Map report records to analytics_page_views rows.

    Metric values arrive as strings from the API and as ints from the
    generator; both are cast to integers. Fields other than the mapped ones
    (e.g. pageTitle) are dropped.

    Raises:
        ValueError: If a record set lacks one of the mapped fields or a
            metric is not an integer
    """
    df = pl.DataFrame(list(records))

    missing = [field for field in FIELD_COLUMNS if field not in df.columns]
    if missing:
        raise ValueError(f"Page view records missing fields: {missing}")

    try:
        df = df.select([
            pl.col("pagePath").cast(pl.Utf8).alias("page_path"),
            pl.col("screenPageViews").cast(pl.Int64).alias("pageviews"),
            pl.col("activeUsers").cast(pl.Int64).alias("users"),
        ])
    except pl.exceptions.PolarsError as e:
        raise ValueError(f"Page view metrics are not integers: {e}") from e

    df = df.with_columns([
        pl.lit(analytics_date, dtype=pl.Date).alias("analytics_date"),
        pl.lit(now, dtype=pl.Datetime("us")).alias("created_at"),
        pl.lit(now, dtype=pl.Datetime("us")).alias("updated_at"),
    ])

    return df.to_dicts()


class PageViewIngestor:
    """
    Writes page view reports for one analytics date at a time.

    Example:
        ingestor = PageViewIngestor(AnalyticsReporter(settings.analytics), PageViewStore())
        ok = ingestor.ingest_page_views("2024-05-01", "2024-05-01")
    """

    def __init__(
        self,
        reporter: AnalyticsReporter,
        store: PageViewStore,
        generator: Optional[PageViewGenerator] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.reporter = reporter
        self.store = store
        self.generator = generator or PageViewGenerator()
        self.clock = clock

    def _store_page_views(self, records: Sequence[Dict[str, Any]], analytics_date: date) -> int:
        now = self.clock().replace(microsecond=0)
        rows = to_page_view_rows(records, analytics_date, now)
        return self.store.insert_batch(rows)

    def ingest_page_views(self, start_date: DateArg, end_date: Union[date, str]) -> bool:
        """
        Fetch page views for the range and store them under end_date.

        Returns:
            True if rows were written; False if the report was unavailable,
            empty, or end_date was already ingested
        """
        analytics_date = _as_date(end_date)
        log = logger.bind(start_date=str(start_date), analytics_date=analytics_date.isoformat())

        records = self.reporter.get_page_views(start_date, analytics_date)
        if records is None:
            log.warning("Page view report unavailable, nothing ingested")
            return False

        # Reports lag by 24-48 hours, so an empty range is not an error
        if not records:
            log.info("No data from GoogleAnalytics API")
            return False

        if self.store.exists(analytics_date):
            log.error("There is data on the same date in analytics_page_views")
            return False

        written = self._store_page_views(records, analytics_date)
        log.info("Page views ingested", rows=written)
        return True

    def ingest_demo_page_views(self, analytics_date: Union[date, str]) -> bool:
        """
        Store synthetic page views for the date.

        Does not check for existing rows; calling twice for a date stores
        two sets.
        """
        analytics_date = _as_date(analytics_date)
        written = self._store_page_views(self.generator.generate(), analytics_date)
        logger.info("Demo page views ingested", analytics_date=analytics_date.isoformat(), rows=written)
        return True

    def ingest_demo_history(
        self,
        days: int = DEFAULT_HISTORY_DAYS,
        today: Optional[date] = None,
    ) -> List[date]:
        """Store synthetic page views for each of the `days` days before today"""
        history = self.generator.generate_history(days=days, today=today)
        for analytics_date, records in history.items():
            self._store_page_views(records, analytics_date)

        logger.info("Demo page view history ingested", days=len(history))
        return list(history)
