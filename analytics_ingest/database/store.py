"""
Page View Store

Narrow persistence interface used by the ingestor: an existence check per
analytics date and a single-transaction batch insert.
"""

from contextlib import AbstractContextManager
from datetime import date
from typing import Any, Callable, Dict, List

import structlog
from sqlalchemy import func, insert, select
from sqlalchemy.orm import Session

from analytics_ingest.database.connection import get_db
from analytics_ingest.database.models import AnalyticsPageView

logger = structlog.get_logger(__name__)

SessionScope = Callable[[], AbstractContextManager[Session]]


class PageViewStore:
    """
    Reads and writes rows of the analytics_page_views table.

    Example:
        store = PageViewStore()
        if not store.exists(date(2024, 5, 1)):
            store.insert_batch(rows)
    """

    def __init__(self, session_scope: SessionScope = get_db):
        self._session_scope = session_scope

    def exists(self, analytics_date: date) -> bool:
        """Whether any row is stored for the given analytics date"""
        stmt = select(
            select(AnalyticsPageView.id)
            .where(AnalyticsPageView.analytics_date == analytics_date)
            .exists()
        )
        with self._session_scope() as db:
            return bool(db.execute(stmt).scalar())

    def count_for_date(self, analytics_date: date) -> int:
        """Number of rows stored for the given analytics date"""
        stmt = (
            select(func.count())
            .select_from(AnalyticsPageView)
            .where(AnalyticsPageView.analytics_date == analytics_date)
        )
        with self._session_scope() as db:
            return db.execute(stmt).scalar_one()

    def insert_batch(self, records: List[Dict[str, Any]]) -> int:
        """
        Insert all records in one transaction.

        Either every row is committed or, on error, none are.

        Returns:
            Number of rows written
        """
        if not records:
            return 0

        with self._session_scope() as db:
            db.execute(insert(AnalyticsPageView), records)

        logger.info(
            "Inserted page view rows",
            table=AnalyticsPageView.__tablename__,
            rows=len(records),
        )
        return len(records)
