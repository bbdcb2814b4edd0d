"""
Database Models

Persisted shape of the analytics data pulled from Google Analytics.

Tables:
- AnalyticsPageView: per-page view and user counts for one analytics date
"""

from datetime import date, datetime

from sqlalchemy import Date, DateTime, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


class AnalyticsPageView(Base):
    """
    Analytics Page View Table

    One row per page path per analytics date. Rows are written in batches by
    the ingestor and are never updated afterwards.
    """
    __tablename__ = "analytics_page_views"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    analytics_date: Mapped[date] = mapped_column(Date, nullable=False)
    page_path: Mapped[str] = mapped_column(String(500), nullable=False)

    # Metrics
    pageviews: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    users: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Audit
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    # Many rows share a date, so the index is not unique
    __table_args__ = (
        Index("ix_analytics_page_views_analytics_date", "analytics_date"),
    )

    def __repr__(self) -> str:
        return f"<AnalyticsPageView {self.analytics_date} {self.page_path}>"
