"""
Data Ingestion Module
"""
from .pageviews import PageViewIngestor, to_page_view_rows

__all__ = [
    "PageViewIngestor",
    "to_page_view_rows",
]
