"""
Database Module
"""
from .connection import (
    init_database,
    close_database,
    create_tables,
    get_db,
    get_engine,
    check_database_health,
)
from .models import Base, AnalyticsPageView
from .store import PageViewStore

__all__ = [
    "init_database",
    "close_database",
    "create_tables",
    "get_db",
    "get_engine",
    "check_database_health",
    "Base",
    "AnalyticsPageView",
    "PageViewStore",
]
