"""
Data Generation Module
"""
from .generators import (
    PAGE_PATTERNS,
    PagePattern,
    PageViewGenerator,
    generate_dummy_history,
    generate_dummy_page_views,
)

__all__ = [
    "PAGE_PATTERNS",
    "PagePattern",
    "PageViewGenerator",
    "generate_dummy_history",
    "generate_dummy_page_views",
]
