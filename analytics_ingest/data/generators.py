"""
Synthetic Page View Generator

Generates page view records for demo environments that lack real traffic.
Output has the same shape as the page view report, so it can be ingested
without access to Google Analytics.
"""

import random
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, List, Optional


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass(frozen=True)
class PagePattern:
    """A demo page with inclusive view and user count ranges"""
    path: str
    view_min: int
    view_max: int
    user_min: int
    user_max: int

    def __post_init__(self):
        if self.view_min > self.view_max:
            raise ValueError(f"{self.path}: view_min {self.view_min} > view_max {self.view_max}")
        if self.user_min > self.user_max:
            raise ValueError(f"{self.path}: user_min {self.user_min} > user_max {self.user_max}")


PAGE_PATTERNS = (
    PagePattern("/", 2000, 2300, 300, 400),
    PagePattern("/floorguide", 1900, 2100, 200, 300),
    PagePattern("/floorguide?floorguide=3", 1800, 1900, 150, 200),
    PagePattern("/floorguide?floorguide=2", 1800, 1900, 150, 200),
    PagePattern("/search", 1500, 1600, 100, 150),
    PagePattern("/search?category=2", 1400, 1500, 50, 100),
)

DEFAULT_HISTORY_DAYS = 30


# =============================================================================
# GENERATORS
# =============================================================================

class PageViewGenerator:
    """Generate page view records from a fixed pattern table"""

    def __init__(self, patterns=PAGE_PATTERNS, rng: Optional[random.Random] = None):
        self.patterns = tuple(patterns)
        self.rng = rng or random.Random()

    def generate(self) -> List[Dict[str, Any]]:
        """One record per pattern, in pattern order"""
        return [
            {
                "pagePath": pattern.path,
                "screenPageViews": self.rng.randint(pattern.view_min, pattern.view_max),
                "activeUsers": self.rng.randint(pattern.user_min, pattern.user_max),
            }
            for pattern in self.patterns
        ]

    def generate_history(
        self,
        days: int = DEFAULT_HISTORY_DAYS,
        today: Optional[date] = None,
    ) -> Dict[date, List[Dict[str, Any]]]:
        """Records for each of the `days` days before `today`, oldest first"""
        today = today or date.today()
        return {
            today - timedelta(days=offset): self.generate()
            for offset in range(days, 0, -1)
        }


def generate_dummy_page_views(rng: Optional[random.Random] = None) -> List[Dict[str, Any]]:
    """Generate one day of synthetic page views"""
    return PageViewGenerator(rng=rng).generate()


def generate_dummy_history(
    days: int = DEFAULT_HISTORY_DAYS,
    today: Optional[date] = None,
    rng: Optional[random.Random] = None,
) -> Dict[date, List[Dict[str, Any]]]:
    """Generate synthetic page views for the `days` days before `today`"""
    return PageViewGenerator(rng=rng).generate_history(days=days, today=today)
