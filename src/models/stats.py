"""
Statistics data models.

Output types of the review statistics aggregator.
"""

from dataclasses import dataclass, field
from typing import List

FEEDBACK_CATEGORIES = ("Positive", "Neutral", "Negative")


@dataclass(frozen=True)
class CategoryStat:
    """Count of reviews in one NPS band and its share of all reviews."""
    count: int = 0
    percent: float = 0.0

    def to_dict(self) -> dict:
        return {"count": self.count, "percent": self.percent}


@dataclass(frozen=True)
class StatsSummary:
    """
    Headline figures shown on the dashboard cards.

    ``responders`` always equals ``total_reviews``. Band percentages are
    taken against all reviews, so they do not sum to 100 when some
    ratings are missing or out of range.
    """
    total_reviews: int = 0
    responders: int = 0
    promoters: CategoryStat = field(default_factory=CategoryStat)
    neutral: CategoryStat = field(default_factory=CategoryStat)
    detractors: CategoryStat = field(default_factory=CategoryStat)
    tnps: float = 0.0
    average_rating: float = 0.0

    def to_dict(self) -> dict:
        return {
            "total_reviews": self.total_reviews,
            "responders": self.responders,
            "promoters": self.promoters.to_dict(),
            "neutral": self.neutral.to_dict(),
            "detractors": self.detractors.to_dict(),
            "tnps": self.tnps,
            "average_rating": self.average_rating
        }


@dataclass(frozen=True)
class RatingBucket:
    rating: int
    count: int = 0

    def to_dict(self) -> dict:
        return {"rating": self.rating, "count": self.count}


@dataclass(frozen=True)
class BreakdownEntry:
    category: str  # "Positive", "Neutral", or "Negative"
    count: int

    def __post_init__(self):
        # Validate category
        if self.category not in FEEDBACK_CATEGORIES:
            raise ValueError(
                f"Invalid category: {self.category}. "
                f"Must be one of {', '.join(FEEDBACK_CATEGORIES)}"
            )

    def to_dict(self) -> dict:
        return {"category": self.category, "count": self.count}


@dataclass(frozen=True)
class TimeSeriesPoint:
    date: str  # YYYY-MM-DD format
    count: int

    def to_dict(self) -> dict:
        return {"date": self.date, "count": self.count}


@dataclass(frozen=True)
class AggregateResult:
    """Complete statistics bundle for one set of reviews."""
    summary: StatsSummary
    histogram: List[RatingBucket]
    breakdown: List[BreakdownEntry]
    time_series: List[TimeSeriesPoint]

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "summary": self.summary.to_dict(),
            "histogram": [bucket.to_dict() for bucket in self.histogram],
            "breakdown": [entry.to_dict() for entry in self.breakdown],
            "time_series": [point.to_dict() for point in self.time_series]
        }
