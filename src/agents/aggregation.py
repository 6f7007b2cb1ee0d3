"""
Review Statistics Aggregator.

Derives the customer-experience metrics (TNPS, NPS bands, rating
histogram, feedback breakdown, daily review volume) from a set of reviews.
"""

import logging
import math
from collections import Counter
from datetime import datetime, tzinfo
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Iterable, List, Optional

import pandas as pd

from src.models.review import ReviewRecord
from src.models.stats import (
    AggregateResult,
    BreakdownEntry,
    CategoryStat,
    RatingBucket,
    StatsSummary,
    TimeSeriesPoint,
)

logger = logging.getLogger(__name__)

MIN_RATING = 0
MAX_RATING = 10

PROMOTER = "promoter"
NEUTRAL = "neutral"
DETRACTOR = "detractor"

# Band -> pie chart category, in display order
BREAKDOWN_CATEGORIES = (
    (PROMOTER, "Positive"),
    (NEUTRAL, "Neutral"),
    (DETRACTOR, "Negative"),
)

DateKey = Callable[[datetime], str]


def classify_rating(rating) -> Optional[str]:
    """
    Map a 0-10 rating onto its NPS band.

    0-6 is the standard detractor band. A rating of 0 is a real detractor,
    not an empty value.

    Returns:
        PROMOTER, NEUTRAL, DETRACTOR, or None when the rating is absent
        or outside 0-10
    """
    rating = normalize_rating(rating)
    if rating is None or not MIN_RATING <= rating <= MAX_RATING:
        return None
    if rating >= 9:
        return PROMOTER
    if rating >= 7:
        return NEUTRAL
    return DETRACTOR


def normalize_rating(rating) -> Optional[int]:
    """
    Whole-number rating as int, or None when the rating is absent.

    9.0 is the same rating as 9. Bools, fractional and non-finite values
    are not ratings.
    """
    if isinstance(rating, bool):
        return None
    if isinstance(rating, int):
        return rating
    if isinstance(rating, float) and math.isfinite(rating) and rating.is_integer():
        return int(rating)
    return None


def is_valid_rating(rating) -> bool:
    """True for a whole-number rating in 0-10."""
    return classify_rating(rating) is not None


def round_half_up(value: float, places: int) -> float:
    """
    Round to a fixed number of decimals, halves away from zero.

    Works on the exact binary value of ``value``, so 1.005 rounds to 1.0
    the same way fixed-point string formatting does.
    """
    quantum = Decimal(1).scaleb(-places)
    rounded = float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))
    if rounded == 0:
        return 0.0  # no negative zero
    return rounded


def local_calendar_date(timestamp: datetime) -> str:
    """
    Calendar date of a timestamp in the local timezone of this process.

    Naive timestamps are assumed to already be local.
    """
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone()
    return timestamp.date().isoformat()


def calendar_date_in(tz: tzinfo) -> DateKey:
    """Build a date key that buckets timestamps by the calendar of ``tz``."""
    def date_key(timestamp: datetime) -> str:
        if timestamp.tzinfo is None:
            return timestamp.date().isoformat()
        return timestamp.astimezone(tz).date().isoformat()
    return date_key


class ReviewStatsAggregator:
    """
    Computes the full statistics bundle for a set of reviews.

    Stateless apart from the date key policy: every call recomputes from
    scratch and never mutates its input. Any sequence of reviews, including
    an empty one, yields a fully populated result.
    """

    def __init__(self, date_key: Optional[DateKey] = None):
        """
        Initialize aggregator.

        Args:
            date_key: Maps a review timestamp to its YYYY-MM-DD bucket.
                Defaults to the local calendar date.
        """
        self.date_key = date_key or local_calendar_date

    def aggregate(self, records: Iterable[ReviewRecord]) -> AggregateResult:
        """
        Aggregate reviews into summary, histogram, breakdown and time series.

        Args:
            records: Reviews to aggregate, in any order

        Returns:
            AggregateResult
        """
        records = list(records)

        band_counts = Counter(classify_rating(r.rating) for r in records)
        summary = self._build_summary(records, band_counts)
        histogram = self._build_histogram(records)
        breakdown = self._build_breakdown(band_counts)
        time_series = self._build_time_series(records)

        logger.debug(
            f"Aggregated {summary.total_reviews} reviews "
            f"(TNPS {summary.tnps}, {len(time_series)} active days)"
        )

        return AggregateResult(
            summary=summary,
            histogram=histogram,
            breakdown=breakdown,
            time_series=time_series
        )

    def _build_summary(
        self,
        records: List[ReviewRecord],
        band_counts: Counter
    ) -> StatsSummary:
        total = len(records)

        def band(name: str) -> CategoryStat:
            count = band_counts.get(name, 0)
            return CategoryStat(count=count, percent=_percent(count, total))

        # TNPS from raw counts, not from the rounded percentages
        tnps = _percent(band_counts.get(PROMOTER, 0) - band_counts.get(DETRACTOR, 0), total)

        ratings = (normalize_rating(r.rating) for r in records)
        rated = [rating for rating in ratings if rating is not None]
        average = round_half_up(sum(rated) / len(rated), 2) if rated else 0.0

        return StatsSummary(
            total_reviews=total,
            responders=total,
            promoters=band(PROMOTER),
            neutral=band(NEUTRAL),
            detractors=band(DETRACTOR),
            tnps=tnps,
            average_rating=average
        )

    def _build_histogram(self, records: List[ReviewRecord]) -> List[RatingBucket]:
        rating_counts = Counter(
            normalize_rating(r.rating) for r in records if is_valid_rating(r.rating)
        )
        return [
            RatingBucket(rating=rating, count=rating_counts.get(rating, 0))
            for rating in range(MIN_RATING, MAX_RATING + 1)
        ]

    def _build_breakdown(self, band_counts: Counter) -> List[BreakdownEntry]:
        return [
            BreakdownEntry(category=category, count=band_counts[band])
            for band, category in BREAKDOWN_CATEGORIES
            if band_counts.get(band, 0) > 0
        ]

    def _build_time_series(self, records: List[ReviewRecord]) -> List[TimeSeriesPoint]:
        dates = [self.date_key(r.created_at) for r in records if r.created_at is not None]
        if not dates:
            return []

        # ISO date strings sort chronologically
        daily_counts = pd.Series(dates, dtype="object").value_counts().sort_index()

        return [
            TimeSeriesPoint(date=str(date), count=int(count))
            for date, count in daily_counts.items()
        ]


def aggregate(
    records: Iterable[ReviewRecord],
    date_key: Optional[DateKey] = None
) -> AggregateResult:
    """Aggregate reviews with a one-off ReviewStatsAggregator."""
    return ReviewStatsAggregator(date_key=date_key).aggregate(records)


def _percent(count: int, total: int) -> float:
    if total == 0:
        return 0.0
    return round_half_up(count / total * 100, 1)
