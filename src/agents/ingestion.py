"""
Ingestion Agent.

Loads branch reviews from a JSON export of the reviews API and applies
the dashboard filters (client, start date, end date).
Supports both real exports and mock data for demos.
"""

import json
import logging
import os
import uuid
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Union

from src.agents.aggregation import local_calendar_date
from src.models.review import InvoiceData, ReviewRecord

logger = logging.getLogger(__name__)

DateLike = Union[str, date, None]


class RetrievalError(Exception):
    """Reviews could not be retrieved. The caller decides how to degrade."""


class IngestionAgent:
    """
    Fetches branch reviews.

    In real mode, reviews are read from a JSON file holding the response
    body of ``GET /branch/reviews`` (a list of review objects).
    In mock mode, deterministic synthetic reviews are generated.
    """

    def __init__(
        self,
        reviews_path: Optional[str] = None,
        use_mock_data: bool = False,
        mock_review_count: int = 50,
        mock_days: int = 7
    ):
        """
        Initialize ingestion agent.

        Args:
            reviews_path: Path to the reviews JSON export (real mode)
            use_mock_data: If True, generate mock reviews instead of reading a file
            mock_review_count: Number of mock reviews to generate
            mock_days: Number of days the mock reviews are spread over
        """
        self.reviews_path = reviews_path
        self.use_mock_data = use_mock_data
        self.mock_review_count = mock_review_count
        self.mock_days = mock_days

        if use_mock_data:
            logger.info("Initialized IngestionAgent in MOCK mode")
        else:
            logger.info(f"Initialized IngestionAgent reading {reviews_path}")

    def fetch_reviews(
        self,
        client_id: Optional[str] = None,
        start_date: DateLike = None,
        end_date: DateLike = None
    ) -> List[ReviewRecord]:
        """
        Fetch reviews matching the dashboard filters.

        Args:
            client_id: Only reviews for this client (exact match)
            start_date: Inclusive start date (YYYY-MM-DD)
            end_date: Inclusive end date (YYYY-MM-DD)

        Returns:
            List of ReviewRecord objects

        Raises:
            RetrievalError: If the export cannot be read or has the wrong shape
        """
        start = _parse_filter_date(start_date, "start_date")
        end = _parse_filter_date(end_date, "end_date")

        if self.use_mock_data:
            records = self._generate_mock_reviews(self.mock_review_count, self.mock_days)
        else:
            records = self._load_reviews()

        filtered = filter_reviews(records, client_id=client_id, start_date=start, end_date=end)

        logger.info(
            f"Fetched {len(filtered)} of {len(records)} reviews "
            f"(client={client_id or 'all'}, from={start or '-'}, to={end or '-'})"
        )
        return filtered

    def _load_reviews(self) -> List[ReviewRecord]:
        """Read and parse the JSON export."""
        if not self.reviews_path:
            raise RetrievalError("No reviews file configured")

        if not os.path.exists(self.reviews_path):
            raise RetrievalError(f"Reviews file not found: {self.reviews_path}")

        try:
            with open(self.reviews_path, 'r', encoding='utf-8') as f:
                payload = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise RetrievalError(f"Failed to read reviews from {self.reviews_path}: {e}") from e

        # Error bodies from the API look like {"message": "..."}
        if isinstance(payload, dict):
            message = payload.get("message", "unexpected JSON object")
            raise RetrievalError(f"Failed to fetch reviews: {message}")

        if not isinstance(payload, list):
            raise RetrievalError(
                f"Expected a list of reviews, got {type(payload).__name__}"
            )

        records = []
        for index, item in enumerate(payload):
            if not isinstance(item, dict):
                logger.warning(f"Skipping non-object review at index {index}")
                continue
            records.append(ReviewRecord.from_dict(item))

        logger.debug(f"Loaded {len(records)} reviews from {self.reviews_path}")
        return records

    def _generate_mock_reviews(self, count: int, days: int) -> List[ReviewRecord]:
        """
        Generate synthetic reviews for demos.

        Creates a realistic spread:
        - Ratings across the whole 0-10 scale, skewed towards promoters
        - A few unrated reviews
        - Reviews spread over the last ``days`` days for two clients
        """
        ratings = [10, 9, 9, 8, 10, 7, 6, 9, 3, 8, 10, 0, 5, None, 9, 2]
        clients = [
            ("client-north", "north@example.com"),
            ("client-south", "south@example.com"),
        ]
        transcripts = [
            "Service was quick and the staff were friendly.",
            "Car was ready on time but the invoice was confusing.",
            "Waited two hours past the promised delivery time.",
            "Excellent work, will come back.",
        ]

        today = datetime.now(timezone.utc).replace(hour=10, minute=0, second=0, microsecond=0)
        days = max(days, 1)

        reviews = []
        for i in range(count):
            client_id, client_email = clients[i % len(clients)]
            created_at = today - timedelta(days=i % days, minutes=7 * i)

            review = ReviewRecord(
                rating=ratings[i % len(ratings)],
                created_at=created_at,
                review_id=str(uuid.uuid4()),
                customer_name=f"Customer {i + 1}",
                customer_mobile=f"+1555{i:07d}",
                client_id=client_id,
                client_email=client_email,
                invoice_data=InvoiceData(
                    vin=f"VIN{i:014d}",
                    job_card_number=f"JC-{1000 + i}",
                    invoice_number=f"INV-{5000 + i}",
                    invoice_date=created_at.date().isoformat()
                ),
                transcribed_text=transcripts[i % len(transcripts)]
            )
            reviews.append(review)

        logger.info(f"Generated {len(reviews)} mock reviews over {days} days")
        return reviews


def filter_reviews(
    records: List[ReviewRecord],
    client_id: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> List[ReviewRecord]:
    """
    Apply the dashboard filters.

    Date bounds are inclusive and compared against the local calendar date
    of ``created_at``. Reviews without a timestamp never match a date filter.
    """
    filtered = []
    for record in records:
        if client_id and record.client_id != client_id:
            continue

        if start_date or end_date:
            if record.created_at is None:
                continue
            day = date.fromisoformat(local_calendar_date(record.created_at))
            if start_date and day < start_date:
                continue
            if end_date and day > end_date:
                continue

        filtered.append(record)
    return filtered


def _parse_filter_date(value: DateLike, name: str) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as e:
        raise ValueError(f"Invalid {name}: {value}. Expected YYYY-MM-DD") from e
