"""
Review data model.

Represents a single customer feedback record as returned by the
branch reviews API.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvoiceData:
    """Invoice metadata attached to a review. Display only."""
    vin: Optional[str] = None
    job_card_number: Optional[str] = None
    invoice_number: Optional[str] = None
    invoice_date: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "InvoiceData":
        data = data or {}
        return cls(
            vin=data.get("vin"),
            job_card_number=data.get("jobCardNumber"),
            invoice_number=data.get("invoiceNumber"),
            invoice_date=data.get("invoiceDate")
        )

    def to_dict(self) -> dict:
        return {
            "vin": self.vin,
            "jobCardNumber": self.job_card_number,
            "invoiceNumber": self.invoice_number,
            "invoiceDate": self.invoice_date
        }


@dataclass(frozen=True)
class ReviewRecord:
    """
    A submitted customer review.

    Only ``rating`` and ``created_at`` are read by the statistics
    aggregator. Everything else is passthrough data for the review table.
    """
    rating: Optional[int] = None  # 0-10, None when unrated
    created_at: Optional[datetime] = None
    review_id: Optional[str] = None
    customer_name: Optional[str] = None
    customer_mobile: Optional[str] = None
    client_id: Optional[str] = None
    client_email: Optional[str] = None
    invoice_data: InvoiceData = field(default_factory=InvoiceData)
    invoice_file_url: Optional[str] = None
    transcribed_text: Optional[str] = None
    voice_data: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "ReviewRecord":
        """
        Create ReviewRecord from an API JSON object.

        Malformed ratings and timestamps are tolerated: they become None
        so the record still counts as a responder.
        """
        client = data.get("client")
        if isinstance(client, dict):
            client_id = client.get("_id")
            client_email = client.get("email")
        else:
            client_id = client
            client_email = None

        return cls(
            rating=parse_rating(data.get("rating")),
            created_at=parse_timestamp(data.get("createdAt")),
            review_id=data.get("_id"),
            customer_name=data.get("customerName"),
            customer_mobile=data.get("customerMobile"),
            client_id=client_id,
            client_email=client_email,
            invoice_data=InvoiceData.from_dict(data.get("invoiceData")),
            invoice_file_url=data.get("invoiceFileUrl"),
            transcribed_text=data.get("transcribedText"),
            voice_data=data.get("voiceData")
        )

    def to_dict(self) -> dict:
        """Convert back to the API's camelCase JSON shape."""
        return {
            "_id": self.review_id,
            "rating": self.rating,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "customerName": self.customer_name,
            "customerMobile": self.customer_mobile,
            "client": {"_id": self.client_id, "email": self.client_email},
            "invoiceData": self.invoice_data.to_dict(),
            "invoiceFileUrl": self.invoice_file_url,
            "transcribedText": self.transcribed_text,
            "voiceData": self.voice_data
        }


def parse_rating(value) -> Optional[int]:
    """Coerce a raw rating value to int, or None if it is not a whole number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    logger.warning(f"Ignoring non-integer rating: {value!r}")
    return None


def parse_timestamp(value) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp (``Z`` suffix allowed)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        logger.warning(f"Ignoring non-string timestamp: {value!r}")
        return None

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        logger.warning(f"Ignoring unparseable timestamp: {value!r}")
        return None
