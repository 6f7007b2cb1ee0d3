"""
Unit tests for the Ingestion Agent.
"""

import json
import os
import tempfile
from datetime import date, datetime

import pytest

from src.agents.ingestion import IngestionAgent, RetrievalError, filter_reviews
from src.models.review import ReviewRecord


def write_export(tmpdir, payload, name="reviews.json"):
    path = os.path.join(tmpdir, name)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f)
    return path


SAMPLE_EXPORT = [
    {
        "_id": "r1",
        "rating": 10,
        "createdAt": "2024-06-01T09:15:00",
        "customerName": "Asha",
        "client": {"_id": "c1", "email": "c1@example.com"},
    },
    {
        "_id": "r2",
        "rating": 0,
        "createdAt": "2024-06-02T17:40:00",
        "client": {"_id": "c2", "email": "c2@example.com"},
    },
    {
        "_id": "r3",
        "rating": None,
        "createdAt": "2024-06-03T08:00:00",
        "client": "c1",
    },
    {
        "_id": "r4",
        "rating": 7,
        "client": {"_id": "c1"},
    },
]


def test_fetch_all_reviews():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = write_export(tmpdir, SAMPLE_EXPORT)
        agent = IngestionAgent(reviews_path=path)

        reviews = agent.fetch_reviews()

        assert [r.review_id for r in reviews] == ["r1", "r2", "r3", "r4"]
        assert reviews[0].rating == 10
        assert reviews[1].rating == 0
        assert reviews[2].rating is None
        assert reviews[2].client_id == "c1"
        assert reviews[3].created_at is None


def test_client_filter_exact_match():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = write_export(tmpdir, SAMPLE_EXPORT)
        agent = IngestionAgent(reviews_path=path)

        reviews = agent.fetch_reviews(client_id="c1")

        assert [r.review_id for r in reviews] == ["r1", "r3", "r4"]
        assert agent.fetch_reviews(client_id="c") == []


def test_date_filters_inclusive():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = write_export(tmpdir, SAMPLE_EXPORT)
        agent = IngestionAgent(reviews_path=path)

        reviews = agent.fetch_reviews(start_date="2024-06-01", end_date="2024-06-02")
        assert [r.review_id for r in reviews] == ["r1", "r2"]

        reviews = agent.fetch_reviews(start_date="2024-06-03")
        assert [r.review_id for r in reviews] == ["r3"]


def test_date_filter_excludes_missing_timestamp():
    records = [
        ReviewRecord(rating=5, created_at=None),
        ReviewRecord(rating=6, created_at=datetime(2024, 6, 1, 12, 0)),
    ]
    filtered = filter_reviews(records, end_date=date(2024, 6, 30))
    assert len(filtered) == 1
    assert filtered[0].rating == 6


def test_invalid_filter_date():
    agent = IngestionAgent(use_mock_data=True)
    with pytest.raises(ValueError, match="start_date"):
        agent.fetch_reviews(start_date="06/01/2024")


def test_missing_file_raises_retrieval_error():
    with tempfile.TemporaryDirectory() as tmpdir:
        agent = IngestionAgent(reviews_path=os.path.join(tmpdir, "missing.json"))
        with pytest.raises(RetrievalError, match="not found"):
            agent.fetch_reviews()


def test_invalid_json_raises_retrieval_error():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "broken.json")
        with open(path, "w") as f:
            f.write("[{not json")

        agent = IngestionAgent(reviews_path=path)
        with pytest.raises(RetrievalError):
            agent.fetch_reviews()


def test_api_error_body_raises_retrieval_error():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = write_export(tmpdir, {"message": "Not authorized"})
        agent = IngestionAgent(reviews_path=path)

        with pytest.raises(RetrievalError, match="Not authorized"):
            agent.fetch_reviews()


def test_non_object_entries_skipped():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = write_export(tmpdir, [SAMPLE_EXPORT[0], "garbage", 42])
        agent = IngestionAgent(reviews_path=path)

        reviews = agent.fetch_reviews()
        assert [r.review_id for r in reviews] == ["r1"]


def test_no_path_configured():
    agent = IngestionAgent()
    with pytest.raises(RetrievalError):
        agent.fetch_reviews()


def test_mock_reviews():
    agent = IngestionAgent(use_mock_data=True, mock_review_count=20, mock_days=5)

    reviews = agent.fetch_reviews()

    assert len(reviews) == 20
    assert {r.client_id for r in reviews} == {"client-north", "client-south"}
    assert any(r.rating is None for r in reviews)
    assert any(r.rating == 0 for r in reviews)
    assert all(r.created_at is not None for r in reviews)


def test_mock_reviews_client_filter():
    agent = IngestionAgent(use_mock_data=True, mock_review_count=10)

    reviews = agent.fetch_reviews(client_id="client-north")

    assert len(reviews) == 5
    assert all(r.client_id == "client-north" for r in reviews)


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
