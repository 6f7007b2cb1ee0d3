"""
Unit tests for the dashboard pipeline and CLI.
"""

import json
import os
import tempfile
from datetime import datetime
from unittest.mock import MagicMock

import pytest

import main
from src.agents.ingestion import IngestionAgent, RetrievalError
from src.models.review import ReviewRecord
from src.orchestrator import DashboardPipeline, build_pipeline, report_stamp


def test_run_aggregates_and_saves():
    agent = MagicMock(spec=IngestionAgent)
    agent.fetch_reviews.return_value = [
        ReviewRecord(rating=9, created_at=datetime(2024, 4, 1, 10, 0)),
        ReviewRecord(rating=2, created_at=datetime(2024, 4, 2, 10, 0)),
    ]

    with tempfile.TemporaryDirectory() as tmpdir:
        pipeline = DashboardPipeline(ingestion_agent=agent, output_dir=tmpdir)
        result = pipeline.run(client_id="c1", start_date="2024-04-01", end_date="2024-04-30")

        agent.fetch_reviews.assert_called_once_with(
            client_id="c1", start_date="2024-04-01", end_date="2024-04-30"
        )
        assert result.error is None
        assert result.stats.summary.total_reviews == 2
        assert result.report_path == os.path.join(
            tmpdir, "stats_client-c1_from-2024-04-01_to-2024-04-30.json"
        )

        with open(result.report_path) as f:
            report = json.load(f)
        assert report["metadata"]["filters"]["client_id"] == "c1"
        assert report["metadata"]["retrieval_error"] is None


def test_retrieval_failure_degrades_to_zero():
    agent = MagicMock(spec=IngestionAgent)
    agent.fetch_reviews.side_effect = RetrievalError("Network error fetching reviews.")

    with tempfile.TemporaryDirectory() as tmpdir:
        pipeline = DashboardPipeline(ingestion_agent=agent, output_dir=tmpdir)
        result = pipeline.run(save=False)

    assert result.error == "Network error fetching reviews."
    assert result.records == []
    assert result.report_path is None
    assert result.stats.summary.total_reviews == 0
    assert result.stats.summary.tnps == 0
    assert result.stats.breakdown == []


def test_retrieval_failure_propagates_when_not_degrading():
    agent = MagicMock(spec=IngestionAgent)
    agent.fetch_reviews.side_effect = RetrievalError("boom")

    with tempfile.TemporaryDirectory() as tmpdir:
        pipeline = DashboardPipeline(
            ingestion_agent=agent,
            output_dir=tmpdir,
            degrade_on_retrieval_error=False
        )
        with pytest.raises(RetrievalError):
            pipeline.run()


def test_build_pipeline_mock_mode():
    with tempfile.TemporaryDirectory() as tmpdir:
        pipeline = build_pipeline(output_dir=tmpdir, use_mock_data=True)
        result = pipeline.run()

        assert result.stats.summary.total_reviews > 0
        assert os.path.exists(result.report_path)


def test_cli_with_export(capsys, monkeypatch):
    with tempfile.TemporaryDirectory() as tmpdir:
        monkeypatch.setattr(main.settings, "LOG_FILE", os.path.join(tmpdir, "run.log"))
        reviews_path = os.path.join(tmpdir, "reviews.json")
        with open(reviews_path, "w") as f:
            json.dump([
                {"_id": "a", "rating": 10, "createdAt": "2024-01-01T10:00:00"},
                {"_id": "b", "rating": 0, "createdAt": "2024-01-01T11:00:00"},
            ], f)

        exit_code = main.main([
            "--input", reviews_path,
            "--output-dir", os.path.join(tmpdir, "out"),
            "--show-table",
        ])

        out = capsys.readouterr().out
        assert exit_code == 0
        assert "Service TNPS" in out
        assert "All Reviews (2)" in out
        assert os.path.exists(os.path.join(tmpdir, "out", "stats_all.json"))


def test_cli_invalid_date_fails(capsys, monkeypatch):
    with tempfile.TemporaryDirectory() as tmpdir:
        monkeypatch.setattr(main.settings, "LOG_FILE", os.path.join(tmpdir, "run.log"))

        exit_code = main.main([
            "--mock",
            "--start-date", "01-01-2024",
            "--output-dir", tmpdir,
        ])

        assert exit_code == 1
        assert "Run failed" in capsys.readouterr().out


def test_report_stamp_distinguishes_filters():
    assert report_stamp() == "all"
    assert report_stamp(end_date="2024-04-30") == "to-2024-04-30"
    assert report_stamp(start_date="2024-04-30") == "from-2024-04-30"
    assert report_stamp("c1", "2024-04-01", "2024-04-30") == "client-c1_from-2024-04-01_to-2024-04-30"
    assert report_stamp(client_id="a/b c") == "client-a-b-c"
    assert report_stamp(client_id="all") != report_stamp()


def test_runs_with_different_filters_keep_separate_reports():
    agent = MagicMock(spec=IngestionAgent)
    agent.fetch_reviews.return_value = [
        ReviewRecord(rating=9, created_at=datetime(2024, 4, 1, 10, 0)),
    ]

    with tempfile.TemporaryDirectory() as tmpdir:
        pipeline = DashboardPipeline(ingestion_agent=agent, output_dir=tmpdir)

        first = pipeline.run(client_id="c1", end_date="2024-04-30")
        second = pipeline.run(client_id="c2", end_date="2024-04-30")
        third = pipeline.run(client_id="c1", start_date="2024-04-15", end_date="2024-04-30")

        paths = {first.report_path, second.report_path, third.report_path}
        assert len(paths) == 3
        assert all(os.path.exists(path) for path in paths)
