"""
Dashboard Pipeline Orchestrator.

Coordinates retrieval, aggregation and report output for one dashboard view.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from src.agents.aggregation import ReviewStatsAggregator
from src.agents.ingestion import IngestionAgent, RetrievalError
from src.models.review import ReviewRecord
from src.models.stats import AggregateResult
from src.utils.storage import StorageManager
import config.settings as settings

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Outcome of one dashboard run."""
    records: List[ReviewRecord]
    stats: AggregateResult
    report_path: Optional[str] = None
    error: Optional[str] = None  # retrieval failure message, if any


class DashboardPipeline:
    """
    Orchestrates one dashboard refresh.

    Coordinates:
    1. Retrieval (with filters) → 2. Aggregation → 3. Report output

    When retrieval fails, the statistics are computed over an empty set so
    every figure reads zero instead of showing partial data.
    """

    def __init__(
        self,
        ingestion_agent: IngestionAgent,
        output_dir: str,
        aggregator: Optional[ReviewStatsAggregator] = None,
        degrade_on_retrieval_error: bool = True
    ):
        """
        Initialize pipeline.

        Args:
            ingestion_agent: Source of review records
            output_dir: Directory for report files
            aggregator: Statistics aggregator (default: local calendar dates)
            degrade_on_retrieval_error: If False, retrieval errors propagate
        """
        self.ingestion_agent = ingestion_agent
        self.aggregator = aggregator or ReviewStatsAggregator()
        self.storage = StorageManager(output_dir)
        self.degrade_on_retrieval_error = degrade_on_retrieval_error

        logger.info("Pipeline initialized successfully")

    def run(
        self,
        client_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        save: bool = True
    ) -> PipelineResult:
        """
        Run retrieval, aggregation and (optionally) report output.

        Args:
            client_id: Client filter (exact match)
            start_date: Inclusive start date (YYYY-MM-DD)
            end_date: Inclusive end date (YYYY-MM-DD)
            save: Write report files when True

        Returns:
            PipelineResult
        """
        error = None

        # STAGE 1: Retrieval
        try:
            records = self.ingestion_agent.fetch_reviews(
                client_id=client_id,
                start_date=start_date,
                end_date=end_date
            )
        except RetrievalError as e:
            logger.error(f"Review retrieval failed: {e}")
            if not self.degrade_on_retrieval_error:
                raise
            logger.warning("Continuing with an empty review set (all figures zero)")
            error = str(e)
            records = []

        # STAGE 2: Aggregation
        stats = self.aggregator.aggregate(records)
        summary = stats.summary
        logger.info(
            f"Aggregated {summary.total_reviews} reviews: "
            f"TNPS {summary.tnps}, average rating {summary.average_rating}"
        )

        # STAGE 3: Report output
        report_path = None
        if save:
            metadata = {
                "filters": {
                    "client_id": client_id,
                    "start_date": start_date,
                    "end_date": end_date
                },
                "retrieval_error": error,
                "generated_at": datetime.now(timezone.utc).isoformat()
            }
            report_path = self.storage.save_report(
                stats,
                stamp=report_stamp(client_id, start_date, end_date),
                metadata=metadata
            )

        return PipelineResult(
            records=records,
            stats=stats,
            report_path=report_path,
            error=error
        )


def build_pipeline(
    reviews_path: Optional[str] = None,
    output_dir: Optional[str] = None,
    use_mock_data: Optional[bool] = None
) -> DashboardPipeline:
    """Build a DashboardPipeline from settings, with per-run overrides."""
    if use_mock_data is None:
        use_mock_data = settings.USE_MOCK_DATA

    ingestion_agent = IngestionAgent(
        reviews_path=reviews_path or str(settings.DEFAULT_REVIEWS_FILE),
        use_mock_data=use_mock_data,
        mock_review_count=settings.MOCK_REVIEW_COUNT,
        mock_days=settings.MOCK_DAYS
    )

    return DashboardPipeline(
        ingestion_agent=ingestion_agent,
        output_dir=output_dir or str(settings.OUTPUT_ROOT),
        degrade_on_retrieval_error=settings.DEGRADE_ON_RETRIEVAL_ERROR
    )


def report_stamp(
    client_id: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None
) -> str:
    """
    File name suffix identifying one filter combination.

    e.g. "client-c1_from-2024-04-01_to-2024-04-30", or "all" with no filters.
    """
    parts = []
    if client_id:
        parts.append("client-" + re.sub(r"[^A-Za-z0-9.-]", "-", client_id))
    if start_date:
        parts.append(f"from-{start_date}")
    if end_date:
        parts.append(f"to-{end_date}")
    return "_".join(parts) or "all"
