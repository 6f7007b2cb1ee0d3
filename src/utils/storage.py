"""
Storage utility.

Writes dashboard reports: the statistics bundle as JSON, and the rating
distribution and daily review volume as CSV tables.
"""

import json
import logging
import os
from typing import Dict, Optional

import pandas as pd

from src.models.stats import AggregateResult

logger = logging.getLogger(__name__)


class StorageManager:
    """
    Manages report output.

    Handles:
    - Statistics bundle (output/stats_<stamp>.json)
    - Rating distribution (output/rating_distribution_<stamp>.csv)
    - Reviews over time (output/reviews_over_time_<stamp>.csv)
    """

    def __init__(self, output_dir: str):
        """
        Initialize storage manager.

        Args:
            output_dir: Directory for report files
        """
        self.output_dir = output_dir
        os.makedirs(self.output_dir, exist_ok=True)

        logger.info(f"Initialized StorageManager with output_dir={output_dir}")

    def save_report(
        self,
        result: AggregateResult,
        stamp: str,
        metadata: Optional[Dict] = None
    ) -> str:
        """
        Save the full statistics report.

        Args:
            result: Aggregated statistics
            stamp: Suffix for file names (end date or "all")
            metadata: Run metadata stored alongside the statistics

        Returns:
            Path to the JSON report
        """
        self.save_histogram(result, stamp)
        self.save_time_series(result, stamp)

        report = result.to_dict()
        report["metadata"] = metadata or {}

        filepath = os.path.join(self.output_dir, f"stats_{stamp}.json")
        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                json.dump(report, f, indent=2, ensure_ascii=False)
            logger.info(f"Saved statistics report to {filepath}")
        except OSError as e:
            logger.error(f"Failed to save statistics report to {filepath}: {e}")
            raise

        return filepath

    def save_histogram(self, result: AggregateResult, stamp: str) -> str:
        """Save the 0-10 rating distribution as CSV."""
        df = pd.DataFrame(
            [bucket.to_dict() for bucket in result.histogram],
            columns=["rating", "count"]
        )
        return self._write_csv(df, f"rating_distribution_{stamp}.csv")

    def save_time_series(self, result: AggregateResult, stamp: str) -> str:
        """Save daily review counts as CSV (one row per active day)."""
        df = pd.DataFrame(
            [point.to_dict() for point in result.time_series],
            columns=["date", "count"]
        )
        return self._write_csv(df, f"reviews_over_time_{stamp}.csv")

    def load_report(self, stamp: str) -> Optional[Dict]:
        """
        Load a previously saved statistics report.

        Returns:
            Report dict, or None if it doesn't exist
        """
        filepath = os.path.join(self.output_dir, f"stats_{stamp}.json")

        if not os.path.exists(filepath):
            logger.debug(f"No statistics report found for {stamp}")
            return None

        with open(filepath, 'r', encoding='utf-8') as f:
            return json.load(f)

    def _write_csv(self, df: pd.DataFrame, filename: str) -> str:
        filepath = os.path.join(self.output_dir, filename)
        try:
            df.to_csv(filepath, index=False)
            logger.info(f"Saved {len(df)} rows to {filepath}")
        except OSError as e:
            logger.error(f"Failed to write {filepath}: {e}")
            raise
        return filepath
