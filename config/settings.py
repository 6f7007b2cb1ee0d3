"""
Configuration settings for FeedbackPulse.

Centralized configuration for retrieval, reporting and logging.
"""

import os
from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
DATA_ROOT = PROJECT_ROOT / "data"
OUTPUT_ROOT = PROJECT_ROOT / "output"

# Retrieval
DEFAULT_REVIEWS_FILE = Path(
    os.getenv("FEEDBACKPULSE_REVIEWS_FILE", str(DATA_ROOT / "reviews.json"))
)
USE_MOCK_DATA = os.getenv("FEEDBACKPULSE_USE_MOCK_DATA", "").lower() in ("1", "true", "yes")
MOCK_REVIEW_COUNT = 50  # Number of mock reviews to generate
MOCK_DAYS = 7  # Days the mock reviews are spread over

# Pipeline Configuration
DEGRADE_ON_RETRIEVAL_ERROR = True  # Zeroed dashboard instead of a crash

# Logging
LOG_LEVEL = os.getenv("FEEDBACKPULSE_LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = "feedbackpulse.log"
