"""
Configuration settings for the review mining pipeline.

Centralized configuration for all stages and pipeline parameters.
"""

import os
from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
DATA_ROOT = Path(os.getenv("REVIEW_MINING_DATA_ROOT", PROJECT_ROOT / "data"))
OUTPUT_ROOT = Path(os.getenv("REVIEW_MINING_OUTPUT_ROOT", PROJECT_ROOT / "output"))
DEFAULT_INPUT_PATH = DATA_ROOT / "reviews.json"

# Loader
RATING_FIELD = "overall"
TEXT_FIELD = "reviewText"
DEFAULT_MAX_DOCUMENTS = 5000
SKIP_MALFORMED_LINES = True  # False = fail fast on the first bad line

# Vectorizer (drop terms present in fewer than 1% of documents)
MIN_DOC_FRACTION = 0.01

# Sentiment
SENTIMENT_MATCHED_ONLY = True  # average over lexicon hits only

# Dataset splitter
TRAIN_FRACTION = 0.7
RANDOM_SEED = int(os.getenv("REVIEW_MINING_SEED", "1234"))

# Classifier
N_ESTIMATORS = 500
MAX_FEATURES = "sqrt"
RATING_LABELS = (1, 2, 3, 4, 5)
LOW_SENSITIVITY_THRESHOLD = 0.05

# Topic modeler
NUM_TOPICS = 3
TOP_N_TERMS = 15
SATISFIED_RATINGS = (4, 5)
DISSATISFIED_RATINGS = (1, 2)
TOPIC_MIN_DOC_FRACTION = 0.0
LDA_MAX_ITER = 50

# Pipeline Configuration
CONTINUE_ON_BRANCH_FAILURE = True
EXPORT_TOKEN_TABLE = True

# Logging
LOG_LEVEL = os.getenv("REVIEW_MINING_LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = "review_mining.log"
