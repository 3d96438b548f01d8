"""
Storage utility.

File output for run results: token table, classifier evaluations,
feature rankings, topic terms and run metadata.
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Dict, List, Optional

import pandas as pd

from review_mining.models.evaluation import EvaluationReport
from review_mining.models.report import RunReport
from review_mining.models.topic import TopicModel

logger = logging.getLogger(__name__)


class StorageManager:
    """
    Writes the outputs of a run under one directory.

    Layout:
    - tokens.csv
    - sentiment_by_rating.csv
    - classifier/<representation>_confusion_matrix.csv
    - classifier/<representation>_per_class.csv
    - classifier/<representation>_feature_importance.csv
    - topics/<subset>_top_terms.csv
    - run_metadata.json
    """

    def __init__(self, output_root: str):
        """
        Initialize storage manager.

        Args:
            output_root: Directory for this run's outputs
        """
        self.output_root = str(output_root)
        self.classifier_dir = os.path.join(self.output_root, "classifier")
        self.topics_dir = os.path.join(self.output_root, "topics")

        # Create directories if they don't exist
        os.makedirs(self.classifier_dir, exist_ok=True)
        os.makedirs(self.topics_dir, exist_ok=True)

        logger.info(f"Initialized StorageManager with output_root={self.output_root}")

    def save_tokens(self, tokens: pd.DataFrame) -> str:
        """Save the cleaned (document_id, token, lemma) table."""
        filepath = os.path.join(self.output_root, "tokens.csv")
        tokens.to_csv(filepath, index=False)
        logger.info(f"Saved {len(tokens)} token records to {filepath}")
        return filepath

    def save_sentiment_by_rating(self, summary: pd.DataFrame) -> str:
        filepath = os.path.join(self.output_root, "sentiment_by_rating.csv")
        summary.to_csv(filepath)
        logger.info(f"Saved sentiment by rating to {filepath}")
        return filepath

    def save_evaluation(self, report: EvaluationReport) -> List[str]:
        """Save the confusion matrix and per-class table of one representation."""
        name = report.representation
        cm_path = os.path.join(self.classifier_dir, f"{name}_confusion_matrix.csv")
        per_class_path = os.path.join(self.classifier_dir, f"{name}_per_class.csv")

        report.confusion_matrix.to_csv(cm_path)
        report.per_class.to_csv(per_class_path)

        logger.info(f"Saved '{name}' evaluation to {self.classifier_dir}")
        return [cm_path, per_class_path]

    def save_feature_importance(self, representation: str, ranking: pd.DataFrame) -> str:
        filepath = os.path.join(self.classifier_dir, f"{representation}_feature_importance.csv")
        ranking.to_csv(filepath, index=False)
        logger.info(f"Saved {len(ranking)} '{representation}' feature importances to {filepath}")
        return filepath

    def save_top_terms(self, model: TopicModel, n: int = 15) -> str:
        filepath = os.path.join(self.topics_dir, f"{model.subset}_top_terms.csv")
        model.top_terms_frame(n).to_csv(filepath, index=False)
        logger.info(f"Saved '{model.subset}' top terms to {filepath}")
        return filepath

    def save_run_metadata(self, metadata: Dict) -> str:
        """Save run metadata as JSON, stamped with the write time."""
        filepath = os.path.join(self.output_root, "run_metadata.json")
        payload = dict(metadata)
        payload["generated_at"] = datetime.now(timezone.utc).isoformat()

        try:
            with open(filepath, 'w') as f:
                json.dump(payload, f, indent=2, allow_nan=False)
            logger.info(f"Saved run metadata to {filepath}")
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save run metadata: {e}")
            raise
        return filepath

    def load_run_metadata(self) -> Optional[Dict]:
        """
        Load the run metadata.

        Returns:
            Metadata dict, or None if no run has been saved here
        """
        filepath = os.path.join(self.output_root, "run_metadata.json")

        if not os.path.exists(filepath):
            logger.warning(f"No run metadata found in {self.output_root}")
            return None

        with open(filepath, 'r') as f:
            return json.load(f)

    def save_run(self, report: RunReport, top_n: int = 15, save_tokens: bool = True) -> Dict:
        """
        Save every output of a run report.

        Returns:
            The metadata dict written to run_metadata.json
        """
        if save_tokens and report.tokens is not None:
            self.save_tokens(report.tokens)
        if report.sentiment_by_rating is not None:
            self.save_sentiment_by_rating(report.sentiment_by_rating)

        for evaluation in report.evaluations.values():
            self.save_evaluation(evaluation)
        for representation, ranking in report.feature_importances.items():
            self.save_feature_importance(representation, ranking)
        for model in report.topic_models.values():
            self.save_top_terms(model, top_n)

        metadata = report.summary()
        metadata["evaluations"] = {
            name: evaluation.to_dict() for name, evaluation in report.evaluations.items()
        }
        self.save_run_metadata(metadata)
        return metadata
