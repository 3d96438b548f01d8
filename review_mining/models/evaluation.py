"""
Classifier result models.

A fitted rating classifier and the evaluation of its held-out predictions.
"""

import math
from dataclasses import dataclass, field
from typing import Any, List, Optional

import numpy as np
import pandas as pd
from scipy import sparse


def json_number(value) -> Optional[float]:
    """Float for JSON output; undefined (NaN) statistics become None."""
    value = float(value)
    return None if math.isnan(value) else value


@dataclass
class TrainedModel:
    """
    Fitted estimator bound to one representation and one train split.
    """
    representation: str  # "count" or "tfidf"
    estimator: Any  # Fitted scikit-learn classifier
    feature_names: List[str]

    def predict(self, features: sparse.spmatrix) -> np.ndarray:
        """Predict ratings for a feature matrix with the training columns."""
        if features.shape[1] != len(self.feature_names):
            raise ValueError(
                f"Expected {len(self.feature_names)} features for '{self.representation}', "
                f"got {features.shape[1]}"
            )
        return self.estimator.predict(features)

    def feature_importance(self) -> pd.DataFrame:
        """Features ranked by importance (descending)."""
        ranking = pd.DataFrame({
            "feature": self.feature_names,
            "importance": self.estimator.feature_importances_
        })
        ranking = ranking.sort_values(
            ["importance", "feature"], ascending=[False, True], kind="mergesort"
        )
        return ranking.reset_index(drop=True)


@dataclass
class EvaluationReport:
    """
    Confusion matrix and per-class statistics for one representation.

    `confusion_matrix` rows are actual ratings, columns predicted ratings.
    """
    representation: str
    labels: List[int]
    confusion_matrix: pd.DataFrame
    per_class: pd.DataFrame  # sensitivity, specificity, balanced_accuracy, support
    accuracy: float
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "representation": self.representation,
            "labels": [int(label) for label in self.labels],
            "accuracy": json_number(self.accuracy),
            "confusion_matrix": self.confusion_matrix.values.tolist(),
            "per_class": {
                str(label): {key: json_number(value) for key, value in row.items()}
                for label, row in self.per_class.iterrows()
            },
            "warnings": list(self.warnings)
        }
