"""
Rating Classifier.

Random forest predicting the 1-5 rating from a document-term
representation plus the document sentiment score.

Ratings skew heavily towards 4 and 5 and nothing here rebalances the
classes, so sensitivity for ratings 1-3 can be close to zero. That is
reported in the evaluation warnings, not corrected.
"""

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from scipy import sparse
from sklearn.ensemble import RandomForestClassifier
from sklearn.metrics import confusion_matrix

from review_mining.errors import ModelFitError
from review_mining.models.evaluation import EvaluationReport, TrainedModel
from review_mining.models.matrix import DocumentTermMatrix
from review_mining.stages.sentiment import SENTIMENT_SCORE

logger = logging.getLogger(__name__)


class RatingClassifier:
    """
    Trains one random forest per representation: bagged decision trees,
    each grown on a bootstrap resample with a random feature subset at
    every split.
    """

    def __init__(
        self,
        n_estimators: int = 500,
        max_features: str = "sqrt",
        seed: int = 1234,
        labels: Sequence[int] = (1, 2, 3, 4, 5),
        low_sensitivity_threshold: float = 0.05
    ):
        """
        Initialize rating classifier.

        Args:
            n_estimators: Number of trees
            max_features: Features considered per split (scikit-learn syntax)
            seed: Random seed for bootstrap and feature sampling
            labels: Rating classes reported in the confusion matrix
            low_sensitivity_threshold: Warn when a class's sensitivity is at or below this
        """
        if n_estimators < 1:
            raise ValueError(f"n_estimators must be >= 1, got {n_estimators}")

        self.n_estimators = n_estimators
        self.max_features = max_features
        self.seed = seed
        self.labels = list(labels)
        self.low_sensitivity_threshold = low_sensitivity_threshold

        logger.info(
            f"Initialized RatingClassifier with n_estimators={n_estimators}, "
            f"max_features={max_features}, seed={seed}"
        )

    def build_features(
        self,
        matrix: DocumentTermMatrix,
        sentiment: pd.Series
    ) -> Tuple[sparse.csr_matrix, List[str]]:
        """
        Join a representation with the document sentiment column.

        Args:
            matrix: Pruned document-term matrix
            sentiment: Sentiment scores indexed by document id

        Returns:
            (sparse feature matrix, feature names); sentiment is the last column
        """
        column = sentiment.reindex(matrix.document_ids).fillna(0.0).to_numpy(dtype=np.float64)
        features = sparse.hstack(
            [matrix.matrix, sparse.csr_matrix(column.reshape(-1, 1))],
            format="csr"
        )
        return features, matrix.terms + [SENTIMENT_SCORE]

    def train(
        self,
        features: sparse.spmatrix,
        ratings: Sequence[int],
        feature_names: List[str],
        representation: str
    ) -> TrainedModel:
        """
        Fit a random forest on the training rows.

        Raises:
            ModelFitError: On empty input, a single rating class, or an estimator failure
        """
        y = np.asarray(ratings)

        if features.shape[0] == 0:
            raise ModelFitError(representation, "no training documents")
        if features.shape[0] != len(y):
            raise ModelFitError(
                representation, f"{features.shape[0]} feature rows but {len(y)} labels"
            )
        if features.shape[1] != len(feature_names):
            raise ModelFitError(
                representation, f"{features.shape[1]} columns but {len(feature_names)} feature names"
            )

        classes = np.unique(y)
        if len(classes) < 2:
            raise ModelFitError(representation, f"only one rating class present: {classes.tolist()}")

        estimator = RandomForestClassifier(
            n_estimators=self.n_estimators,
            max_features=self.max_features,
            bootstrap=True,
            random_state=self.seed
        )
        try:
            estimator.fit(features, y)
        except ValueError as e:
            raise ModelFitError(representation, str(e)) from e

        logger.info(
            f"Trained '{representation}' random forest on {features.shape[0]} documents "
            f"x {features.shape[1]} features ({len(classes)} classes)"
        )
        return TrainedModel(
            representation=representation,
            estimator=estimator,
            feature_names=list(feature_names)
        )

    def predict(self, model: TrainedModel, features: sparse.spmatrix) -> np.ndarray:
        return model.predict(features)

    def evaluate(
        self,
        predicted: Sequence[int],
        actual: Sequence[int],
        representation: str
    ) -> EvaluationReport:
        """
        Confusion matrix and per-class statistics.

        Per class (one-vs-rest): sensitivity = TP / (TP + FN),
        specificity = TN / (TN + FP), balanced accuracy = their mean.
        Undefined ratios (and balanced accuracy built on one) are NaN.
        """
        actual = np.asarray(actual)
        predicted = np.asarray(predicted)
        if len(actual) != len(predicted):
            raise ValueError(f"Got {len(predicted)} predictions for {len(actual)} labels")

        cm = confusion_matrix(actual, predicted, labels=self.labels)
        total = cm.sum()

        rows = []
        for i, label in enumerate(self.labels):
            tp = cm[i, i]
            fn = cm[i, :].sum() - tp
            fp = cm[:, i].sum() - tp
            tn = total - tp - fn - fp
            sensitivity = tp / (tp + fn) if tp + fn > 0 else np.nan
            specificity = tn / (tn + fp) if tn + fp > 0 else np.nan
            rows.append({
                "rating": label,
                "sensitivity": sensitivity,
                "specificity": specificity,
                "balanced_accuracy": (sensitivity + specificity) / 2,
                "support": int(tp + fn)
            })

        per_class = pd.DataFrame(rows).set_index("rating")
        accuracy = float(np.trace(cm) / total) if total > 0 else float("nan")

        warnings = []
        for label, row in per_class.iterrows():
            if row["support"] > 0 and row["sensitivity"] <= self.low_sensitivity_threshold:
                message = (
                    f"'{representation}': sensitivity for rating {label} is "
                    f"{row['sensitivity']:.3f} ({int(row['support'])} test documents); "
                    f"classes are imbalanced and not resampled"
                )
                logger.warning(message)
                warnings.append(message)

        logger.info(f"Evaluated '{representation}' on {total} documents: accuracy={accuracy:.3f}")

        return EvaluationReport(
            representation=representation,
            labels=list(self.labels),
            confusion_matrix=pd.DataFrame(
                cm,
                index=pd.Index(self.labels, name="actual"),
                columns=pd.Index(self.labels, name="predicted")
            ),
            per_class=per_class,
            accuracy=accuracy,
            warnings=warnings
        )

    def feature_importance(self, model: TrainedModel, top_n: Optional[int] = None) -> pd.DataFrame:
        """Ranked (feature, importance) table, optionally truncated."""
        ranking = model.feature_importance()
        return ranking.head(top_n) if top_n else ranking

    def fit_and_evaluate(
        self,
        train: DocumentTermMatrix,
        test: DocumentTermMatrix,
        sentiment: pd.Series,
        y_train: Sequence[int],
        y_test: Sequence[int],
        representation: str
    ) -> Tuple[TrainedModel, EvaluationReport]:
        """Train on `train`, predict `test` and evaluate."""
        X_train, names = self.build_features(train, sentiment)
        X_test, _ = self.build_features(test, sentiment)

        model = self.train(X_train, y_train, names, representation)
        predicted = self.predict(model, X_test)
        return model, self.evaluate(predicted, y_test, representation)
