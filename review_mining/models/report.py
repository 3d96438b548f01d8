"""
Run report data model.

Collects the outputs and counters of one pipeline run.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pandas as pd

from review_mining.models.evaluation import EvaluationReport, json_number
from review_mining.models.topic import TopicModel


@dataclass
class BranchFailure:
    """A branch (representation or subset) that did not complete."""
    branch: str
    error_type: str
    message: str

    def to_dict(self) -> dict:
        return {"branch": self.branch, "error_type": self.error_type, "message": self.message}


@dataclass
class RunReport:
    """Outputs of a pipeline run."""
    documents_loaded: int = 0
    documents_after_cleaning: int = 0
    malformed_lines: int = 0
    incomplete_records: int = 0
    empty_documents: int = 0
    token_count: int = 0
    vocabulary_sizes: Dict[str, int] = field(default_factory=dict)
    sentiment_by_rating: Optional[pd.DataFrame] = None
    class_proportions: Optional[pd.DataFrame] = None
    evaluations: Dict[str, EvaluationReport] = field(default_factory=dict)
    feature_importances: Dict[str, pd.DataFrame] = field(default_factory=dict)
    topic_models: Dict[str, TopicModel] = field(default_factory=dict)
    branch_failures: List[BranchFailure] = field(default_factory=list)
    tokens: Optional[pd.DataFrame] = None

    @property
    def succeeded(self) -> bool:
        return not self.branch_failures

    def summary(self) -> dict:
        """JSON-serializable run summary (counts, accuracies, failures)."""
        return {
            "documents_loaded": self.documents_loaded,
            "documents_after_cleaning": self.documents_after_cleaning,
            "malformed_lines": self.malformed_lines,
            "incomplete_records": self.incomplete_records,
            "empty_documents": self.empty_documents,
            "token_count": self.token_count,
            "vocabulary_sizes": dict(self.vocabulary_sizes),
            "accuracy": {
                name: json_number(report.accuracy) for name, report in self.evaluations.items()
            },
            "topic_subsets": sorted(self.topic_models),
            "branch_failures": [failure.to_dict() for failure in self.branch_failures]
        }
