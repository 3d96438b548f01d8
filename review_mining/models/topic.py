"""
Topic model data model.

Represents a topic model fit on one customer-satisfaction subset.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import pandas as pd


@dataclass
class TopicModel:
    """
    Fitted topic model for a document subset.

    Topic ids are positional and exchangeable: two fits with different
    seeds can return the same topics under different ids.
    """
    subset: str  # "satisfied" or "dissatisfied"
    k: int
    seed: int
    beta: pd.DataFrame  # topic × term, each row sums to 1
    gamma: pd.DataFrame  # document × topic, each row sums to 1
    metadata: dict = field(default_factory=dict)

    def __post_init__(self):
        if self.k < 1:
            raise ValueError(f"Invalid topic count: {self.k}. Must be >= 1")
        if self.beta.shape[0] != self.k:
            raise ValueError(f"beta has {self.beta.shape[0]} topics, expected {self.k}")

    @property
    def vocabulary(self) -> List[str]:
        return list(self.beta.columns)

    def top_terms(self, n: int = 15) -> Dict[int, List[Tuple[str, float]]]:
        """
        Top `n` terms per topic ranked by beta.

        Returns fewer than `n` terms when the vocabulary is smaller.
        """
        if n < 1:
            raise ValueError(f"n must be >= 1, got {n}")

        result = {}
        for topic_id, weights in self.beta.iterrows():
            ranked = weights.sort_values(ascending=False, kind="mergesort").head(n)
            result[int(topic_id)] = [(term, float(weight)) for term, weight in ranked.items()]
        return result

    def top_terms_frame(self, n: int = 15) -> pd.DataFrame:
        """Long-format table (subset, topic, rank, term, beta)."""
        rows = []
        for topic_id, terms in self.top_terms(n).items():
            for rank, (term, weight) in enumerate(terms, start=1):
                rows.append({
                    "subset": self.subset,
                    "topic": topic_id,
                    "rank": rank,
                    "term": term,
                    "beta": weight
                })
        return pd.DataFrame(rows, columns=["subset", "topic", "rank", "term", "beta"])
