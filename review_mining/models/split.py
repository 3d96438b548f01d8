"""
Train/test split model.

A partition of document ids into disjoint train and test sets.
"""

from dataclasses import dataclass
from typing import List, Tuple

import pandas as pd

from review_mining.models.matrix import DocumentTermMatrix


@dataclass(frozen=True)
class TrainTestSplit:
    """
    Disjoint partition of the corpus document ids.
    The same instance is applied to every representation.
    """
    train_ids: Tuple[int, ...]
    test_ids: Tuple[int, ...]
    seed: int
    train_fraction: float

    def __post_init__(self):
        overlap = set(self.train_ids) & set(self.test_ids)
        if overlap:
            raise ValueError(f"Train and test sets overlap on {sorted(overlap)[:10]}")

    @property
    def all_ids(self) -> List[int]:
        return list(self.train_ids) + list(self.test_ids)

    def apply(self, matrix: DocumentTermMatrix) -> Tuple[DocumentTermMatrix, DocumentTermMatrix]:
        """Return the (train, test) row subsets of `matrix`."""
        return matrix.select_documents(self.train_ids), matrix.select_documents(self.test_ids)

    def labels(self, ratings: pd.Series) -> Tuple[pd.Series, pd.Series]:
        """Return the (train, test) labels from a rating Series indexed by document id."""
        return ratings.loc[list(self.train_ids)], ratings.loc[list(self.test_ids)]

    def class_proportions(self, ratings: pd.Series) -> pd.DataFrame:
        """
        Class proportions of the full corpus and of each partition.

        Args:
            ratings: Rating Series indexed by document id

        Returns:
            DataFrame indexed by rating with columns corpus, train, test
        """
        train, test = self.labels(ratings)
        frame = pd.DataFrame({
            "corpus": ratings.loc[self.all_ids].value_counts(normalize=True),
            "train": train.value_counts(normalize=True),
            "test": test.value_counts(normalize=True)
        })
        return frame.fillna(0.0).sort_index()
