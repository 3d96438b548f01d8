"""
Dataset Splitter.

Stratified train/test partition of the document ids on the rating label.
"""

import logging
from typing import Iterable

import pandas as pd
from sklearn.model_selection import train_test_split

from review_mining.errors import StratificationError
from review_mining.models.split import TrainTestSplit

logger = logging.getLogger(__name__)


class DatasetSplitter:
    """
    Splits documents into train and test sets, preserving the share of
    each rating class. The same seed reproduces the same partition.
    """

    def __init__(self, train_fraction: float = 0.7, seed: int = 1234):
        """
        Initialize dataset splitter.

        Args:
            train_fraction: Share of documents in the train set
            seed: Random seed for the shuffle
        """
        if not 0.0 < train_fraction < 1.0:
            raise ValueError(f"train_fraction must be in (0, 1), got {train_fraction}")

        self.train_fraction = train_fraction
        self.seed = seed

        logger.info(f"Initialized DatasetSplitter with train_fraction={train_fraction}, seed={seed}")

    def split(self, document_ids: Iterable[int], ratings: Iterable[int]) -> TrainTestSplit:
        """
        Draw the stratified partition.

        Args:
            document_ids: All document ids
            ratings: Rating of each document, aligned with document_ids

        Returns:
            TrainTestSplit covering every id exactly once

        Raises:
            StratificationError: If a class is too small to appear in both sets
        """
        ids = [int(doc_id) for doc_id in document_ids]
        labels = [int(rating) for rating in ratings]

        if len(ids) != len(labels):
            raise ValueError(f"Got {len(ids)} document ids but {len(labels)} ratings")
        if len(set(ids)) != len(ids):
            raise ValueError("document_ids must be unique")

        class_sizes = pd.Series(labels).value_counts()
        too_small = class_sizes[class_sizes < 2]
        if not too_small.empty:
            raise StratificationError(
                f"Rating classes {sorted(too_small.index.tolist())} have fewer than 2 documents"
            )

        try:
            train_ids, test_ids = train_test_split(
                ids,
                train_size=self.train_fraction,
                stratify=labels,
                random_state=self.seed
            )
        except ValueError as e:
            raise StratificationError(f"Cannot stratify {len(ids)} documents: {e}") from e

        split = TrainTestSplit(
            train_ids=tuple(train_ids),
            test_ids=tuple(test_ids),
            seed=self.seed,
            train_fraction=self.train_fraction
        )

        logger.info(f"Split {len(ids)} documents into {len(train_ids)} train / {len(test_ids)} test")
        return split
