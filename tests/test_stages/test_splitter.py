"""
Unit tests for the Dataset Splitter and TrainTestSplit model.
"""

import random

import numpy as np
import pandas as pd
import pytest
from scipy import sparse

from review_mining.errors import StratificationError
from review_mining.models.matrix import DocumentTermMatrix
from review_mining.models.split import TrainTestSplit
from review_mining.stages.splitter import DatasetSplitter


@pytest.fixture
def large_corpus():
    """5000 ratings skewed towards 4 and 5."""
    rng = random.Random(3)
    ratings = rng.choices([1, 2, 3, 4, 5], weights=[6, 5, 9, 20, 60], k=5000)
    return pd.Series(ratings, index=pd.Index(range(5000), name="document_id"), name="rating")


def test_partition_is_disjoint_and_exhaustive(large_corpus):
    split = DatasetSplitter().split(large_corpus.index, large_corpus)

    train, test = set(split.train_ids), set(split.test_ids)
    assert not train & test
    assert train | test == set(large_corpus.index)


def test_train_fraction(large_corpus):
    split = DatasetSplitter(train_fraction=0.7).split(large_corpus.index, large_corpus)

    assert len(split.train_ids) == 3500
    assert len(split.test_ids) == 1500


def test_class_proportions_are_preserved(large_corpus):
    """Each class share in train and test is within 5 points of the corpus."""
    split = DatasetSplitter().split(large_corpus.index, large_corpus)

    proportions = split.class_proportions(large_corpus)

    assert list(proportions.columns) == ["corpus", "train", "test"]
    assert proportions.index.tolist() == [1, 2, 3, 4, 5]
    assert (proportions["train"] - proportions["corpus"]).abs().max() <= 0.05
    assert (proportions["test"] - proportions["corpus"]).abs().max() <= 0.05


def test_same_seed_same_partition(large_corpus):
    first = DatasetSplitter(seed=1234).split(large_corpus.index, large_corpus)
    second = DatasetSplitter(seed=1234).split(large_corpus.index, large_corpus)

    assert first.train_ids == second.train_ids
    assert first.test_ids == second.test_ids


def test_different_seed_different_partition(large_corpus):
    first = DatasetSplitter(seed=1).split(large_corpus.index, large_corpus)
    second = DatasetSplitter(seed=2).split(large_corpus.index, large_corpus)

    assert set(first.train_ids) != set(second.train_ids)


def test_singleton_class_raises():
    ids = list(range(11))
    ratings = [5] * 5 + [4] * 5 + [1]

    with pytest.raises(StratificationError):
        DatasetSplitter().split(ids, ratings)


def test_test_set_too_small_for_classes_raises():
    ids = list(range(10))
    ratings = [1, 1, 2, 2, 3, 3, 4, 4, 5, 5]

    # 10% of 10 documents leaves one test slot for five classes
    with pytest.raises(StratificationError):
        DatasetSplitter(train_fraction=0.9).split(ids, ratings)


def test_misaligned_input_rejected():
    with pytest.raises(ValueError):
        DatasetSplitter().split([0, 1, 2], [5, 5])
    with pytest.raises(ValueError):
        DatasetSplitter().split([0, 0, 1, 1], [5, 5, 4, 4])


@pytest.mark.parametrize("fraction", [0.0, 1.0, -0.5, 1.5])
def test_invalid_train_fraction(fraction):
    with pytest.raises(ValueError):
        DatasetSplitter(train_fraction=fraction)


def test_overlapping_split_rejected():
    with pytest.raises(ValueError):
        TrainTestSplit(train_ids=(0, 1), test_ids=(1, 2), seed=1, train_fraction=0.5)


def test_apply_and_labels():
    split = TrainTestSplit(train_ids=(2, 0), test_ids=(1,), seed=1, train_fraction=0.7)
    matrix = DocumentTermMatrix(
        kind="count",
        matrix=sparse.csr_matrix(np.array([[1.0, 0.0], [0.0, 1.0], [2.0, 2.0]])),
        document_ids=[0, 1, 2],
        terms=["fun", "bad"]
    )
    ratings = pd.Series([5, 1, 4], index=[0, 1, 2])

    train, test = split.apply(matrix)
    y_train, y_test = split.labels(ratings)

    assert train.document_ids == [2, 0]
    assert test.document_ids == [1]
    assert y_train.tolist() == [4, 5]
    assert y_test.tolist() == [1]


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
