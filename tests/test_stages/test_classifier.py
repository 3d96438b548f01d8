"""
Unit tests for the Rating Classifier.
"""

import math

import numpy as np
import pandas as pd
import pytest
from scipy import sparse

from review_mining.errors import ModelFitError
from review_mining.models.matrix import DocumentTermMatrix
from review_mining.stages.classifier import RatingClassifier
from review_mining.stages.sentiment import SentimentScorer
from review_mining.stages.splitter import DatasetSplitter
from review_mining.stages.text_normalizer import TextNormalizer
from review_mining.stages.tokenizer import Tokenizer
from review_mining.stages.vectorizer import Vectorizer


@pytest.fixture
def classifier():
    return RatingClassifier(n_estimators=25, seed=1234)


@pytest.fixture
def prepared(resources, synthetic_reviews):
    """Synthetic corpus run through the stages up to the split."""
    corpus = pd.DataFrame({
        "document_id": range(len(synthetic_reviews)),
        "rating": [int(r["overall"]) for r in synthetic_reviews],
        "text": [r["reviewText"] for r in synthetic_reviews],
    })
    cleaned = TextNormalizer().normalize_corpus(corpus)
    tokens = Tokenizer(resources.stop_words, resources.lemmatizer).tokenize_corpus(cleaned)

    vectorizer = Vectorizer(min_doc_fraction=0.01)
    matrices = vectorizer.build(tokens, cleaned["document_id"])
    sentiment = SentimentScorer(resources.lexicon).score_documents(tokens, cleaned["document_id"])

    ratings = cleaned.set_index("document_id")["rating"]
    split = DatasetSplitter(seed=1234).split(ratings.index, ratings)

    return {
        "count": vectorizer.prune(matrices["count"]),
        "tfidf": vectorizer.prune(matrices["tfidf"]),
        "sentiment": sentiment,
        "ratings": ratings,
        "split": split,
    }


def small_matrix():
    return DocumentTermMatrix(
        kind="count",
        matrix=sparse.csr_matrix(np.array([[1.0, 0.0], [0.0, 2.0], [1.0, 1.0]])),
        document_ids=[4, 7, 9],
        terms=["bad", "fun"]
    )


def test_build_features_appends_sentiment(classifier):
    sentiment = pd.Series({9: 0.5, 4: -1.0, 7: 1.0})

    features, names = classifier.build_features(small_matrix(), sentiment)

    assert names == ["bad", "fun", "sentiment_score"]
    assert sparse.issparse(features)
    assert features.shape == (3, 3)
    assert features.toarray()[:, -1].tolist() == [-1.0, 1.0, 0.5]


def test_build_features_missing_sentiment_is_zero(classifier):
    features, _ = classifier.build_features(small_matrix(), pd.Series({4: 1.0}))
    assert features.toarray()[:, -1].tolist() == [1.0, 0.0, 0.0]


def test_fit_and_evaluate(classifier, prepared):
    """Both representations train and are evaluated on the held-out rows."""
    split = prepared["split"]
    y_train, y_test = split.labels(prepared["ratings"])

    for representation in ("count", "tfidf"):
        train, test = split.apply(prepared[representation])
        model, report = classifier.fit_and_evaluate(
            train, test, prepared["sentiment"], y_train, y_test, representation
        )

        assert model.representation == representation
        assert model.feature_names[-1] == "sentiment_score"
        assert report.confusion_matrix.shape == (5, 5)
        assert int(report.confusion_matrix.values.sum()) == len(split.test_ids)
        assert report.per_class["support"].sum() == len(split.test_ids)
        assert report.accuracy > 0.6


def test_training_is_reproducible(prepared):
    split = prepared["split"]
    y_train, y_test = split.labels(prepared["ratings"])
    train, test = split.apply(prepared["count"])

    reports = []
    for _ in range(2):
        classifier = RatingClassifier(n_estimators=10, seed=99)
        _, report = classifier.fit_and_evaluate(
            train, test, prepared["sentiment"], y_train, y_test, "count"
        )
        reports.append(report)

    assert reports[0].confusion_matrix.equals(reports[1].confusion_matrix)


def test_predict_rejects_wrong_width(classifier, prepared):
    split = prepared["split"]
    y_train, _ = split.labels(prepared["ratings"])
    train, _ = split.apply(prepared["count"])
    features, names = classifier.build_features(train, prepared["sentiment"])
    model = classifier.train(features, y_train, names, "count")

    with pytest.raises(ValueError):
        classifier.predict(model, features[:, :-1])


def test_single_class_raises_model_fit_error(classifier):
    features = sparse.csr_matrix(np.ones((4, 2)))

    with pytest.raises(ModelFitError) as exc_info:
        classifier.train(features, [5, 5, 5, 5], ["fun", "sentiment_score"], "count")

    assert exc_info.value.name == "count"


def test_empty_or_misaligned_training_raises(classifier):
    with pytest.raises(ModelFitError):
        classifier.train(sparse.csr_matrix((0, 2)), [], ["a", "b"], "tfidf")
    with pytest.raises(ModelFitError):
        classifier.train(sparse.csr_matrix(np.ones((3, 2))), [1, 5], ["a", "b"], "tfidf")
    with pytest.raises(ModelFitError):
        classifier.train(sparse.csr_matrix(np.ones((2, 2))), [1, 5], ["a"], "tfidf")


def test_evaluate_statistics(classifier):
    """Per-class one-vs-rest statistics from a hand-checked confusion matrix."""
    report = classifier.evaluate(predicted=[5, 4, 4, 5], actual=[5, 5, 4, 1], representation="count")

    per_class = report.per_class
    assert report.accuracy == 0.5
    assert report.confusion_matrix.loc[5, 4] == 1
    assert report.confusion_matrix.loc[1, 5] == 1

    assert per_class.loc[5, "sensitivity"] == 0.5
    assert per_class.loc[5, "specificity"] == 0.5
    assert per_class.loc[4, "sensitivity"] == 1.0
    assert per_class.loc[4, "specificity"] == pytest.approx(2 / 3)
    assert per_class.loc[4, "balanced_accuracy"] == pytest.approx((1 + 2 / 3) / 2)
    assert per_class.loc[1, "sensitivity"] == 0.0
    assert per_class.loc[1, "specificity"] == 1.0


def test_evaluate_undefined_ratios_are_nan(classifier):
    report = classifier.evaluate(predicted=[5, 4], actual=[5, 4], representation="count")

    row = report.per_class.loc[2]
    assert row["support"] == 0
    assert math.isnan(row["sensitivity"])
    assert math.isnan(row["balanced_accuracy"])
    assert row["specificity"] == 1.0


def test_low_sensitivity_warning(classifier):
    """Classes with support but (near) zero sensitivity are flagged."""
    report = classifier.evaluate(predicted=[5, 4, 4, 5], actual=[5, 5, 4, 1], representation="tfidf")

    assert len(report.warnings) == 1
    assert "rating 1" in report.warnings[0]


def test_evaluate_length_mismatch(classifier):
    with pytest.raises(ValueError):
        classifier.evaluate(predicted=[5], actual=[5, 4], representation="count")


def test_report_to_dict(classifier):
    report = classifier.evaluate(predicted=[5, 4], actual=[5, 4], representation="count")

    result = report.to_dict()

    assert result["representation"] == "count"
    assert result["labels"] == [1, 2, 3, 4, 5]
    assert result["accuracy"] == 1.0
    assert len(result["confusion_matrix"]) == 5
    assert set(result["per_class"]) == {"1", "2", "3", "4", "5"}
    assert result["per_class"]["2"]["sensitivity"] is None
    assert result["per_class"]["5"]["sensitivity"] == 1.0


def test_feature_importance_ranking(classifier, prepared):
    split = prepared["split"]
    y_train, _ = split.labels(prepared["ratings"])
    train, _ = split.apply(prepared["tfidf"])
    features, names = classifier.build_features(train, prepared["sentiment"])
    model = classifier.train(features, y_train, names, "tfidf")

    ranking = classifier.feature_importance(model)
    top = classifier.feature_importance(model, top_n=5)

    assert list(ranking.columns) == ["feature", "importance"]
    assert set(ranking["feature"]) == set(names)
    assert ranking["importance"].is_monotonic_decreasing
    assert ranking["importance"].sum() == pytest.approx(1.0)
    assert top["feature"].tolist() == ranking["feature"].head(5).tolist()


def test_invalid_estimator_count():
    with pytest.raises(ValueError):
        RatingClassifier(n_estimators=0)


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
