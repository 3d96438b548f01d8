"""
Shared fixtures.

Tests use small in-memory lexical resources so they never need the
NLTK corpora.
"""

import json
import random

import pandas as pd
import pytest

from review_mining.utils.resources import LexicalResources, Lemmatizer, PolarityLexicon, StopWords

STOP_WORDS = [
    "a", "an", "the", "and", "or", "but", "if", "of", "at", "by", "for", "with",
    "this", "that", "these", "those", "is", "are", "was", "were", "be", "been",
    "it", "its", "i", "me", "my", "we", "you", "he", "she", "they", "them",
    "to", "from", "in", "on", "so", "very", "too", "not", "no", "do", "does",
    "did", "have", "has", "had", "just", "than", "then", "there", "here", "what",
]

LEMMAS = {
    "games": "game",
    "playing": "play",
    "played": "play",
    "controllers": "controller",
    "graphics": "graphic",
    "crashes": "crash",
    "crashed": "crash",
    "bought": "buy",
    "loved": "love",
    "loves": "love",
    "levels": "level",
    "hours": "hour",
}

POSITIVE_WORDS = ["great", "excellent", "fun", "love", "awesome", "good", "smooth", "beautiful"]
NEGATIVE_WORDS = ["terrible", "broken", "waste", "crash", "bad", "boring", "buggy", "refund"]

SCENARIO_REVIEWS = [
    {"overall": 5, "reviewText": "This game is great and fun!!"},
    {"overall": 1, "reviewText": "Terrible broken game, waste of money."},
    {"overall": 3, "reviewText": "It's okay, nothing special."},
]

_PHRASES = {
    5: ["great game love the graphic", "excellent story fun level", "awesome smooth controller great fun"],
    4: ["good game fun level", "beautiful graphic good story", "fun controller good hour"],
    3: ["okay game average story", "decent graphic average level", "okay controller nothing special"],
    2: ["boring level bad story", "buggy controller bad graphic", "boring hour average game"],
    1: ["terrible broken game crash", "waste of money refund", "buggy crash terrible controller"],
}


@pytest.fixture
def resources():
    return LexicalResources(
        stop_words=StopWords(STOP_WORDS),
        lemmatizer=Lemmatizer(LEMMAS),
        lexicon=PolarityLexicon.from_words(POSITIVE_WORDS, NEGATIVE_WORDS)
    )


@pytest.fixture
def scenario_corpus():
    """The three-review scenario as a loaded corpus table."""
    return pd.DataFrame({
        "document_id": [0, 1, 2],
        "rating": [r["overall"] for r in SCENARIO_REVIEWS],
        "text": [r["reviewText"] for r in SCENARIO_REVIEWS],
    })


def make_reviews(n: int, seed: int = 7):
    """Synthetic reviews whose vocabulary depends on the rating (skewed to 4-5)."""
    rng = random.Random(seed)
    ratings = rng.choices([1, 2, 3, 4, 5], weights=[10, 8, 12, 25, 45], k=n)
    reviews = []
    for rating in ratings:
        words = " ".join(rng.sample(_PHRASES[rating], 2))
        reviews.append({
            "reviewerID": f"R{rng.randint(0, 10**6)}",
            "asin": "B000TEST",
            "overall": float(rating),
            "reviewText": f"{words.capitalize()}!",
        })
    return reviews


def write_jsonl(path, records, extra_lines=()):
    with open(path, "w", encoding="utf-8") as f:
        for record in records:
            f.write(json.dumps(record) + "\n")
        for line in extra_lines:
            f.write(line + "\n")
    return str(path)


@pytest.fixture
def synthetic_reviews():
    return make_reviews(300)


@pytest.fixture
def reviews_file(tmp_path, synthetic_reviews):
    return write_jsonl(tmp_path / "reviews.json", synthetic_reviews)
