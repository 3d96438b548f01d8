"""
Sentiment Scorer.

Looks up each lemma in the polarity lexicon and aggregates the scores
per document.
"""

import logging
from typing import Iterable

import pandas as pd

from review_mining.models.review import DOCUMENT_ID, LEMMA, RATING
from review_mining.utils.resources import PolarityLexicon

logger = logging.getLogger(__name__)

POLARITY = "polarity"
SENTIMENT_SCORE = "sentiment_score"


class SentimentScorer:
    """
    Lexicon-based sentiment.

    Token scores: +1 positive, -1 negative, 0 not in the lexicon.
    Document score: mean of the lexicon-matched token scores
    (matched_only=True) or of all token scores (matched_only=False).
    Documents with nothing to average score 0.
    """

    def __init__(self, lexicon: PolarityLexicon, matched_only: bool = True):
        """
        Initialize sentiment scorer.

        Args:
            lexicon: Polarity lookup
            matched_only: Average over lexicon hits only
        """
        self.lexicon = lexicon
        self.matched_only = matched_only

        logger.info(
            f"Initialized SentimentScorer with {len(lexicon)} lexicon entries, "
            f"matched_only={matched_only}"
        )

    def sentiment_table(self, lemmas: Iterable[str]) -> pd.DataFrame:
        """Polarity of each distinct lemma (lemma, polarity)."""
        distinct = sorted(set(lemmas))
        return pd.DataFrame({
            LEMMA: distinct,
            POLARITY: [self.lexicon.polarity(lemma) for lemma in distinct]
        })

    def score_tokens(self, tokens: pd.DataFrame) -> pd.DataFrame:
        """Return a copy of the token table with a polarity column."""
        scored = tokens.copy()
        scored[POLARITY] = scored[LEMMA].map(self.lexicon.polarity).astype("int64")
        return scored

    def score_documents(self, tokens: pd.DataFrame, document_ids: Iterable[int]) -> pd.Series:
        """
        Aggregate token polarity per document.

        Args:
            tokens: Token table (document_id, token, lemma)
            document_ids: Documents to score, including those without tokens

        Returns:
            Float Series named sentiment_score, indexed by document_id
        """
        scored = self.score_tokens(tokens)
        if self.matched_only:
            scored = scored[scored[POLARITY] != 0]

        means = scored.groupby(DOCUMENT_ID)[POLARITY].mean()

        index = pd.Index([int(doc_id) for doc_id in document_ids], name=DOCUMENT_ID)
        scores = means.reindex(index).fillna(0.0).astype("float64")
        scores.name = SENTIMENT_SCORE

        logger.info(
            f"Scored {len(scores)} documents: "
            f"{int((scores > 0).sum())} positive, {int((scores < 0).sum())} negative, "
            f"{int((scores == 0).sum())} neutral"
        )
        return scores

    def mean_by_rating(self, scores: pd.Series, corpus: pd.DataFrame) -> pd.DataFrame:
        """
        Mean document sentiment per rating class.

        Args:
            scores: Output of score_documents
            corpus: DataFrame with columns document_id, rating

        Returns:
            DataFrame indexed by rating with columns mean_sentiment, documents
        """
        ratings = corpus.set_index(DOCUMENT_ID)[RATING]
        joined = pd.DataFrame({RATING: ratings, SENTIMENT_SCORE: scores}).dropna(subset=[RATING])
        summary = joined.groupby(RATING)[SENTIMENT_SCORE].agg(["mean", "size"])
        summary.columns = ["mean_sentiment", "documents"]
        summary.index = summary.index.astype("int64")
        return summary
