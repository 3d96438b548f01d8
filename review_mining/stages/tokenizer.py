"""
Tokenizer and Lemmatizer.

Splits normalized text into word tokens, removes stop words and maps
each surviving token to its lemma.
"""

import logging
from typing import List

import pandas as pd
from nltk.tokenize import wordpunct_tokenize

from review_mining.models.review import DOCUMENT_ID, TEXT, TOKEN_COLUMNS, TokenRecord
from review_mining.utils.resources import Lemmatizer, StopWords

logger = logging.getLogger(__name__)


class Tokenizer:
    """
    Produces the token table (document_id, token, lemma).

    One row per surviving token occurrence, in document order then
    position order. A document that loses every token contributes no
    rows but stays in the corpus.
    """

    def __init__(self, stop_words: StopWords, lemmatizer: Lemmatizer):
        """
        Initialize tokenizer.

        Args:
            stop_words: Stop-word lookup (case-insensitive)
            lemmatizer: Lemma lookup; unknown tokens map to themselves
        """
        self.stop_words = stop_words
        self.lemmatizer = lemmatizer

        logger.info(f"Initialized Tokenizer with {len(stop_words)} stop words")

    def tokenize(self, text: str) -> List[str]:
        """Split text into alphabetic word tokens."""
        return [token for token in wordpunct_tokenize(text) if token.isalpha()]

    def records(self, document_id: int, text: str) -> List[TokenRecord]:
        """Token records for one document, stop words removed."""
        return [
            TokenRecord(document_id=document_id, token=token, lemma=self.lemmatizer.lemmatize(token))
            for token in self.tokenize(text)
            if token not in self.stop_words
        ]

    def tokenize_corpus(self, corpus: pd.DataFrame) -> pd.DataFrame:
        """
        Tokenize and lemmatize every document of a normalized corpus.

        Args:
            corpus: DataFrame with columns document_id, text

        Returns:
            DataFrame with columns document_id, token, lemma
        """
        rows = []
        empty_documents = 0
        for document_id, text in zip(corpus[DOCUMENT_ID], corpus[TEXT]):
            records = self.records(int(document_id), text)
            if not records:
                empty_documents += 1
                logger.debug(f"Document {document_id} has no tokens after stop-word removal")
            rows.extend(record.to_row() for record in records)

        tokens = pd.DataFrame(rows, columns=TOKEN_COLUMNS)
        tokens = tokens.astype({DOCUMENT_ID: "int64"})

        logger.info(
            f"Tokenized {len(corpus)} documents into {len(tokens)} tokens "
            f"({tokens['lemma'].nunique()} distinct lemmas, "
            f"{empty_documents} documents without tokens)"
        )
        return tokens
