"""
Vectorizer.

Builds sparse count and TF-IDF document-term matrices from the token
table and prunes rare terms from each.

Pruning runs on the whole corpus before the train/test split, so test
documents take part in vocabulary selection. This is a known, accepted
source of minor leakage.
"""

import logging
from typing import Dict, Iterable

import numpy as np
import pandas as pd
from scipy import sparse

from review_mining.errors import VocabularyEmptyError
from review_mining.models.matrix import COUNT, TFIDF, DocumentTermMatrix
from review_mining.models.review import DOCUMENT_ID, LEMMA

logger = logging.getLogger(__name__)


class Vectorizer:
    """
    Converts token records into document-term matrices.

    tf = count / document token total
    idf = ln(total documents / documents containing the term)
    """

    def __init__(self, min_doc_fraction: float = 0.01):
        """
        Initialize vectorizer.

        Args:
            min_doc_fraction: Keep terms present in at least this fraction
                of documents (0.01 drops terms that are 99% sparse)
        """
        if not 0.0 <= min_doc_fraction <= 1.0:
            raise ValueError(f"min_doc_fraction must be in [0, 1], got {min_doc_fraction}")

        self.min_doc_fraction = min_doc_fraction

        logger.info(f"Initialized Vectorizer with min_doc_fraction={min_doc_fraction}")

    def count_matrix(self, tokens: pd.DataFrame, document_ids: Iterable[int]) -> DocumentTermMatrix:
        """
        Count lemmas per document.

        Args:
            tokens: Token table (document_id, token, lemma)
            document_ids: Row order; documents without tokens get empty rows

        Returns:
            Unpruned count matrix with terms in sorted order
        """
        document_ids = [int(doc_id) for doc_id in document_ids]
        row_of = {doc_id: i for i, doc_id in enumerate(document_ids)}
        if len(row_of) != len(document_ids):
            raise ValueError("document_ids must be unique")

        tokens = tokens[tokens[DOCUMENT_ID].isin(row_of)]
        if tokens.empty:
            empty = sparse.csr_matrix((len(document_ids), 0), dtype=np.float64)
            return DocumentTermMatrix(kind=COUNT, matrix=empty, document_ids=document_ids, terms=[])

        pair_counts = tokens.groupby([DOCUMENT_ID, LEMMA]).size()

        terms = sorted(tokens[LEMMA].unique())
        column_of = {term: j for j, term in enumerate(terms)}

        rows = [row_of[doc_id] for doc_id in pair_counts.index.get_level_values(DOCUMENT_ID)]
        cols = [column_of[term] for term in pair_counts.index.get_level_values(LEMMA)]
        matrix = sparse.csr_matrix(
            (pair_counts.to_numpy(dtype=np.float64), (rows, cols)),
            shape=(len(document_ids), len(terms))
        )
        matrix.sort_indices()

        return DocumentTermMatrix(kind=COUNT, matrix=matrix, document_ids=document_ids, terms=terms)

    def tfidf_matrix(self, counts: DocumentTermMatrix) -> DocumentTermMatrix:
        """
        Weight an unpruned count matrix by TF-IDF.

        The result keeps the sparsity structure of `counts`; terms present
        in every document are stored with weight 0.
        """
        if counts.kind != COUNT:
            raise ValueError(f"Expected a count matrix, got '{counts.kind}'")

        n_documents = len(counts.document_ids)
        weights = counts.matrix.astype(np.float64, copy=True)

        row_totals = np.asarray(weights.sum(axis=1)).ravel()
        entries_per_row = np.diff(weights.indptr)
        with np.errstate(divide="ignore"):
            inverse_totals = np.where(row_totals > 0, 1.0 / row_totals, 0.0)
        weights.data *= np.repeat(inverse_totals, entries_per_row)

        document_frequency = counts.document_frequency()
        idf = np.where(
            document_frequency > 0,
            np.log(n_documents / np.maximum(document_frequency, 1)),
            0.0
        )
        weights.data *= idf[weights.indices]

        return DocumentTermMatrix(
            kind=TFIDF,
            matrix=weights,
            document_ids=counts.document_ids,
            terms=counts.terms,
            metadata={"idf": dict(zip(counts.terms, idf.tolist()))}
        )

    def prune(self, matrix: DocumentTermMatrix, name: str = None) -> DocumentTermMatrix:
        """
        Drop rare terms, and for TF-IDF also terms whose weight is zero everywhere.

        Raises:
            VocabularyEmptyError: If no term survives
        """
        name = name or matrix.kind
        pruned = matrix.prune(self.min_doc_fraction)
        if pruned.kind == TFIDF:
            pruned = pruned.select_terms(pruned.column_sums() > 0)

        logger.info(
            f"Pruned '{name}' vocabulary from {matrix.vocabulary_size} "
            f"to {pruned.vocabulary_size} terms"
        )

        if pruned.vocabulary_size == 0:
            raise VocabularyEmptyError(
                name,
                f"no term reaches document fraction {self.min_doc_fraction} "
                f"across {len(matrix.document_ids)} documents"
            )
        return pruned

    def build(self, tokens: pd.DataFrame, document_ids: Iterable[int]) -> Dict[str, DocumentTermMatrix]:
        """
        Build both representations before pruning.

        Each representation is pruned separately with `prune`, so an empty
        vocabulary in one does not stop the other.

        Returns:
            {"count": counts, "tfidf": TF-IDF weights}, both unpruned
        """
        counts = self.count_matrix(tokens, document_ids)
        tfidf = self.tfidf_matrix(counts)

        logger.info(
            f"Built {counts.shape[0]} x {counts.shape[1]} document-term matrices "
            f"({counts.matrix.nnz} non-zero entries)"
        )
        return {COUNT: counts, TFIDF: tfidf}
