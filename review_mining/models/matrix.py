"""
Document-term matrix model.

Sparse (document × term) weights with the document ids and terms that
label its rows and columns.
"""

import math
from dataclasses import dataclass, field
from typing import Iterable, List

import numpy as np
import pandas as pd
from scipy import sparse

COUNT = "count"
TFIDF = "tfidf"


@dataclass
class DocumentTermMatrix:
    """
    Document-term matrix for one representation.

    Rows follow `document_ids`, columns follow `terms`. The matrix stays
    in CSR form; `to_frame()` is the only dense conversion.
    """
    kind: str  # "count" or "tfidf"
    matrix: sparse.csr_matrix
    document_ids: List[int]
    terms: List[str]
    metadata: dict = field(default_factory=dict)

    def __post_init__(self):
        if self.kind not in (COUNT, TFIDF):
            raise ValueError(f"Invalid kind: {self.kind}. Must be '{COUNT}' or '{TFIDF}'")

        self.matrix = sparse.csr_matrix(self.matrix)
        self.document_ids = list(self.document_ids)
        self.terms = list(self.terms)

        n_rows, n_cols = self.matrix.shape
        if n_rows != len(self.document_ids):
            raise ValueError(
                f"Matrix has {n_rows} rows but {len(self.document_ids)} document ids"
            )
        if n_cols != len(self.terms):
            raise ValueError(f"Matrix has {n_cols} columns but {len(self.terms)} terms")

    @property
    def shape(self):
        return self.matrix.shape

    @property
    def vocabulary_size(self) -> int:
        return len(self.terms)

    def document_frequency(self) -> np.ndarray:
        """Number of documents with a non-zero weight for each term."""
        present = self.matrix.copy()
        present.eliminate_zeros()
        return np.diff(present.tocsc().indptr)

    def row_sums(self) -> pd.Series:
        """Total weight per document, indexed by document id."""
        sums = np.asarray(self.matrix.sum(axis=1)).ravel()
        return pd.Series(sums, index=pd.Index(self.document_ids, name="document_id"))

    def column_sums(self) -> np.ndarray:
        return np.asarray(self.matrix.sum(axis=0)).ravel()

    def select_terms(self, mask: np.ndarray) -> "DocumentTermMatrix":
        """Keep only the columns where `mask` is True."""
        mask = np.asarray(mask, dtype=bool)
        kept = [term for term, keep in zip(self.terms, mask) if keep]
        return DocumentTermMatrix(
            kind=self.kind,
            matrix=self.matrix[:, np.flatnonzero(mask)],
            document_ids=self.document_ids,
            terms=kept,
            metadata=dict(self.metadata)
        )

    def select_documents(self, document_ids: Iterable[int]) -> "DocumentTermMatrix":
        """
        Keep the rows for `document_ids`, in the order given.

        Raises:
            KeyError: If an id is not a row of this matrix
        """
        position = {doc_id: i for i, doc_id in enumerate(self.document_ids)}
        ids = list(document_ids)
        missing = [doc_id for doc_id in ids if doc_id not in position]
        if missing:
            raise KeyError(f"Unknown document ids: {missing[:10]}")

        rows = [position[doc_id] for doc_id in ids]
        return DocumentTermMatrix(
            kind=self.kind,
            matrix=self.matrix[rows, :],
            document_ids=ids,
            terms=self.terms,
            metadata=dict(self.metadata)
        )

    def prune(self, min_doc_fraction: float) -> "DocumentTermMatrix":
        """
        Drop terms present in fewer than `min_doc_fraction` of the documents.

        A term is kept when its document frequency is at least
        min_doc_fraction × number of documents.
        """
        if not 0.0 <= min_doc_fraction <= 1.0:
            raise ValueError(f"min_doc_fraction must be in [0, 1], got {min_doc_fraction}")

        threshold = min_doc_fraction * len(self.document_ids)
        # Tolerate float noise such as 0.01 * 300 == 3.0000000000000004
        threshold = math.floor(threshold * 1e9) / 1e9
        return self.select_terms(self.document_frequency() >= threshold)

    def to_frame(self) -> pd.DataFrame:
        """Dense DataFrame copy (documents × terms)."""
        return pd.DataFrame(
            self.matrix.toarray(),
            index=pd.Index(self.document_ids, name="document_id"),
            columns=self.terms
        )
