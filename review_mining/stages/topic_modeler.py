"""
Topic Modeler.

Fits a fixed-k LDA topic model on the satisfied (ratings 4-5) and
dissatisfied (ratings 1-2) subsets and extracts their top terms.

Inference is batch variational Bayes (scikit-learn's
LatentDirichletAllocation with an injected random_state), not Gibbs
sampling, so the seed fixes the initialisation rather than a sampler
chain. Topic ids are exchangeable: fits with different seeds can return
the same topics in a different order, so results should be compared by
term sets, not by topic id.
"""

import logging
from typing import Dict, Iterable, List, Sequence, Tuple

import numpy as np
import pandas as pd
from sklearn.decomposition import LatentDirichletAllocation

from review_mining.errors import ModelFitError, VocabularyEmptyError
from review_mining.models.review import DOCUMENT_ID, RATING
from review_mining.models.topic import TopicModel
from review_mining.stages.vectorizer import Vectorizer

logger = logging.getLogger(__name__)

SATISFIED = "satisfied"
DISSATISFIED = "dissatisfied"


class TopicModeler:
    """
    Fits one topic model per customer-satisfaction subset.
    """

    def __init__(
        self,
        k: int = 3,
        seed: int = 1234,
        min_doc_fraction: float = 0.0,
        max_iter: int = 50,
        subsets: Dict[str, Sequence[int]] = None
    ):
        """
        Initialize topic modeler.

        Args:
            k: Number of topics per subset
            seed: Random state for the inference
            min_doc_fraction: Term pruning inside each subset (0 keeps every term)
            max_iter: Maximum passes over the subset
            subsets: Subset name -> ratings; defaults to satisfied {4, 5}
                and dissatisfied {1, 2}
        """
        if k < 1:
            raise ValueError(f"k must be >= 1, got {k}")

        self.k = k
        self.seed = seed
        self.max_iter = max_iter
        self.subsets = dict(subsets or {SATISFIED: (4, 5), DISSATISFIED: (1, 2)})
        self.vectorizer = Vectorizer(min_doc_fraction=min_doc_fraction)

        logger.info(
            f"Initialized TopicModeler with k={k}, seed={seed}, "
            f"subsets={self.subsets}"
        )

    def subset_ids(self, corpus: pd.DataFrame, subset: str) -> List[int]:
        """Document ids whose rating belongs to `subset`."""
        if subset not in self.subsets:
            raise KeyError(f"Unknown subset '{subset}'. Known: {sorted(self.subsets)}")

        selected = corpus[corpus[RATING].isin(self.subsets[subset])]
        return [int(doc_id) for doc_id in selected[DOCUMENT_ID]]

    def fit_topics(
        self,
        tokens: pd.DataFrame,
        document_ids: Iterable[int],
        subset: str,
        k: int = None
    ) -> TopicModel:
        """
        Fit a topic model on the documents of one subset.

        Args:
            tokens: Token table (document_id, token, lemma)
            document_ids: Documents in the subset
            subset: Subset name, used in logs and errors
            k: Topic count; defaults to the modeler's k

        Returns:
            TopicModel with beta (topic × term) and gamma (document × topic)

        Raises:
            VocabularyEmptyError: If the subset has no documents or no terms
            ModelFitError: If k is invalid or the inference fails
        """
        k = self.k if k is None else k
        if k < 1:
            raise ModelFitError(subset, f"invalid topic count {k}")

        document_ids = list(document_ids)
        if not document_ids:
            raise VocabularyEmptyError(subset, "subset has no documents")

        counts = self.vectorizer.count_matrix(tokens, document_ids)
        counts = self.vectorizer.prune(counts, name=subset)

        # Documents with no remaining terms carry no topic signal
        non_empty = np.asarray(counts.matrix.sum(axis=1)).ravel() > 0
        kept_ids = [doc_id for doc_id, keep in zip(counts.document_ids, non_empty) if keep]
        dropped = len(counts.document_ids) - len(kept_ids)
        counts = counts.select_documents(kept_ids)

        lda = LatentDirichletAllocation(
            n_components=k,
            learning_method="batch",
            max_iter=self.max_iter,
            random_state=self.seed
        )
        try:
            doc_topic = lda.fit_transform(counts.matrix)
        except ValueError as e:
            raise ModelFitError(subset, str(e)) from e

        topic_term = lda.components_
        beta = pd.DataFrame(
            topic_term / topic_term.sum(axis=1, keepdims=True),
            index=pd.Index(range(k), name="topic"),
            columns=counts.terms
        )
        gamma = pd.DataFrame(
            doc_topic,
            index=pd.Index(counts.document_ids, name=DOCUMENT_ID),
            columns=pd.Index(range(k), name="topic")
        )

        logger.info(
            f"Fit {k} topics on '{subset}': {len(kept_ids)} documents, "
            f"{counts.vocabulary_size} terms ({dropped} documents without terms skipped)"
        )
        return TopicModel(
            subset=subset,
            k=k,
            seed=self.seed,
            beta=beta,
            gamma=gamma,
            metadata={
                "documents": len(kept_ids),
                "documents_without_terms": dropped,
                "perplexity": float(lda.perplexity(counts.matrix))
            }
        )

    def top_terms(self, model: TopicModel, n: int = 15) -> Dict[int, List[Tuple[str, float]]]:
        return model.top_terms(n)

    def fit_subset(self, corpus: pd.DataFrame, tokens: pd.DataFrame, subset: str) -> TopicModel:
        """Select a subset's documents from the corpus and fit its topics."""
        return self.fit_topics(tokens, self.subset_ids(corpus, subset), subset)
