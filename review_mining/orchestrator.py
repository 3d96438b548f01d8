"""
Pipeline Orchestrator.

Runs the stages in order over one corpus and collects the results.
"""

import logging
from typing import Optional

import config.settings as settings
from review_mining.errors import ModelFitError, ReviewMiningError, VocabularyEmptyError
from review_mining.models.report import BranchFailure, RunReport
from review_mining.models.review import DOCUMENT_ID, RATING
from review_mining.stages.classifier import RatingClassifier
from review_mining.stages.loader import ReviewLoader
from review_mining.stages.sentiment import SentimentScorer
from review_mining.stages.splitter import DatasetSplitter
from review_mining.stages.text_normalizer import TextNormalizer
from review_mining.stages.tokenizer import Tokenizer
from review_mining.stages.topic_modeler import TopicModeler
from review_mining.stages.vectorizer import Vectorizer
from review_mining.utils.resources import LexicalResources
from review_mining.utils.storage import StorageManager

logger = logging.getLogger(__name__)

BRANCH_ERRORS = (VocabularyEmptyError, ModelFitError)


class PipelineOrchestrator:
    """
    Orchestrates one batch run.

    Load → Normalize → Tokenize → Vectorize → Sentiment → Split
    → Classifier (per representation) → Topic Modeler (per subset)

    Failures before the branches abort the run. A vocabulary or model
    failure in one branch is recorded and the other branches continue.
    """

    def __init__(
        self,
        resources: Optional[LexicalResources] = None,
        max_documents: int = settings.DEFAULT_MAX_DOCUMENTS,
        min_doc_fraction: float = settings.MIN_DOC_FRACTION,
        train_fraction: float = settings.TRAIN_FRACTION,
        seed: int = settings.RANDOM_SEED,
        num_topics: int = settings.NUM_TOPICS,
        top_n_terms: int = settings.TOP_N_TERMS,
        n_estimators: int = settings.N_ESTIMATORS,
        output_dir: Optional[str] = None
    ):
        """
        Initialize pipeline orchestrator.

        Args:
            resources: Stop words, lemmatizer and lexicon; NLTK resources by default
            max_documents: Documents kept by the loader
            min_doc_fraction: Vectorizer pruning threshold
            train_fraction: Share of documents used for training
            seed: Seed for the split, the forests and the topic models
            num_topics: Topics per satisfaction subset
            top_n_terms: Terms reported per topic
            n_estimators: Trees per random forest
            output_dir: Write outputs here when set
        """
        logger.info("Initializing pipeline components...")

        if resources is None:
            resources = LexicalResources.from_nltk()

        self.top_n_terms = top_n_terms
        self.continue_on_branch_failure = settings.CONTINUE_ON_BRANCH_FAILURE

        self.loader = ReviewLoader(
            max_documents=max_documents,
            rating_field=settings.RATING_FIELD,
            text_field=settings.TEXT_FIELD,
            skip_malformed=settings.SKIP_MALFORMED_LINES
        )
        self.normalizer = TextNormalizer()
        self.tokenizer = Tokenizer(resources.stop_words, resources.lemmatizer)
        self.vectorizer = Vectorizer(min_doc_fraction=min_doc_fraction)
        self.sentiment_scorer = SentimentScorer(
            resources.lexicon,
            matched_only=settings.SENTIMENT_MATCHED_ONLY
        )
        self.splitter = DatasetSplitter(train_fraction=train_fraction, seed=seed)
        self.classifier = RatingClassifier(
            n_estimators=n_estimators,
            max_features=settings.MAX_FEATURES,
            seed=seed,
            labels=settings.RATING_LABELS,
            low_sensitivity_threshold=settings.LOW_SENSITIVITY_THRESHOLD
        )
        self.topic_modeler = TopicModeler(
            k=num_topics,
            seed=seed,
            min_doc_fraction=settings.TOPIC_MIN_DOC_FRACTION,
            max_iter=settings.LDA_MAX_ITER,
            subsets={
                "satisfied": settings.SATISFIED_RATINGS,
                "dissatisfied": settings.DISSATISFIED_RATINGS
            }
        )
        self.storage = StorageManager(output_dir) if output_dir else None

        logger.info("Pipeline initialized successfully")

    def run(self, input_path: str) -> RunReport:
        """
        Run the complete pipeline on a review file.

        Args:
            input_path: Newline-delimited JSON reviews

        Returns:
            RunReport with evaluations, topic models and counters

        Raises:
            ReviewMiningError: If a stage before the branches fails, or a
                branch fails while CONTINUE_ON_BRANCH_FAILURE is off
        """
        report = RunReport()

        # STAGE 1: Load
        corpus = self.loader.load(input_path)
        report.documents_loaded = len(corpus)
        report.malformed_lines = self.loader.malformed_lines
        report.incomplete_records = self.loader.incomplete_records

        # STAGE 2: Normalize
        corpus = self.normalizer.normalize_corpus(corpus)
        report.documents_after_cleaning = len(corpus)
        report.empty_documents = self.normalizer.empty_documents
        if corpus.empty:
            raise VocabularyEmptyError("corpus", "no documents left after cleaning")

        # STAGE 3: Tokenize / lemmatize
        tokens = self.tokenizer.tokenize_corpus(corpus)
        report.tokens = tokens
        report.token_count = len(tokens)

        document_ids = corpus[DOCUMENT_ID].tolist()
        ratings = corpus.set_index(DOCUMENT_ID)[RATING]

        # STAGE 4: Vectorize (both representations, unpruned)
        matrices = self.vectorizer.build(tokens, document_ids)

        # STAGE 5: Sentiment
        sentiment = self.sentiment_scorer.score_documents(tokens, document_ids)
        report.sentiment_by_rating = self.sentiment_scorer.mean_by_rating(sentiment, corpus)

        # STAGE 6: Split (shared by every representation)
        split = self.splitter.split(document_ids, ratings.loc[document_ids])
        report.class_proportions = split.class_proportions(ratings)
        y_train, y_test = split.labels(ratings)

        # STAGE 7: Classifier per representation
        for representation, matrix in matrices.items():
            try:
                pruned = self.vectorizer.prune(matrix, name=representation)
                report.vocabulary_sizes[representation] = pruned.vocabulary_size

                train, test = split.apply(pruned)
                model, evaluation = self.classifier.fit_and_evaluate(
                    train, test, sentiment, y_train, y_test, representation
                )
                report.evaluations[representation] = evaluation
                report.feature_importances[representation] = self.classifier.feature_importance(model)
            except BRANCH_ERRORS as e:
                self._record_failure(report, f"classifier:{representation}", e)

        # STAGE 8: Topic models per subset
        for subset in self.topic_modeler.subsets:
            try:
                report.topic_models[subset] = self.topic_modeler.fit_subset(corpus, tokens, subset)
            except BRANCH_ERRORS as e:
                self._record_failure(report, f"topics:{subset}", e)

        # STAGE 9: Export
        if self.storage is not None:
            self.storage.save_run(
                report,
                top_n=self.top_n_terms,
                save_tokens=settings.EXPORT_TOKEN_TABLE
            )

        logger.info(
            f"Pipeline complete: {len(report.evaluations)} classifiers, "
            f"{len(report.topic_models)} topic models, "
            f"{len(report.branch_failures)} failed branches"
        )
        return report

    def _record_failure(self, report: RunReport, branch: str, error: ReviewMiningError) -> None:
        logger.error(f"Branch {branch} failed: {error}")
        if not self.continue_on_branch_failure:
            raise error

        report.branch_failures.append(
            BranchFailure(branch=branch, error_type=type(error).__name__, message=str(error))
        )
        logger.warning(f"Continuing with remaining branches after {branch} failure")
