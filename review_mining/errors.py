"""
Pipeline error types.

Row-level conditions (malformed lines, empty documents) are recovered
inside the stage that detects them. Vocabulary and model failures abort
the enclosing branch and carry the name of the representation or subset.
"""

from typing import Optional


class ReviewMiningError(Exception):
    """Base class for every error raised by the pipeline."""


class SourceReadError(ReviewMiningError, IOError):
    """The review source could not be opened or read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read review source {path}: {reason}")


class ParseError(ReviewMiningError, ValueError):
    """A line of the review source is not valid JSON."""

    def __init__(self, line_number: int, reason: str):
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"Malformed record on line {line_number}: {reason}")


class EmptyDocumentError(ReviewMiningError):
    """A document has no text left after normalization."""

    def __init__(self, document_id: int):
        self.document_id = document_id
        super().__init__(f"Document {document_id} is empty after normalization")


class VocabularyEmptyError(ReviewMiningError):
    """Pruning removed every term of a representation or subset."""

    def __init__(self, name: str, detail: Optional[str] = None):
        self.name = name
        message = f"No terms left for '{name}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ModelFitError(ReviewMiningError):
    """A classifier or topic model could not be fit on its input."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Model fit failed for '{name}': {reason}")


class StratificationError(ReviewMiningError):
    """A stratified train/test split cannot be drawn from the labels."""
