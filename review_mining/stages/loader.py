"""
Review Loader.

Reads a newline-delimited JSON review collection into a corpus table
(document_id, rating, text).
"""

import gzip
import json
import logging
import math
from numbers import Number
from typing import Iterator, Optional, Tuple

import pandas as pd

from review_mining.errors import ParseError, SourceReadError
from review_mining.models.review import CORPUS_COLUMNS, Review

logger = logging.getLogger(__name__)


class ReviewLoader:
    """
    Loads reviews from newline-delimited JSON.

    Malformed lines are skipped and counted by default; with
    skip_malformed=False the first one raises ParseError. Records missing
    the rating or text are excluded, never imputed.
    """

    def __init__(
        self,
        max_documents: int = 5000,
        rating_field: str = "overall",
        text_field: str = "reviewText",
        skip_malformed: bool = True
    ):
        """
        Initialize review loader.

        Args:
            max_documents: Keep the first N valid records
            rating_field: JSON field holding the 1-5 rating
            text_field: JSON field holding the review text
            skip_malformed: Skip invalid JSON lines instead of failing
        """
        if max_documents < 1:
            raise ValueError(f"max_documents must be >= 1, got {max_documents}")

        self.max_documents = max_documents
        self.rating_field = rating_field
        self.text_field = text_field
        self.skip_malformed = skip_malformed

        self.malformed_lines = 0
        self.incomplete_records = 0

        logger.info(
            f"Initialized ReviewLoader with max_documents={max_documents}, "
            f"skip_malformed={skip_malformed}"
        )

    def load(self, path: str) -> pd.DataFrame:
        """
        Load the first `max_documents` valid reviews.

        Args:
            path: Path to a .json / .jsonl file, optionally gzip-compressed (.gz)

        Returns:
            DataFrame with columns document_id, rating, text

        Raises:
            SourceReadError: If the source cannot be read
            ParseError: If a line is malformed and skip_malformed is False
        """
        self.malformed_lines = 0
        self.incomplete_records = 0

        reviews = []
        try:
            for line_number, record in self._read_records(path):
                fields = self._extract_fields(record)
                if fields is None:
                    self.incomplete_records += 1
                    logger.debug(f"Line {line_number}: missing rating or text, excluded")
                    continue

                rating, text = fields
                reviews.append(Review(document_id=len(reviews), rating=rating, raw_text=text))
                if len(reviews) >= self.max_documents:
                    break
        except (OSError, EOFError, UnicodeDecodeError) as e:
            raise SourceReadError(str(path), str(e)) from e

        df = pd.DataFrame([review.to_row() for review in reviews], columns=CORPUS_COLUMNS)
        df = df.astype({"document_id": "int64", "rating": "int64"})

        logger.info(
            f"Loaded {len(df)} reviews from {path} "
            f"({self.malformed_lines} malformed lines, "
            f"{self.incomplete_records} incomplete records excluded)"
        )
        return df

    def _read_records(self, path: str) -> Iterator[Tuple[int, dict]]:
        """Yield (line_number, record) for each parseable line."""
        opener = gzip.open if str(path).endswith(".gz") else open

        with opener(path, "rt", encoding="utf-8") as f:
            for line_number, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue

                try:
                    record = self._parse_line(line, line_number)
                except ParseError as e:
                    if not self.skip_malformed:
                        raise
                    self.malformed_lines += 1
                    logger.warning(f"Skipping malformed line: {e}")
                    continue

                yield line_number, record

    def _parse_line(self, line: str, line_number: int) -> dict:
        try:
            record = json.loads(line)
        except json.JSONDecodeError as e:
            raise ParseError(line_number, e.msg) from e

        if not isinstance(record, dict):
            raise ParseError(line_number, f"expected a JSON object, got {type(record).__name__}")
        return record

    def _extract_fields(self, record: dict) -> Optional[Tuple[int, str]]:
        """Return (rating, text), or None when either is missing or invalid."""
        rating = record.get(self.rating_field)
        text = record.get(self.text_field)

        if isinstance(rating, bool) or not isinstance(rating, Number):
            return None
        if not math.isfinite(rating) or rating != int(rating) or not (1 <= rating <= 5):
            return None
        if not isinstance(text, str) or not text.strip():
            return None

        return int(rating), text
