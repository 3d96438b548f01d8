"""
Text Normalizer.

Cleans raw review text through an ordered chain of pure str -> str
transforms. Emoticons and symbols are replaced by words before any
step that strips punctuation. Elongated runs are collapsed only after
ASCII folding and digit and punctuation removal have produced the final
letters.
"""

import logging
import re
import string
import unicodedata
from typing import Callable, List, Sequence, Tuple

import pandas as pd

from review_mining.errors import EmptyDocumentError
from review_mining.models.review import DOCUMENT_ID, RATING, TEXT

logger = logging.getLogger(__name__)

Transform = Callable[[str], str]

EMOTICONS = {
    ":)": "smile",
    ":-)": "smile",
    ":]": "smile",
    "=)": "smile",
    ":D": "laugh",
    ":-D": "laugh",
    ";)": "wink",
    ";-)": "wink",
    ":(": "sad",
    ":-(": "sad",
    ":[": "sad",
    ":'(": "cry",
    ":P": "tongue",
    ":-P": "tongue",
    ":/": "skeptical",
    ":-/": "skeptical",
    ":|": "neutral",
    "<3": "love",
    "</3": "heartbreak",
    "\U0001F600": "smile",
    "\U0001F60A": "smile",
    "\U0001F603": "smile",
    "\U0001F602": "laugh",
    "\U0001F622": "cry",
    "\U0001F61E": "sad",
    "\U0001F620": "angry",
    "\U0001F621": "angry",
    "\U0001F44D": "thumbs up",
    "\U0001F44E": "thumbs down",
    "❤": "love",
    "\U0001F494": "heartbreak",
}

SYMBOLS = {
    "&": "and",
    "%": "percent",
    "$": "dollar",
    "€": "euro",
    "£": "pound",
    "@": "at",
    "#": "number",
    "+": "plus",
    "=": "equal",
    "°": "degrees",
    "♥": "love",
}


def _replacement_pattern(mapping: dict) -> "re.Pattern":
    # Longest keys first so ":-)" wins over ":-"
    keys = sorted(mapping, key=len, reverse=True)
    return re.compile("|".join(re.escape(key) for key in keys))


_EMOTICON_RE = _replacement_pattern(EMOTICONS)
_SYMBOL_RE = _replacement_pattern(SYMBOLS)
_APOSTROPHE_RE = re.compile(r"['’‘`]")
_NON_ALPHABETIC_RE = re.compile(r"[^\w\s]|[\d_]")
_ELONGATED_RE = re.compile(r"([^\W\d_])\1{2,}", re.IGNORECASE)
_PUNCTUATION_RE = re.compile(f"[{re.escape(string.punctuation)}]")
_DIGIT_RE = re.compile(r"\d")
_WHITESPACE_RE = re.compile(r"\s+")


def replace_emoticons(text: str) -> str:
    """Replace emoticons and emoji with words, e.g. ':)' -> ' smile '."""
    return _EMOTICON_RE.sub(lambda m: f" {EMOTICONS[m.group(0)]} ", text)


def replace_symbols(text: str) -> str:
    """Replace symbol characters with words, e.g. '&' -> ' and '."""
    return _SYMBOL_RE.sub(lambda m: f" {SYMBOLS[m.group(0)]} ", text)


def strip_non_alphabetic(text: str) -> str:
    """Keep letters and whitespace only. Apostrophes join their word ("it's" -> "its")."""
    text = unicodedata.normalize("NFC", text)
    text = _APOSTROPHE_RE.sub("", text)
    return _NON_ALPHABETIC_RE.sub(" ", text)


def expand_elongated(text: str) -> str:
    """Collapse 3+ repeats of a letter to two ('soooo good' -> 'soo good')."""
    return _ELONGATED_RE.sub(r"\1\1", text)


def strip_punctuation(text: str) -> str:
    return _PUNCTUATION_RE.sub("", text)


def to_ascii(text: str) -> str:
    """Fold accented letters to ASCII and drop what has no ASCII form."""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(c for c in decomposed if unicodedata.category(c) != "Mn")
    return stripped.encode("ascii", "ignore").decode("ascii")


def strip_digits(text: str) -> str:
    return _DIGIT_RE.sub("", text)


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def lowercase(text: str) -> str:
    return text.lower()


DEFAULT_STEPS: Tuple[Transform, ...] = (
    replace_emoticons,
    replace_symbols,
    strip_non_alphabetic,
    to_ascii,
    strip_digits,
    strip_punctuation,
    expand_elongated,
    collapse_whitespace,
    lowercase,
)


class TextNormalizer:
    """
    Applies the transform chain to review text.

    The chain is a plain sequence of functions, so each step can be
    tested and audited on its own.
    """

    def __init__(self, steps: Sequence[Transform] = DEFAULT_STEPS):
        """
        Initialize text normalizer.

        Args:
            steps: Ordered str -> str transforms
        """
        if not steps:
            raise ValueError("TextNormalizer needs at least one step")

        self.steps = tuple(steps)
        self.empty_documents = 0

        logger.info(
            f"Initialized TextNormalizer with steps="
            f"{[step.__name__ for step in self.steps]}"
        )

    @property
    def step_names(self) -> List[str]:
        return [step.__name__ for step in self.steps]

    def normalize(self, text: str) -> str:
        """Run every step in order."""
        for step in self.steps:
            text = step(text)
        return text

    def trace(self, text: str) -> List[Tuple[str, str]]:
        """Return (step name, text after step) for each step."""
        results = []
        for step in self.steps:
            text = step(text)
            results.append((step.__name__, text))
        return results

    def normalize_corpus(self, corpus: pd.DataFrame) -> pd.DataFrame:
        """
        Normalize the text column of a corpus table.

        Documents left empty, or with a missing rating, are dropped.
        Document ids and row order are preserved for the rest.

        Args:
            corpus: DataFrame with columns document_id, rating, text

        Returns:
            New DataFrame with normalized text
        """
        cleaned = corpus.copy()
        cleaned[TEXT] = cleaned[TEXT].map(
            lambda value: self.normalize(value) if isinstance(value, str) else None
        )

        empty = cleaned[TEXT].isna() | (cleaned[TEXT] == "")
        for document_id in cleaned.loc[empty, DOCUMENT_ID]:
            logger.warning(f"Dropping document: {EmptyDocumentError(int(document_id))}")
        self.empty_documents = int(empty.sum())

        missing_rating = cleaned[RATING].isna() & ~empty
        if missing_rating.any():
            logger.warning(f"Dropping {int(missing_rating.sum())} documents with no rating")

        cleaned = cleaned[~(empty | missing_rating)].reset_index(drop=True)

        logger.info(
            f"Normalized {len(corpus)} documents: {len(cleaned)} kept, "
            f"{self.empty_documents} empty after cleaning"
        )
        return cleaned

