"""
Lexical resources.

Lookup interfaces for the stop-word set, the lemma dictionary and the
polarity lexicon, with in-memory and NLTK-backed implementations.
"""

import logging
from typing import Dict, Iterable, Optional

import nltk
from nltk.stem import WordNetLemmatizer

logger = logging.getLogger(__name__)

POSITIVE = "positive"
NEGATIVE = "negative"
POLARITY_SCORES = {POSITIVE: 1, NEGATIVE: -1}

_NLTK_RESOURCES = {
    "stopwords": "corpora/stopwords",
    "wordnet": "corpora/wordnet",
    "opinion_lexicon": "corpora/opinion_lexicon",
}


def ensure_nltk_resource(name: str) -> None:
    """Download an NLTK corpus unless it is already installed."""
    try:
        nltk.data.find(_NLTK_RESOURCES[name])
    except LookupError:
        logger.info(f"Downloading NLTK resource '{name}'")
        if not nltk.download(name, quiet=True):
            raise LookupError(f"NLTK resource '{name}' is not available")


class StopWords:
    """Static stop-word set with case-insensitive exact matching."""

    def __init__(self, words: Iterable[str]):
        self.words = frozenset(word.lower() for word in words)

    def __contains__(self, token: str) -> bool:
        return token.lower() in self.words

    def __len__(self) -> int:
        return len(self.words)

    @classmethod
    def from_nltk(cls, language: str = "english") -> "StopWords":
        ensure_nltk_resource("stopwords")
        from nltk.corpus import stopwords
        words = stopwords.words(language)
        logger.info(f"Loaded {len(words)} NLTK stop words ({language})")
        return cls(words)


class Lemmatizer:
    """
    Dictionary lemmatizer.
    Tokens without an entry are returned unchanged.
    """

    def __init__(self, lemmas: Optional[Dict[str, str]] = None):
        self.lemmas = dict(lemmas or {})

    def lemmatize(self, token: str) -> str:
        return self.lemmas.get(token, token)


class WordNetLemmaDictionary(Lemmatizer):
    """
    WordNet morphological lookup.

    Tries the noun, verb and adjective readings in that order and keeps
    the first one that changes the token.
    """

    POS_ORDER = ("n", "v", "a")

    def __init__(self):
        super().__init__()
        ensure_nltk_resource("wordnet")
        self._wordnet = WordNetLemmatizer()
        self._cache: Dict[str, str] = {}

    def lemmatize(self, token: str) -> str:
        if token in self._cache:
            return self._cache[token]

        lemma = token
        for pos in self.POS_ORDER:
            candidate = self._wordnet.lemmatize(token, pos=pos)
            if candidate != token:
                lemma = candidate
                break

        self._cache[token] = lemma
        return lemma


class PolarityLexicon:
    """
    Word → polarity lookup.
    Unknown words have polarity 0.
    """

    def __init__(self, entries: Dict[str, str]):
        invalid = {word: label for word, label in entries.items() if label not in POLARITY_SCORES}
        if invalid:
            raise ValueError(f"Invalid polarity labels: {invalid}. Must be 'positive' or 'negative'")
        self.entries = dict(entries)

    def __len__(self) -> int:
        return len(self.entries)

    def label(self, word: str) -> Optional[str]:
        return self.entries.get(word)

    def polarity(self, word: str) -> int:
        return POLARITY_SCORES.get(self.entries.get(word), 0)

    @classmethod
    def from_words(cls, positive: Iterable[str], negative: Iterable[str]) -> "PolarityLexicon":
        entries = {word: POSITIVE for word in positive}
        # Words listed under both labels count as negative
        entries.update({word: NEGATIVE for word in negative})
        return cls(entries)

    @classmethod
    def from_nltk(cls) -> "PolarityLexicon":
        """Bing Liu opinion lexicon shipped with NLTK."""
        ensure_nltk_resource("opinion_lexicon")
        from nltk.corpus import opinion_lexicon
        lexicon = cls.from_words(opinion_lexicon.positive(), opinion_lexicon.negative())
        logger.info(f"Loaded opinion lexicon with {len(lexicon)} entries")
        return lexicon


class LexicalResources:
    """Bundle of the three lookups used by the pipeline."""

    def __init__(self, stop_words: StopWords, lemmatizer: Lemmatizer, lexicon: PolarityLexicon):
        self.stop_words = stop_words
        self.lemmatizer = lemmatizer
        self.lexicon = lexicon

    @classmethod
    def from_nltk(cls) -> "LexicalResources":
        return cls(
            stop_words=StopWords.from_nltk(),
            lemmatizer=WordNetLemmaDictionary(),
            lexicon=PolarityLexicon.from_nltk()
        )
