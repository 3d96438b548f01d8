"""
Unit tests for the lexical resources.

NLTK lookups are patched so the tests never download corpora.
"""

from unittest.mock import MagicMock, patch

import pytest

from review_mining.utils import resources
from review_mining.utils.resources import (
    Lemmatizer,
    PolarityLexicon,
    StopWords,
    WordNetLemmaDictionary,
    ensure_nltk_resource,
)


def test_stop_words_case_insensitive():
    stop_words = StopWords(["The", "and"])

    assert "the" in stop_words
    assert "THE" in stop_words
    assert "And" in stop_words
    assert "game" not in stop_words
    assert len(stop_words) == 2


def test_lemmatizer_falls_back_to_token():
    lemmatizer = Lemmatizer({"games": "game"})

    assert lemmatizer.lemmatize("games") == "game"
    assert lemmatizer.lemmatize("zelda") == "zelda"
    assert Lemmatizer().lemmatize("games") == "games"


def test_polarity_lexicon():
    lexicon = PolarityLexicon.from_words(["great", "fun"], ["bad"])

    assert lexicon.polarity("great") == 1
    assert lexicon.polarity("bad") == -1
    assert lexicon.polarity("game") == 0
    assert lexicon.label("fun") == "positive"
    assert lexicon.label("game") is None
    assert len(lexicon) == 3


def test_polarity_lexicon_conflict_resolves_negative():
    lexicon = PolarityLexicon.from_words(["sharp"], ["sharp"])
    assert lexicon.polarity("sharp") == -1


def test_polarity_lexicon_rejects_unknown_labels():
    with pytest.raises(ValueError):
        PolarityLexicon({"meh": "neutral"})


def test_ensure_resource_skips_download_when_present():
    with patch.object(resources.nltk.data, "find") as find, \
            patch.object(resources.nltk, "download") as download:
        ensure_nltk_resource("stopwords")

    find.assert_called_once_with("corpora/stopwords")
    download.assert_not_called()


def test_ensure_resource_downloads_when_missing():
    with patch.object(resources.nltk.data, "find", side_effect=LookupError), \
            patch.object(resources.nltk, "download", return_value=True) as download:
        ensure_nltk_resource("opinion_lexicon")

    download.assert_called_once_with("opinion_lexicon", quiet=True)


def test_ensure_resource_raises_when_download_fails():
    with patch.object(resources.nltk.data, "find", side_effect=LookupError), \
            patch.object(resources.nltk, "download", return_value=False):
        with pytest.raises(LookupError):
            ensure_nltk_resource("wordnet")


def test_wordnet_lemmatizer_tries_noun_then_verb():
    readings = {
        ("games", "n"): "game",
        ("playing", "n"): "playing",
        ("playing", "v"): "play",
        ("zelda", "n"): "zelda",
        ("zelda", "v"): "zelda",
        ("zelda", "a"): "zelda",
    }
    wordnet = MagicMock()
    wordnet.lemmatize.side_effect = lambda token, pos: readings[(token, pos)]

    with patch.object(resources, "ensure_nltk_resource"), \
            patch.object(resources, "WordNetLemmatizer", return_value=wordnet):
        lemmatizer = WordNetLemmaDictionary()

    assert lemmatizer.lemmatize("games") == "game"
    assert lemmatizer.lemmatize("playing") == "play"
    assert lemmatizer.lemmatize("zelda") == "zelda"

    # Cached lookups do not hit WordNet again
    calls = wordnet.lemmatize.call_count
    lemmatizer.lemmatize("playing")
    assert wordnet.lemmatize.call_count == calls


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
