"""
Review data models.

Represents a loaded product review and the token records derived from it.
"""

from dataclasses import dataclass

# Column names shared by every corpus table
DOCUMENT_ID = "document_id"
RATING = "rating"
TEXT = "text"
TOKEN = "token"
LEMMA = "lemma"

CORPUS_COLUMNS = [DOCUMENT_ID, RATING, TEXT]
TOKEN_COLUMNS = [DOCUMENT_ID, TOKEN, LEMMA]


@dataclass(frozen=True)
class Review:
    """
    A product review as read from the source.
    Minimal fields needed for the analysis.
    """
    document_id: int  # Row index assigned after truncation
    rating: int  # 1-5 star rating
    raw_text: str  # Free-form review text

    def __post_init__(self):
        # Validate rating
        if not (1 <= self.rating <= 5):
            raise ValueError(f"Invalid rating: {self.rating}. Must be 1-5")

    def to_row(self) -> dict:
        """Convert to a corpus table row."""
        return {DOCUMENT_ID: self.document_id, RATING: self.rating, TEXT: self.raw_text}


@dataclass(frozen=True)
class TokenRecord:
    """One surviving token occurrence and its lemma."""
    document_id: int
    token: str
    lemma: str

    def to_row(self) -> dict:
        return {DOCUMENT_ID: self.document_id, TOKEN: self.token, LEMMA: self.lemma}
