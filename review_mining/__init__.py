"""
Review Mining.

Text analytics over product reviews: cleaning, document-term matrices,
lexicon sentiment, rating classification and topic models.
"""

__version__ = "0.1.0"
