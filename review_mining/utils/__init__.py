"""
Utility modules for review mining.

Cross-cutting concerns:
- Resources: stop words, lemma dictionary and polarity lexicon lookups
- Storage: File output for run results
"""
