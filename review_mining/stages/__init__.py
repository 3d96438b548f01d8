"""
Pipeline stages for review mining.

One module per stage, in run order:
- Loader
- Text Normalizer
- Tokenizer / Lemmatizer
- Vectorizer
- Sentiment Scorer
- Dataset Splitter
- Rating Classifier
- Topic Modeler
"""
