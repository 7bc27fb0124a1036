"""docindex: documentation crawler, extractor and keyword index."""

__version__ = "0.1.0"
