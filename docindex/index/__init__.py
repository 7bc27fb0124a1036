"""Corpus and keyword search package."""

from docindex.index.corpus import Corpus
from docindex.index.search import search

__all__ = ["Corpus", "search"]
