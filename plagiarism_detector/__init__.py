"""Structural plagiarism detection for C-family source code."""

from .fingerprints import collect_fingerprints, fingerprint_source
from .parser import SourceSyntaxError, parse
from .similarity import jaccard_similarity
from .tokenizer import tokenize

__all__ = [
    "SourceSyntaxError",
    "collect_fingerprints",
    "fingerprint_source",
    "jaccard_similarity",
    "parse",
    "tokenize",
]
