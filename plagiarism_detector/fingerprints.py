"""Structural fingerprints: the set of canonical hashes of every subtree."""

from __future__ import annotations

import logging
from typing import FrozenSet, List, Set

from .parser import parse
from .syntax_tree import CanonicalHasher, For, Node, lower_for_loop
from .tokenizer import tokenize

logger = logging.getLogger(__name__)

Fingerprints = FrozenSet[int]


def _collect(root: Node, hasher: CanonicalHasher, out: Set[int]) -> None:
    stack: List[Node] = [root]
    while stack:
        node = stack.pop()
        if isinstance(node, For):
            # Visit the while lowering in place of the loop itself.
            init_stmt, while_loop = lower_for_loop(node)
            stack.append(while_loop)
            if init_stmt is not None:
                stack.append(init_stmt)
            continue
        out.add(hasher.hash(node))
        stack.extend(reversed(list(node.children())))


def collect_fingerprints(root: Node) -> Fingerprints:
    """Pre-order walk of ``root`` returning the set of subtree hashes.

    ``for`` loops contribute the fingerprints of their ``while`` rewrite, so
    both spellings of the same loop produce the same set. ``root`` is not
    modified.
    """
    out: Set[int] = set()
    _collect(root, CanonicalHasher(), out)
    logger.debug("Collected %d fingerprints", len(out))
    return frozenset(out)


def fingerprint_source(source: str) -> Fingerprints:
    """Tokenize, parse and fingerprint a source text.

    Raises :class:`~plagiarism_detector.parser.SourceSyntaxError` when the
    text does not parse.
    """
    return collect_fingerprints(parse(tokenize(source)))
