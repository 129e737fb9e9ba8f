"""Lexical-overlap convergence check between the entries of one round.

This is a crude heuristic, not semantic similarity: paraphrased agreement
scores low, and because a token counts as shared when it is a *substring* of
another entry, short tokens such as "a" or "is" are shared almost always.
"""

from collections.abc import Sequence

from src.models import TranscriptEntry


def overlap_ratio(entries: Sequence[TranscriptEntry]) -> float:
    """Fraction of distinct tokens that occur in more than one entry.

    Returns 0.0 when the entries contain no tokens at all.
    """
    contents = [e.content.lower() for e in entries]
    universe: set[str] = set()
    shared: set[str] = set()
    for content in contents:
        for token in content.split():
            universe.add(token)
            if token not in shared and sum(token in other for other in contents) > 1:
                shared.add(token)
    if not universe:
        return 0.0
    return len(shared) / len(universe)


def check_convergence(entries: Sequence[TranscriptEntry], threshold: float) -> bool:
    """True when overlap_ratio(entries) is strictly greater than threshold."""
    return overlap_ratio(entries) > threshold
