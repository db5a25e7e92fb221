"""Word alignment between an original and an edited text.

A greedy single pass with two cursors. Each step either pairs the
current tokens or skips one token on one side when a one-token
lookahead shows a better match there. It never backtracks, so runs of
unrelated words on both sides end up force-paired; the correction
threshold downstream discards those pairs.
"""

from __future__ import annotations

from typing import Sequence

from typo_learn.config import ALIGNMENT_THRESHOLD
from typo_learn.learning.similarity import similarity


def align_words(
    original: Sequence[str],
    edited: Sequence[str],
    threshold: float = ALIGNMENT_THRESHOLD,
) -> list[tuple[str, str]]:
    """Pair tokens of `original` with the tokens of `edited` that replace them.

    Args:
        original: Tokens of the machine-transcribed text
        edited: Tokens of the user-edited text
        threshold: Minimum similarity for two tokens to share a slot

    Returns:
        Ordered (original, edited) pairs, at most min(len) of them
    """
    if not original or not edited:
        return []

    pairs: list[tuple[str, str]] = []
    i = j = 0

    while i < len(original) and j < len(edited):
        orig = original[i]
        edit = edited[j]

        if orig.lower() == edit.lower():
            pairs.append((orig, edit))
            i += 1
            j += 1
            continue

        score = similarity(orig, edit)
        if score >= threshold:
            pairs.append((orig, edit))
            i += 1
            j += 1
            continue

        # orig was dropped by the edit: the next original token fits edit better
        skip_orig = i + 1 < len(original) and similarity(original[i + 1], edit) > score
        # edit was inserted by the user: orig fits the next edited token better
        skip_edit = j + 1 < len(edited) and similarity(orig, edited[j + 1]) > score

        if skip_orig and not skip_edit:
            i += 1
        elif skip_edit and not skip_orig:
            j += 1
        else:
            pairs.append((orig, edit))
            i += 1
            j += 1

    return pairs
