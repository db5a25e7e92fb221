"""Token similarity scoring.

Jaro-Winkler similarity, which weights shared prefixes and tolerates
transposed letters, the typical shape of a transcription typo.
"""

from __future__ import annotations

from rapidfuzz.distance import JaroWinkler

PREFIX_WEIGHT = 0.1
MAX_PREFIX = 4

# Below this many characters the classic match window is zero positions wide
_SHORT_TOKEN_LEN = 4


def similarity(a: str, b: str) -> float:
    """Score how alike two tokens are.

    Case-sensitive and symmetric. Tokens of three characters or fewer are
    scored with a match window of one position, so that a swapped pair of
    letters ("teh" / "the") still counts as matching characters.

    Args:
        a: First token
        b: Second token

    Returns:
        Similarity in [0.0, 1.0]
    """
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0
    if max(len(a), len(b)) >= _SHORT_TOKEN_LEN:
        return JaroWinkler.similarity(a, b, prefix_weight=PREFIX_WEIGHT)
    return _short_jaro_winkler(a, b)


def _short_jaro_winkler(a: str, b: str) -> float:
    window = 1
    a_matched = [False] * len(a)
    b_matched = [False] * len(b)
    matches = 0

    for i, ch in enumerate(a):
        for j in range(max(0, i - window), min(len(b), i + window + 1)):
            if not b_matched[j] and b[j] == ch:
                a_matched[i] = b_matched[j] = True
                matches += 1
                break

    if matches == 0:
        return 0.0

    a_seq = [ch for ch, hit in zip(a, a_matched) if hit]
    b_seq = [ch for ch, hit in zip(b, b_matched) if hit]
    transpositions = sum(x != y for x, y in zip(a_seq, b_seq)) / 2

    jaro = (
        matches / len(a)
        + matches / len(b)
        + (matches - transpositions) / matches
    ) / 3

    if jaro <= 0.7:
        return jaro

    prefix = 0
    for x, y in zip(a[:MAX_PREFIX], b[:MAX_PREFIX]):
        if x != y:
            break
        prefix += 1

    return jaro + prefix * PREFIX_WEIGHT * (1.0 - jaro)
