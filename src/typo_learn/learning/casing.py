"""Case matching for replacement tokens."""

from __future__ import annotations


def match_case(corrected: str, original: str) -> str:
    """Reproduce the capitalization pattern of `original` on `corrected`.

    Three patterns are recognised:
    - Title case ("Teh"): first letter upper, the rest lower
    - All caps ("TEH"): upper-cased
    - Anything else: `corrected` is returned with its stored casing

    Args:
        corrected: Replacement token as stored
        original: Token being replaced

    Returns:
        Replacement with the original's case pattern applied
    """
    if not original or not corrected:
        return corrected

    if not original[0].isupper():
        return corrected

    if all(not c.isalpha() or c.islower() for c in original[1:]):
        return corrected[0].upper() + corrected[1:].lower()

    if all(not c.isalpha() or c.isupper() for c in original):
        return corrected.upper()

    return corrected
