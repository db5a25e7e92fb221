"""Learning module for transcript typo correction.

Aligns transcribed text with the user's edits, learns recurring
single-word typos and applies them to future transcriptions.
"""

from typo_learn.learning.alignment import align_words
from typo_learn.learning.cache import CorrectionCache, ReadWriteLock
from typo_learn.learning.casing import match_case
from typo_learn.learning.engine import LearningEngine
from typo_learn.learning.similarity import similarity

__all__ = [
    "LearningEngine",
    "CorrectionCache",
    "ReadWriteLock",
    "align_words",
    "match_case",
    "similarity",
]
