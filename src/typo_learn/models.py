"""Correction models for typo-learn.

A Correction is the durable record of one observed (original -> corrected)
pair. Its confidence grows with the number of times the pair was observed.
LearnedCorrection and AppliedCorrection are transient results reported by
the learning engine.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator


class CorrectionSource(str, Enum):
    """Where a correction came from."""

    USER_EDIT = "user_edit"  # Observed from a user editing transcribed text
    MANUAL = "manual"  # Added explicitly by the user


def confidence_for(occurrences: int) -> float:
    """Map an occurrence count to a confidence in [0, 1).

    Logarithmic growth with diminishing returns:
    1 -> 0.41, 2 -> 0.52, 3 -> 0.58, 10 -> 0.71.
    Three observations clear the default auto-apply threshold of 0.55.

    Args:
        occurrences: Number of times the pair was observed

    Returns:
        Confidence value, never reaching 1.0
    """
    if occurrences <= 0:
        return 0.0
    return 1.0 - 1.0 / (1.0 + math.log1p(occurrences))


class Correction(BaseModel):
    """A learned typo correction.

    `original` is always lower-cased; `corrected` keeps the casing it was
    observed with. (original, corrected) is the identity key. Unless given
    explicitly, confidence is derived from occurrences on construction.
    """

    original: str
    corrected: str
    source: CorrectionSource = CorrectionSource.USER_EDIT
    occurrences: int = Field(default=1, ge=0)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    created_at: str = Field(default_factory=lambda: datetime.now().isoformat())
    updated_at: str = Field(default_factory=lambda: datetime.now().isoformat())

    @field_validator("original")
    @classmethod
    def _lowercase_original(cls, value: str) -> str:
        return value.lower()

    @model_validator(mode="after")
    def _derive_confidence(self) -> "Correction":
        # An explicit confidence (e.g. loaded from a store) is kept as is
        if "confidence" not in self.model_fields_set:
            self.update_confidence()
        return self

    @property
    def key(self) -> tuple[str, str]:
        """Identity key used by stores for upserts."""
        return (self.original, self.corrected)

    def update_confidence(self) -> None:
        """Recompute confidence from the occurrence count."""
        self.confidence = confidence_for(self.occurrences)

    def record_occurrence(self, count: int = 1) -> None:
        """Register `count` more observations of this pair."""
        self.occurrences += count
        self.update_confidence()
        self.update_timestamp()

    def update_timestamp(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = datetime.now().isoformat()


@dataclass(frozen=True)
class CachedCorrection:
    """Read-optimized projection of a Correction held in the engine cache."""

    corrected: str
    confidence: float


@dataclass
class LearnedCorrection:
    """A pair accepted as a typo correction by a single learn call."""

    original: str
    corrected: str
    similarity: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "original": self.original,
            "corrected": self.corrected,
            "similarity": self.similarity,
        }


@dataclass
class AppliedCorrection:
    """A token rewritten by a single apply call.

    Attributes:
        original: Token as it appeared in the input
        corrected: Replacement after case matching
        confidence: Cached confidence of the correction
        position: Token index in the input (not a character offset)
    """

    original: str
    corrected: str
    confidence: float
    position: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "original": self.original,
            "corrected": self.corrected,
            "confidence": self.confidence,
            "position": self.position,
        }
