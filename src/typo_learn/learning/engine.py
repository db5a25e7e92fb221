"""Self-learning typo correction engine.

Learns single-word corrections from the edits a user makes to transcribed
text and re-applies them to later transcriptions from an in-memory cache.

Learning:
    original/edited -> align words -> keep similar-but-different pairs
    -> upsert in the store -> cache once confidence is high enough

Applying:
    text -> tokens -> case-insensitive cache lookup -> case matching -> text
"""

from __future__ import annotations

import logging

from typo_learn.config import EngineSettings, LoadFailurePolicy
from typo_learn.errors import ConfigurationError, ErrorContext, StorageError
from typo_learn.learning.alignment import align_words
from typo_learn.learning.cache import CorrectionCache
from typo_learn.learning.casing import match_case
from typo_learn.learning.similarity import similarity
from typo_learn.logging import get_logger
from typo_learn.models import (
    AppliedCorrection,
    CachedCorrection,
    Correction,
    CorrectionSource,
    LearnedCorrection,
)
from typo_learn.storage import CorrectionStore

logger = get_logger(__name__)


def _byte_length_diff(a: str, b: str) -> int:
    return abs(len(a.encode("utf-8")) - len(b.encode("utf-8")))


def _best_per_original(corrections: list[Correction]) -> dict[str, CachedCorrection]:
    """Collapse corrections to one cache entry per original token.

    The most confident replacement wins; ties go to the one seen more often.
    """
    best: dict[str, Correction] = {}
    for correction in corrections:
        key = correction.original.lower()
        current = best.get(key)
        if current is None or (correction.confidence, correction.occurrences) > (
            current.confidence,
            current.occurrences,
        ):
            best[key] = correction

    return {
        key: CachedCorrection(corrected=c.corrected, confidence=c.confidence)
        for key, c in best.items()
    }


class LearningEngine:
    """Learns typo corrections from user edits and applies them to new text.

    Thread-safe. The cache belongs to the instance; engines never share
    state. The store is never called while the cache lock is held.

    Usage:
        engine = LearningEngine.from_storage(JsonCorrectionStore(path))
        engine.learn_from_edit("I will recieve teh package", "I will receive the package")
        text, applied = engine.apply_corrections(transcript)
    """

    def __init__(
        self,
        store: CorrectionStore | None = None,
        settings: EngineSettings | None = None,
    ):
        """Initialize an empty engine.

        Args:
            store: Default store for learning and reloading
            settings: Thresholds and policies (defaults if omitted)
        """
        self.store = store
        self.settings = settings or EngineSettings()
        self._cache = CorrectionCache()
        self._min_confidence = self.settings.min_confidence

    @classmethod
    def from_storage(
        cls,
        store: CorrectionStore,
        settings: EngineSettings | None = None,
    ) -> "LearningEngine":
        """Create an engine and load its cache from a store.

        If the store cannot be read, settings.load_failure decides:
        FALLBACK_EMPTY logs a warning and returns an empty engine bound to
        the store; PROPAGATE raises the StorageError.

        Args:
            store: Store to load corrections from
            settings: Thresholds and policies

        Returns:
            LearningEngine instance
        """
        engine = cls(store=store, settings=settings)
        try:
            engine.reload_from_storage()
        except StorageError as e:
            if engine.settings.load_failure == LoadFailurePolicy.PROPAGATE:
                raise
            logger.warning(
                f"Could not load corrections, starting empty: {e}",
                extra={"error_type": type(e).__name__},
            )
        return engine

    @property
    def min_confidence(self) -> float:
        """Minimum confidence for a cached correction to be applied."""
        return self._min_confidence

    def set_min_confidence(self, confidence: float) -> None:
        """Change the auto-apply threshold, clamped to [0, 1].

        Takes effect on the next lookup; no reload needed.
        """
        self._min_confidence = min(1.0, max(0.0, confidence))

    def _resolve_store(self, store: CorrectionStore | None) -> CorrectionStore:
        store = store if store is not None else self.store
        if store is None:
            raise ConfigurationError("No correction store configured for the learning engine")
        return store

    def learn_from_edit(
        self,
        original: str,
        edited: str,
        store: CorrectionStore | None = None,
    ) -> list[LearnedCorrection]:
        """Learn typo corrections from a before/after pair of texts.

        Each accepted pair is upserted in the store before the next one is
        considered, so a store failure leaves earlier pairs saved.

        Args:
            original: Text as transcribed
            edited: Text after the user's edits
            store: Store to record corrections in (defaults to the bound one)

        Returns:
            Corrections accepted from this edit, possibly empty

        Raises:
            StorageError: If the store fails to save a correction
            ConfigurationError: If no store is available
        """
        store = self._resolve_store(store)
        settings = self.settings

        pairs = align_words(original.split(), edited.split(), settings.alignment_threshold)
        learned: list[LearnedCorrection] = []

        for orig, edit in pairs:
            if orig.lower() == edit.lower():
                continue

            score = similarity(orig, edit)
            if score < settings.correction_threshold:
                continue
            if _byte_length_diff(orig, edit) > settings.max_length_diff:
                continue

            correction = Correction(
                original=orig,
                corrected=edit,
                source=CorrectionSource.USER_EDIT,
            )

            # StorageError reaches the caller, which reports it
            with ErrorContext(
                "save_correction",
                context={"original": correction.original},
                log_level=logging.INFO,
            ):
                saved = store.save_correction(correction)

            if saved.confidence >= self._min_confidence:
                self._cache.insert(saved.original, saved.corrected, saved.confidence)

            logger.debug(
                f"Learned correction: '{orig}' -> '{edit}' (similarity: {score:.2f})",
                extra={"occurrences": saved.occurrences, "confidence": round(saved.confidence, 3)},
            )
            learned.append(LearnedCorrection(original=orig, corrected=edit, similarity=score))

        return learned

    def apply_corrections(self, text: str) -> tuple[str, list[AppliedCorrection]]:
        """Rewrite known typos in text.

        Tokens are split on whitespace and re-joined with single spaces
        whenever the cache is non-empty, even if nothing was replaced.

        Args:
            text: Text to correct

        Returns:
            Tuple of (corrected_text, applied_corrections)
        """
        applied: list[AppliedCorrection] = []
        min_conf = self._min_confidence

        with self._cache.reading() as entries:
            if not entries:
                return text, applied

            words = text.split()
            if not words:
                return text, applied

            result_words: list[str] = []
            for i, word in enumerate(words):
                entry = entries.get(word.lower())
                if entry is not None and entry.confidence >= min_conf:
                    replacement = match_case(entry.corrected, word)
                    applied.append(AppliedCorrection(
                        original=word,
                        corrected=replacement,
                        confidence=entry.confidence,
                        position=i,
                    ))
                    result_words.append(replacement)
                else:
                    result_words.append(word)

        if applied:
            logger.debug(f"Applied {len(applied)} corrections to text")

        return " ".join(result_words), applied

    def has_correction(self, word: str) -> bool:
        """Check if the cache holds a correction for a word, at any confidence."""
        return self._cache.contains(word)

    def get_correction(self, word: str) -> str | None:
        """Get the stored replacement for a word if it clears the threshold."""
        entry = self._cache.get(word)
        if entry is None or entry.confidence < self._min_confidence:
            return None
        return entry.corrected

    def get_all_corrections(self) -> list[tuple[str, str, float]]:
        """All cached corrections as (original, corrected, confidence), sorted by original."""
        return sorted(
            (original, entry.corrected, entry.confidence)
            for original, entry in self._cache.items()
        )

    def clear_cache(self) -> None:
        """Drop every cached correction. The store is untouched."""
        self._cache.clear()

    def cache_size(self) -> int:
        """Number of cached corrections."""
        return len(self._cache)

    def remove_from_cache(self, original: str) -> None:
        """Evict one word's correction from the cache."""
        self._cache.remove(original)

    def reload_from_storage(self, store: CorrectionStore | None = None) -> None:
        """Replace the cache with corrections loaded fresh from the store.

        Only corrections at or above the current minimum confidence are
        loaded. The cache is swapped in one step after the read completes.

        Raises:
            StorageError: If the store cannot be read
        """
        store = self._resolve_store(store)
        corrections = store.get_corrections(self._min_confidence)
        self._cache.replace_all(_best_per_original(corrections))

        logger.info(f"Loaded {len(self._cache)} corrections into learning engine")
