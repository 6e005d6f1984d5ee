"""Correction history and similarity-ranked suggestions."""

import json
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List

from ..exceptions import StorageError, TrainingDataError
from ..models import Correction, value_to_text
from ..storage import PreferenceStore
from .features import relevant_excerpt, text_hash, trigram_similarity

logger = logging.getLogger(__name__)

CORRECTION_HISTORY_KEY = 'receipt_correction_history'

HASH_MATCH_SCORE = 10.0
EXCERPT_SIMILARITY_SCORE = 5.0
SAME_ORIGINAL_SCORE = 3.0


class CorrectionEngine:
    """Records user corrections and suggests past corrected values for similar receipts."""

    def __init__(self,
                 preferences: PreferenceStore,
                 max_history: int = 100,
                 max_suggestions: int = 5,
                 clock: Callable[[], datetime] = datetime.now):
        self.preferences = preferences
        self.max_history = max_history
        self.max_suggestions = max_suggestions
        self.clock = clock

    async def store_correction(self, text: str, field: str, original_value: Any, corrected_value: Any):
        """
        Append a correction to the bounded history.

        Nothing is stored when the corrected value equals the original. Failures
        are logged and never raised.
        """
        original = value_to_text(original_value) or ''
        corrected = value_to_text(corrected_value) or ''
        if original == corrected:
            logger.debug(f"Ignoring no-op correction for {field}")
            return

        correction = Correction(
            field=field,
            original_value=original,
            corrected_value=corrected,
            timestamp=int(self.clock().timestamp() * 1000),
            text_hash=text_hash(text),
            text_sample=relevant_excerpt(text, field),
        )

        try:
            history = self._load()
            history.append(correction)
            if len(history) > self.max_history:
                history = history[len(history) - self.max_history:]
            self.preferences.set_string_list(
                CORRECTION_HISTORY_KEY, [json.dumps(c.to_dict()) for c in history]
            )
            logger.info(f"Stored correction for {field}: {original!r} -> {corrected!r}")
        except StorageError as e:
            logger.error(f"Error storing correction: {e}")

    async def get_suggestions(self, text: str, field: str, extracted_value: Any) -> List[str]:
        """
        Rank past corrected values for a field by similarity to this receipt.

        Args:
            text: Receipt text
            field: Field name
            extracted_value: Value currently extracted for the field

        Returns:
            Up to max_suggestions corrected values, best first, never the current value
        """
        try:
            history = self._load()
        except StorageError as e:
            logger.error(f"Error getting suggestions: {e}")
            return []

        corrections = [c for c in history if c.field == field]
        if not corrections:
            return []

        current = value_to_text(extracted_value)
        current_hash = text_hash(text)
        current_excerpt = relevant_excerpt(text, field)

        scored: Dict[str, float] = {}
        for correction in corrections:
            if correction.corrected_value == current:
                continue

            score = 0.0
            if correction.text_hash == current_hash:
                score += HASH_MATCH_SCORE
            score += EXCERPT_SIMILARITY_SCORE * trigram_similarity(current_excerpt, correction.text_sample)
            if correction.original_value == current:
                score += SAME_ORIGINAL_SCORE

            scored[correction.corrected_value] = scored.get(correction.corrected_value, 0.0) + score

        ranked = sorted(scored.items(), key=lambda item: item[1], reverse=True)
        return [value for value, _ in ranked[:self.max_suggestions]]

    async def get_history(self) -> List[Correction]:
        try:
            return self._load()
        except StorageError as e:
            logger.error(f"Error reading correction history: {e}")
            return []

    async def clear_correction_history(self):
        try:
            self.preferences.remove(CORRECTION_HISTORY_KEY)
            logger.info("Cleared correction history")
        except StorageError as e:
            logger.error(f"Error clearing correction history: {e}")

    def _load(self) -> List[Correction]:
        history = []
        for raw in self.preferences.get_string_list(CORRECTION_HISTORY_KEY):
            try:
                history.append(Correction.from_dict(json.loads(raw)))
            except (json.JSONDecodeError, TrainingDataError, TypeError) as e:
                logger.warning(f"Skipping malformed correction record: {e}")
        return history
