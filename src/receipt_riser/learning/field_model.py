"""Relative-frequency model predicting one receipt field from text features."""

import logging
from typing import Dict, List, Optional, Tuple

from .features import FeatureBag

logger = logging.getLogger(__name__)

EPSILON = 1e-10


class FieldModel:
    """
    Per-label feature weights learned from labelled examples.

    A label's weight for a feature is the feature's total count over that
    label's examples divided by the number of those examples. Prediction is
    the label with the largest dot product against the input features.
    """

    def __init__(self, field: str):
        self.field = field
        self.weights: Dict[str, Dict[str, float]] = {}
        self.default_label: Optional[str] = None
        self._examples: List[Tuple[FeatureBag, str]] = []
        self._label_counts: Dict[str, int] = {}

    @property
    def example_count(self) -> int:
        return len(self._examples)

    @property
    def labels(self) -> List[str]:
        return list(self._label_counts)

    def add_example(self, features: FeatureBag, label: str):
        self._examples.append((features, label))
        self._label_counts[label] = self._label_counts.get(label, 0) + 1

    def train(self):
        """Rebuild the weight tables and majority label from the added examples."""
        max_count = 0
        self.default_label = None
        for label, count in self._label_counts.items():
            if count > max_count:
                max_count = count
                self.default_label = label

        totals: Dict[str, Dict[str, float]] = {label: {} for label in self._label_counts}
        for features, label in self._examples:
            label_totals = totals[label]
            for feature, value in features.items():
                label_totals[feature] = label_totals.get(feature, 0.0) + value

        self.weights = {
            label: {feature: total / self._label_counts[label] for feature, total in feature_totals.items()}
            for label, feature_totals in totals.items()
        }

        logger.debug(f"Trained {self.field} model: {self.example_count} examples, "
                     f"{len(self.weights)} labels, default={self.default_label!r}")

    def scores(self, features: FeatureBag) -> Dict[str, float]:
        """Dot product of the input features with each label's weights."""
        return {
            label: sum(value * weights[feature] for feature, value in features.items() if feature in weights)
            for label, weights in self.weights.items()
        }

    def predict(self, features: FeatureBag) -> Optional[str]:
        """
        Predict the label for a feature bag.

        Returns:
            The highest-scoring label, the default label on ties, or None when untrained
        """
        if not self.weights:
            return self.default_label

        scores = self.scores(features)
        best_score = max(scores.values())
        leaders = [label for label, score in scores.items() if score == best_score]

        if self.default_label in leaders:
            return self.default_label
        return leaders[0]

    def confidence(self, features: FeatureBag) -> float:
        """Normalized margin between the two best label scores, in [0, 1]."""
        if not self.weights:
            return 0.0
        if len(self.weights) == 1:
            return 1.0

        ranked = sorted(self.scores(features).values(), reverse=True)
        top, runner_up = ranked[0], ranked[1]
        margin = (top - runner_up) / (top + EPSILON)
        return min(1.0, max(0.0, margin))
