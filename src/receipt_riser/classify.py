"""Receipt type classification using weighted term dictionaries."""

import re
import logging
from collections import Counter
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from .config import DEFAULT_RULES_PATH
from .exceptions import ConfigurationError
from .models import ReceiptType

logger = logging.getLogger(__name__)


class ReceiptClassifier:
    """Classify receipts as retail, restaurant or gas by term frequency."""

    def __init__(self, rules_path: Optional[Path] = None):
        """
        Initialize classifier with term rules.

        Args:
            rules_path: Path to receipt_types.yml; the packaged rules by default
        """
        self.rules_path = Path(rules_path) if rules_path else DEFAULT_RULES_PATH
        self.term_weights: Dict[ReceiptType, Dict[str, float]] = {}
        self.bonuses: Dict[ReceiptType, tuple] = {}
        self.load_rules()

    def load_rules(self):
        """Load term weights and bonus patterns from YAML."""
        try:
            with open(self.rules_path, 'r', encoding='utf-8') as f:
                rules = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load receipt type rules: {e}")
            raise ConfigurationError(f"Cannot load rules from {self.rules_path}: {e}") from e

        try:
            for type_name, rule in rules.items():
                receipt_type = ReceiptType(type_name)
                self.term_weights[receipt_type] = {
                    str(term): float(weight) for term, weight in rule.get('terms', {}).items()
                }
                bonus = rule.get('bonus')
                if bonus:
                    self.bonuses[receipt_type] = (re.compile(bonus['pattern']), float(bonus['score']))
        except (AttributeError, KeyError, TypeError, ValueError, re.error) as e:
            raise ConfigurationError(f"Malformed rules in {self.rules_path}: {e}") from e

        logger.info(f"Loaded term rules for {len(self.term_weights)} receipt types")

    def classify(self, text: str) -> ReceiptType:
        """
        Classify receipt text.

        Args:
            text: Raw OCR text

        Returns:
            RESTAURANT or GAS when that type scores strictly highest, otherwise RETAIL
        """
        scores = self.score(text)

        best_score = max(scores.values(), default=0.0)
        leaders = [receipt_type for receipt_type, s in scores.items() if s == best_score]

        if best_score <= 0 or len(leaders) != 1:
            result = ReceiptType.RETAIL
        else:
            result = leaders[0]

        logger.info(f"Classified receipt as {result.value} (scores: "
                    + ", ".join(f"{t.value}={s:.1f}" for t, s in scores.items()) + ")")
        return result

    def score(self, text: str) -> Dict[ReceiptType, float]:
        """Return the weighted term score plus regex bonus for each receipt type."""
        token_counts = Counter(tokenize(text))
        upper_text = text.upper()

        scores = {}
        for receipt_type, weights in self.term_weights.items():
            score = sum(count * weights[token]
                        for token, count in token_counts.items() if token in weights)

            bonus = self.bonuses.get(receipt_type)
            if bonus and bonus[0].search(upper_text):
                score += bonus[1]

            scores[receipt_type] = score

        return scores


def tokenize(text: str) -> List[str]:
    """Lower-cased word tokens with punctuation treated as whitespace."""
    return re.sub(r'[^\w\s]', ' ', text).lower().split()
