"""Amount parsing for receipt totals and other money fields."""

import re
import logging
from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence

from .base import BaseParser, ParseResult, ReceiptContext

logger = logging.getLogger(__name__)


DEFAULT_TOTAL_LABELS = r'(?:TOTAL|AMOUNT|BALANCE|DUE|PAID)'

CURRENCY_MARKERS = [
    ('USD', ('$', 'USD')),
    ('EUR', ('€', 'EUR')),
    ('GBP', ('£', 'GBP')),
]


class AmountParser(BaseParser):
    """Extracts the receipt total, preferring lines labelled as totals."""

    def __init__(self,
                 keywords: Sequence[str] = ('TOTAL', 'AMOUNT'),
                 total_labels: str = DEFAULT_TOTAL_LABELS,
                 skip_subtotal: bool = True,
                 skip_keywords: Sequence[str] = ()):
        """
        Initialize amount parser.

        Args:
            keywords: Upper-case labels that mark a total line
            total_labels: Regex alternation of labels that may precede the total
            skip_subtotal: Ignore SUBTOTAL lines unless they also read "TOTAL:"
            skip_keywords: Lines containing any of these are never totals
        """
        super().__init__()
        self.keywords = list(keywords)
        self.skip_subtotal = skip_subtotal
        self.skip_keywords = list(skip_keywords)

        # Amount patterns in priority order
        self.amount_patterns = [
            re.compile(total_labels + r'(?:[:\s]+)?\$?(\d+\.\d{2})'),
            re.compile(r'\$\s*(\d+\.\d{2})'),
            re.compile(r'(\d+\.\d{2})\s*(?:USD|EUR|GBP)'),
        ]

    def parse(self, context: ReceiptContext) -> Optional[ParseResult]:
        """
        Extract the total amount.

        The first keyword line carrying an amount wins; otherwise the largest
        amount on any line is taken.

        Args:
            context: Receipt context with trimmed lines

        Returns:
            ParseResult holding a Decimal, or None if no amount is present
        """
        result = None

        for line, upper in zip(context.lines, context.upper_lines):
            if not self._is_total_line(upper):
                continue
            amount = self.parse_line(upper)
            if amount is not None:
                result = ParseResult(value=amount, confidence=0.9, source_text=line)
                break

        if result is None:
            candidates = []
            for line, upper in zip(context.lines, context.upper_lines):
                amount = self.parse_line(upper)
                if amount is not None:
                    candidates.append((amount, line))
            if candidates:
                amount, line = max(candidates, key=lambda c: c[0])
                result = ParseResult(value=amount, confidence=0.6, source_text=line)

        self._log_result(result)
        return result

    def parse_line(self, line: str) -> Optional[Decimal]:
        """Return the first amount matched on an upper-cased line."""
        for pattern in self.amount_patterns:
            match = pattern.search(line)
            if match:
                amount = to_decimal(match.group(1))
                if amount is not None:
                    return amount
        return None

    def _is_total_line(self, upper: str) -> bool:
        if not any(keyword in upper for keyword in self.keywords):
            return False
        if self.skip_subtotal and 'SUBTOTAL' in upper and 'TOTAL:' not in upper:
            return False
        if any(keyword in upper for keyword in self.skip_keywords):
            return False
        return True


def detect_currency(text: str) -> str:
    """Return the currency code implied by symbols in the text, USD by default."""
    for code, markers in CURRENCY_MARKERS:
        if any(marker in text for marker in markers):
            return code
    return 'USD'


def to_decimal(text: str) -> Optional[Decimal]:
    try:
        return Decimal(text)
    except (InvalidOperation, TypeError):
        return None
