"""Merchant name and address extraction from receipt headers."""

import re
import logging
from typing import Optional, Sequence

from .base import BaseParser, ParseResult, ReceiptContext

logger = logging.getLogger(__name__)


ADDRESS_PATTERN = re.compile(r'\d+\s+[A-Za-z]+|[A-Za-z]+,\s*[A-Za-z]{2}|\d{5}(-\d{4})?')


class VendorParser(BaseParser):
    """Picks the merchant name from the first few lines of a receipt."""

    def __init__(self,
                 scan_lines: int = 5,
                 skip_keywords: Sequence[str] = ('RECEIPT', 'INVOICE'),
                 brands: Sequence[str] = ()):
        """
        Initialize vendor parser.

        Args:
            scan_lines: Number of leading lines considered for the name
            skip_keywords: Lines containing any of these are never the name
            brands: Known brand names; a line containing one is taken verbatim
        """
        super().__init__()
        self.scan_lines = scan_lines
        self.skip_keywords = list(skip_keywords)
        self.brands = list(brands)

        self.skip_patterns = [
            re.compile(r'\d{2}/\d{2}/\d{2,4}'),
            re.compile(r'\$\d+\.\d{2}'),
        ]

    def parse(self, context: ReceiptContext) -> Optional[ParseResult]:
        """
        Extract the merchant name.

        Args:
            context: Receipt context with trimmed lines

        Returns:
            ParseResult holding the name, or None for an empty receipt
        """
        if not context.lines:
            self._log_result(None)
            return None

        header = context.lines[:self.scan_lines]
        result = None

        if self.brands:
            for line in header:
                upper = line.upper()
                if any(brand in upper for brand in self.brands):
                    result = ParseResult(value=upper, confidence=0.95, source_text=line,
                                         metadata={'brand': True})
                    break

        if result is None:
            for line in header:
                if self._should_skip(line):
                    continue
                if line == line.upper() or (len(line) > 3 and line[0] == line[0].upper()):
                    result = ParseResult(value=line, confidence=0.8, source_text=line)
                    break

        if result is None:
            result = ParseResult(value=context.lines[0], confidence=0.4,
                                 source_text=context.lines[0])

        self._log_result(result)
        return result

    def parse_address(self, context: ReceiptContext) -> Optional[ParseResult]:
        """Return the first line after the header that looks like a street address or locality."""
        if len(context.lines) < 2:
            return None

        for line in context.lines[1:7]:
            if ADDRESS_PATTERN.search(line):
                return ParseResult(value=line, confidence=0.7, source_text=line)

        return None

    def _should_skip(self, line: str) -> bool:
        if any(pattern.search(line) for pattern in self.skip_patterns):
            return True
        upper = line.upper()
        return any(keyword in upper for keyword in self.skip_keywords)
