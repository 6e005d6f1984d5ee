"""Date parsing for US and European style receipt dates."""

import re
import logging
from typing import Optional, List, Sequence
from datetime import date

from dateutil.parser import parse as dateutil_parse

from .base import BaseParser, ParseResult, ReceiptContext

logger = logging.getLogger(__name__)


MONTHS = {
    'JAN': 1, 'FEB': 2, 'MAR': 3, 'APR': 4, 'MAY': 5, 'JUN': 6,
    'JUL': 7, 'AUG': 8, 'SEP': 9, 'OCT': 10, 'NOV': 11, 'DEC': 12,
}

TIME_PATTERN = re.compile(r'\d{1,2}:\d{2}')


class DateParser(BaseParser):
    """Finds the transaction date, preferring lines that look like date labels."""

    def __init__(self, keywords: Sequence[str] = ('DATE',), use_time_lines: bool = False):
        """
        Initialize date parser.

        Args:
            keywords: Upper-case labels that mark a date line
            use_time_lines: Also search lines with a clock time before the full scan
        """
        super().__init__()
        self.keywords = list(keywords)
        self.use_time_lines = use_time_lines

        # Date patterns in priority order
        self.date_patterns = [
            (re.compile(r'(?<!\d)(\d{1,2})[/\-](\d{1,2})[/\-](\d{2,4})'), 'numeric'),           # MM/DD/YYYY or DD/MM/YYYY
            (re.compile(r'(\d{1,2})\s+([A-Za-z]{3,})\s+(\d{2,4})'), 'day_month_year'),   # 15 January 2024
            (re.compile(r'([A-Za-z]{3,})\s+(\d{1,2}),?\s+(\d{2,4})'), 'month_day_year'), # January 15, 2024
        ]

    def parse(self, context: ReceiptContext) -> Optional[ParseResult]:
        """
        Extract the transaction date from receipt lines.

        Args:
            context: Receipt context with trimmed lines

        Returns:
            ParseResult holding a date, or None if no line carries one
        """
        passes = [
            ([line for line in context.lines if self._has_keyword(line)], 0.9),
        ]
        if self.use_time_lines:
            passes.append(([line for line in context.lines if TIME_PATTERN.search(line)], 0.8))
        passes.append((context.lines, 0.7))

        result = None
        for lines, confidence in passes:
            for line in lines:
                parsed = self.parse_line(line)
                if parsed:
                    result = ParseResult(value=parsed, confidence=confidence, source_text=line)
                    break
            if result:
                break

        self._log_result(result)
        return result

    def parse_line(self, line: str) -> Optional[date]:
        """Return the first valid date found in a single line."""
        for pattern, pattern_type in self.date_patterns:
            match = pattern.search(line)
            if not match:
                continue
            try:
                parsed = self._build_date(match.groups(), pattern_type)
            except ValueError:
                continue
            if parsed:
                return parsed
        return None

    def parse_text(self, text: str) -> Optional[date]:
        """
        Parse a free-form date string such as an entity annotation.

        Falls back to ISO format and then to dateutil when no receipt pattern matches.
        """
        if not text or not text.strip():
            return None

        parsed = self.parse_line(text)
        if parsed:
            return parsed

        try:
            return date.fromisoformat(text.strip())
        except ValueError:
            pass

        try:
            return dateutil_parse(text, fuzzy=True).date()
        except (ValueError, OverflowError) as e:
            self.logger.debug(f"Unparseable date string {text!r}: {e}")
            return None

    def _has_keyword(self, line: str) -> bool:
        upper = line.upper()
        return any(keyword in upper for keyword in self.keywords)

    def _build_date(self, groups: List[str], pattern_type: str) -> Optional[date]:
        if pattern_type == 'numeric':
            first, second, year = int(groups[0]), int(groups[1]), int(groups[2])
            if first <= 12:
                month, day = first, second
            else:
                day, month = first, second
        elif pattern_type == 'day_month_year':
            day, year = int(groups[0]), int(groups[2])
            month = month_number(groups[1])
        else:
            day, year = int(groups[1]), int(groups[2])
            month = month_number(groups[0])

        if month is None:
            return None

        return date(normalize_year(year), month, day)


def month_number(name: str) -> Optional[int]:
    """Map a month name or abbreviation to its number, None if unrecognized."""
    upper = name.upper()
    for abbreviation, number in MONTHS.items():
        if abbreviation in upper:
            return number
    return None


def normalize_year(year: int) -> int:
    """Expand two-digit years: 00-49 map to 2000s, 50-99 to 1900s."""
    if year < 100:
        return 2000 + year if year < 50 else 1900 + year
    return year
