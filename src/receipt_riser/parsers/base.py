"""Base classes for receipt field parsers."""

from abc import ABC, abstractmethod
from typing import Optional, Any, Dict, List
from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)


@dataclass
class ParseResult:
    """Result of a parsing operation with confidence and metadata."""
    value: Any
    confidence: float
    source_text: str = ""
    metadata: Dict[str, Any] = None

    def __post_init__(self):
        if self.metadata is None:
            self.metadata = {}


@dataclass
class ReceiptContext:
    """Receipt text split into trimmed, non-empty lines."""
    full_text: str
    lines: List[str] = None
    upper_lines: List[str] = None

    def __post_init__(self):
        if self.lines is None:
            raw_lines = self.full_text.split('\n') if self.full_text else []
            self.lines = [line.strip() for line in raw_lines if line.strip()]
        if self.upper_lines is None:
            self.upper_lines = [line.upper() for line in self.lines]


class BaseParser(ABC):
    """Base class for all receipt field parsers."""

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def parse(self, context: ReceiptContext) -> Optional[ParseResult]:
        """
        Parse the specific field from receipt context.

        Args:
            context: Receipt context with text and lines

        Returns:
            ParseResult with value and confidence, or None if parsing failed
        """
        pass

    def _log_result(self, result: Optional[ParseResult]):
        """Log parsing result for debugging."""
        if result:
            self.logger.debug(f"Parsed: {result.value} (confidence: {result.confidence:.2f})")
        else:
            self.logger.debug("Parsing failed - no result")
