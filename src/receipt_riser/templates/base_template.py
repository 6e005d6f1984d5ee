"""Base extractor template shared by the per-type receipt templates."""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional, Callable, Sequence
import re
import logging

from ..models import ExtractionResult, ReceiptType, AuxiliaryFields
from ..parsers import (
    AmountParser, DateParser, ReceiptContext, VendorParser, detect_currency,
)

logger = logging.getLogger(__name__)


PAYMENT_METHODS = [
    'CASH', 'CREDIT', 'DEBIT', 'VISA', 'MASTERCARD', 'AMEX', 'AMERICAN EXPRESS',
    'DISCOVER', 'CHECK', 'GIFT CARD', 'APPLE PAY', 'GOOGLE PAY',
]

TAX_PATTERN = re.compile(r'(?:TAX|SALES\s+TAX|VAT)(?:[:\s]+)?\$?(\d+\.\d{2})')


class BaseTemplate(ABC):
    """Base class for receipt extraction templates."""

    receipt_type: ReceiptType = ReceiptType.UNKNOWN

    def __init__(self,
                 name: str,
                 vendor_parser: VendorParser,
                 date_parser: DateParser,
                 amount_parser: AmountParser,
                 clock: Optional[Callable[[], date]] = None):
        """
        Initialize template.

        Args:
            name: Template name
            vendor_parser: Parser for merchant name and address
            date_parser: Parser for the transaction date
            amount_parser: Parser for the total amount
            clock: Returns today's date when no date is found on the receipt
        """
        self.name = name
        self.vendor_parser = vendor_parser
        self.date_parser = date_parser
        self.amount_parser = amount_parser
        self.clock = clock or date.today
        self.logger = logging.getLogger(f"{self.__class__.__name__}")

    def extract(self, text: str) -> ExtractionResult:
        """
        Extract all fields this template knows about.

        Args:
            text: Raw OCR text

        Returns:
            ExtractionResult with baseline confidence
        """
        context = ReceiptContext(full_text=text)

        name = self.vendor_parser.parse(context)
        address = self.vendor_parser.parse_address(context)
        amount = self.amount_parser.parse(context)

        transaction_date = self.date_parser.parse(context)
        if transaction_date is None:
            self.logger.warning("No date found on receipt, using today's date")

        currency = detect_currency(amount.source_text) if amount else 'USD'

        result = ExtractionResult(
            merchant_name=name.value if name else None,
            merchant_address=address.value if address else None,
            transaction_date=transaction_date.value if transaction_date else self.clock(),
            date_found=transaction_date is not None,
            amount=amount.value if amount else None,
            currency=currency,
            receipt_type=self.receipt_type,
            auxiliary_fields=self.extract_auxiliary(context),
        )
        result.confidence_score = baseline_confidence(result)

        self.logger.info(f"{self.name} extraction: merchant={result.merchant_name}, "
                         f"date={result.transaction_date}, amount={result.amount} "
                         f"(confidence: {result.confidence_score:.2f})")
        return result

    @abstractmethod
    def extract_auxiliary(self, context: ReceiptContext) -> AuxiliaryFields:
        """
        Extract the fields specific to this receipt type.

        Args:
            context: Receipt context with trimmed lines

        Returns:
            The typed auxiliary payload for this receipt type
        """
        pass

    def _find_text(self, context: ReceiptContext, keywords: Sequence[str], pattern: re.Pattern,
                   fallback_after_colon: bool = False) -> Optional[str]:
        """
        Return group 1 of pattern on the first keyword line that yields a value.

        Matching runs on the upper-cased line; the value keeps its original case.
        """
        for line, upper in zip(context.lines, context.upper_lines):
            if not any(keyword in upper for keyword in keywords):
                continue
            match = pattern.search(upper)
            if match:
                return line[match.start(1):match.end(1)]
            if fallback_after_colon and ':' in line:
                value = line.split(':', 1)[1].strip()
                if value:
                    return value
        return None

    def _find_number(self, context: ReceiptContext, keywords: Sequence[str],
                     patterns: Sequence[re.Pattern], number_type=Decimal):
        """Return the first number captured by any pattern on a keyword line."""
        for upper in context.upper_lines:
            if not any(keyword in upper for keyword in keywords):
                continue
            for pattern in patterns:
                match = pattern.search(upper)
                if not match:
                    continue
                try:
                    return number_type(match.group(1))
                except (InvalidOperation, ValueError):
                    continue
        return None

    def _find_vocabulary(self, context: ReceiptContext, vocabulary: Sequence[str]) -> Optional[str]:
        """Return the longest vocabulary entry on the first line mentioning any of them."""
        for upper in context.upper_lines:
            found = [term for term in vocabulary if term in upper]
            if found:
                return max(found, key=len)
        return None


def baseline_confidence(result: ExtractionResult) -> float:
    """Fraction of the four core fields that carry a value."""
    extracted = sum([
        bool(result.merchant_name),
        bool(result.merchant_address),
        result.transaction_date is not None,
        result.amount is not None,
    ])
    return extracted / 4
