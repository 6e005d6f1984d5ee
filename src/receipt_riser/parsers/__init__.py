"""Field parsers shared by the receipt extractors."""

from .base import BaseParser, ParseResult, ReceiptContext
from .date_parser import DateParser
from .amount_parser import AmountParser, detect_currency
from .vendor_parser import VendorParser, ADDRESS_PATTERN

__all__ = [
    'BaseParser', 'ParseResult', 'ReceiptContext',
    'DateParser', 'AmountParser', 'VendorParser',
    'detect_currency', 'ADDRESS_PATTERN',
]
