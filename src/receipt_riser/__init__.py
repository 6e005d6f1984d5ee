"""Receipt Riser - Extract structured receipt data from OCR text and learn from corrections."""

__version__ = "1.0.0"
__author__ = "Receipt Riser Team"
__email__ = ""

from .classify import ReceiptClassifier
from .config import Settings
from .entities import EntityExtractionService, RegexEntityRecognizer
from .export import ExcelExporter
from .models import ExtractionResult, ParsedReceipt, ReceiptField, ReceiptType
from .parse import ReceiptParser

__all__ = [
    'ReceiptParser',
    'ReceiptClassifier',
    'EntityExtractionService',
    'RegexEntityRecognizer',
    'ExcelExporter',
    'Settings',
    'ExtractionResult',
    'ParsedReceipt',
    'ReceiptField',
    'ReceiptType',
]
