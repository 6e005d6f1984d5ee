"""Template for general retail receipts."""

from datetime import date
from typing import Optional, Callable

from ..models import ReceiptType, RetailFields
from ..parsers import AmountParser, DateParser, ReceiptContext, VendorParser
from .base_template import BaseTemplate, PAYMENT_METHODS, TAX_PATTERN


class RetailTemplate(BaseTemplate):
    """Template for store and supermarket receipts."""

    receipt_type = ReceiptType.RETAIL

    def __init__(self, clock: Optional[Callable[[], date]] = None):
        super().__init__(
            name="retail",
            vendor_parser=VendorParser(scan_lines=5),
            date_parser=DateParser(
                keywords=['DATE', 'TRANSACTION DATE', 'PURCHASE DATE', 'SALE DATE'],
            ),
            amount_parser=AmountParser(
                keywords=['TOTAL', 'AMOUNT', 'BALANCE DUE', 'AMOUNT PAID', 'GRAND TOTAL'],
            ),
            clock=clock,
        )

    def extract_auxiliary(self, context: ReceiptContext) -> RetailFields:
        return RetailFields(
            tax=self._find_number(context, ['TAX', 'VAT'], [TAX_PATTERN]),
            payment_method=self._find_vocabulary(context, PAYMENT_METHODS),
        )
