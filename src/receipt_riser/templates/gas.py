"""Template for fuel station receipts."""

import re
from datetime import date
from typing import Optional, Callable

from ..models import ReceiptType, GasFields
from ..parsers import AmountParser, DateParser, ReceiptContext, VendorParser
from .base_template import BaseTemplate, PAYMENT_METHODS


GAS_BRANDS = [
    'SHELL', 'EXXON', 'MOBIL', 'BP', 'CHEVRON', 'TEXACO', 'CITGO', 'MARATHON',
    'SUNOCO', 'VALERO', 'PHILLIPS', 'CONOCO', '76', 'GULF',
]

FUEL_TYPES = [
    'REGULAR', 'UNLEADED', 'PREMIUM', 'SUPER', 'DIESEL', 'E85', 'MIDGRADE',
    'REGULAR UNLEADED', 'PREMIUM UNLEADED', 'SUPER UNLEADED',
]


class GasTemplate(BaseTemplate):
    """Template for gas station receipts with fuel quantities."""

    receipt_type = ReceiptType.GAS

    def __init__(self, clock: Optional[Callable[[], date]] = None):
        super().__init__(
            name="gas",
            vendor_parser=VendorParser(scan_lines=5, brands=GAS_BRANDS),
            date_parser=DateParser(
                keywords=['DATE', 'TRANSACTION DATE', 'PURCHASE DATE'],
                use_time_lines=True,
            ),
            amount_parser=AmountParser(
                keywords=['TOTAL', 'AMOUNT', 'SALE', 'FUEL TOTAL', 'FUEL AMOUNT'],
                total_labels=r'(?:TOTAL|AMOUNT|SALE|FUEL\s+TOTAL)',
                skip_subtotal=False,
            ),
            clock=clock,
        )

        self.gallon_patterns = [
            re.compile(r'(?:GALLONS|GAL)(?:[:\s]+)?(\d+\.\d{1,3})'),
            re.compile(r'(\d+\.\d{1,3})\s*(?:GALLONS|GAL)'),
        ]
        self.price_patterns = [
            re.compile(r'(?:PRICE|PRICE/GAL|PER\s+GALLON)(?:[:\s]+)?\$?(\d+\.\d{1,3})'),
            re.compile(r'\$\s*(\d+\.\d{1,3})\s*(?:/\s*GAL|PER\s+GAL)'),
        ]
        self.pump_pattern = re.compile(r'(?:PUMP|PUMP\s+NO|PUMP\s+NUMBER)[:\s]+(\d+)')

    def extract_auxiliary(self, context: ReceiptContext) -> GasFields:
        return GasFields(
            gallons=self._find_number(context, ['GAL'], self.gallon_patterns),
            price_per_gallon=self._find_number(context, ['PRICE', 'PER GAL', '/GAL'],
                                               self.price_patterns),
            fuel_type=self._find_vocabulary(context, FUEL_TYPES),
            payment_method=self._find_vocabulary(context, PAYMENT_METHODS),
            pump_number=self._find_number(context, ['PUMP'], [self.pump_pattern],
                                          number_type=int),
        )
