"""Template for restaurant, cafe and bar receipts."""

import re
from datetime import date
from typing import Optional, Callable

from ..models import ReceiptType, RestaurantFields
from ..parsers import AmountParser, DateParser, ReceiptContext, VendorParser
from .base_template import BaseTemplate, TAX_PATTERN


class RestaurantTemplate(BaseTemplate):
    """Template for dine-in receipts with tips, servers and tables."""

    receipt_type = ReceiptType.RESTAURANT

    def __init__(self, clock: Optional[Callable[[], date]] = None):
        super().__init__(
            name="restaurant",
            vendor_parser=VendorParser(
                scan_lines=4,
                skip_keywords=['RECEIPT', 'INVOICE', 'TABLE', 'SERVER'],
            ),
            date_parser=DateParser(
                keywords=['DATE', 'CHECK DATE', 'VISIT DATE', 'ORDER DATE'],
                use_time_lines=True,
            ),
            amount_parser=AmountParser(
                keywords=['TOTAL', 'AMOUNT DUE', 'BALANCE DUE', 'AMOUNT PAID',
                          'GRAND TOTAL', 'CHECK TOTAL'],
                skip_keywords=['TIP', 'GRATUITY'],
            ),
            clock=clock,
        )

        self.tip_pattern = re.compile(r'(?:TIP|GRATUITY)(?:[:\s]+)?\$?(\d+\.\d{2})')
        self.server_pattern = re.compile(r'(?:SERVER|WAITER|WAITRESS)[:\s]+([A-Z]+)')
        self.table_pattern = re.compile(r'(?:TABLE|TABLE\s+NO|TABLE\s+NUMBER)[:\s]+([A-Z\d]+)')
        self.guests_pattern = re.compile(r'(?:GUESTS|PEOPLE|PERSONS|PARTY\s+SIZE)[:\s]+(\d+)')

    def extract_auxiliary(self, context: ReceiptContext) -> RestaurantFields:
        return RestaurantFields(
            tip=self._find_number(context, ['TIP', 'GRATUITY'], [self.tip_pattern]),
            tax=self._find_number(context, ['TAX', 'VAT'], [TAX_PATTERN]),
            server=self._find_text(context, ['SERVER', 'WAITER', 'WAITRESS'],
                                   self.server_pattern, fallback_after_colon=True),
            table=self._find_text(context, ['TABLE'], self.table_pattern,
                                  fallback_after_colon=True),
            guests=self._find_number(context, ['GUEST', 'PEOPLE', 'PERSONS', 'PARTY SIZE'],
                                     [self.guests_pattern], number_type=int),
        )
