"""Tests for the per-type extraction templates."""

from datetime import date
from decimal import Decimal

from receipt_riser.models import GasFields, ReceiptType, RestaurantFields, RetailFields
from receipt_riser.templates import GasTemplate, RestaurantTemplate, RetailTemplate, TemplateEngine

TODAY = date(2025, 6, 30)


def fixed_today():
    return TODAY


RETAIL_RECEIPT = """CORNER MARKET
500 Elm St
Springfield, IL 62701
DATE: 03/15/2024
MILK 3.49
BREAD 2.50
SUBTOTAL $5.99
SALES TAX $0.48
TOTAL $6.47
PAID WITH VISA"""

RESTAURANT_RECEIPT = """BLUE DOOR BISTRO
42 Harbor Rd
Portland, ME 04101
Server: Anna
Table: 12
Guests: 3
06/01/2024 19:30
SUBTOTAL $40.00
TAX $3.20
TOTAL $43.20
TIP $8.00
VISA"""

GAS_RECEIPT = """EXXON
9 RIVER RD
PUMP: 4
PREMIUM UNLEADED
12.000 GAL @ $3.999/GAL
FUEL TOTAL $47.99
DEBIT"""


class TestRetailTemplate:
    """Test suite for the retail template."""

    def setup_method(self):
        self.template = RetailTemplate(clock=fixed_today)

    def test_core_fields(self):
        result = self.template.extract(RETAIL_RECEIPT)

        assert result.receipt_type == ReceiptType.RETAIL
        assert result.merchant_name == "CORNER MARKET"
        assert result.merchant_address == "500 Elm St"
        assert result.transaction_date == date(2024, 3, 15)
        assert result.date_found is True
        assert result.amount == Decimal('6.47')
        assert result.currency == 'USD'
        assert result.confidence_score == 1.0

    def test_auxiliary_fields(self):
        result = self.template.extract(RETAIL_RECEIPT)

        assert result.auxiliary_fields == RetailFields(tax=Decimal('0.48'), payment_method='VISA')

    def test_missing_date_defaults_to_today(self):
        result = self.template.extract("CORNER MARKET\nTOTAL $6.47")

        assert result.transaction_date == TODAY
        assert result.date_found is False
        assert result.merchant_address is None
        assert result.confidence_score == 0.75

    def test_empty_text(self):
        result = self.template.extract("\n   \n")

        assert result.merchant_name is None
        assert result.amount is None
        assert result.transaction_date == TODAY
        assert result.confidence_score == 0.25


class TestRestaurantTemplate:
    """Test suite for the restaurant template."""

    def setup_method(self):
        self.template = RestaurantTemplate(clock=fixed_today)

    def test_core_fields(self):
        result = self.template.extract(RESTAURANT_RECEIPT)

        assert result.receipt_type == ReceiptType.RESTAURANT
        assert result.merchant_name == "BLUE DOOR BISTRO"
        assert result.merchant_address == "42 Harbor Rd"
        assert result.transaction_date == date(2024, 6, 1)
        assert result.amount == Decimal('43.20')

    def test_total_not_taken_from_tip_line(self):
        result = self.template.extract("CAFE ROMA\nSUBTOTAL $10.00\nTOTAL $12.50\nTIP $2.00")
        assert result.amount == Decimal('12.50')

    def test_auxiliary_fields(self):
        fields = self.template.extract(RESTAURANT_RECEIPT).auxiliary_fields

        assert isinstance(fields, RestaurantFields)
        assert fields.tip == Decimal('8.00')
        assert fields.tax == Decimal('3.20')
        assert fields.server == "Anna"
        assert fields.table == "12"
        assert fields.guests == 3

    def test_server_falls_back_to_text_after_colon(self):
        fields = self.template.extract("DINER\nSERVER: 114\nTOTAL $9.00").auxiliary_fields
        assert fields.server == "114"


class TestGasTemplate:
    """Test suite for the gas station template."""

    def setup_method(self):
        self.template = GasTemplate(clock=fixed_today)

    def test_core_fields(self):
        result = self.template.extract(GAS_RECEIPT)

        assert result.receipt_type == ReceiptType.GAS
        assert result.merchant_name == "EXXON"
        assert result.merchant_address == "9 RIVER RD"
        assert result.amount == Decimal('47.99')
        assert result.transaction_date == TODAY
        assert result.date_found is False

    def test_auxiliary_fields(self):
        fields = self.template.extract(GAS_RECEIPT).auxiliary_fields

        assert fields == GasFields(
            gallons=Decimal('12.000'),
            price_per_gallon=Decimal('3.999'),
            fuel_type='PREMIUM UNLEADED',
            payment_method='DEBIT',
            pump_number=4,
        )

    def test_shell_receipt(self):
        text = "SHELL\n123 MAIN ST\n01/15/24\nGALLONS 10.5\nPRICE/GAL 3.459\nTOTAL $36.32"
        result = self.template.extract(text)

        assert result.merchant_name == "SHELL"
        assert result.transaction_date == date(2024, 1, 15)
        assert result.amount == Decimal('36.32')
        assert result.auxiliary_fields.gallons == Decimal('10.5')
        assert result.auxiliary_fields.price_per_gallon == Decimal('3.459')


class TestTemplateEngine:
    """Test suite for template selection."""

    def setup_method(self):
        self.engine = TemplateEngine(clock=fixed_today)

    def test_dispatch_by_type(self):
        assert isinstance(self.engine.template_for(ReceiptType.GAS), GasTemplate)
        assert isinstance(self.engine.template_for(ReceiptType.RESTAURANT), RestaurantTemplate)
        assert isinstance(self.engine.template_for(ReceiptType.RETAIL), RetailTemplate)

    def test_unknown_uses_retail(self):
        assert isinstance(self.engine.template_for(ReceiptType.UNKNOWN), RetailTemplate)

    def test_extract_uses_selected_template(self):
        result = self.engine.extract(GAS_RECEIPT, ReceiptType.GAS)
        assert isinstance(result.auxiliary_fields, GasFields)

    def test_list_templates(self):
        assert self.engine.list_templates() == {
            'retail': 'retail', 'restaurant': 'restaurant', 'gas': 'gas',
        }
