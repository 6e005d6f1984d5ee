"""Tests for the shared record types."""

from datetime import date
from decimal import Decimal

import pytest

from receipt_riser.exceptions import TrainingDataError
from receipt_riser.models import (
    Correction, ExtractionResult, ParsedReceipt, ReceiptField, ReceiptType,
    RestaurantFields, TrainingExample, value_to_text,
)


class TestExtractionResult:
    """Test suite for ExtractionResult."""

    def setup_method(self):
        self.result = ExtractionResult(
            merchant_name="BLUE DOOR BISTRO",
            merchant_address="42 Harbor Rd",
            transaction_date=date(2024, 6, 1),
            amount=Decimal('43.20'),
            receipt_type=ReceiptType.RESTAURANT,
            auxiliary_fields=RestaurantFields(tip=Decimal('8.00'), server="Anna"),
            confidence_score=1.0,
        )

    def test_to_dict(self):
        data = self.result.to_dict()

        assert data['merchantName'] == "BLUE DOOR BISTRO"
        assert data['transactionDate'] == '2024-06-01'
        assert data['amount'] == 43.2
        assert data['receiptType'] == 'restaurant'
        assert data['tip'] == 8.0
        assert data['server'] == "Anna"
        assert 'phoneNumber' not in data

    def test_contact_fields_when_present(self):
        self.result.phone_number = '555-867-5309'
        data = self.result.to_dict()

        assert data['phoneNumber'] == '555-867-5309'
        assert 'email' not in data

    def test_field_value(self):
        assert self.result.field_value(ReceiptField.AMOUNT) == Decimal('43.20')
        assert self.result.field_value('transactionDate') == date(2024, 6, 1)

    def test_parsed_receipt_adds_suggestions(self):
        data = ParsedReceipt(self.result, {'amount': ['44.20']}).to_dict()
        assert data['suggestions'] == {'amount': ['44.20']}


class TestRecords:
    """Test suite for training examples and corrections."""

    def test_training_example_from_dict(self):
        example = TrainingExample.from_dict({
            'timestamp': 5, 'text': 'A', 'labels': {'amount': 1.5, 'merchantName': None}, 'textHash': 65,
        })

        assert example.labels == {'amount': '1.5', 'merchantName': None}
        assert example.has_label('amount')
        assert not example.has_label('merchantName')
        assert example.to_dict()['textHash'] == 65

    def test_training_example_rejects_bad_labels(self):
        with pytest.raises(TrainingDataError):
            TrainingExample.from_dict({'timestamp': 5, 'text': 'A', 'labels': ['x'], 'textHash': 65})

    def test_correction_round_trip_keys(self):
        correction = Correction('amount', '5.00', '6.00', 1, 2, 'TOTAL $5.00')
        data = correction.to_dict()

        assert set(data) == {'timestamp', 'field', 'originalValue', 'correctedValue', 'textHash', 'textSample'}
        assert Correction.from_dict(data) == correction

    def test_correction_missing_key(self):
        with pytest.raises(TrainingDataError):
            Correction.from_dict({'field': 'amount'})


def test_value_to_text():
    assert value_to_text(None) is None
    assert value_to_text(date(2024, 1, 15)) == '2024-01-15'
    assert value_to_text(Decimal('36.32')) == '36.32'
    assert value_to_text(ReceiptType.GAS) == 'gas'
