"""Typed records shared across the extraction and learning pipeline."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional, Dict, Any, Union

from .exceptions import TrainingDataError


class ReceiptType(str, Enum):
    """Receipt categories understood by the extractors."""
    RETAIL = 'retail'
    RESTAURANT = 'restaurant'
    GAS = 'gas'
    UNKNOWN = 'unknown'


class ReceiptField(str, Enum):
    """Semantic fields that can be learned and corrected."""
    MERCHANT_NAME = 'merchantName'
    MERCHANT_ADDRESS = 'merchantAddress'
    TRANSACTION_DATE = 'transactionDate'
    AMOUNT = 'amount'


@dataclass
class RetailFields:
    """Auxiliary fields found on retail receipts."""
    tax: Optional[Decimal] = None
    payment_method: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'tax': _jsonable(self.tax),
            'paymentMethod': self.payment_method,
        }


@dataclass
class RestaurantFields:
    """Auxiliary fields found on restaurant receipts."""
    tip: Optional[Decimal] = None
    tax: Optional[Decimal] = None
    server: Optional[str] = None
    table: Optional[str] = None
    guests: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'tip': _jsonable(self.tip),
            'tax': _jsonable(self.tax),
            'server': self.server,
            'table': self.table,
            'guests': self.guests,
        }


@dataclass
class GasFields:
    """Auxiliary fields found on gas station receipts."""
    gallons: Optional[Decimal] = None
    price_per_gallon: Optional[Decimal] = None
    fuel_type: Optional[str] = None
    payment_method: Optional[str] = None
    pump_number: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'gallons': _jsonable(self.gallons),
            'pricePerGallon': _jsonable(self.price_per_gallon),
            'fuelType': self.fuel_type,
            'paymentMethod': self.payment_method,
            'pumpNumber': self.pump_number,
        }


AuxiliaryFields = Union[RetailFields, RestaurantFields, GasFields]


@dataclass
class ExtractionResult:
    """Structured record produced from one receipt's OCR text."""
    merchant_name: Optional[str]
    merchant_address: Optional[str]
    transaction_date: date
    amount: Optional[Decimal] = None
    currency: str = 'USD'
    receipt_type: ReceiptType = ReceiptType.UNKNOWN
    auxiliary_fields: Optional[AuxiliaryFields] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    confidence_score: float = 0.0
    date_found: bool = True

    def field_value(self, receipt_field: ReceiptField) -> Any:
        """Return the value currently held for a learnable field."""
        return {
            ReceiptField.MERCHANT_NAME: self.merchant_name,
            ReceiptField.MERCHANT_ADDRESS: self.merchant_address,
            ReceiptField.TRANSACTION_DATE: self.transaction_date,
            ReceiptField.AMOUNT: self.amount,
        }[ReceiptField(receipt_field)]

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'merchantName': self.merchant_name,
            'merchantAddress': self.merchant_address,
            'transactionDate': self.transaction_date.isoformat(),
            'amount': _jsonable(self.amount),
            'currency': self.currency,
            'receiptType': self.receipt_type.value,
            'confidenceScore': self.confidence_score,
        }
        if self.auxiliary_fields is not None:
            data.update(self.auxiliary_fields.to_dict())
        if self.phone_number:
            data['phoneNumber'] = self.phone_number
        if self.email:
            data['email'] = self.email
        return data


@dataclass
class TrainingExample:
    """One labelled receipt text used to train the field models."""
    text: str
    labels: Dict[str, str]
    text_hash: int
    timestamp: int

    def has_label(self, field_name: str) -> bool:
        return self.labels.get(field_name) is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': self.timestamp,
            'text': self.text,
            'labels': dict(self.labels),
            'textHash': self.text_hash,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TrainingExample':
        try:
            labels = data['labels']
            if not isinstance(labels, dict):
                raise TypeError("labels must be a mapping")
            return cls(
                text=str(data['text']),
                labels={k: (None if v is None else str(v)) for k, v in labels.items()},
                text_hash=int(data['textHash']),
                timestamp=int(data['timestamp']),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise TrainingDataError(f"Malformed training example: {e}") from e


@dataclass(frozen=True)
class Correction:
    """A single user edit of an extracted field."""
    field: str
    original_value: str
    corrected_value: str
    timestamp: int
    text_hash: int
    text_sample: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': self.timestamp,
            'field': self.field,
            'originalValue': self.original_value,
            'correctedValue': self.corrected_value,
            'textHash': self.text_hash,
            'textSample': self.text_sample,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Correction':
        try:
            return cls(
                field=str(data['field']),
                original_value=str(data['originalValue']),
                corrected_value=str(data['correctedValue']),
                timestamp=int(data['timestamp']),
                text_hash=int(data['textHash']),
                text_sample=str(data['textSample']),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise TrainingDataError(f"Malformed correction record: {e}") from e


@dataclass
class ParsedReceipt:
    """Extraction result plus learned suggestions for each field."""
    result: ExtractionResult
    suggestions: Dict[str, list] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = self.result.to_dict()
        data['suggestions'] = {k: list(v) for k, v in self.suggestions.items()}
        return data


def value_to_text(value: Any) -> Optional[str]:
    """Render a field value the way it is stored in labels and corrections."""
    if value is None:
        return None
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _jsonable(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    return value
