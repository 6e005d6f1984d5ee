"""Entity extraction adapter wrapping a pluggable named-entity recognizer."""

import re
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Protocol

from .parsers import DateParser

logger = logging.getLogger(__name__)


class EntityRecognizer(Protocol):
    """Anything that can annotate a text chunk with typed entity strings."""

    async def annotate(self, chunk: str) -> Dict[str, List[str]]:
        ...


class RegexEntityRecognizer:
    """Deterministic recognizer for the entity types found on receipts."""

    MONEY_PATTERN = r'\$\s*\d[\d,]*\.\d{2}|\b\d[\d,]*\.\d{2}\b'

    DATE_PATTERNS = [
        r'\b\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4}\b',     # MM/DD/YYYY, DD-MM-YY
        r'\b\d{4}[/\-.]\d{1,2}[/\-.]\d{1,2}\b',       # YYYY-MM-DD
        r'\b(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\.?\s+\d{1,2},?\s+\d{4}\b',
    ]

    ADDRESS_PATTERN = (r'\b\d+[ \t]+(?:[A-Za-z]+[ \t]+)*?(?:ST|STREET|AVE|AVENUE|RD|ROAD|BLVD|BOULEVARD'
                       r'|DR|DRIVE|LN|LANE|WAY|HWY|HIGHWAY|CT|COURT|PL|PLACE|PKWY)\b\.?')
    PHONE_PATTERN = r'(?:\+?1[ .\-]?)?\(?\b\d{3}\)?[ .\-]?\d{3}[ .\-]\d{4}\b'
    EMAIL_PATTERN = r'\b[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}\b'
    URL_PATTERN = r'\b(?:https?://|www\.)[^\s]+'

    def __init__(self):
        self.patterns = {
            'money': [re.compile(self.MONEY_PATTERN)],
            'date': [re.compile(p, re.IGNORECASE) for p in self.DATE_PATTERNS],
            'address': [re.compile(self.ADDRESS_PATTERN, re.IGNORECASE)],
            'phone': [re.compile(self.PHONE_PATTERN)],
            'email': [re.compile(self.EMAIL_PATTERN)],
            'url': [re.compile(self.URL_PATTERN, re.IGNORECASE)],
        }

    async def annotate(self, chunk: str) -> Dict[str, List[str]]:
        entities: Dict[str, List[str]] = {}
        for entity_type, patterns in self.patterns.items():
            for pattern in patterns:
                for match in pattern.finditer(chunk):
                    entities.setdefault(entity_type, []).append(match.group().strip())
        return entities


@dataclass
class ReceiptEntities:
    """Receipt field candidates picked from recognized entities."""
    amount: Optional[Decimal] = None
    transaction_date: Optional[date] = None
    merchant_address: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None


class EntityExtractionService:
    """Runs a recognizer over bounded chunks and post-processes the result for receipts."""

    def __init__(self, recognizer: Optional[EntityRecognizer] = None, chunk_size: int = 500):
        """
        Initialize the adapter.

        Args:
            recognizer: Entity recognizer; the regex recognizer by default
            chunk_size: Maximum characters sent to the recognizer per call
        """
        self.recognizer = recognizer if recognizer is not None else RegexEntityRecognizer()
        self.chunk_size = chunk_size
        self.date_parser = DateParser()

    async def extract_entities(self, text: str) -> Dict[str, List[str]]:
        """
        Annotate text chunk by chunk and concatenate the results.

        Returns:
            Entity type to matched strings; empty when the recognizer fails
        """
        result: Dict[str, List[str]] = {}
        try:
            for chunk in split_into_chunks(text, self.chunk_size):
                annotations = await self.recognizer.annotate(chunk)
                for entity_type, values in (annotations or {}).items():
                    result.setdefault(entity_type, []).extend(values)
        except Exception as e:
            logger.warning(f"Entity extraction failed, continuing without entities: {e}")
            return {}

        logger.debug(f"Extracted entity types: {sorted(result)}")
        return result

    async def extract_receipt_entities(self, text: str) -> ReceiptEntities:
        """Pick the largest money value and the first date, address, phone and email."""
        entities = await self.extract_entities(text)
        receipt = ReceiptEntities()

        amounts = [parse_money(value) for value in entities.get('money', [])]
        amounts = [amount for amount in amounts if amount is not None]
        if amounts:
            receipt.amount = max(amounts)

        for value in entities.get('date', []):
            receipt.transaction_date = self.date_parser.parse_text(value)
            break

        receipt.merchant_address = _first(entities.get('address'))
        receipt.phone_number = _first(entities.get('phone'))
        receipt.email = _first(entities.get('email'))
        return receipt


def split_into_chunks(text: str, chunk_size: int) -> List[str]:
    """
    Pack whole lines into chunks of at most chunk_size characters.

    Lines longer than chunk_size are cut into fixed-size pieces.
    """
    chunks = []
    current = ''
    for line in text.split('\n'):
        while len(line) > chunk_size:
            if current:
                chunks.append(current)
                current = ''
            chunks.append(line[:chunk_size])
            line = line[chunk_size:]

        candidate = f"{current}\n{line}" if current else line
        if len(candidate) <= chunk_size:
            current = candidate
        else:
            chunks.append(current)
            current = line

    if current.strip():
        chunks.append(current)
    return chunks


def parse_money(value: str) -> Optional[Decimal]:
    cleaned = re.sub(r'[^\d.,]', '', value).replace(',', '')
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return None


def _first(values: Optional[List[str]]) -> Optional[str]:
    return values[0] if values else None
