"""Text hashing, feature bags and excerpts shared by the learning components."""

import re
from typing import Dict, Set

from ..models import ReceiptField
from ..parsers import ADDRESS_PATTERN

FeatureBag = Dict[str, float]

DATE_LIKE = re.compile(r'\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4}')
DECIMAL_NUMBER = re.compile(r'\d+\.\d{2}')
ADDRESS_LIKE = ADDRESS_PATTERN

AMOUNT_LINE_MARKERS = ('$', 'total', 'amount', 'due', 'pay')


def text_hash(text: str) -> int:
    """
    Content hash identifying "the same receipt text".

    Whitespace is removed and the text upper-cased first, so OCR spacing
    differences do not change the hash. Collisions are possible.
    """
    normalized = re.sub(r'\s+', '', text).upper()
    h = 0
    for char in normalized:
        h = (h * 31 + ord(char)) & 0x7FFFFFFF
    return h


def extract_features(text: str, field: str) -> FeatureBag:
    """
    Build the feature bag used to train and query the model for one field.

    Args:
        text: Raw receipt text
        field: Field name; unknown fields get generic word and character n-grams

    Returns:
        Mapping of feature name to count
    """
    features: FeatureBag = {}
    normalized = text.lower()

    if field == ReceiptField.MERCHANT_NAME.value:
        _merchant_name_features(normalized, features)
    elif field == ReceiptField.AMOUNT.value:
        _amount_features(normalized, features)
    elif field == ReceiptField.TRANSACTION_DATE.value:
        _date_features(normalized, features)
    elif field == ReceiptField.MERCHANT_ADDRESS.value:
        _address_features(normalized, features)
    else:
        add_word_ngrams(normalized, features)
        add_char_trigrams(normalized, features)

    return features


def _merchant_name_features(text: str, features: FeatureBag):
    top_lines = ' '.join(text.split('\n')[:5])
    add_word_ngrams(top_lines, features, prefix='top_')

    if 'store' in text or 'shop' in text:
        features['is_store'] = 1.0
    if 'restaurant' in text or 'cafe' in text:
        features['is_restaurant'] = 1.0
    if 'gas' in text or 'fuel' in text:
        features['is_gas'] = 1.0


def _amount_features(text: str, features: FeatureBag):
    for i, line in enumerate(text.split('\n')):
        if any(marker in line for marker in AMOUNT_LINE_MARKERS):
            features[f'has_amount_line_{i}'] = 1.0
            add_word_ngrams(line, features, prefix='amount_line_')
        if DECIMAL_NUMBER.search(line):
            features[f'has_decimal_number_{i}'] = 1.0


def _date_features(text: str, features: FeatureBag):
    for i, line in enumerate(text.split('\n')):
        if 'date' in line or DATE_LIKE.search(line):
            features[f'has_date_line_{i}'] = 1.0
            add_word_ngrams(line, features, prefix='date_line_')


def _address_features(text: str, features: FeatureBag):
    for i, line in enumerate(text.split('\n')):
        if ADDRESS_LIKE.search(line):
            features[f'has_address_line_{i}'] = 1.0
            add_word_ngrams(line, features, prefix='address_line_')


def add_word_ngrams(text: str, features: FeatureBag, prefix: str = ''):
    """Count whitespace-token unigrams and bigrams into features."""
    tokens = text.split()

    for token in tokens:
        key = f'{prefix}unigram_{token}'
        features[key] = features.get(key, 0.0) + 1.0

    for first, second in zip(tokens, tokens[1:]):
        key = f'{prefix}bigram_{first}_{second}'
        features[key] = features.get(key, 0.0) + 1.0


def add_char_trigrams(text: str, features: FeatureBag, prefix: str = ''):
    for i in range(len(text) - 2):
        key = f'{prefix}char_trigram_{text[i:i + 3]}'
        features[key] = features.get(key, 0.0) + 1.0


def relevant_excerpt(text: str, field: str) -> str:
    """
    Return the part of the receipt that matters for a field.

    Used to compare a new receipt against the text stored with past corrections.
    """
    lines = text.split('\n')

    if field == ReceiptField.MERCHANT_NAME.value:
        return ' '.join(lines[:5])

    if field == ReceiptField.AMOUNT.value:
        markers = ('TOTAL', 'AMOUNT', 'DUE', 'PAY', '$')
        return ' '.join(line for line in lines if any(m in line.upper() for m in markers))

    if field == ReceiptField.TRANSACTION_DATE.value:
        return ' '.join(line for line in lines
                        if DATE_LIKE.search(line) or 'DATE' in line.upper())

    if field == ReceiptField.MERCHANT_ADDRESS.value:
        return ' '.join(line for line in lines if ADDRESS_LIKE.search(line))

    if len(text) <= 200:
        return text
    middle = len(text) // 2
    return text[middle - 100:middle + 100]


def trigram_similarity(first: str, second: str) -> float:
    """Jaccard index of the character trigrams of two upper-cased alphanumeric strings."""
    normalized_first = re.sub(r'[^A-Z0-9]', '', first.upper())
    normalized_second = re.sub(r'[^A-Z0-9]', '', second.upper())

    if not normalized_first or not normalized_second:
        return 0.0
    if normalized_first == normalized_second:
        return 1.0

    trigrams_first = _trigrams(normalized_first)
    trigrams_second = _trigrams(normalized_second)
    return len(trigrams_first & trigrams_second) / len(trigrams_first | trigrams_second)


def _trigrams(text: str) -> Set[str]:
    if len(text) < 3:
        return {text}
    return {text[i:i + 3] for i in range(len(text) - 2)}
