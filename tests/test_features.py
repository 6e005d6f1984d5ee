"""Tests for text hashing, feature bags and excerpt similarity."""

import pytest

from receipt_riser.learning.features import (
    add_word_ngrams, extract_features, relevant_excerpt, text_hash, trigram_similarity,
)

RECEIPT = """SHELL
123 MAIN ST
01/15/24
TOTAL $36.32"""


class TestTextHash:
    """Test suite for the receipt content hash."""

    def test_known_value(self):
        assert text_hash("ab") == 65 * 31 + 66

    def test_ignores_whitespace_and_case(self):
        assert text_hash("Shell\n 123 Main St") == text_hash("SHELL123MAINST")

    def test_stays_within_31_bits(self):
        assert 0 <= text_hash(RECEIPT * 50) <= 0x7FFFFFFF

    def test_different_text_differs(self):
        assert text_hash("TOTAL $5.00") != text_hash("TOTAL $6.00")


class TestFeatureExtraction:
    """Test suite for per-field feature bags."""

    def test_merchant_features_use_top_lines(self):
        features = extract_features(RECEIPT, 'merchantName')

        assert features['top_unigram_shell'] == 1.0
        assert features['top_bigram_shell_123'] == 1.0

    def test_merchant_category_flags(self):
        features = extract_features("Joe's Gas Station\nFuel", 'merchantName')
        assert features['is_gas'] == 1.0
        assert 'is_store' not in features

    def test_amount_features(self):
        features = extract_features(RECEIPT, 'amount')

        assert features['has_amount_line_3'] == 1.0
        assert features['has_decimal_number_3'] == 1.0
        assert features['amount_line_unigram_total'] == 1.0
        assert 'has_amount_line_0' not in features

    def test_date_features(self):
        features = extract_features(RECEIPT, 'transactionDate')

        assert features['has_date_line_2'] == 1.0
        assert features['date_line_unigram_01/15/24'] == 1.0

    def test_address_features(self):
        features = extract_features(RECEIPT, 'merchantAddress')

        assert features['has_address_line_1'] == 1.0
        assert features['address_line_bigram_main_st'] == 1.0

    def test_unknown_field_uses_generic_ngrams(self):
        features = extract_features("tip 5", 'tip')

        assert features['unigram_tip'] == 1.0
        assert features['bigram_tip_5'] == 1.0
        assert features['char_trigram_tip'] == 1.0

    def test_word_ngrams_count_repeats(self):
        features = {}
        add_word_ngrams("a b a b", features)

        assert features['unigram_a'] == 2.0
        assert features['bigram_a_b'] == 2.0
        assert features['bigram_b_a'] == 1.0


class TestExcerpts:
    """Test suite for excerpts and trigram similarity."""

    def test_amount_excerpt(self):
        assert relevant_excerpt(RECEIPT, 'amount') == "TOTAL $36.32"

    def test_merchant_excerpt_is_header(self):
        assert relevant_excerpt(RECEIPT, 'merchantName') == RECEIPT.replace('\n', ' ')

    def test_date_excerpt(self):
        assert relevant_excerpt(RECEIPT, 'transactionDate') == "01/15/24"

    def test_other_field_uses_middle_of_long_text(self):
        text = "a" * 150 + "b" * 150
        excerpt = relevant_excerpt(text, 'tip')

        assert len(excerpt) == 200
        assert excerpt == "a" * 100 + "b" * 100

    def test_similarity_bounds(self):
        assert trigram_similarity("SHELL", "shell") == 1.0
        assert trigram_similarity("", "SHELL") == 0.0
        assert trigram_similarity("ABCD", "ABCE") == pytest.approx(1 / 3)
        assert trigram_similarity("ABC", "XYZ") == 0.0
