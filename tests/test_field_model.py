"""Tests for the per-field relative-frequency model."""

import pytest

from receipt_riser.learning.field_model import FieldModel


class TestFieldModel:
    """Test suite for FieldModel."""

    def setup_method(self):
        self.model = FieldModel('merchantName')

    def train(self, examples):
        for features, label in examples:
            self.model.add_example(features, label)
        self.model.train()

    def test_untrained_model(self):
        assert self.model.predict({'a': 1.0}) is None
        assert self.model.confidence({'a': 1.0}) == 0.0
        assert self.model.example_count == 0

    def test_weights_are_averaged_per_label(self):
        self.train([
            ({'a': 1.0}, 'X'),
            ({'a': 2.0, 'b': 1.0}, 'X'),
            ({'b': 4.0}, 'Y'),
        ])

        assert self.model.weights['X'] == {'a': 1.5, 'b': 0.5}
        assert self.model.weights['Y'] == {'b': 4.0}

    def test_default_label_is_majority(self):
        self.train([({'a': 1.0}, 'X'), ({'a': 1.0}, 'X'), ({'b': 1.0}, 'Y')])

        assert self.model.default_label == 'X'
        assert self.model.labels == ['X', 'Y']
        assert self.model.example_count == 3

    def test_default_label_tie_goes_to_first_seen(self):
        self.train([({'a': 1.0}, 'Y'), ({'b': 1.0}, 'X')])
        assert self.model.default_label == 'Y'

    def test_predicts_best_scoring_label(self):
        self.train([({'a': 1.0}, 'X'), ({'a': 1.0}, 'X'), ({'b': 1.0}, 'Y')])

        assert self.model.predict({'b': 1.0}) == 'Y'
        assert self.model.predict({'a': 1.0}) == 'X'

    def test_score_tie_prefers_default_label(self):
        self.train([({'a': 1.0}, 'X'), ({'a': 1.0}, 'X'), ({'b': 1.0}, 'Y')])

        assert self.model.predict({}) == 'X'
        assert self.model.predict({'unseen': 3.0}) == 'X'

    def test_confidence(self):
        self.train([({'a': 1.0}, 'X'), ({'b': 1.0}, 'Y')])

        assert self.model.confidence({'a': 1.0}) == pytest.approx(1.0)
        assert self.model.confidence({'a': 1.0, 'b': 1.0}) == 0.0
        assert self.model.confidence({'a': 2.0, 'b': 1.0}) == pytest.approx(0.5)

    def test_single_label_confidence_is_full(self):
        self.train([({'a': 1.0}, 'X')])
        assert self.model.confidence({'zzz': 1.0}) == 1.0

    def test_confidence_without_signal_is_zero(self):
        self.train([({'a': 1.0}, 'X'), ({'b': 1.0}, 'Y')])
        assert self.model.confidence({}) == 0.0
