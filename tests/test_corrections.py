"""Tests for correction history and suggestions."""

import asyncio
from decimal import Decimal

from receipt_riser.learning.corrections import CorrectionEngine

SHELL_RECEIPT = "SHEL\n123 MAIN ST\nTOTAL $10.00"
BP_RECEIPT = "BP STATON\n9 OAK RD\nTOTAL $20.00"


class TestCorrectionEngine:
    """Test suite for CorrectionEngine."""

    def make_engine(self, preferences, clock, **kwargs):
        return CorrectionEngine(preferences, clock=clock, **kwargs)

    def test_no_op_correction_is_ignored(self, preferences, clock):
        engine = self.make_engine(preferences, clock)
        asyncio.run(engine.store_correction(SHELL_RECEIPT, 'merchantName', 'SHELL', 'SHELL'))

        assert asyncio.run(engine.get_history()) == []

    def test_correction_is_recorded(self, preferences, clock):
        engine = self.make_engine(preferences, clock)
        asyncio.run(engine.store_correction(SHELL_RECEIPT, 'amount', Decimal('10.00'), '12.00'))

        history = asyncio.run(engine.get_history())
        assert len(history) == 1
        assert history[0].original_value == '10.00'
        assert history[0].corrected_value == '12.00'
        assert history[0].text_sample == 'TOTAL $10.00'

    def test_exact_text_match_ranks_first(self, preferences, clock):
        engine = self.make_engine(preferences, clock)
        asyncio.run(engine.store_correction(BP_RECEIPT, 'merchantName', 'BP STATON', 'BP STATION INC'))
        asyncio.run(engine.store_correction(SHELL_RECEIPT, 'merchantName', 'SHEL', 'SHELL'))

        suggestions = asyncio.run(engine.get_suggestions(SHELL_RECEIPT, 'merchantName', 'SHEL'))
        assert suggestions == ['SHELL', 'BP STATION INC']

    def test_current_value_is_never_suggested(self, preferences, clock):
        engine = self.make_engine(preferences, clock)
        asyncio.run(engine.store_correction(SHELL_RECEIPT, 'merchantName', 'SHEL', 'SHELL'))

        assert asyncio.run(engine.get_suggestions(SHELL_RECEIPT, 'merchantName', 'SHELL')) == []

    def test_suggestions_are_per_field(self, preferences, clock):
        engine = self.make_engine(preferences, clock)
        asyncio.run(engine.store_correction(SHELL_RECEIPT, 'amount', '10.00', '12.00'))

        assert asyncio.run(engine.get_suggestions(SHELL_RECEIPT, 'merchantName', 'SHEL')) == []
        assert asyncio.run(engine.get_suggestions(SHELL_RECEIPT, 'amount', '10.00')) == ['12.00']

    def test_suggestion_count_is_capped(self, preferences, clock):
        engine = self.make_engine(preferences, clock)
        for i in range(8):
            asyncio.run(engine.store_correction(f"STORE {i}\nTOTAL $1.00", 'merchantName', 'X', f'STORE {i}'))

        suggestions = asyncio.run(engine.get_suggestions("STORE 3\nTOTAL $1.00", 'merchantName', 'X'))
        assert len(suggestions) == 5
        assert suggestions[0] == 'STORE 3'

    def test_history_is_first_in_first_out(self, preferences, clock):
        engine = self.make_engine(preferences, clock, max_history=3)
        for i in range(5):
            asyncio.run(engine.store_correction(SHELL_RECEIPT, 'amount', '10.00', f'{i}.00'))

        history = asyncio.run(engine.get_history())
        assert [c.corrected_value for c in history] == ['2.00', '3.00', '4.00']

    def test_clear_history(self, preferences, clock):
        engine = self.make_engine(preferences, clock)
        asyncio.run(engine.store_correction(SHELL_RECEIPT, 'amount', '10.00', '12.00'))
        asyncio.run(engine.clear_correction_history())

        assert asyncio.run(engine.get_history()) == []

    def test_malformed_records_are_skipped(self, preferences, clock):
        preferences.set_string_list('receipt_correction_history', ['{broken', '{"field": "amount"}'])
        engine = self.make_engine(preferences, clock)

        assert asyncio.run(engine.get_history()) == []
        assert asyncio.run(engine.get_suggestions(SHELL_RECEIPT, 'amount', '10.00')) == []
