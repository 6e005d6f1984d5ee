"""Shared fixtures and helpers for the test suite."""

from datetime import datetime, timedelta

import pytest

from receipt_riser.storage import PreferenceStore


class SteppingClock:
    """Clock that advances by a fixed step on every call."""

    def __init__(self, start=datetime(2025, 1, 10, 12, 0), step=timedelta(seconds=1)):
        self.now = start
        self.step = step

    def __call__(self):
        current = self.now
        self.now += self.step
        return current


@pytest.fixture
def preferences(tmp_path):
    return PreferenceStore(tmp_path / 'preferences.json')


@pytest.fixture
def clock():
    return SteppingClock()
