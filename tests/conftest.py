"""Pytest configuration for lazytwine test suite."""

import sys
from pathlib import Path

import pytest

# Add src directory to path for package imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


class SinkFailure(Exception):
    """Raised by FailingSink on write."""


class RecordingSink:
    """Sink that keeps every chunk it receives, in order."""

    def __init__(self) -> None:
        self.chunks: list[str] = []

    def write(self, s: str) -> None:
        self.chunks.append(s)


class FailingSink:
    """Sink that accepts `budget` writes and then raises."""

    def __init__(self, budget: int = 0) -> None:
        self.budget = budget
        self.error = SinkFailure("sink closed")

    def write(self, s: str) -> None:
        if self.budget == 0:
            raise self.error
        self.budget -= 1


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def failing_sink() -> FailingSink:
    return FailingSink()
