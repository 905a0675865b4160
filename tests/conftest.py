"""
Pytest Configuration and Fixtures.
"""
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from timed_exam.models.question_model import Question  # noqa: E402
from timed_exam.services.report_sink import ReportSink  # noqa: E402


class RecordingSink(ReportSink):
    """Collects submitted payloads instead of sending them."""

    def __init__(self):
        super().__init__()
        self.payloads = []

    def submit(self, payload):
        self.payloads.append(payload)


class FailingSink(ReportSink):
    def submit(self, payload):
        raise ConnectionError("sink unreachable")


def make_bank(size, correct_index=1):
    return [
        Question(
            id=f"q{i}",
            question=f"Question {i}?",
            options=["alpha", "beta", "gamma", "delta"],
            correctIndex=correct_index,
            explanation=f"Because {i}.",
        )
        for i in range(size)
    ]


@pytest.fixture
def bank():
    """Four questions, all with correctIndex = 1."""
    return make_bank(4)


@pytest.fixture
def recording_sink():
    return RecordingSink()


@pytest.fixture
def failing_sink():
    return FailingSink()
