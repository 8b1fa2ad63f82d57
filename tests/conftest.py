from __future__ import annotations

import pytest

from lotto_analyzer.services.frequency_analysis_service import AnalysisSnapshot, FrequencyAnalyzer
from tests.helpers import RecordingSleep, make_dataset


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def snapshot() -> AnalysisSnapshot:
    """Hot 1..6 (3 each), medium 7..18 (2 each), cold 19..45 (19..24 once, rest never)."""

    hot = (1, 2, 3, 4, 5, 6)
    medium_a = (7, 8, 9, 10, 11, 12)
    medium_b = (13, 14, 15, 16, 17, 18)
    return FrequencyAnalyzer().analyze(
        make_dataset(hot, hot, hot, medium_a, medium_b, medium_a, medium_b, (19, 20, 21, 22, 23, 24))
    )
