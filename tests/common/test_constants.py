# tests/common/test_constants.py
"""
Тесты для констант и перечислений.
"""

from src.common.constants import (
    EXPIRY_THRESHOLD_MS,
    STALE_THRESHOLD_MS,
    StalenessStatus,
    TypeMsg,
)


class TestEnums:
    """Тесты перечислений."""

    def test_type_msg_values(self) -> None:
        assert TypeMsg.DEBUG.value == "debug"
        assert TypeMsg.CRITICAL == "critical"

    def test_staleness_values(self) -> None:
        assert [s.value for s in StalenessStatus] == ["fresh", "stale", "expired"]


class TestThresholds:
    """Тесты порогов свежести."""

    def test_stale_before_expiry(self) -> None:
        assert STALE_THRESHOLD_MS == 300_000
        assert EXPIRY_THRESHOLD_MS == 3_600_000
        assert STALE_THRESHOLD_MS < EXPIRY_THRESHOLD_MS
