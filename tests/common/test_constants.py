# tests/common/test_constants.py
"""
Тесты для модуля констант.
"""

from src.common.constants import (
    DASHBOARD_EARNINGS_DAYS,
    DASHBOARD_RECENT_RIDES,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    MAX_RATING_SCORE,
    MIN_RATING_SCORE,
    TypeMsg,
)


class TestTypeMsg:
    """Тесты для enum TypeMsg."""

    def test_type_msg_values(self) -> None:
        assert TypeMsg.DEBUG.value == "debug"
        assert TypeMsg.INFO.value == "info"
        assert TypeMsg.WARNING.value == "warning"
        assert TypeMsg.ERROR.value == "error"
        assert TypeMsg.CRITICAL.value == "critical"

    def test_type_msg_is_str_enum(self) -> None:
        assert isinstance(TypeMsg.DEBUG, str)
        assert TypeMsg.INFO == "info"


def test_rating_bounds() -> None:
    assert (MIN_RATING_SCORE, MAX_RATING_SCORE) == (1, 5)


def test_dashboard_window() -> None:
    assert DASHBOARD_RECENT_RIDES == 5
    assert DASHBOARD_EARNINGS_DAYS == 7


def test_page_size_within_max() -> None:
    assert 0 < DEFAULT_PAGE_SIZE <= MAX_PAGE_SIZE
