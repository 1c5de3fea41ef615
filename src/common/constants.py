# src/common/constants.py
"""
Общие константы и перечисления.
"""

from enum import Enum


class TypeMsg(str, Enum):
    """Типы сообщений для логирования."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


# Пагинация
DEFAULT_PAGE_SIZE: int = 10
MAX_PAGE_SIZE: int = 100

# Панель водителя
DASHBOARD_RECENT_RIDES: int = 5
DASHBOARD_EARNINGS_DAYS: int = 7

# Допустимые оценки
MIN_RATING_SCORE: int = 1
MAX_RATING_SCORE: int = 5
