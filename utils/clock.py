"""
Модуль: Часы леджера
Описание: Источник времени в целых unix-секундах (системный и ручной для тестов/симуляций)
Автор: AHA Ledger Team
"""

import time

from config.constants import SECONDS_PER_DAY, SECONDS_PER_MONTH


class SystemClock:
    """Системные часы"""

    def __call__(self) -> int:
        return int(time.time())


class ManualClock:
    """Часы, которые двигаются только вручную"""

    def __init__(self, start: int = 1_700_000_000):
        self.current = int(start)

    def __call__(self) -> int:
        return self.current

    def set(self, timestamp: int) -> None:
        if timestamp < self.current:
            raise ValueError("Время не может идти назад")
        self.current = int(timestamp)

    def advance(self, seconds: int = 0, days: int = 0, months: int = 0) -> int:
        delta = seconds + days * SECONDS_PER_DAY + months * SECONDS_PER_MONTH
        if delta < 0:
            raise ValueError("Время не может идти назад")
        self.current += delta
        return self.current
