"""
AHA Time-Locked Ledger - Reward Calculator
Расчет награды/процентов для созревших депозитов и позиций.

Награда линейная и "все или ничего": principal * rate / RATE_SCALE,
выплачивается только после созревания. Вся арифметика целочисленная.

Автор: AHA Ledger Team
Версия: 1.0.0
"""

from dataclasses import dataclass

from config.constants import RATE_SCALE, SECONDS_PER_DAY, SECONDS_PER_MONTH
from utils.logger import get_logger
from utils.converters import TimeConverter

logger = get_logger(__name__)


@dataclass(frozen=True)
class RewardCalculation:
    """Результат расчета выплаты."""
    principal: int
    rate: int
    reward: int
    mature: bool

    @property
    def payout(self) -> int:
        return self.principal + self.reward


class RewardEngine:
    """
    Калькулятор наград с фиксированной точкой.

    Функциональность:
    - Проверка созревания по целым секундам от зафиксированного старта
    - Расчет награды principal * rate / scale (округление вниз)
    - Оставшийся срок в целых днях
    """

    def __init__(self, rate_scale: int = RATE_SCALE):
        if rate_scale <= 0:
            raise ValueError("rate_scale должен быть положительным")
        self.rate_scale = rate_scale

    def compute_reward(self, principal: int, rate: int) -> int:
        """Награда без учета времени"""
        return principal * rate // self.rate_scale

    def is_mature(self, start_time: int, duration_seconds: int, now: int) -> bool:
        return TimeConverter.elapsed_seconds(start_time, now) >= duration_seconds

    def calculate(self, principal: int, rate: int, start_time: int, duration_seconds: int, now: int) -> RewardCalculation:
        """Выплата на момент `now`; до созревания награда равна нулю"""
        mature = self.is_mature(start_time, duration_seconds, now)
        reward = self.compute_reward(principal, rate) if mature else 0
        return RewardCalculation(principal=principal, rate=rate, reward=reward, mature=mature)

    def remaining_days(self, duration_days: int, start_time: int, now: int) -> int:
        """max(0, duration - прошедшие целые дни)"""
        return max(0, duration_days - TimeConverter.elapsed_days(start_time, now))

    @staticmethod
    def days(duration_days: int) -> int:
        return duration_days * SECONDS_PER_DAY

    @staticmethod
    def months(duration_months: int) -> int:
        return duration_months * SECONDS_PER_MONTH
