"""
AHA Time-Locked Ledger - Tier Table

Матрица ставок 6×6 для стейкинга с переменным сроком:
- строки - тиры по сумме, у каждого границы [min, max)
- столбцы - администраторский набор сроков в месяцах (0 - гибкий срок)

Таблица заменяется администратором целиком; открытые позиции хранят
ставку, зафиксированную при стейке, и не пересчитываются.

Автор: AHA Ledger Team
Версия: 1.0.0
"""

from typing import List, Optional, Sequence

from config.constants import (
    TIER_COUNT, DURATION_COUNT,
    DEFAULT_APR_MATRIX, DEFAULT_TIER_MIN_AMOUNTS, DEFAULT_TIER_MAX_AMOUNTS, DEFAULT_STAKE_MONTHS,
)
from utils.atomic import remember_attrs
from utils.logger import get_logger
from utils.validators import AmountValidator, ValidationError
from core.errors import (
    RangeError,
    REASON_INVALID_STAKE_AMOUNT, REASON_INVALID_STAKE_MONTH, REASON_INVALID_TABLE, REASON_INVALID_BOUNDS,
)

logger = get_logger(__name__)


class TierTable:
    """Таблица ставок (тир по сумме × срок)"""

    def __init__(self,
                 matrix: Optional[Sequence[Sequence[int]]] = None,
                 min_amounts: Optional[Sequence[int]] = None,
                 max_amounts: Optional[Sequence[int]] = None,
                 months: Optional[Sequence[int]] = None):
        self.matrix: List[List[int]] = self._validate_matrix(matrix if matrix is not None else DEFAULT_APR_MATRIX)
        self.min_amounts, self.max_amounts = self._validate_bounds(
            min_amounts if min_amounts is not None else DEFAULT_TIER_MIN_AMOUNTS,
            max_amounts if max_amounts is not None else DEFAULT_TIER_MAX_AMOUNTS,
        )
        self.months: List[int] = self._validate_months(months if months is not None else DEFAULT_STAKE_MONTHS)

    # --- Валидация --------------------------------------------------------

    @staticmethod
    def _validate_matrix(matrix: Sequence[Sequence[int]]) -> List[List[int]]:
        if len(matrix) != TIER_COUNT or any(len(row) != DURATION_COUNT for row in matrix):
            raise RangeError(REASON_INVALID_TABLE)
        try:
            return [[AmountValidator.validate_rate(rate) for rate in row] for row in matrix]
        except ValidationError:
            raise RangeError(REASON_INVALID_TABLE) from None

    @staticmethod
    def _validate_bounds(mins: Sequence[int], maxs: Sequence[int]):
        """Границы [min, max) непрерывны и не пересекаются"""
        try:
            mins = AmountValidator.validate_vector(mins, TIER_COUNT, "min_amounts")
            maxs = AmountValidator.validate_vector(maxs, TIER_COUNT, "max_amounts")
        except ValidationError:
            raise RangeError(REASON_INVALID_BOUNDS) from None
        for i in range(TIER_COUNT):
            if mins[i] >= maxs[i]:
                raise RangeError(REASON_INVALID_BOUNDS)
            if i > 0 and mins[i] != maxs[i - 1]:
                raise RangeError(REASON_INVALID_BOUNDS)
        return mins, maxs

    @staticmethod
    def _validate_months(months: Sequence[int]) -> List[int]:
        try:
            values = AmountValidator.validate_vector(months, DURATION_COUNT, "months")
        except ValidationError:
            raise RangeError(REASON_INVALID_STAKE_MONTH) from None
        if len(set(values)) != len(values):
            raise RangeError(REASON_INVALID_STAKE_MONTH)
        return values

    # --- Поиск ------------------------------------------------------------

    def tier_for(self, amount: int) -> int:
        """Строка, границы которой содержат сумму"""
        for row in range(TIER_COUNT):
            if self.min_amounts[row] <= amount < self.max_amounts[row]:
                return row
        raise RangeError(REASON_INVALID_STAKE_AMOUNT)

    def column_for(self, months: int) -> int:
        """Столбец для срока из набора"""
        try:
            return self.months.index(months)
        except ValueError:
            raise RangeError(REASON_INVALID_STAKE_MONTH) from None

    def has_duration(self, months: int) -> bool:
        return months in self.months

    def get_rate(self, amount: int, months: int) -> int:
        """matrix[тир(amount)][столбец(months)]"""
        row = self.tier_for(amount)
        column = self.column_for(months)
        return self.matrix[row][column]

    # --- Замена целиком ---------------------------------------------------

    def update_table(self, matrix: Sequence[Sequence[int]]) -> None:
        matrix = self._validate_matrix(matrix)
        remember_attrs(self, 'matrix')
        self.matrix = matrix
        logger.info("📊 Матрица ставок обновлена")

    def update_tier_bounds(self, min_amounts: Sequence[int], max_amounts: Sequence[int]) -> None:
        min_amounts, max_amounts = self._validate_bounds(min_amounts, max_amounts)
        remember_attrs(self, 'min_amounts', 'max_amounts')
        self.min_amounts, self.max_amounts = min_amounts, max_amounts
        logger.info("📊 Границы тиров обновлены")

    def update_duration_set(self, months: Sequence[int]) -> None:
        months = self._validate_months(months)
        remember_attrs(self, 'months')
        self.months = months
        logger.info(f"📊 Набор сроков обновлен: {self.months}")

    def snapshot(self) -> dict:
        return {
            'matrix': [list(row) for row in self.matrix],
            'min_amounts': list(self.min_amounts),
            'max_amounts': list(self.max_amounts),
            'months': list(self.months),
        }
