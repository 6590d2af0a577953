"""
Модуль: PositionRegistry
Описание: Позиции стейкинга держателя - append-only список со стабильными индексами.
Индекс позиции не переиспользуется даже после вывода.
Автор: AHA Ledger Team
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from utils.atomic import remember_attrs, remember_item
from core.errors import PositionIndexError, StateError, REASON_INVALID_INDEX, REASON_ALREADY_WITHDRAWN


@dataclass
class Position:
    """Позиция стейкинга с переменным сроком"""
    holder: str
    index: int
    amount: int
    months: int
    rate: int            # зафиксирована при стейке
    start_time: int
    withdrawn: bool = False
    withdrawn_at: Optional[int] = None

    def to_dict(self) -> Dict:
        return {
            'holder': self.holder,
            'index': self.index,
            'amount': str(self.amount),
            'months': self.months,
            'rate': str(self.rate),
            'start_time': self.start_time,
            'withdrawn': self.withdrawn,
            'withdrawn_at': self.withdrawn_at,
        }


class PositionRegistry:
    """Реестр позиций по держателям"""

    def __init__(self):
        self._positions: Dict[str, List[Position]] = {}

    def add(self, holder: str, amount: int, months: int, rate: int, start_time: int) -> Position:
        """Новая позиция получает индекс = текущая длина списка"""
        remember_item(self._positions, holder, deep=False)
        positions = self._positions.setdefault(holder, [])
        position = Position(
            holder=holder,
            index=len(positions),
            amount=amount,
            months=months,
            rate=rate,
            start_time=start_time,
        )
        positions.append(position)
        return position

    def get(self, holder: str, index: int) -> Position:
        positions = self._positions.get(holder, [])
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(positions):
            raise PositionIndexError(REASON_INVALID_INDEX)
        return positions[index]

    def mark_withdrawn(self, holder: str, index: int, now: int) -> Position:
        """Запечатать позицию; повторный вывод запрещен"""
        position = self.get(holder, index)
        if position.withdrawn:
            raise StateError(REASON_ALREADY_WITHDRAWN)
        remember_attrs(position, 'withdrawn', 'withdrawn_at')
        position.withdrawn = True
        position.withdrawn_at = now
        return position

    def positions(self, holder: str) -> List[Position]:
        return list(self._positions.get(holder, []))

    def open_positions(self, holder: str) -> List[Position]:
        return [p for p in self._positions.get(holder, []) if not p.withdrawn]

    def count(self, holder: str) -> int:
        return len(self._positions.get(holder, []))

    def holders(self) -> List[str]:
        return list(self._positions)

    def total_staked(self) -> int:
        """Сумма открытых позиций всех держателей"""
        return sum(p.amount for positions in self._positions.values() for p in positions if not p.withdrawn)
