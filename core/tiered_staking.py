"""
AHA Time-Locked Ledger - Tiered Staking

Стейкинг с переменным сроком:
- Ставка выбирается по таблице (тир суммы × срок в месяцах) и фиксируется при стейке
- У держателя несколько независимых позиций с индексами 0, 1, 2, ...
- Вывод principal + interest после срока; 0 месяцев - гибкий срок
- Администратор заменяет таблицу, границы тиров, набор сроков и глобальный диапазон

Награда выплачивается из собственного баланса контракта, который
пополняет администратор.

Автор: AHA Ledger Team
Версия: 1.0.0
"""

from typing import Dict, List, Optional, Sequence, Tuple

from config.constants import DEFAULT_STAKE_RANGE, EVENT_NAMES
from utils.validators import AmountValidator, ValidationError
from core.contract_base import LedgerContract
from core.errors import (
    RangeError, StateError, TimingError,
    REASON_AMOUNT_OUT_OF_RANGE, REASON_INVALID_DURATION, REASON_STAKE_NOT_COMPLETED,
    REASON_ALREADY_WITHDRAWN, REASON_INVALID_BOUNDS,
)
from core.notifications import EventType
from core.position_registry import Position, PositionRegistry
from core.reward_calculator import RewardEngine
from core.tier_table import TierTable


class TieredStaking(LedgerContract):
    """Контракт стейкинга по таблице ставок"""

    _STATE_FIELDS = ('min_stake_amount', 'max_stake_amount')

    def __init__(self,
                 address: str,
                 administrator: str,
                 asset_ledger,
                 event_bus=None,
                 clock=None,
                 table: Optional[TierTable] = None,
                 stake_range: Tuple[int, int] = DEFAULT_STAKE_RANGE,
                 reward_engine: Optional[RewardEngine] = None):
        super().__init__(address, administrator, asset_ledger, event_bus, clock)
        self.reward_engine = reward_engine or RewardEngine()
        self.table = table or TierTable()
        self.registry = PositionRegistry()
        self.min_stake_amount, self.max_stake_amount = self._validate_range(*stake_range)

        self.logger.info(
            f"🏗️ {self.contract_name} развернут: {self.address} | сроки {self.table.months}"
        )

    @staticmethod
    def _validate_range(min_amount: int, max_amount: int) -> Tuple[int, int]:
        try:
            AmountValidator.validate_amount(min_amount, allow_zero=True)
            AmountValidator.validate_amount(max_amount)
        except ValidationError:
            raise RangeError(REASON_INVALID_BOUNDS) from None
        if min_amount > max_amount:
            raise RangeError(REASON_INVALID_BOUNDS)
        return min_amount, max_amount

    # --- Администрирование ------------------------------------------------

    def update_apr(self, caller: str, matrix: Sequence[Sequence[int]]) -> None:
        """Заменить матрицу ставок целиком"""
        with self._operation():
            self._require_admin(caller)
            self.table.update_table(matrix)
            self._emit(EventType.TIER_TABLE_UPDATED, EVENT_NAMES['apr_updated'],
                       matrix=[list(row) for row in self.table.matrix])
            self.log.log_admin_action(self.contract_name, "update_apr", {'rows': len(matrix)})

    def update_min_max_amounts(self, caller: str, min_amounts: Sequence[int], max_amounts: Sequence[int]) -> None:
        """Заменить границы тиров"""
        with self._operation():
            self._require_admin(caller)
            self.table.update_tier_bounds(min_amounts, max_amounts)
            self._emit(EventType.TIER_TABLE_UPDATED, EVENT_NAMES['range_amount_updated'],
                       min_amounts=list(self.table.min_amounts), max_amounts=list(self.table.max_amounts))
            self.log.log_admin_action(self.contract_name, "update_min_max_amounts", {
                'min_amounts': list(min_amounts)
            })

    def update_stake_months(self, caller: str, months: Sequence[int]) -> None:
        """Заменить набор сроков (порядок задает столбцы матрицы)"""
        with self._operation():
            self._require_admin(caller)
            self.table.update_duration_set(months)
            self._emit(EventType.TIER_TABLE_UPDATED, EVENT_NAMES['months_updated'],
                       months=list(self.table.months))
            self.log.log_admin_action(self.contract_name, "update_stake_months", {'months': list(months)})

    def update_stake_range(self, caller: str, min_amount: int, max_amount: int) -> None:
        """Заменить глобальный диапазон суммы стейка"""
        with self._operation():
            self._require_admin(caller)
            self.min_stake_amount, self.max_stake_amount = self._validate_range(min_amount, max_amount)
            self._emit(EventType.TIER_TABLE_UPDATED, EVENT_NAMES['stake_range_updated'],
                       min_amount=min_amount, max_amount=max_amount)
            self.log.log_admin_action(self.contract_name, "update_stake_range", {
                'min': min_amount, 'max': max_amount
            })

    # --- Операции держателя -----------------------------------------------

    def get_apr(self, amount: int, months: int) -> int:
        return self.table.get_rate(amount, months)

    def stake(self, holder: str, amount: int, months: int) -> int:
        """
        Открыть позицию.

        Returns:
            Индекс новой позиции
        """
        with self._operation():
            holder = self._holder(holder)
            if (isinstance(amount, bool) or not isinstance(amount, int)
                    or not self.min_stake_amount <= amount <= self.max_stake_amount):
                self._reject(RangeError(REASON_AMOUNT_OUT_OF_RANGE), holder=holder, amount=amount)
            if not self.table.has_duration(months):
                self._reject(RangeError(REASON_INVALID_DURATION), holder=holder, months=months)

            rate = self.table.get_rate(amount, months)
            position = self.registry.add(holder, amount, months, rate, self.now())
            self._pull(holder, amount)

            self._emit(
                EventType.DEPOSIT_ACCEPTED, EVENT_NAMES['staked'],
                holder=holder, index=position.index, amount=amount, months=months, rate=rate,
            )
            self.log.log_deposit(self.contract_name, holder, position.index, amount)
            return position.index

    def unstake(self, holder: str, index: int) -> int:
        """Вывести principal + interest позиции; возвращает выплату"""
        with self._operation():
            holder = self._holder(holder)
            position = self.registry.get(holder, index)
            if position.withdrawn:
                self._reject(StateError(REASON_ALREADY_WITHDRAWN), holder=holder, index=index)

            now = self.now()
            calculation = self.reward_engine.calculate(
                position.amount, position.rate, position.start_time,
                RewardEngine.months(position.months), now,
            )
            if not calculation.mature:
                self._reject(TimingError(REASON_STAKE_NOT_COMPLETED), holder=holder, index=index)

            self.registry.mark_withdrawn(holder, index, now)
            self._push(holder, calculation.payout)

            self._emit(
                EventType.WITHDRAWAL_COMPLETED, EVENT_NAMES['unstaked'],
                holder=holder, index=index, amount=calculation.principal, reward=calculation.reward,
            )
            self.log.log_withdrawal(self.contract_name, holder, index, calculation.principal, calculation.reward)
            return calculation.payout

    # --- Чтение -----------------------------------------------------------

    def calculate_interest(self, holder: str, index: int) -> int:
        """amount * rate / RATE_SCALE по зафиксированной ставке, без учета созревания"""
        position = self.registry.get(self._holder(holder), index)
        return self.reward_engine.compute_reward(position.amount, position.rate)

    def get_position(self, holder: str, index: int) -> Position:
        return self.registry.get(self._holder(holder), index)

    def get_positions(self, holder: str) -> List[Position]:
        return self.registry.positions(self._holder(holder))

    def position_count(self, holder: str) -> int:
        return self.registry.count(self._holder(holder))

    def get_remaining_duration(self, holder: str, index: int) -> int:
        """Оставшиеся дни до конца срока позиции"""
        position = self.registry.get(self._holder(holder), index)
        if position.withdrawn:
            return 0
        duration_days = RewardEngine.months(position.months) // RewardEngine.days(1)
        return self.reward_engine.remaining_days(duration_days, position.start_time, self.now())

    def get_table(self) -> Dict:
        snapshot = self.table.snapshot()
        snapshot['stake_range'] = [self.min_stake_amount, self.max_stake_amount]
        return snapshot
