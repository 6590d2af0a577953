"""
AHA Time-Locked Ledger - Deposit Ledger

Учет депозитов держателей в кампаниях и планах:
- Проверка границ min/max, зафиксированных при создании цели
- Немедленное подтверждение (простой вариант) или постановка в очередь
- Одна открытая запись на пару (держатель, цель)
- Чтение оставшегося срока и текущей награды
- Список целей держателя в порядке первого депозита

Перевод средств выполняет вызывающий контракт: ledger только ведет записи.

Автор: AHA Ledger Team
Версия: 1.0.0
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from utils.atomic import remember_attrs, remember_item
from utils.logger import get_logger
from core.errors import (
    RangeError, StateError,
    REASON_BELOW_MINIMUM, REASON_ABOVE_MAXIMUM, REASON_INVALID_AMOUNT, REASON_EXCEEDS_CAPACITY,
    REASON_NO_DEPOSIT, REASON_DEPOSIT_ACTIVE, REASON_ALREADY_WITHDRAWN,
)
from core.lifecycle import CampaignStatus
from core.reward_calculator import RewardEngine

logger = get_logger(__name__)


class DepositState(Enum):
    """Состояния записи депозита"""
    QUEUED = "queued"
    CONFIRMED = "confirmed"
    WITHDRAWN = "withdrawn"


@dataclass
class DepositTarget:
    """Общие условия цели депозита (кампания или план)"""
    id: int
    duration: int          # в днях
    rate: int              # доля * RATE_SCALE
    min_amount: int
    max_amount: int
    created_at: int
    total_committed: int = 0
    total_queued: int = 0

    # Поля, меняющиеся после создания (для журнала отката)
    _MUTABLE = ('total_committed', 'total_queued')

    def remember(self) -> None:
        remember_attrs(self, *self._MUTABLE)

    @property
    def duration_seconds(self) -> int:
        return RewardEngine.days(self.duration)


@dataclass
class Campaign(DepositTarget):
    """Кампания (проект) с ограниченной емкостью"""
    status: CampaignStatus = CampaignStatus.FUNDING
    capacity: Optional[int] = None  # None - без ограничения

    _MUTABLE = DepositTarget._MUTABLE + ('status', 'capacity')

    def remaining_capacity(self) -> Optional[int]:
        if self.capacity is None:
            return None
        return max(0, self.capacity - self.total_committed)


@dataclass
class Plan(DepositTarget):
    """План стейкинга"""
    active: bool = True

    _MUTABLE = DepositTarget._MUTABLE + ('active',)


@dataclass
class DepositRecord:
    """Запись о депозите держателя"""
    holder: str
    target_id: int
    amount: int
    start_time: int
    state: DepositState
    via_queue: bool = False
    queue_sequence: Optional[int] = None
    confirmed_at: Optional[int] = None
    withdrawn_at: Optional[int] = None
    paid_out: int = 0

    _MUTABLE = ('amount', 'start_time', 'state', 'confirmed_at', 'withdrawn_at', 'paid_out')

    def remember(self) -> None:
        remember_attrs(self, *self._MUTABLE)

    @property
    def is_open(self) -> bool:
        return self.state != DepositState.WITHDRAWN

    def to_dict(self) -> Dict:
        """Конвертация в словарь для JSON"""
        return {
            "holder": self.holder,
            "target_id": self.target_id,
            "amount": str(self.amount),
            "start_time": self.start_time,
            "state": self.state.value,
            "via_queue": self.via_queue,
            "confirmed_at": self.confirmed_at,
            "withdrawn_at": self.withdrawn_at,
            "paid_out": str(self.paid_out),
        }


class DepositLedger:
    """Книга депозитов одного контракта"""

    def __init__(self, reward_engine: Optional[RewardEngine] = None):
        self.reward_engine = reward_engine or RewardEngine()
        self._records: Dict[Tuple[str, int], DepositRecord] = {}
        self._holder_targets: Dict[str, List[int]] = {}
        self._queues: Dict[int, List[str]] = {}
        self._queue_sequence = 0

    # --- Проверки ---------------------------------------------------------

    @staticmethod
    def check_bounds(target: DepositTarget, amount: int) -> None:
        """min <= amount <= max, amount > 0"""
        if amount <= 0:
            raise RangeError(REASON_INVALID_AMOUNT)
        if amount < target.min_amount:
            raise RangeError(REASON_BELOW_MINIMUM)
        if amount > target.max_amount:
            raise RangeError(REASON_ABOVE_MAXIMUM)

    def validate_admission(self, holder: str, target: DepositTarget, amount: int, queued: bool) -> Optional[DepositRecord]:
        """
        Проверить депозит до перевода средств.

        Returns:
            Открытую очередную запись, которую нужно пополнить, или None для новой записи
        """
        self.check_bounds(target, amount)

        existing = self.open_record(holder, target.id)
        if existing is None:
            if not queued and isinstance(target, Campaign):
                remaining = target.remaining_capacity()
                if remaining is not None and amount > remaining:
                    raise RangeError(REASON_EXCEEDS_CAPACITY)
            return None

        if queued and existing.state == DepositState.QUEUED:
            if existing.amount + amount > target.max_amount:
                raise RangeError(REASON_ABOVE_MAXIMUM)
            return existing

        raise StateError(REASON_DEPOSIT_ACTIVE)

    # --- Изменения --------------------------------------------------------

    def record_admission(self, holder: str, target: DepositTarget, amount: int, queued: bool, now: int) -> DepositRecord:
        """Создать или пополнить запись после успешного перевода"""
        existing = self.validate_admission(holder, target, amount, queued)
        if existing is not None:
            existing.remember()
            target.remember()
            existing.amount += amount
            target.total_queued += amount
            logger.debug(f"➕ Пополнение очереди {holder} в {target.id}: {existing.amount}")
            return existing

        record = DepositRecord(
            holder=holder,
            target_id=target.id,
            amount=amount,
            start_time=now,
            state=DepositState.QUEUED if queued else DepositState.CONFIRMED,
            via_queue=queued,
        )
        target.remember()
        if queued:
            remember_attrs(self, '_queue_sequence')
            remember_item(self._queues, target.id)
            self._queue_sequence += 1
            record.queue_sequence = self._queue_sequence
            self._queues.setdefault(target.id, []).append(holder)
            target.total_queued += amount
        else:
            record.confirmed_at = now
            target.total_committed += amount

        remember_item(self._records, (holder, target.id))
        self._records[(holder, target.id)] = record

        if target.id not in self._holder_targets.get(holder, []):
            remember_item(self._holder_targets, holder)
            self._holder_targets.setdefault(holder, []).append(target.id)
        return record

    def confirm(self, target: DepositTarget, record: DepositRecord, now: int) -> None:
        """Перевести запись из очереди в подтвержденные; срок отсчитывается от `now`"""
        if record.state != DepositState.QUEUED:
            raise StateError(REASON_DEPOSIT_ACTIVE)
        record.remember()
        target.remember()
        record.state = DepositState.CONFIRMED
        record.start_time = now
        record.confirmed_at = now
        target.total_queued -= record.amount
        target.total_committed += record.amount
        self._dequeue(target.id, record.holder)

    def mark_withdrawn(self, target: DepositTarget, record: DepositRecord, now: int, payout: int) -> None:
        """Закрыть запись (терминально) до исходящего перевода"""
        if record.state == DepositState.WITHDRAWN:
            raise StateError(REASON_ALREADY_WITHDRAWN)
        record.remember()
        target.remember()
        if record.state == DepositState.QUEUED:
            target.total_queued -= record.amount
            self._dequeue(target.id, record.holder)
        record.state = DepositState.WITHDRAWN
        record.withdrawn_at = now
        record.paid_out = payout

    def _dequeue(self, target_id: int, holder: str) -> None:
        queue = self._queues.get(target_id, [])
        if holder in queue:
            remember_item(self._queues, target_id)
            self._queues[target_id].remove(holder)

    # --- Чтение -----------------------------------------------------------

    def open_record(self, holder: str, target_id: int) -> Optional[DepositRecord]:
        record = self._records.get((holder, target_id))
        if record is not None and record.is_open:
            return record
        return None

    def get(self, holder: str, target_id: int) -> DepositRecord:
        """Последняя запись держателя по цели (открытая или закрытая)"""
        record = self._records.get((holder, target_id))
        if record is None:
            raise StateError(REASON_NO_DEPOSIT)
        return record

    def queued_records(self, target_id: int) -> List[DepositRecord]:
        """Очередь цели в порядке FIFO"""
        return [self._records[(holder, target_id)] for holder in self._queues.get(target_id, [])]

    def remaining_duration(self, holder: str, target: DepositTarget, now: int) -> int:
        """Оставшиеся целые дни; до первого прошедшего дня - исходный срок"""
        record = self.get(holder, target.id)
        if record.state == DepositState.WITHDRAWN:
            return 0
        return self.reward_engine.remaining_days(target.duration, record.start_time, now)

    def current_reward(self, holder: str, target: DepositTarget, now: int) -> int:
        """0 до созревания; после - полная награда (начисления частями нет)"""
        record = self.get(holder, target.id)
        if record.state != DepositState.CONFIRMED:
            return 0
        return self.reward_engine.calculate(
            record.amount, target.rate, record.start_time, target.duration_seconds, now
        ).reward

    def list_holder_targets(self, holder: str) -> List[int]:
        """Цели с открытой записью, в порядке первого депозита"""
        return [
            target_id for target_id in self._holder_targets.get(holder, [])
            if self.open_record(holder, target_id) is not None
        ]

