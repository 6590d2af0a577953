"""
AHA Time-Locked Ledger - Notifications

Уведомления (event-like сигналы) для внешних наблюдателей и индексаторов:
- создание кампании/плана, смена статуса
- принятые депозиты и распределение очереди
- изменения таблицы ставок и порога членства
- выводы средств и возвраты

События, выпущенные внутри неудавшейся операции, отбрасываются:
подписчики получают их только после успешного завершения внешней операции,
даже если вложенная операция шла через другую шину.

Автор: AHA Ledger Team
Версия: 1.0.0
"""

from contextlib import contextmanager
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional

from utils.atomic import atomic_scope, on_commit, on_rollback
from utils.logger import get_logger

logger = get_logger(__name__)


class EventType(Enum):
    """Типы уведомлений"""
    TARGET_CREATED = "target_created"
    STATUS_CHANGED = "status_changed"
    DEPOSIT_ACCEPTED = "deposit_accepted"
    DEPOSIT_QUEUED = "deposit_queued"
    ALLOCATION_COMPLETED = "allocation_completed"
    MEMBERSHIP_THRESHOLD_UPDATED = "membership_threshold_updated"
    TIER_TABLE_UPDATED = "tier_table_updated"
    CAPACITY_UPDATED = "capacity_updated"
    WITHDRAWAL_COMPLETED = "withdrawal_completed"
    DEPOSIT_REFUNDED = "deposit_refunded"
    TOKENS_PURCHASED = "tokens_purchased"
    SALE_UPDATED = "sale_updated"
    DONATION_RECEIVED = "donation_received"


@dataclass
class LedgerEvent:
    """Опубликованное уведомление"""
    event_type: EventType
    name: str
    contract: str
    timestamp: int
    payload: Dict[str, Any] = field(default_factory=dict)
    sequence: int = 0

    @property
    def holder(self) -> Optional[str]:
        return self.payload.get('holder')

    def to_dict(self) -> Dict[str, Any]:
        """Конвертация в словарь для сериализации"""
        data = asdict(self)
        data['event_type'] = self.event_type.value
        # Суммы uint256 не влезают в JSON-числа некоторых потребителей
        data['payload'] = {k: (str(v) if isinstance(v, int) and not isinstance(v, bool) else v)
                           for k, v in self.payload.items()}
        return data


Subscriber = Callable[[LedgerEvent], None]


class EventBus:
    """Шина уведомлений с буферизацией до завершения операции"""

    def __init__(self):
        self._published: List[LedgerEvent] = []
        self._pending: List[LedgerEvent] = []
        self._subscribers: List[Subscriber] = []
        self._sequence = 0

    def subscribe(self, callback: Subscriber) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def emit(self, event_type: EventType, name: str, contract: str, timestamp: int, **payload) -> LedgerEvent:
        """Выпустить уведомление (в буфер, если идет операция)"""
        event = LedgerEvent(
            event_type=event_type,
            name=name,
            contract=contract,
            timestamp=timestamp,
            payload=payload
        )
        self._pending.append(event)
        on_commit(self._flush)
        return event

    @contextmanager
    def transaction(self) -> Iterator["EventBus"]:
        """Область операции: при ошибке уведомления этой области отбрасываются"""
        with atomic_scope():
            on_rollback(self._discard_from(len(self._pending)))
            yield self

    def _discard_from(self, mark: int) -> Callable[[], None]:
        def discard() -> None:
            dropped = len(self._pending) - mark
            del self._pending[mark:]
            if dropped > 0:
                logger.debug(f"🗑️ Отброшено уведомлений неудавшейся операции: {dropped}")
        return discard

    def _flush(self) -> None:
        pending, self._pending = self._pending, []
        for event in pending:
            self._sequence += 1
            event.sequence = self._sequence
            self._published.append(event)
            logger.debug(f"📣 {event.name} #{event.sequence} от {event.contract}: {event.payload}")
            for callback in list(self._subscribers):
                try:
                    callback(event)
                except Exception as e:
                    # Подписчики вне ядра; их сбой не отменяет завершенную операцию
                    logger.error(f"❌ Ошибка подписчика {getattr(callback, '__name__', callback)}: {e}")

    @property
    def events(self) -> List[LedgerEvent]:
        return list(self._published)

    def events_of(self, event_type: EventType, contract: Optional[str] = None) -> List[LedgerEvent]:
        return [
            e for e in self._published
            if e.event_type == event_type and (contract is None or e.contract == contract)
        ]

    def events_named(self, name: str) -> List[LedgerEvent]:
        return [e for e in self._published if e.name == name]

    def last(self) -> Optional[LedgerEvent]:
        return self._published[-1] if self._published else None
