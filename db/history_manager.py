"""
AHA Time-Locked Ledger - History Manager

Журнал уведомлений леджера:
- Подписка на EventBus и сохранение каждого опубликованного уведомления
- Выборки по типу, контракту и держателю
- История операций держателя для аудита

Автор: AHA Ledger Team
Версия: 1.0.0
"""

import json
import threading
from typing import Any, Dict, List, Optional

from utils.logger import get_logger
from core.notifications import EventBus, EventType, LedgerEvent
from db.database import DatabaseManager
from db.models import LedgerEventRecord

logger = get_logger(__name__)

# Ключи payload, в которых лежит ID цели
_TARGET_KEYS = ('project_id', 'plan_id', 'index')


class HistoryManager:
    """Менеджер истории уведомлений"""

    def __init__(self, event_bus: EventBus, db_manager: DatabaseManager):
        self.event_bus = event_bus
        self.db_manager = db_manager
        self.lock = threading.Lock()

        if not self.db_manager.is_initialized and not self.db_manager.initialize_sync():
            raise RuntimeError("Не удалось инициализировать БД журнала")

        self.event_bus.subscribe(self.record_event)
        logger.info("📚 HistoryManager подписан на уведомления")

    def close(self) -> None:
        self.event_bus.unsubscribe(self.record_event)

    @staticmethod
    def _to_record(event: LedgerEvent) -> LedgerEventRecord:
        data = event.to_dict()
        payload = data['payload']
        target_id = next((payload[k] for k in _TARGET_KEYS if payload.get(k) is not None), None)
        amount = payload.get('amount')
        return LedgerEventRecord(
            sequence=event.sequence,
            event_type=event.event_type.value,
            name=event.name,
            contract=event.contract,
            holder=event.holder,
            target_id=None if target_id is None else str(target_id),
            amount=None if amount is None else str(amount),
            payload=json.dumps(payload, default=str),
            timestamp=event.timestamp,
        )

    def record_event(self, event: LedgerEvent) -> None:
        """Сохранить опубликованное уведомление"""
        with self.lock:
            with self.db_manager.get_session() as session:
                session.add(self._to_record(event))
        logger.debug(f"💾 Сохранено уведомление #{event.sequence} {event.name}")

    def get_events(self,
                   event_type: Optional[EventType] = None,
                   contract: Optional[str] = None,
                   holder: Optional[str] = None,
                   limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Уведомления в порядке публикации"""
        with self.db_manager.get_session() as session:
            query = session.query(LedgerEventRecord)
            if event_type is not None:
                query = query.filter(LedgerEventRecord.event_type == event_type.value)
            if contract is not None:
                query = query.filter(LedgerEventRecord.contract == contract)
            if holder is not None:
                query = query.filter(LedgerEventRecord.holder == holder)
            query = query.order_by(LedgerEventRecord.sequence)
            if limit:
                query = query.limit(limit)
            return [record.to_dict() for record in query.all()]

    def count_events(self, event_type: Optional[EventType] = None) -> int:
        with self.db_manager.get_session() as session:
            query = session.query(LedgerEventRecord)
            if event_type is not None:
                query = query.filter(LedgerEventRecord.event_type == event_type.value)
            return query.count()

    def get_holder_history(self, holder: str) -> List[Dict[str, Any]]:
        """Все операции держателя: депозиты, выводы, возвраты, покупки"""
        return self.get_events(holder=holder)
