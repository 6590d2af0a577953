"""
Модуль: Модели базы данных для AHA Time-Locked Ledger
Описание: SQLAlchemy модель журнала уведомлений леджера
Автор: AHA Ledger Team
"""

import json
from typing import Dict

from sqlalchemy import Column, Integer, String, DateTime, Text, Index
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

from utils.logger import get_logger

logger = get_logger("AHA_Database")

Base = declarative_base()


class LedgerEventRecord(Base):
    """Опубликованное уведомление контракта"""
    __tablename__ = 'ledger_events'

    id = Column(Integer, primary_key=True, autoincrement=True)
    sequence = Column(Integer, nullable=False, index=True)
    event_type = Column(String(50), nullable=False, index=True)
    name = Column(String(64), nullable=False)
    contract = Column(String(42), nullable=False, index=True)
    holder = Column(String(42), index=True)
    target_id = Column(String(78))
    # uint256 не помещается в целочисленные колонки
    amount = Column(String(78))
    payload = Column(Text, nullable=False, default='{}')
    timestamp = Column(Integer, nullable=False, index=True)
    created_at = Column(DateTime, default=func.now())

    __table_args__ = (
        Index('idx_event_holder_time', 'holder', 'timestamp'),
        Index('idx_event_contract_type', 'contract', 'event_type'),
    )

    def payload_dict(self) -> Dict:
        return json.loads(self.payload or '{}')

    def to_dict(self) -> Dict:
        return {
            'sequence': self.sequence,
            'event_type': self.event_type,
            'name': self.name,
            'contract': self.contract,
            'holder': self.holder,
            'target_id': self.target_id,
            'amount': self.amount,
            'payload': self.payload_dict(),
            'timestamp': self.timestamp,
        }

    def __repr__(self):
        return f"<LedgerEventRecord(#{self.sequence} {self.name} holder={self.holder})>"
