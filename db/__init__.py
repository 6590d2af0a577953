"""
Модуль db - Журнал уведомлений AHA Time-Locked Ledger
"""

from .models import Base, LedgerEventRecord
from .database import DatabaseManager
from .history_manager import HistoryManager

__all__ = [
    'Base',
    'LedgerEventRecord',
    'DatabaseManager',
    'HistoryManager'
]
