"""
AHA Time-Locked Ledger - Contract Base

Общая основа контрактов леджера:
- адрес контракта и администратор (AccessGuard)
- AssetLedger, через который идут все переводы
- общая шина уведомлений и часы
- область операции: откат изменений и отброс уведомлений при любой ошибке

Автор: AHA Ledger Team
Версия: 1.0.0
"""

from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Tuple

from utils.atomic import remember_attrs
from utils.clock import SystemClock
from utils.logger import get_ledger_logger
from utils.validators import ValidationError, validate_address
from core.access import AccessGuard
from core.errors import RangeError, REASON_INVALID_ADDRESS
from core.notifications import EventBus, EventType, LedgerEvent


class LedgerContract:
    """Базовый класс контракта леджера"""

    # Скалярные атрибуты, сохраняемые в журнале отката в начале операции;
    # словари и записи сохраняются поэлементно в местах изменения
    _STATE_FIELDS: Tuple[str, ...] = ()

    def __init__(self,
                 address: str,
                 administrator: str,
                 asset_ledger,
                 event_bus: Optional[EventBus] = None,
                 clock: Optional[Callable[[], int]] = None):
        self.address = validate_address(address)
        self.guard = AccessGuard(administrator)
        self.asset = asset_ledger
        self.bus = event_bus or EventBus()
        self.clock = clock or SystemClock()
        self.log = get_ledger_logger(type(self).__name__)
        self.logger = self.log.get_logger()

    @property
    def administrator(self) -> str:
        return self.guard.administrator

    @property
    def contract_name(self) -> str:
        return type(self).__name__

    def now(self) -> int:
        return int(self.clock())

    @contextmanager
    def _operation(self) -> Iterator[None]:
        """
        Выполнить публичную операцию атомарно.

        Журнал отката общий для всех контрактов потока: операция другого
        контракта, вызванная изнутри (например, из хука получателя),
        откатывается вместе с внешней.
        """
        with self.bus.transaction():
            remember_attrs(self, *self._STATE_FIELDS)
            yield

    def _require_admin(self, caller: str) -> None:
        self.guard.require_admin(caller)

    @staticmethod
    def _holder(address: str) -> str:
        try:
            return validate_address(address)
        except ValidationError:
            raise RangeError(REASON_INVALID_ADDRESS) from None

    def _pull(self, holder: str, amount: int) -> None:
        """Забрать средства держателя по allowance; ошибки AssetLedger не маскируются"""
        self.asset.transfer_from(self.address, holder, self.address, amount)

    def _push(self, holder: str, amount: int) -> None:
        """Исходящий перевод - всегда последним шагом операции"""
        self.asset.transfer(self.address, holder, amount)

    def _emit(self, event_type: EventType, name: str, **payload) -> LedgerEvent:
        return self.bus.emit(event_type, name, self.address, self.now(), **payload)

    def _reject(self, error: Exception, **context) -> None:
        """Залогировать причину отказа и пробросить ошибку"""
        self.logger.warning(f"⛔ {self.contract_name}: {getattr(error, 'reason', error)} | {context}")
        raise error
