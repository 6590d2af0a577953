"""
Модуль: AccessGuard
Описание: Проверка, что вызывающий привилегированную операцию - зарегистрированный администратор
Автор: AHA Ledger Team
"""

from utils.logger import get_logger
from utils.validators import validate_address
from core.errors import AuthorizationError, REASON_NOT_OWNER

logger = get_logger("AccessGuard")


class AccessGuard:
    """Администратор фиксируется при создании и не меняется"""

    def __init__(self, administrator: str):
        self._administrator = validate_address(administrator)

    @property
    def administrator(self) -> str:
        return self._administrator

    def is_administrator(self, caller: str) -> bool:
        try:
            return validate_address(caller) == self._administrator
        except ValueError:
            return False

    def require_admin(self, caller: str) -> str:
        """Отказать, если caller не администратор. Побочных эффектов нет."""
        if not self.is_administrator(caller):
            logger.warning(f"🚫 Отказ в доступе: {caller}")
            raise AuthorizationError(REASON_NOT_OWNER)
        return self._administrator
