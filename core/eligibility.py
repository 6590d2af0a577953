"""
Модуль: Проверка права на участие (EligibilityGate)
Описание: Минимальный баланс вторичного "membership" актива перед постановкой депозита в очередь
Автор: AHA Ledger Team
"""

from typing import Dict, Optional

from utils.atomic import remember_attrs
from utils.logger import get_logger
from utils.validators import validate_address, validate_token_amount
from core.errors import EligibilityError, REASON_INSUFFICIENT_MEMBERSHIP

logger = get_logger("EligibilityGate")


class EligibilityGate:
    """Гейт по балансу membership актива"""

    def __init__(self, membership_ledger, minimum_membership_amount: int = 0):
        """
        Инициализация гейта

        Args:
            membership_ledger: AssetLedger вторичного актива (читается только balance_of)
            minimum_membership_amount: Минимальный баланс в минимальных единицах
        """
        self.membership_ledger = membership_ledger
        self.minimum_membership_amount = validate_token_amount(minimum_membership_amount, allow_zero=True)

        logger.info(f"🎯 EligibilityGate: порог членства {self.minimum_membership_amount}")

    def set_minimum(self, amount: int) -> int:
        """Новый порог действует для последующих депозитов, без обратной силы"""
        previous = self.minimum_membership_amount
        amount = validate_token_amount(amount, allow_zero=True)
        remember_attrs(self, 'minimum_membership_amount')
        self.minimum_membership_amount = amount
        return previous

    def evaluate(self, holder: str) -> Dict:
        """Расчет права на участие без отказа"""
        address = validate_address(holder)
        balance = self.membership_ledger.balance_of(address)
        eligible = balance >= self.minimum_membership_amount
        return {
            'holder': address,
            'balance': balance,
            'required': self.minimum_membership_amount,
            'eligible': eligible,
            'reason': None if eligible else REASON_INSUFFICIENT_MEMBERSHIP,
        }

    def check(self, holder: str) -> None:
        """Отказать с EligibilityError, если баланс ниже порога"""
        result = self.evaluate(holder)
        if not result['eligible']:
            logger.warning(
                f"🚫 {result['holder']}: баланс членства {result['balance']} < {result['required']}"
            )
            raise EligibilityError(REASON_INSUFFICIENT_MEMBERSHIP)
        logger.debug(f"✅ {result['holder']}: членство подтверждено ({result['balance']})")


def build_gate(membership_ledger, minimum: Optional[int]) -> Optional[EligibilityGate]:
    """Гейт нужен только двухактивному варианту кампании"""
    if membership_ledger is None:
        return None
    return EligibilityGate(membership_ledger, minimum or 0)
