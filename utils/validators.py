"""
Модуль: Валидаторы данных для AHA Time-Locked Ledger
Описание: Валидация адресов, сумм в минимальных единицах и ставок
Зависимости: web3
Автор: AHA Ledger Team
"""

import re
from typing import List, Sequence
from web3 import Web3

from config.constants import MAX_UINT256
from utils.logger import get_logger

logger = get_logger("Validators")


class ValidationError(ValueError):
    """Ошибка валидации данных"""
    pass


class AddressValidator:
    """Валидатор Ethereum/BSC адресов"""

    @staticmethod
    def is_valid_address(address: str) -> bool:
        """Проверить корректность адреса"""
        if not isinstance(address, str):
            return False

        # Проверка формата 0x + 40 hex символов
        if not re.match(r'^0x[a-fA-F0-9]{40}$', address):
            return False

        # Проверка checksum (если применяется)
        try:
            return Web3.is_address(address)
        except Exception:
            return False

    @staticmethod
    def normalize_address(address: str) -> str:
        """Нормализовать адрес к checksum формату"""
        if not AddressValidator.is_valid_address(address):
            raise ValidationError(f"Invalid address format: {address}")

        return Web3.to_checksum_address(address)


class AmountValidator:
    """Валидатор сумм в минимальных единицах токена"""

    @staticmethod
    def validate_amount(amount: int, allow_zero: bool = False) -> int:
        """Сумма должна быть целым числом uint256"""
        # bool - подкласс int, его не принимаем
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise ValidationError(f"Amount must be an integer number of base units: {amount!r}")
        if amount < 0 or amount > MAX_UINT256:
            raise ValidationError(f"Amount out of uint256 range: {amount}")
        if amount == 0 and not allow_zero:
            raise ValidationError("Amount must be greater than zero")
        return amount

    @staticmethod
    def validate_rate(rate: int) -> int:
        """Ставка - неотрицательная доля в фиксированной точке"""
        if isinstance(rate, bool) or not isinstance(rate, int):
            raise ValidationError(f"Rate must be an integer fixed-point value: {rate!r}")
        if rate < 0:
            raise ValidationError(f"Rate cannot be negative: {rate}")
        return rate

    @staticmethod
    def validate_vector(values: Sequence[int], length: int, name: str) -> List[int]:
        """Проверить вектор фиксированной длины из неотрицательных целых"""
        if len(values) != length:
            raise ValidationError(f"{name} must contain exactly {length} values, got {len(values)}")
        return [AmountValidator.validate_amount(v, allow_zero=True) for v in values]


# Удобные функции

def validate_address(address: str) -> str:
    return AddressValidator.normalize_address(address)


def is_valid_address(address: str) -> bool:
    return AddressValidator.is_valid_address(address)


def validate_token_amount(amount: int, allow_zero: bool = False) -> int:
    return AmountValidator.validate_amount(amount, allow_zero=allow_zero)


def validate_rate(rate: int) -> int:
    return AmountValidator.validate_rate(rate)
