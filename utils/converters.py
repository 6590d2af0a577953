"""
Модуль: Конвертеры данных для AHA Time-Locked Ledger
Описание: Конвертация между минимальными единицами и токенами, ставками и процентами, временем
Зависимости: decimal
Автор: AHA Ledger Team
"""

from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP
from typing import Union

from config.constants import (
    TOKEN_DECIMALS, TOKEN_SYMBOL, RATE_SCALE, SECONDS_PER_DAY, SECONDS_PER_MONTH
)
from utils.logger import get_logger

logger = get_logger("Converters")


class TokenConverter:
    """Конвертер для работы с токенами"""

    @staticmethod
    def wei_to_token(wei_amount: Union[int, str], decimals: int = TOKEN_DECIMALS) -> Decimal:
        """
        Конвертировать минимальные единицы в токены

        Args:
            wei_amount: Количество в минимальных единицах
            decimals: Количество знаков после запятой токена

        Returns:
            Decimal: Количество токенов
        """
        wei = Decimal(str(wei_amount))
        return wei / Decimal(10 ** decimals)

    @staticmethod
    def token_to_wei(token_amount: Union[str, int, Decimal], decimals: int = TOKEN_DECIMALS) -> int:
        """
        Конвертировать токены в минимальные единицы (с отбрасыванием остатка)

        Args:
            token_amount: Количество токенов
            decimals: Количество знаков после запятой токена

        Returns:
            int: Количество в минимальных единицах
        """
        amount = Decimal(str(token_amount))
        wei = (amount * Decimal(10 ** decimals)).to_integral_value(rounding=ROUND_DOWN)
        return int(wei)

    @staticmethod
    def format_token_amount(wei_amount: int, include_symbol: bool = True, precision: int = 4) -> str:
        """Форматировать количество токенов для отображения"""
        decimal_amount = TokenConverter.wei_to_token(wei_amount)
        rounded = decimal_amount.quantize(Decimal(10) ** -precision, rounding=ROUND_HALF_UP)
        formatted = f"{rounded:,}"
        if include_symbol:
            formatted += f" {TOKEN_SYMBOL}"
        return formatted


class RateConverter:
    """Конвертер ставок фиксированной точки"""

    @staticmethod
    def rate_from_percent(percent: Union[str, int, Decimal]) -> int:
        """4.5 -> 45 * 10**15"""
        value = Decimal(str(percent)) * Decimal(RATE_SCALE) / Decimal(100)
        return int(value.to_integral_value(rounding=ROUND_DOWN))

    @staticmethod
    def rate_to_percent(rate: int) -> Decimal:
        return Decimal(rate) * Decimal(100) / Decimal(RATE_SCALE)


class TimeConverter:
    """Целочисленные интервалы времени"""

    @staticmethod
    def elapsed_seconds(start: int, now: int) -> int:
        return max(0, now - start)

    @staticmethod
    def elapsed_days(start: int, now: int) -> int:
        return TimeConverter.elapsed_seconds(start, now) // SECONDS_PER_DAY

    @staticmethod
    def elapsed_months(start: int, now: int) -> int:
        return TimeConverter.elapsed_seconds(start, now) // SECONDS_PER_MONTH

    @staticmethod
    def days_to_seconds(days: int) -> int:
        return days * SECONDS_PER_DAY

    @staticmethod
    def months_to_seconds(months: int) -> int:
        return months * SECONDS_PER_MONTH


# Удобные функции

def wei_to_token(wei_amount: Union[int, str], decimals: int = TOKEN_DECIMALS) -> Decimal:
    return TokenConverter.wei_to_token(wei_amount, decimals)


def token_to_wei(token_amount: Union[Decimal, int, str], decimals: int = TOKEN_DECIMALS) -> int:
    return TokenConverter.token_to_wei(token_amount, decimals)


def format_token_amount(wei_amount: int, precision: int = 4) -> str:
    return TokenConverter.format_token_amount(wei_amount, precision=precision)


def rate_from_percent(percent: Union[str, int, Decimal]) -> int:
    return RateConverter.rate_from_percent(percent)


def elapsed_days(start: int, now: int) -> int:
    return TimeConverter.elapsed_days(start, now)
