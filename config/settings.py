"""
Модуль: Настройки для AHA Time-Locked Ledger
Описание: Pydantic класс для настроек с валидацией и загрузкой из .env
Зависимости: pydantic, pydantic-settings
Автор: AHA Ledger Team
"""

from typing import Literal
from pydantic import field_validator, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import TOKEN_DECIMALS, ZERO_ADDRESS


class LedgerSettings(BaseSettings):
    """Настройки для AHA Time-Locked Ledger с валидацией"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Подключение к ноде
    rpc_url: str = Field(default="http://127.0.0.1:8545", description="RPC endpoint ноды")
    connection_timeout: int = Field(default=30, description="Таймаут подключения в секундах")

    # Параметры токена
    token_address: str = Field(default=ZERO_ADDRESS, description="Адрес контракта токена")
    token_decimals: int = Field(default=TOKEN_DECIMALS, description="Количество знаков после запятой")

    # Администратор леджера
    administrator_address: str = Field(default=ZERO_ADDRESS, description="Адрес администратора")

    # Порог членства для двухактивных кампаний (в минимальных единицах)
    minimum_membership_amount: int = Field(default=0, description="Минимальный баланс membership токена")

    # База данных
    database_url: str = Field(default="sqlite:///aha_ledger.db", description="URL базы данных")
    debug_sql: bool = Field(default=False, description="Включить отладку SQL запросов")
    persist_events: bool = Field(default=False, description="Сохранять уведомления в БД")

    # Логирование
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO", description="Уровень логирования")
    log_file: str = Field(default="logs/aha_ledger.log", description="Файл для логов")

    # Retry настройки (только для чтения с ноды)
    retry_attempts: int = Field(default=5, description="Количество повторных попыток")
    retry_delay_base: float = Field(default=1.0, description="Базовая задержка retry в секундах")

    @field_validator("token_address", "administrator_address")
    @classmethod
    def validate_address(cls, v: str) -> str:
        """Валидация Ethereum адресов"""
        if not v.startswith("0x") or len(v) != 42:
            raise ValueError(f"Неверный формат адреса: {v}")
        try:
            int(v, 16)  # Проверка на hex
        except ValueError:
            raise ValueError(f"Адрес содержит неверные hex символы: {v}")
        return v.lower()  # Приводим к нижнему регистру для консистентности

    @field_validator("rpc_url")
    @classmethod
    def validate_urls(cls, v: str) -> str:
        """Валидация URL endpoints"""
        if not v.startswith(("http://", "https://", "ws://", "wss://")):
            raise ValueError(f"Неверный формат URL: {v}")
        return v

    @field_validator("token_decimals")
    @classmethod
    def validate_decimals(cls, v: int) -> int:
        """Проверка допустимого количества decimals"""
        if v < 0 or v > 36:
            raise ValueError(f"token_decimals должен быть в диапазоне 0..36, получен {v}")
        return v

    @field_validator("minimum_membership_amount", "connection_timeout", "retry_attempts")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        """Проверка неотрицательных чисел"""
        if v < 0:
            raise ValueError(f"Значение не может быть отрицательным: {v}")
        return v

    @field_validator("retry_delay_base")
    @classmethod
    def validate_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"Задержка не может быть отрицательной: {v}")
        return v

    def is_debug(self) -> bool:
        """Проверка debug режима"""
        return self.log_level == "DEBUG"

    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


# Глобальный экземпляр настроек
settings = LedgerSettings()


def get_settings() -> LedgerSettings:
    """Получить глобальный экземпляр настроек"""
    return settings


# Функция для создания тестовых настроек
def create_test_settings(**overrides) -> LedgerSettings:
    """Создать настройки для тестирования с переопределениями"""
    test_data = {
        "database_url": "sqlite:///:memory:",
        "log_level": "DEBUG",
        **overrides
    }
    return LedgerSettings(**test_data)
