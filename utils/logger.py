"""
Модуль: Система логирования для AHA Time-Locked Ledger
Описание: Настройка логирования с ротацией файлов и форматированием
Зависимости: logging, pathlib
Автор: AHA Ledger Team
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

from config.settings import settings


class ColoredFormatter(logging.Formatter):
    """Цветной форматтер для консольного вывода"""

    # Цветовые коды ANSI
    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m'  # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        # Копия записи, чтобы цвет не попадал в файловый хендлер
        record = logging.makeLogRecord(record.__dict__)
        log_color = self.COLORS.get(record.levelname, self.RESET)
        record.levelname = f"{log_color}{record.levelname}{self.RESET}"
        return super().format(record)


class LedgerLogger:
    """Централизованная система логирования для AHA Time-Locked Ledger"""

    def __init__(self, name: str = "AHA_Ledger", log_file: Optional[str] = None):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, settings.log_level))

        # Предотвращаем дублирование хендлеров
        if self.logger.handlers:
            return

        # Создаем директорию для логов
        log_file = log_file or settings.log_file
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        # Форматтеры
        file_formatter = logging.Formatter(
            fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        console_formatter = ColoredFormatter(
            fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
            datefmt='%H:%M:%S'
        )

        # Файловый хендлер с ротацией
        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_path,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setFormatter(file_formatter)
        file_handler.setLevel(logging.DEBUG)

        # Консольный хендлер
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(console_formatter)
        console_handler.setLevel(getattr(logging, settings.log_level))

        self.logger.addHandler(file_handler)
        self.logger.addHandler(console_handler)
        self.logger.propagate = False

    def get_logger(self) -> logging.Logger:
        """Получить настроенный логгер"""
        return self.logger

    def log_deposit(self, contract: str, holder: str, target_id: int, amount: int, queued: bool = False):
        """Логирование принятого депозита"""
        kind = "QUEUED" if queued else "DEPOSIT"
        self.logger.info(f"📥 {kind}: {contract} | Holder: {holder} | Target: {target_id} | Amount: {amount}")

    def log_withdrawal(self, contract: str, holder: str, target_id: int, principal: int, reward: int):
        """Логирование вывода средств"""
        self.logger.info(
            f"💰 WITHDRAW: {contract} | Holder: {holder} | Target: {target_id} | "
            f"Principal: {principal} | Reward: {reward}"
        )

    def log_status_change(self, contract: str, target_id: int, old_status: str, new_status: str):
        """Логирование смены статуса кампании или плана"""
        self.logger.warning(f"📊 STATUS: {contract} | Target: {target_id} | {old_status} → {new_status}")

    def log_admin_action(self, contract: str, action: str, details: dict):
        """Логирование административных операций"""
        self.logger.info(f"🛠️ ADMIN: {contract} | {action} | {details}")

    def log_allocation(self, contract: str, campaign_id: int, confirmed: int, skipped: int, total: int):
        """Логирование распределения очереди"""
        self.logger.info(
            f"📦 ALLOCATION: {contract} | Campaign: {campaign_id} | Confirmed: {confirmed} | "
            f"Left queued: {skipped} | Committed amount: {total}"
        )


def get_logger(name: str) -> logging.Logger:
    """Получить логгер для конкретного модуля"""
    module_logger = LedgerLogger(f"AHA_{name}")
    return module_logger.get_logger()


def get_ledger_logger(name: str) -> LedgerLogger:
    """Получить логгер со специализированными методами леджера"""
    return LedgerLogger(f"AHA_{name}")


def setup_logging_for_external_libs():
    """Настройка логирования для внешних библиотек"""
    # Устанавливаем уровень WARNING для шумных библиотек
    noisy_loggers = ['urllib3', 'requests', 'web3', 'sqlalchemy.engine']

    for logger_name in noisy_loggers:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


# Инициализация при импорте
setup_logging_for_external_libs()
