"""
Скрипт: Инициализация базы данных AHA Time-Locked Ledger
Описание: Создание таблиц журнала уведомлений
Автор: AHA Ledger Team
"""

import sys
from pathlib import Path
sys.path.append(str(Path(__file__).parent.parent))

from config.settings import settings
from db.database import DatabaseManager
from utils.logger import get_logger

logger = get_logger("DatabaseInit")


def init_database(database_url: str = None) -> bool:
    """Создать таблицы журнала и проверить подключение"""
    logger.info("🗄️ Инициализация базы данных...")

    db_manager = DatabaseManager(database_url or settings.database_url)
    if not db_manager.initialize_sync():
        logger.error("❌ Ошибка инициализации БД")
        return False

    db_manager.close()
    logger.info("✅ База данных инициализирована")
    return True


if __name__ == "__main__":
    success = init_database(sys.argv[1] if len(sys.argv) > 1 else None)
    sys.exit(0 if success else 1)
