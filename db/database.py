"""
AHA Time-Locked Ledger - Database Connection
Модуль для подключения к базе данных и управления сессиями.

Автор: AHA Ledger Team
Версия: 1.0.0
"""

from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, Engine, text
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from utils.logger import get_logger
from config.settings import get_settings
from db.models import Base

logger = get_logger(__name__)


class DatabaseManager:
    """
    Менеджер базы данных журнала уведомлений.

    Функциональность:
    - Синхронное подключение (SQLite или PostgreSQL)
    - Автоматическое создание таблиц
    - Сессии с commit/rollback через контекстный менеджер
    """

    def __init__(self, database_url: Optional[str] = None):
        """
        Args:
            database_url: URL базы данных (если не указан, берется из настроек)
        """
        self.settings = get_settings()
        self.database_url = database_url or self.settings.database_url

        self.sync_engine: Optional[Engine] = None
        self.sync_session_factory: Optional[sessionmaker] = None
        self.is_initialized = False

        logger.info(f"📊 DatabaseManager инициализирован для: {self._mask_db_url()}")

    def _mask_db_url(self) -> str:
        """Маскирование URL БД для логов."""
        if '@' in self.database_url:
            scheme, rest = self.database_url.split('://', 1)
            return f"{scheme}://***@{rest.split('@', 1)[1]}"
        return self.database_url[:50] + "..." if len(self.database_url) > 50 else self.database_url

    def initialize_sync(self) -> bool:
        """
        Инициализация синхронного подключения к БД.

        Returns:
            bool: True если инициализация успешна
        """
        try:
            logger.info("🔧 Инициализация подключения к БД...")

            if self.database_url.startswith('sqlite'):
                # StaticPool держит одно соединение: нужно для sqlite :memory:
                self.sync_engine = create_engine(
                    self.database_url,
                    poolclass=StaticPool,
                    connect_args={'check_same_thread': False, 'timeout': 30},
                    echo=self.settings.debug_sql
                )
            else:
                self.sync_engine = create_engine(
                    self.database_url,
                    pool_size=10,
                    max_overflow=20,
                    pool_pre_ping=True,
                    pool_recycle=3600,
                    echo=self.settings.debug_sql
                )

            self.sync_session_factory = sessionmaker(
                bind=self.sync_engine,
                autocommit=False,
                autoflush=False,
                expire_on_commit=False
            )

            Base.metadata.create_all(bind=self.sync_engine)
            with self.sync_session_factory() as session:
                session.execute(text('SELECT 1'))

            self.is_initialized = True
            logger.info("✅ Подключение к БД успешно инициализировано")
            return True

        except Exception as e:
            logger.error(f"❌ Ошибка инициализации подключения: {e}")
            return False

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """Сессия БД: commit при успехе, rollback при ошибке"""
        if not self.is_initialized or not self.sync_session_factory:
            raise RuntimeError("БД не инициализирована")

        session = self.sync_session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self) -> None:
        """Закрытие соединений."""
        if self.sync_engine:
            self.sync_engine.dispose()
            self.sync_engine = None
        self.sync_session_factory = None
        self.is_initialized = False
        logger.info("🔒 Соединения с БД закрыты")


__all__ = [
    'DatabaseManager'
]
