"""
AHA Time-Locked Ledger - Staking Manager
Главный оркестратор контрактов леджера.

Собирает кампании, планы и стейкинг по таблице над одним AssetLedger,
одной шиной уведомлений и одними часами; при включенном persist_events
подключает журнал уведомлений в БД.

Автор: AHA Ledger Team
Версия: 1.0.0
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Callable, Dict, Optional

from config.settings import get_settings
from utils.clock import SystemClock
from utils.logger import get_logger
from utils.validators import validate_address
from blockchain.asset_ledger import InMemoryAssetLedger
from core.contribute import ContributionCampaigns
from core.lifecycle import accepts_funding
from core.notifications import EventBus
from core.staking_plans import PlanStaking
from core.tiered_staking import TieredStaking

logger = get_logger(__name__)

# Адреса контрактов по умолчанию для процессного развертывания
DEFAULT_ADDRESSES = {
    'token': "0x" + "a0" * 20,
    'campaigns': "0x" + "c1" * 20,
    'plans': "0x" + "c2" * 20,
    'tiered': "0x" + "c3" * 20,
}


class StakingStatus(Enum):
    """Статусы системы стейкинга."""
    INITIALIZING = "initializing"
    RUNNING = "running"
    ERROR = "error"
    STOPPED = "stopped"


@dataclass
class SystemStats:
    """Статистика системы стейкинга."""
    campaigns: int
    funding_campaigns: int
    plans: int
    active_plans: int
    total_committed: int
    total_queued: int
    open_positions: int
    total_position_amount: int
    events_published: int
    last_update: int
    status: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class StakingManager:
    """
    Главный оркестратор леджера.

    Координирует:
    - Контракты кампаний, планов и стейкинга по таблице
    - Общую шину уведомлений и журнал в БД
    - Статистику системы
    """

    def __init__(self,
                 administrator: Optional[str] = None,
                 asset_ledger=None,
                 membership_ledger=None,
                 clock: Optional[Callable[[], int]] = None,
                 config: Optional[Dict[str, Any]] = None,
                 db_manager=None):
        """
        Args:
            administrator: Адрес администратора (по умолчанию из настроек)
            asset_ledger: AssetLedger основного токена (по умолчанию токен в памяти)
            membership_ledger: AssetLedger membership токена для очереди кампаний
            clock: Источник времени
            config: Переопределения адресов и настроек
            db_manager: DatabaseManager журнала (создается при persist_events)
        """
        self.settings = get_settings()
        self.config = config or {}
        self.status = StakingStatus.INITIALIZING

        self.administrator = validate_address(administrator or self.settings.administrator_address)
        self.clock = clock or SystemClock()
        self.event_bus = EventBus()
        self.asset_ledger = asset_ledger
        self.membership_ledger = membership_ledger
        self.db_manager = db_manager

        self.campaigns: Optional[ContributionCampaigns] = None
        self.plans: Optional[PlanStaking] = None
        self.tiered: Optional[TieredStaking] = None
        self.history_manager = None

        logger.info("🚀 StakingManager инициализирован")

    def _address(self, key: str) -> str:
        return self.config.get(f'{key}_address', DEFAULT_ADDRESSES[key])

    def initialize(self) -> bool:
        """
        Развернуть контракты и подключить журнал.

        Returns:
            bool: True если инициализация успешна
        """
        try:
            logger.info("🔧 Начинаем инициализацию системы...")

            if self.asset_ledger is None:
                self.asset_ledger = InMemoryAssetLedger(self._address('token'), self.administrator)

            self.campaigns = ContributionCampaigns(
                self._address('campaigns'), self.administrator, self.asset_ledger,
                self.event_bus, self.clock,
                membership_ledger=self.membership_ledger,
                minimum_membership_amount=self.config.get(
                    'minimum_membership_amount', self.settings.minimum_membership_amount
                ),
            )
            self.plans = PlanStaking(
                self._address('plans'), self.administrator, self.asset_ledger, self.event_bus, self.clock
            )
            self.tiered = TieredStaking(
                self._address('tiered'), self.administrator, self.asset_ledger, self.event_bus, self.clock
            )

            if self.config.get('persist_events', self.settings.persist_events):
                self._initialize_history()

            self.status = StakingStatus.RUNNING
            logger.info("✅ Система успешно инициализирована")
            return True
        except Exception as e:
            logger.error(f"❌ Ошибка инициализации системы: {e}")
            self.status = StakingStatus.ERROR
            return False

    def _initialize_history(self) -> None:
        # db импортируется только при включенном журнале
        from db.database import DatabaseManager
        from db.history_manager import HistoryManager

        if self.db_manager is None:
            self.db_manager = DatabaseManager(self.config.get('database_url'))
        self.history_manager = HistoryManager(self.event_bus, self.db_manager)
        logger.info("💾 Журнал уведомлений подключен")

    def get_system_stats(self) -> SystemStats:
        """Сводная статистика по всем контрактам"""
        if self.status != StakingStatus.RUNNING:
            raise RuntimeError("Система не инициализирована")

        projects = self.campaigns.get_projects()
        plans = self.plans.get_plans()
        registry = self.tiered.registry
        open_positions = [
            p for holder in registry.holders() for p in registry.open_positions(holder)
        ]

        return SystemStats(
            campaigns=len(projects),
            funding_campaigns=sum(1 for p in projects if accepts_funding(p.status)),
            plans=len(plans),
            active_plans=sum(1 for p in plans if p.active),
            total_committed=sum(p.total_committed for p in projects) + sum(p.total_committed for p in plans),
            total_queued=sum(p.total_queued for p in projects),
            open_positions=len(open_positions),
            total_position_amount=registry.total_staked(),
            events_published=len(self.event_bus.events),
            last_update=int(self.clock()),
            status=self.status.value,
        )

    def get_status(self) -> Dict[str, Any]:
        """Состояние системы и адреса контрактов"""
        contracts = {}
        if self.status == StakingStatus.RUNNING:
            contracts = {
                'token': self.asset_ledger.address,
                'campaigns': self.campaigns.address,
                'plans': self.plans.address,
                'tiered': self.tiered.address,
            }
        return {
            'status': self.status.value,
            'administrator': self.administrator,
            'contracts': contracts,
            'journal': self.history_manager is not None,
        }

    def shutdown(self) -> None:
        """Отключить журнал и закрыть БД"""
        if self.history_manager is not None:
            self.history_manager.close()
            self.history_manager = None
        if self.db_manager is not None:
            self.db_manager.close()
        self.status = StakingStatus.STOPPED
        logger.info("🔒 StakingManager остановлен")
