"""
AHA Time-Locked Ledger - Тестирование StakingManager
Автор: AHA Ledger Team
Версия: 1.0.0
"""

import unittest

from web3 import Web3

from config.constants import DECIMAL, PERCENT
from utils.clock import ManualClock
from utils.logger import get_logger
from core.notifications import EventType
from core.staking_manager import StakingManager, StakingStatus, DEFAULT_ADDRESSES

logger = get_logger(__name__)

ADMIN = Web3.to_checksum_address("0x" + "ad" * 20)
HOLDER = Web3.to_checksum_address("0x" + "11" * 20)


class TestStakingManager(unittest.TestCase):
    """Сборка контрактов и сводная статистика"""

    def setUp(self):
        self.clock = ManualClock()
        self.manager = StakingManager(
            administrator=ADMIN,
            clock=self.clock,
            config={'persist_events': True, 'database_url': "sqlite:///:memory:"},
        )

    def tearDown(self):
        self.manager.shutdown()

    def test_stats_require_initialization(self):
        self.assertEqual(self.manager.status, StakingStatus.INITIALIZING)
        with self.assertRaises(RuntimeError):
            self.manager.get_system_stats()

    def test_initialize(self):
        self.assertTrue(self.manager.initialize())
        status = self.manager.get_status()
        self.assertEqual(status['status'], "running")
        self.assertTrue(status['journal'])
        self.assertEqual(status['contracts']['campaigns'], Web3.to_checksum_address(DEFAULT_ADDRESSES['campaigns']))
        # Все контракты работают с одним токеном и одной шиной
        self.assertIs(self.manager.campaigns.asset, self.manager.tiered.asset)
        self.assertIs(self.manager.plans.bus, self.manager.event_bus)

    def test_system_stats(self):
        self.manager.initialize()
        token = self.manager.asset_ledger
        campaigns, plans, tiered = self.manager.campaigns, self.manager.plans, self.manager.tiered
        token.mint(ADMIN, HOLDER, 100_000 * DECIMAL)

        campaigns.create_project(ADMIN, 1, 30, 10 * PERCENT, 0, 5000 * DECIMAL)
        plans.create_plan(ADMIN, 1, 30, 5 * PERCENT, 0, 5000 * DECIMAL)
        plans.create_plan(ADMIN, 2, 60, 8 * PERCENT, 0, 5000 * DECIMAL, active=False)

        token.approve(HOLDER, campaigns.address, 1000 * DECIMAL)
        campaigns.contribute(HOLDER, 1, 1000 * DECIMAL)
        token.approve(HOLDER, plans.address, 500 * DECIMAL)
        plans.stake(HOLDER, 1, 500 * DECIMAL)
        token.approve(HOLDER, tiered.address, 30_000 * DECIMAL)
        tiered.stake(HOLDER, 30_000 * DECIMAL, 1)

        stats = self.manager.get_system_stats()
        self.assertEqual(stats.campaigns, 1)
        self.assertEqual(stats.funding_campaigns, 1)
        self.assertEqual(stats.plans, 2)
        self.assertEqual(stats.active_plans, 1)
        self.assertEqual(stats.total_committed, 1500 * DECIMAL)
        self.assertEqual(stats.open_positions, 1)
        self.assertEqual(stats.total_position_amount, 30_000 * DECIMAL)
        self.assertEqual(stats.to_dict()['status'], "running")

        journal = self.manager.history_manager
        self.assertEqual(journal.count_events(EventType.DEPOSIT_ACCEPTED), 3)
        self.assertEqual(journal.count_events(), stats.events_published)

    def test_shutdown(self):
        self.manager.initialize()
        self.manager.shutdown()
        self.assertEqual(self.manager.status, StakingStatus.STOPPED)
        self.assertIsNone(self.manager.history_manager)

    def test_initialize_without_journal(self):
        manager = StakingManager(administrator=ADMIN, clock=self.clock, config={'persist_events': False})
        self.assertTrue(manager.initialize())
        self.assertIsNone(manager.history_manager)
        self.assertEqual(manager.get_system_stats().events_published, 0)


if __name__ == "__main__":
    unittest.main(verbosity=2)
