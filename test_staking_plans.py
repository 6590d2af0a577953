"""
AHA Time-Locked Ledger - Тестирование PlanStaking
Автор: AHA Ledger Team
Версия: 1.0.0
"""

import unittest

from web3 import Web3

from config.constants import DECIMAL, PERCENT
from utils.clock import ManualClock
from utils.logger import get_logger
from blockchain.asset_ledger import InMemoryAssetLedger
from core.errors import (
    AuthorizationError, RangeError, StateError, TimingError, UpstreamTransferError,
    REASON_NOT_OWNER, REASON_PLAN_ALREADY_ACTIVE, REASON_PLAN_ALREADY_INACTIVE, REASON_PLAN_INACTIVE,
    REASON_DURATION_NOT_PASSED, REASON_ALREADY_WITHDRAWN,
)
from core.notifications import EventBus, EventType
from core.staking_plans import PlanStaking

logger = get_logger(__name__)

ADMIN = Web3.to_checksum_address("0x" + "ad" * 20)
HOLDER = Web3.to_checksum_address("0x" + "11" * 20)
CONTRACT = Web3.to_checksum_address("0x" + "c2" * 20)

RATE = 45 * PERCENT // 10


class TestPlanStaking(unittest.TestCase):
    """Планы: создание, активация, стейк и вывод."""

    def setUp(self):
        self.clock = ManualClock()
        self.bus = EventBus()
        self.token = InMemoryAssetLedger("0x" + "a0" * 20, ADMIN)
        self.contract = PlanStaking(CONTRACT, ADMIN, self.token, self.bus, self.clock)
        self.token.mint(ADMIN, HOLDER, 5000 * DECIMAL)
        self.token.mint(ADMIN, CONTRACT, 10_000 * DECIMAL)
        self.contract.create_plan(ADMIN, 1, 30, RATE, 0, 2000 * DECIMAL)

    def _stake(self, amount, plan_id=1):
        self.token.approve(HOLDER, CONTRACT, amount)
        self.contract.stake(HOLDER, plan_id, amount)

    def test_create_plan_emits_event(self):
        event = self.bus.events_of(EventType.TARGET_CREATED)[0]
        self.assertEqual(event.name, "PlanCreated")
        self.assertTrue(self.contract.get_plan(1).active)

    def test_non_owner_cannot_create_plan(self):
        with self.assertRaises(AuthorizationError) as ctx:
            self.contract.create_plan(HOLDER, 2, 30, RATE, 0, 2000 * DECIMAL)
        self.assertEqual(ctx.exception.reason, REASON_NOT_OWNER)

    def test_toggle_to_current_state_rejected(self):
        with self.assertRaises(StateError) as ctx:
            self.contract.activate_plan(ADMIN, 1)
        self.assertEqual(ctx.exception.reason, REASON_PLAN_ALREADY_ACTIVE)

        self.contract.deactivate_plan(ADMIN, 1)
        with self.assertRaises(StateError) as ctx:
            self.contract.deactivate_plan(ADMIN, 1)
        self.assertEqual(ctx.exception.reason, REASON_PLAN_ALREADY_INACTIVE)

        self.contract.activate_plan(ADMIN, 1)
        names = [e.name for e in self.bus.events_of(EventType.STATUS_CHANGED)]
        self.assertEqual(names, ["PlanDeactivated", "PlanActivated"])

    def test_inactive_plan_refuses_stake_but_allows_withdrawal(self):
        self._stake(1000 * DECIMAL)
        self.contract.deactivate_plan(ADMIN, 1)

        self.token.approve(HOLDER, CONTRACT, 100 * DECIMAL)
        with self.assertRaises(StateError) as ctx:
            self.contract.stake(HOLDER, 1, 100 * DECIMAL)
        self.assertEqual(ctx.exception.reason, REASON_PLAN_INACTIVE)

        self.clock.advance(days=30)
        self.assertEqual(self.contract.unstake(HOLDER, 1), 1045 * DECIMAL)

    def test_stake_and_unstake_scenario(self):
        self._stake(1000 * DECIMAL)
        self.assertEqual(self.contract.get_remaining_duration(HOLDER, 1), 30)
        self.assertEqual(self.contract.get_current_reward(HOLDER, 1), 0)
        self.assertEqual(self.contract.get_user_staked_plans(HOLDER), [1])

        with self.assertRaises(TimingError) as ctx:
            self.contract.unstake(HOLDER, 1)
        self.assertEqual(ctx.exception.reason, REASON_DURATION_NOT_PASSED)

        self.clock.advance(days=30)
        self.assertEqual(self.contract.get_current_reward(HOLDER, 1), 45 * DECIMAL)
        self.assertEqual(self.contract.unstake(HOLDER, 1), 1045 * DECIMAL)
        self.assertEqual(self.token.balance_of(HOLDER), (5000 + 45) * DECIMAL)
        self.assertEqual(self.contract.get_user_staked_plans(HOLDER), [])
        self.assertEqual(self.bus.events_of(EventType.WITHDRAWAL_COMPLETED)[0].name, "Unstaked")

        with self.assertRaises(StateError) as ctx:
            self.contract.unstake(HOLDER, 1)
        self.assertEqual(ctx.exception.reason, REASON_ALREADY_WITHDRAWN)

    def test_bounds(self):
        self.contract.create_plan(ADMIN, 2, 10, RATE, 100 * DECIMAL, 200 * DECIMAL)
        self.token.approve(HOLDER, CONTRACT, 1000 * DECIMAL)
        for amount in (100 * DECIMAL - 1, 200 * DECIMAL + 1):
            with self.assertRaises(RangeError):
                self.contract.stake(HOLDER, 2, amount)
        self.contract.stake(HOLDER, 2, 200 * DECIMAL)

    def test_stake_without_allowance(self):
        with self.assertRaises(UpstreamTransferError):
            self.contract.stake(HOLDER, 1, 100 * DECIMAL)
        self.assertEqual(self.contract.get_user_staked_plans(HOLDER), [])
        self.assertEqual(self.contract.get_plan(1).total_committed, 0)

    def test_unknown_plan(self):
        with self.assertRaises(StateError):
            self.contract.stake(HOLDER, 99, 100 * DECIMAL)


if __name__ == "__main__":
    unittest.main(verbosity=2)
