"""
AHA Time-Locked Ledger - Тестирование отката между контрактами
Кампания и план работают с одним токеном; операции плана, вызванные
из хука получателя, откатываются вместе с внешней операцией кампании.
Автор: AHA Ledger Team
Версия: 1.0.0
"""

import unittest

from web3 import Web3

from config.constants import DECIMAL, EVENT_NAMES, PERCENT
from utils.atomic import atomic_scope
from utils.clock import ManualClock
from utils.logger import get_logger
from blockchain.asset_ledger import InMemoryAssetLedger
from core.contribute import ContributionCampaigns
from core.deposit_ledger import DepositState
from core.errors import RangeError, StateError, REASON_NO_DEPOSIT
from core.notifications import EventBus, EventType
from core.staking_plans import PlanStaking

logger = get_logger(__name__)

ADMIN = Web3.to_checksum_address("0x" + "ad" * 20)
HOLDER = Web3.to_checksum_address("0x" + "11" * 20)
CAMPAIGNS = Web3.to_checksum_address("0x" + "c1" * 20)
PLANS = Web3.to_checksum_address("0x" + "c2" * 20)
TOKEN = "0x" + "a0" * 20


class TestCrossContractRollback(unittest.TestCase):
    """Откат вложенных операций другого контракта"""

    def setUp(self):
        self.clock = ManualClock()
        self.bus = EventBus()
        self.token = InMemoryAssetLedger(TOKEN, ADMIN)
        self.campaigns = ContributionCampaigns(CAMPAIGNS, ADMIN, self.token, self.bus, self.clock)
        self.plans = PlanStaking(PLANS, ADMIN, self.token, self.bus, self.clock)

        self.token.mint(ADMIN, HOLDER, 1000 * DECIMAL)
        self.token.mint(ADMIN, CAMPAIGNS, 10_000 * DECIMAL)
        self.token.mint(ADMIN, PLANS, 10_000 * DECIMAL)

        self.campaigns.create_project(ADMIN, 1, 30, 10 * PERCENT, 0, 5000 * DECIMAL)
        self.plans.create_plan(ADMIN, 7, 30, 5 * PERCENT, 0, 5000 * DECIMAL)
        self.token.approve(HOLDER, CAMPAIGNS, 1000 * DECIMAL)
        self.campaigns.contribute(HOLDER, 1, 1000 * DECIMAL)
        self.clock.advance(days=30)

    def tearDown(self):
        self.token.clear_receive_hooks()

    def _restake(self, ledger, sender, recipient, amount):
        ledger.approve(HOLDER, PLANS, 1000 * DECIMAL)
        self.plans.stake(HOLDER, 7, 1000 * DECIMAL)

    @staticmethod
    def _explode(ledger, sender, recipient, amount):
        raise RuntimeError("holder rejects transfer")

    def test_nested_stake_rolled_back_with_failed_withdrawal(self):
        self.token.register_receive_hook(HOLDER, self._restake)
        self.token.register_receive_hook(HOLDER, self._explode)

        with self.assertRaises(RuntimeError):
            self.campaigns.uncontribute(HOLDER, 1)

        # План не получил ни записи, ни средств
        self.assertEqual(self.plans.get_user_staked_plans(HOLDER), [])
        self.assertEqual(self.plans.get_plan(7).total_committed, 0)
        with self.assertRaises(StateError) as ctx:
            self.plans.get_current_reward(HOLDER, 7)
        self.assertEqual(ctx.exception.reason, REASON_NO_DEPOSIT)
        self.assertEqual(self.token.balance_of(PLANS), 10_000 * DECIMAL)
        self.assertEqual(self.token.allowance(HOLDER, PLANS), 0)

        # Кампания и баланс держателя как до вызова
        self.assertEqual(self.campaigns.get_deposit(HOLDER, 1).state, DepositState.CONFIRMED)
        self.assertEqual(self.token.balance_of(HOLDER), 0)
        self.assertEqual(self.token.balance_of(CAMPAIGNS), 11_000 * DECIMAL)
        self.assertEqual(self.bus.events_named(EVENT_NAMES['staked']), [])
        self.assertEqual(self.bus.events_of(EventType.WITHDRAWAL_COMPLETED), [])

        # После снятия хуков обе операции проходят
        self.token.clear_receive_hooks(HOLDER)
        self.assertEqual(self.campaigns.uncontribute(HOLDER, 1), 1100 * DECIMAL)
        self.token.approve(HOLDER, PLANS, 1000 * DECIMAL)
        self.plans.stake(HOLDER, 7, 1000 * DECIMAL)
        self.assertEqual(self.plans.get_user_staked_plans(HOLDER), [7])
        self.assertEqual(self.token.balance_of(PLANS), 11_000 * DECIMAL)

    def test_notifications_of_other_bus_discarded(self):
        plan_bus = EventBus()
        plans = PlanStaking("0x" + "c3" * 20, ADMIN, self.token, plan_bus, self.clock)
        plans.create_plan(ADMIN, 7, 30, 5 * PERCENT, 0, 5000 * DECIMAL)
        published = []
        plan_bus.subscribe(published.append)

        def restake(ledger, sender, recipient, amount):
            ledger.approve(HOLDER, plans.address, 1000 * DECIMAL)
            plans.stake(HOLDER, 7, 1000 * DECIMAL)

        self.token.register_receive_hook(HOLDER, restake)
        self.token.register_receive_hook(HOLDER, self._explode)
        with self.assertRaises(RuntimeError):
            self.campaigns.uncontribute(HOLDER, 1)

        self.assertEqual([e.name for e in plan_bus.events], [EVENT_NAMES['plan_created']])
        self.assertEqual(published, [])
        self.assertEqual(plans.get_user_staked_plans(HOLDER), [])

    def test_successful_nested_stake_committed(self):
        self.token.register_receive_hook(HOLDER, self._restake)

        self.assertEqual(self.campaigns.uncontribute(HOLDER, 1), 1100 * DECIMAL)

        self.assertEqual(self.plans.get_user_staked_plans(HOLDER), [7])
        self.assertEqual(self.token.balance_of(HOLDER), 100 * DECIMAL)
        self.assertEqual(self.token.balance_of(PLANS), 11_000 * DECIMAL)
        # Вложенное уведомление выпущено раньше внешнего
        names = [e.name for e in self.bus.events[-2:]]
        self.assertEqual(names, [EVENT_NAMES['staked'], EVENT_NAMES['uncontributed']])

    def test_caught_nested_failure_keeps_outer_operation(self):
        rejected = []

        def oversized_stake(ledger, sender, recipient, amount):
            ledger.approve(HOLDER, PLANS, 6000 * DECIMAL)
            try:
                self.plans.stake(HOLDER, 7, 6000 * DECIMAL)
            except RangeError as e:
                rejected.append(e.reason)

        self.token.register_receive_hook(HOLDER, oversized_stake)
        self.assertEqual(self.campaigns.uncontribute(HOLDER, 1), 1100 * DECIMAL)

        self.assertEqual(len(rejected), 1)
        self.assertEqual(self.campaigns.get_deposit(HOLDER, 1).state, DepositState.WITHDRAWN)
        self.assertEqual(self.token.balance_of(HOLDER), 1100 * DECIMAL)
        # approve внутри хука прошел вне отказавшей операции плана
        self.assertEqual(self.token.allowance(HOLDER, PLANS), 6000 * DECIMAL)


class TestUndoLogScope(unittest.TestCase):
    """Журнал отката хранит только затронутые операцией записи"""

    def test_entries_do_not_grow_with_ledger_size(self):
        clock = ManualClock()
        token = InMemoryAssetLedger(TOKEN, ADMIN)
        contract = ContributionCampaigns(CAMPAIGNS, ADMIN, token, EventBus(), clock)
        contract.create_project(ADMIN, 1, 30, 10 * PERCENT, 0, 5000 * DECIMAL)

        holders = [Web3.to_checksum_address("0x" + f"{i + 1:040x}") for i in range(50)]
        for holder in holders:
            token.mint(ADMIN, holder, 100 * DECIMAL)
            token.approve(holder, CAMPAIGNS, 100 * DECIMAL)
            contract.contribute(holder, 1, 100 * DECIMAL)

        token.mint(ADMIN, HOLDER, 100 * DECIMAL)
        token.approve(HOLDER, CAMPAIGNS, 100 * DECIMAL)
        with atomic_scope() as log:
            contract.contribute(HOLDER, 1, 100 * DECIMAL)
            touched = len(log.entries)

        self.assertLess(touched, 20)
        self.assertEqual(contract.get_project(1).total_committed, 51 * 100 * DECIMAL)


if __name__ == "__main__":
    unittest.main(verbosity=2)
