"""
AHA Time-Locked Ledger - Plan Staking

Стейкинг по планам с фиксированным сроком и ставкой:
- Администратор создает, активирует и деактивирует планы
- Держатель стейкает в активный план (одна открытая запись на план)
- Вывод principal + reward после созревания; деактивация плана вывод не блокирует

Автор: AHA Ledger Team
Версия: 1.0.0
"""

from typing import Dict, List, Optional

from config.constants import EVENT_NAMES
from utils.atomic import remember_item
from utils.validators import AmountValidator, ValidationError
from core.contract_base import LedgerContract
from core.deposit_ledger import DepositLedger, DepositState, Plan
from core.errors import (
    RangeError, StateError, TimingError, LedgerError,
    REASON_TARGET_EXISTS, REASON_TARGET_UNKNOWN, REASON_PLAN_INACTIVE, REASON_ALREADY_WITHDRAWN,
    REASON_DURATION_NOT_PASSED, REASON_INVALID_BOUNDS, REASON_INVALID_AMOUNT,
)
from core.lifecycle import next_plan_state
from core.notifications import EventType
from core.reward_calculator import RewardEngine


class PlanStaking(LedgerContract):
    """Контракт стейкинга по планам"""

    def __init__(self,
                 address: str,
                 administrator: str,
                 asset_ledger,
                 event_bus=None,
                 clock=None,
                 reward_engine: Optional[RewardEngine] = None):
        super().__init__(address, administrator, asset_ledger, event_bus, clock)
        self.reward_engine = reward_engine or RewardEngine()
        self.plans: Dict[int, Plan] = {}
        self.ledger = DepositLedger(self.reward_engine)

        self.logger.info(f"🏗️ {self.contract_name} развернут: {self.address}")

    # --- Администрирование ------------------------------------------------

    def create_plan(self, caller: str, plan_id: int, duration: int, rate: int,
                    min_amount: int, max_amount: int, active: bool = True) -> Plan:
        """Создать план (срок в днях, ставка - доля * RATE_SCALE)"""
        with self._operation():
            self._require_admin(caller)
            if plan_id in self.plans:
                self._reject(StateError(REASON_TARGET_EXISTS), plan_id=plan_id)
            try:
                AmountValidator.validate_amount(duration, allow_zero=True)
                AmountValidator.validate_rate(rate)
                AmountValidator.validate_amount(min_amount, allow_zero=True)
                AmountValidator.validate_amount(max_amount)
            except ValidationError as e:
                self._reject(RangeError(str(e)), plan_id=plan_id)
            if min_amount > max_amount:
                self._reject(RangeError(REASON_INVALID_BOUNDS), min=min_amount, max=max_amount)

            plan = Plan(
                id=plan_id,
                duration=duration,
                rate=rate,
                min_amount=min_amount,
                max_amount=max_amount,
                created_at=self.now(),
                active=bool(active),
            )
            remember_item(self.plans, plan_id)
            self.plans[plan_id] = plan

            self._emit(
                EventType.TARGET_CREATED, EVENT_NAMES['plan_created'],
                plan_id=plan_id, duration=duration, rate=rate,
                min_amount=min_amount, max_amount=max_amount, active=plan.active,
            )
            self.log.log_admin_action(self.contract_name, "create_plan", {
                'id': plan_id, 'duration': duration, 'rate': rate, 'active': plan.active
            })
            return plan

    def activate_plan(self, caller: str, plan_id: int) -> None:
        self._set_plan_state(caller, plan_id, True)

    def deactivate_plan(self, caller: str, plan_id: int) -> None:
        self._set_plan_state(caller, plan_id, False)

    def _set_plan_state(self, caller: str, plan_id: int, active: bool) -> None:
        with self._operation():
            self._require_admin(caller)
            plan = self._plan(plan_id)
            plan.remember()
            try:
                plan.active = next_plan_state(plan.active, active)
            except StateError as e:
                self._reject(e, plan_id=plan_id)

            name = EVENT_NAMES['plan_activated'] if active else EVENT_NAMES['plan_deactivated']
            self._emit(EventType.STATUS_CHANGED, name, plan_id=plan_id, active=active)
            self.log.log_status_change(
                self.contract_name, plan_id,
                "Inactive" if active else "Active", "Active" if active else "Inactive",
            )

    # --- Операции держателя -----------------------------------------------

    def stake(self, holder: str, plan_id: int, amount: int) -> None:
        """Стейк в активный план, подтверждается сразу"""
        with self._operation():
            holder = self._holder(holder)
            plan = self._plan(plan_id)
            if not plan.active:
                self._reject(StateError(REASON_PLAN_INACTIVE), plan_id=plan_id)
            if isinstance(amount, bool) or not isinstance(amount, int):
                self._reject(RangeError(REASON_INVALID_AMOUNT), amount=amount)
            try:
                self.ledger.validate_admission(holder, plan, amount, queued=False)
            except LedgerError as e:
                self._reject(e, holder=holder, plan_id=plan_id, amount=amount)

            self.ledger.record_admission(holder, plan, amount, False, self.now())
            self._pull(holder, amount)

            self._emit(
                EventType.DEPOSIT_ACCEPTED, EVENT_NAMES['staked'],
                holder=holder, plan_id=plan_id, amount=amount,
            )
            self.log.log_deposit(self.contract_name, holder, plan_id, amount)

    def unstake(self, holder: str, plan_id: int) -> int:
        """Вывести principal + reward; возвращает выплаченную сумму"""
        with self._operation():
            holder = self._holder(holder)
            plan = self._plan(plan_id)
            record = self.ledger.get(holder, plan_id)
            if record.state == DepositState.WITHDRAWN:
                self._reject(StateError(REASON_ALREADY_WITHDRAWN), holder=holder, plan_id=plan_id)

            now = self.now()
            calculation = self.reward_engine.calculate(
                record.amount, plan.rate, record.start_time, plan.duration_seconds, now
            )
            if not calculation.mature:
                self._reject(TimingError(REASON_DURATION_NOT_PASSED), holder=holder, plan_id=plan_id)

            self.ledger.mark_withdrawn(plan, record, now, calculation.payout)
            self._push(holder, calculation.payout)

            self._emit(
                EventType.WITHDRAWAL_COMPLETED, EVENT_NAMES['unstaked'],
                holder=holder, plan_id=plan_id,
                amount=calculation.principal, reward=calculation.reward,
            )
            self.log.log_withdrawal(self.contract_name, holder, plan_id, calculation.principal, calculation.reward)
            return calculation.payout

    # --- Чтение -----------------------------------------------------------

    def get_remaining_duration(self, holder: str, plan_id: int) -> int:
        return self.ledger.remaining_duration(self._holder(holder), self._plan(plan_id), self.now())

    def get_current_reward(self, holder: str, plan_id: int) -> int:
        return self.ledger.current_reward(self._holder(holder), self._plan(plan_id), self.now())

    def get_user_staked_plans(self, holder: str) -> List[int]:
        return self.ledger.list_holder_targets(self._holder(holder))

    def get_plan(self, plan_id: int) -> Plan:
        return self._plan(plan_id)

    def get_plans(self) -> List[Plan]:
        return list(self.plans.values())

    def _plan(self, plan_id: int) -> Plan:
        plan = self.plans.get(plan_id)
        if plan is None:
            self._reject(StateError(REASON_TARGET_UNKNOWN), plan_id=plan_id)
        return plan
