"""
AHA Time-Locked Ledger - Contribution Campaigns

Контракт кампаний (проектов) финансирования:
- Администратор создает кампании и меняет их статус
- Простой вариант: contribute подтверждает депозит сразу
- Вариант с очередью: queue_up ставит депозит в очередь (с проверкой членства),
  allocate подтверждает очередь в пределах емкости
- Вывод principal + reward после созревания (uncontribute)
- Отмена очереди (unqueue) и возврат при NotFulfilled (refund)

Автор: AHA Ledger Team
Версия: 1.0.0
"""

from typing import Dict, List, Optional

from config.constants import EVENT_NAMES
from utils.atomic import remember_item
from utils.validators import AmountValidator, ValidationError
from core.allocation import AllocationEngine, AllocationResult
from core.contract_base import LedgerContract
from core.deposit_ledger import Campaign, DepositLedger, DepositState
from core.eligibility import EligibilityGate, build_gate
from core.errors import (
    RangeError, StateError, TimingError, LedgerError,
    REASON_TARGET_EXISTS, REASON_TARGET_UNKNOWN, REASON_NOT_FUNDING, REASON_INVALID_STATUS,
    REASON_ALREADY_WITHDRAWN, REASON_NOT_ALLOCATED, REASON_NOT_QUEUED, REASON_NOT_REFUNDABLE,
    REASON_DURATION_NOT_PASSED, REASON_INVALID_BOUNDS, REASON_CAPACITY_BELOW_COMMITTED,
    REASON_INVALID_AMOUNT,
)
from core.lifecycle import (
    CampaignStatus, parse_status, next_campaign_status,
    accepts_funding, authorizes_withdrawal, authorizes_refund,
)
from core.notifications import EventType
from core.reward_calculator import RewardEngine


class ContributionCampaigns(LedgerContract):
    """
    Контракт кампаний с немедленными и очередными депозитами.

    Политика очереди: FIFO, запись подтверждается только целиком,
    срок созревания отсчитывается от момента распределения.
    """

    def __init__(self,
                 address: str,
                 administrator: str,
                 asset_ledger,
                 event_bus=None,
                 clock=None,
                 membership_ledger=None,
                 minimum_membership_amount: int = 0,
                 reward_engine: Optional[RewardEngine] = None):
        super().__init__(address, administrator, asset_ledger, event_bus, clock)
        self.reward_engine = reward_engine or RewardEngine()
        self.projects: Dict[int, Campaign] = {}
        self.ledger = DepositLedger(self.reward_engine)
        self.allocation_engine = AllocationEngine()
        self.gate: Optional[EligibilityGate] = build_gate(membership_ledger, minimum_membership_amount)

        self.logger.info(
            f"🏗️ {self.contract_name} развернут: {self.address} "
            f"(очередь с членством: {'да' if self.gate else 'нет'})"
        )

    # --- Администрирование ------------------------------------------------

    def create_project(self,
                       caller: str,
                       project_id: int,
                       duration: int,
                       rate: int,
                       min_amount: int,
                       max_amount: int,
                       status=CampaignStatus.FUNDING,
                       capacity: Optional[int] = None) -> Campaign:
        """
        Создать кампанию.

        Args:
            caller: Адрес вызывающего (должен быть администратором)
            project_id: Уникальный ID кампании
            duration: Срок в днях
            rate: Ставка награды (доля * RATE_SCALE)
            min_amount: Минимальный депозит
            max_amount: Максимальный депозит
            status: Начальный статус (любой)
            capacity: Емкость кампании, None - без ограничения

        Returns:
            Созданная кампания
        """
        with self._operation():
            self._require_admin(caller)
            if project_id in self.projects:
                self._reject(StateError(REASON_TARGET_EXISTS), project_id=project_id)
            try:
                AmountValidator.validate_amount(duration, allow_zero=True)
                AmountValidator.validate_rate(rate)
                AmountValidator.validate_amount(min_amount, allow_zero=True)
                AmountValidator.validate_amount(max_amount)
                if capacity is not None:
                    AmountValidator.validate_amount(capacity, allow_zero=True)
            except ValidationError as e:
                self._reject(RangeError(str(e)), project_id=project_id)
            if min_amount > max_amount:
                self._reject(RangeError(REASON_INVALID_BOUNDS), min=min_amount, max=max_amount)

            project = Campaign(
                id=project_id,
                duration=duration,
                rate=rate,
                min_amount=min_amount,
                max_amount=max_amount,
                created_at=self.now(),
                status=parse_status(status),
                capacity=capacity,
            )
            remember_item(self.projects, project_id)
            self.projects[project_id] = project

            self._emit(
                EventType.TARGET_CREATED, EVENT_NAMES['project_created'],
                project_id=project_id, duration=duration, rate=rate,
                min_amount=min_amount, max_amount=max_amount,
                status=int(project.status), capacity=capacity,
            )
            self.log.log_admin_action(self.contract_name, "create_project", {
                'id': project_id, 'duration': duration, 'rate': rate, 'status': project.status.name
            })
            return project

    def change_status(self, caller: str, project_id: int, status) -> CampaignStatus:
        """Сменить статус; отказ только при переходе в текущее значение"""
        with self._operation():
            self._require_admin(caller)
            project = self._project(project_id)
            project.remember()
            old_status = project.status
            try:
                project.status = next_campaign_status(old_status, status)
            except StateError as e:
                self._reject(e, project_id=project_id, status=status)

            self._emit(
                EventType.STATUS_CHANGED, EVENT_NAMES['project_updated'],
                project_id=project_id, old_status=int(old_status), status=int(project.status),
            )
            self.log.log_status_change(self.contract_name, project_id, old_status.name, project.status.name)
            return project.status

    def set_capacity(self, caller: str, project_id: int, capacity: Optional[int]) -> None:
        """Изменить емкость; нельзя опустить ниже уже подтвержденной суммы"""
        with self._operation():
            self._require_admin(caller)
            project = self._project(project_id)
            if capacity is not None:
                try:
                    AmountValidator.validate_amount(capacity, allow_zero=True)
                except ValidationError:
                    self._reject(RangeError(REASON_INVALID_AMOUNT), capacity=capacity)
                if capacity < project.total_committed:
                    self._reject(
                        RangeError(REASON_CAPACITY_BELOW_COMMITTED),
                        capacity=capacity, committed=project.total_committed,
                    )
            project.remember()
            previous = project.capacity
            project.capacity = capacity

            self._emit(
                EventType.CAPACITY_UPDATED, EVENT_NAMES['capacity_updated'],
                project_id=project_id, previous=previous, capacity=capacity,
            )
            self.log.log_admin_action(self.contract_name, "set_capacity", {
                'id': project_id, 'previous': previous, 'capacity': capacity
            })

    def set_minimum_membership_amount(self, caller: str, amount: int) -> None:
        """Порог членства для последующих постановок в очередь"""
        with self._operation():
            self._require_admin(caller)
            if self.gate is None:
                self._reject(StateError("membership asset is not configured"))
            try:
                previous = self.gate.set_minimum(amount)
            except ValidationError:
                self._reject(RangeError(REASON_INVALID_AMOUNT), amount=amount)

            self._emit(
                EventType.MEMBERSHIP_THRESHOLD_UPDATED, EVENT_NAMES['membership_updated'],
                previous=previous, amount=amount,
            )
            self.log.log_admin_action(self.contract_name, "set_minimum_membership_amount", {
                'previous': previous, 'amount': amount
            })

    def allocate(self, caller: str, project_id: int) -> AllocationResult:
        """Подтвердить очередь кампании в пределах емкости (повторный вызов - no-op)"""
        with self._operation():
            self._require_admin(caller)
            project = self._project(project_id)
            result = self.allocation_engine.allocate(project, self.ledger, self.now())

            self._emit(
                EventType.ALLOCATION_COMPLETED, EVENT_NAMES['allocated'],
                project_id=project_id,
                holders=list(result.confirmed_holders),
                skipped=list(result.skipped_holders),
                amount=result.confirmed_amount,
                total_committed=result.total_committed,
            )
            self.log.log_allocation(
                self.contract_name, project_id, result.confirmed_count,
                len(result.skipped_holders), result.total_committed,
            )
            return result

    # --- Операции держателя -----------------------------------------------

    def contribute(self, holder: str, project_id: int, amount: int) -> None:
        """Депозит с немедленным подтверждением"""
        self._deposit(holder, project_id, amount, queued=False)

    def queue_up(self, holder: str, project_id: int, amount: int) -> None:
        """Депозит в очередь кампании; при настроенном членстве проверяется порог"""
        self._deposit(holder, project_id, amount, queued=True)

    def _deposit(self, holder: str, project_id: int, amount: int, queued: bool) -> None:
        with self._operation():
            holder = self._holder(holder)
            project = self._project(project_id)
            if not accepts_funding(project.status):
                self._reject(StateError(REASON_NOT_FUNDING), project_id=project_id, status=project.status.name)
            if isinstance(amount, bool) or not isinstance(amount, int):
                self._reject(RangeError(REASON_INVALID_AMOUNT), amount=amount)
            if queued and self.gate is not None:
                self.gate.check(holder)

            try:
                self.ledger.validate_admission(holder, project, amount, queued)
            except LedgerError as e:
                self._reject(e, holder=holder, project_id=project_id, amount=amount)

            self.ledger.record_admission(holder, project, amount, queued, self.now())
            self._pull(holder, amount)

            if queued:
                self._emit(
                    EventType.DEPOSIT_QUEUED, EVENT_NAMES['queued'],
                    holder=holder, project_id=project_id, amount=amount,
                )
            else:
                self._emit(
                    EventType.DEPOSIT_ACCEPTED, EVENT_NAMES['contributed'],
                    holder=holder, project_id=project_id, amount=amount,
                )
            self.log.log_deposit(self.contract_name, holder, project_id, amount, queued=queued)

    def uncontribute(self, holder: str, project_id: int) -> int:
        """
        Вывести principal + reward созревшего депозита.

        Returns:
            Выплаченная сумма
        """
        with self._operation():
            holder = self._holder(holder)
            project = self._project(project_id)
            record = self.ledger.get(holder, project_id)

            if record.state == DepositState.WITHDRAWN:
                self._reject(StateError(REASON_ALREADY_WITHDRAWN), holder=holder, project_id=project_id)
            if record.state == DepositState.QUEUED:
                self._reject(StateError(REASON_NOT_ALLOCATED), holder=holder, project_id=project_id)
            if record.via_queue and not authorizes_withdrawal(project.status):
                self._reject(StateError(REASON_INVALID_STATUS), project_id=project_id, status=project.status.name)

            now = self.now()
            calculation = self.reward_engine.calculate(
                record.amount, project.rate, record.start_time, project.duration_seconds, now
            )
            if not calculation.mature:
                self._reject(TimingError(REASON_DURATION_NOT_PASSED), holder=holder, project_id=project_id)

            # Запись закрывается до исходящего перевода
            self.ledger.mark_withdrawn(project, record, now, calculation.payout)
            self._push(holder, calculation.payout)

            self._emit(
                EventType.WITHDRAWAL_COMPLETED, EVENT_NAMES['uncontributed'],
                holder=holder, project_id=project_id,
                amount=calculation.principal, reward=calculation.reward,
            )
            self.log.log_withdrawal(self.contract_name, holder, project_id, calculation.principal, calculation.reward)
            return calculation.payout

    def unqueue(self, holder: str, project_id: int) -> int:
        """Забрать principal записи, оставшейся в очереди (без награды)"""
        with self._operation():
            holder = self._holder(holder)
            project = self._project(project_id)
            record = self.ledger.get(holder, project_id)
            if record.state != DepositState.QUEUED:
                self._reject(StateError(REASON_NOT_QUEUED), holder=holder, project_id=project_id)

            amount = record.amount
            self.ledger.mark_withdrawn(project, record, self.now(), amount)
            self._push(holder, amount)

            self._emit(
                EventType.DEPOSIT_REFUNDED, EVENT_NAMES['unqueued'],
                holder=holder, project_id=project_id, amount=amount,
            )
            self.logger.info(f"↩️ UNQUEUE: {holder} | Project: {project_id} | Amount: {amount}")
            return amount

    def refund(self, holder: str, project_id: int) -> int:
        """Возврат principal подтвержденного депозита кампании в статусе NotFulfilled"""
        with self._operation():
            holder = self._holder(holder)
            project = self._project(project_id)
            if not authorizes_refund(project.status):
                self._reject(StateError(REASON_NOT_REFUNDABLE), project_id=project_id, status=project.status.name)
            record = self.ledger.get(holder, project_id)
            if record.state == DepositState.WITHDRAWN:
                self._reject(StateError(REASON_ALREADY_WITHDRAWN), holder=holder, project_id=project_id)
            if record.state == DepositState.QUEUED:
                self._reject(StateError(REASON_NOT_ALLOCATED), holder=holder, project_id=project_id)

            amount = record.amount
            project.remember()
            project.total_committed -= amount
            self.ledger.mark_withdrawn(project, record, self.now(), amount)
            self._push(holder, amount)

            self._emit(
                EventType.DEPOSIT_REFUNDED, EVENT_NAMES['refunded'],
                holder=holder, project_id=project_id, amount=amount,
            )
            self.logger.info(f"↩️ REFUND: {holder} | Project: {project_id} | Amount: {amount}")
            return amount

    # --- Чтение -----------------------------------------------------------

    def get_remaining_duration(self, holder: str, project_id: int) -> int:
        """Оставшиеся дни до созревания"""
        project = self._project(project_id)
        return self.ledger.remaining_duration(self._holder(holder), project, self.now())

    def get_current_reward(self, holder: str, project_id: int) -> int:
        """0 до созревания, затем полная награда"""
        project = self._project(project_id)
        return self.ledger.current_reward(self._holder(holder), project, self.now())

    def get_user_contributed_projects(self, holder: str) -> List[int]:
        return self.ledger.list_holder_targets(self._holder(holder))

    def get_deposit(self, holder: str, project_id: int):
        return self.ledger.get(self._holder(holder), project_id)

    def get_project(self, project_id: int) -> Campaign:
        return self._project(project_id)

    def get_projects(self) -> List[Campaign]:
        return list(self.projects.values())

    def _project(self, project_id: int) -> Campaign:
        project = self.projects.get(project_id)
        if project is None:
            self._reject(StateError(REASON_TARGET_UNKNOWN), project_id=project_id)
        return project
