"""
Модуль: LifecycleStateMachine
Описание: Статусы кампаний и планов. Машина состояний свободная: единственное
правило - нельзя перейти в текущее значение. Терминальные статусы не блокируют
дальнейшие переходы по решению администратора.
Автор: AHA Ledger Team
"""

from enum import IntEnum
from typing import FrozenSet

from core.errors import (
    StateError,
    REASON_STATUS_SAME, REASON_PLAN_ALREADY_ACTIVE, REASON_PLAN_ALREADY_INACTIVE,
)


class CampaignStatus(IntEnum):
    """Статусы кампании (значения совпадают с исходным контрактом)"""
    FROZEN = 0
    FUNDING = 1
    FULFILLED = 2
    NOT_FULFILLED = 3
    FINISHED = 4


# Статусы, в которых кампания принимает депозиты
FUNDING_STATUSES: FrozenSet[CampaignStatus] = frozenset({CampaignStatus.FUNDING})

# Статусы, разрешающие вывод распределенных (ранее поставленных в очередь) депозитов
WITHDRAWAL_STATUSES: FrozenSet[CampaignStatus] = frozenset({
    CampaignStatus.FULFILLED,
    CampaignStatus.FINISHED,
})

# Статусы, в которых подтвержденные депозиты возвращаются без награды
REFUND_STATUSES: FrozenSet[CampaignStatus] = frozenset({CampaignStatus.NOT_FULFILLED})


def parse_status(value) -> CampaignStatus:
    """Принять CampaignStatus, число или имя"""
    if isinstance(value, CampaignStatus):
        return value
    if isinstance(value, str):
        try:
            return CampaignStatus[value.upper()]
        except KeyError:
            raise StateError(f"unknown status {value}") from None
    try:
        return CampaignStatus(int(value))
    except (TypeError, ValueError):
        raise StateError(f"unknown status {value}") from None


def next_campaign_status(current: CampaignStatus, requested) -> CampaignStatus:
    """Проверить переход статуса кампании; любой переход, кроме no-op, разрешен"""
    new_status = parse_status(requested)
    if new_status == current:
        raise StateError(REASON_STATUS_SAME)
    return new_status


def next_plan_state(active: bool, requested_active: bool) -> bool:
    """Проверить переключение Active/Inactive плана"""
    if active == requested_active:
        raise StateError(REASON_PLAN_ALREADY_ACTIVE if active else REASON_PLAN_ALREADY_INACTIVE)
    return requested_active


def accepts_funding(status: CampaignStatus) -> bool:
    return status in FUNDING_STATUSES


def authorizes_withdrawal(status: CampaignStatus) -> bool:
    return status in WITHDRAWAL_STATUSES


def authorizes_refund(status: CampaignStatus) -> bool:
    return status in REFUND_STATUSES
