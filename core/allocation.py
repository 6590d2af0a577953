"""
Модуль: AllocationEngine
Описание: Перевод очереди кампании в подтвержденные записи в пределах емкости.

Политика переполнения: FIFO по времени постановки в очередь, запись допускается
только целиком. Запись, не помещающаяся в остаток емкости, остается в очереди
(частичного заполнения нет), держатель может забрать ее через unqueue.
Срок созревания подтвержденной записи отсчитывается от момента распределения.
Автор: AHA Ledger Team
"""

from dataclasses import dataclass, field
from typing import List

from utils.logger import get_logger
from core.deposit_ledger import Campaign, DepositLedger

logger = get_logger("AllocationEngine")


@dataclass
class AllocationResult:
    """Результат распределения очереди"""
    campaign_id: int
    confirmed_holders: List[str] = field(default_factory=list)
    skipped_holders: List[str] = field(default_factory=list)
    confirmed_amount: int = 0
    total_committed: int = 0

    @property
    def confirmed_count(self) -> int:
        return len(self.confirmed_holders)

    @property
    def is_noop(self) -> bool:
        return not self.confirmed_holders


class AllocationEngine:
    """Двухфазная фиксация: очередь → подтверждение до емкости"""

    def allocate(self, campaign: Campaign, ledger: DepositLedger, now: int) -> AllocationResult:
        result = AllocationResult(campaign_id=campaign.id)

        for record in ledger.queued_records(campaign.id):
            remaining = campaign.remaining_capacity()
            if remaining is not None and record.amount > remaining:
                result.skipped_holders.append(record.holder)
                logger.debug(
                    f"⏭️ {record.holder}: {record.amount} не помещается в остаток {remaining}"
                )
                continue
            ledger.confirm(campaign, record, now)
            result.confirmed_holders.append(record.holder)
            result.confirmed_amount += record.amount

        result.total_committed = campaign.total_committed
        return result
