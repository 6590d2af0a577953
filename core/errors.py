"""
Модуль: Таксономия ошибок AHA Time-Locked Ledger
Описание: Каждая ошибка несет стабильную строку причины, по которой вызывающий код может ветвиться
Автор: AHA Ledger Team
"""

# Причины отказов (стабильные строки)
REASON_NOT_OWNER = "Only contract owner can call this function"
REASON_STATUS_SAME = "Project status is already ID"
REASON_PLAN_ALREADY_ACTIVE = "Plan is already active"
REASON_PLAN_ALREADY_INACTIVE = "Plan is already inactive"
REASON_PLAN_INACTIVE = "plan is not active"
REASON_NOT_FUNDING = "project is not open for funding"
REASON_INVALID_STATUS = "invalid status"
REASON_TARGET_EXISTS = "target id already exists"
REASON_TARGET_UNKNOWN = "target does not exist"
REASON_NO_DEPOSIT = "no deposit found"
REASON_DEPOSIT_ACTIVE = "deposit already active"
REASON_ALREADY_WITHDRAWN = "already withdrawn"
REASON_NOT_ALLOCATED = "deposit not allocated"
REASON_NOT_QUEUED = "deposit is not queued"
REASON_NOT_REFUNDABLE = "project is not refundable"
REASON_BELOW_MINIMUM = "Amount is below minimum contribute"
REASON_ABOVE_MAXIMUM = "Amount exceeds maximum contribute"
REASON_INVALID_AMOUNT = "invalid amount"
REASON_EXCEEDS_CAPACITY = "Amount exceeds project capacity"
REASON_CAPACITY_BELOW_COMMITTED = "capacity below committed amount"
REASON_INVALID_BOUNDS = "invalid min/max bounds"
REASON_DURATION_NOT_PASSED = "Duration not passed"
REASON_STAKE_NOT_COMPLETED = "Stake period not yet completed"
REASON_INSUFFICIENT_MEMBERSHIP = "insufficient membership holding"
REASON_INVALID_STAKE_AMOUNT = "Invalid stake amount"
REASON_INVALID_STAKE_MONTH = "Invalid stake month"
REASON_AMOUNT_OUT_OF_RANGE = "Amount out of range"
REASON_INVALID_DURATION = "Invalid staking duration"
REASON_INVALID_TABLE = "invalid tier table"
REASON_INVALID_INDEX = "Invalid stake index"
REASON_SALE_NOT_STARTED = "Sale has not started"
REASON_SALE_ENDED = "Sale has ended"
REASON_SALE_AMOUNT = "Amount is below minimum or above maximum token price"
REASON_INVALID_PRICE = "invalid token price"
REASON_INVALID_ADDRESS = "invalid address"


class LedgerError(Exception):
    """Базовая ошибка леджера"""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class AuthorizationError(LedgerError):
    """Привилегированная операция вызвана не администратором"""
    pass


class StateError(LedgerError):
    """Недопустимый переход состояния или неверная фаза жизненного цикла"""
    pass


class RangeError(LedgerError):
    """Сумма или срок вне настроенных границ"""
    pass


class TimingError(LedgerError):
    """Срок созревания еще не наступил"""
    pass


class EligibilityError(LedgerError):
    """Не выполнен порог членства"""
    pass


class PositionIndexError(LedgerError, IndexError):
    """Неизвестный индекс позиции"""
    pass


class UpstreamTransferError(LedgerError):
    """Ошибка, пришедшая из AssetLedger (allowance, баланс), пробрасывается как есть"""
    pass
