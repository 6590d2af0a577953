"""
Модуль: Константы проекта AHA Time-Locked Ledger
Описание: Масштабы фиксированной точки, временные единицы и таблица ставок по умолчанию
Автор: AHA Ledger Team
"""

import os
from typing import Final, List, Tuple

# 🏗️ Системные константы
BASE_DIR: Final[str] = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# 🚫 ОБЯЗАТЕЛЬНЫЕ КОНСТАНТЫ ПРОЕКТА - НЕ ИЗМЕНЯЙ!
TOKEN_NAME: Final[str] = "AHA Token"
TOKEN_SYMBOL: Final[str] = "tAHA"
TOKEN_DECIMALS: Final[int] = 18
DECIMAL: Final[int] = 10 ** TOKEN_DECIMALS  # 1 токен в минимальных единицах

# Масштаб ставок: все ставки - доли, умноженные на RATE_SCALE (4.5% = 45 * 10**15)
RATE_SCALE: Final[int] = 10 ** 18
PERCENT: Final[int] = RATE_SCALE // 100

# Временные единицы
SECONDS_PER_DAY: Final[int] = 86_400
DAYS_PER_MONTH: Final[int] = 30
SECONDS_PER_MONTH: Final[int] = DAYS_PER_MONTH * SECONDS_PER_DAY

# Нулевой адрес
ZERO_ADDRESS: Final[str] = "0x0000000000000000000000000000000000000000"

# Размерность таблицы ставок
TIER_COUNT: Final[int] = 6
DURATION_COUNT: Final[int] = 6

# Неограниченный верхний предел суммы (uint256 max)
MAX_UINT256: Final[int] = 2 ** 256 - 1

# Варианты срока стейкинга в месяцах (0 - гибкий)
DEFAULT_STAKE_MONTHS: Final[List[int]] = [0, 1, 3, 6, 12, 24]

# Границы тиров по сумме [min, max)
DEFAULT_TIER_MIN_AMOUNTS: Final[List[int]] = [
    30_000 * DECIMAL,
    35_000 * DECIMAL,
    60_000 * DECIMAL,
    150_000 * DECIMAL,
    300_000 * DECIMAL,
    600_000 * DECIMAL,
]
DEFAULT_TIER_MAX_AMOUNTS: Final[List[int]] = [
    35_000 * DECIMAL,
    60_000 * DECIMAL,
    150_000 * DECIMAL,
    300_000 * DECIMAL,
    600_000 * DECIMAL,
    MAX_UINT256,
]

# Матрица ставок [тир][срок], доли * RATE_SCALE
_MILLI: Final[int] = RATE_SCALE // 1000
DEFAULT_APR_MATRIX: Final[List[List[int]]] = [
    [10 * _MILLI, 12 * _MILLI, 15 * _MILLI, 20 * _MILLI, 30 * _MILLI, 40 * _MILLI],
    [12 * _MILLI, 15 * _MILLI, 18 * _MILLI, 24 * _MILLI, 35 * _MILLI, 45 * _MILLI],
    [15 * _MILLI, 18 * _MILLI, 22 * _MILLI, 28 * _MILLI, 40 * _MILLI, 50 * _MILLI],
    [18 * _MILLI, 22 * _MILLI, 26 * _MILLI, 32 * _MILLI, 45 * _MILLI, 55 * _MILLI],
    [20 * _MILLI, 25 * _MILLI, 30 * _MILLI, 36 * _MILLI, 50 * _MILLI, 60 * _MILLI],
    [25 * _MILLI, 30 * _MILLI, 35 * _MILLI, 40 * _MILLI, 55 * _MILLI, 70 * _MILLI],
]

# Глобальный диапазон суммы стейка (не границы тиров)
DEFAULT_STAKE_RANGE: Final[Tuple[int, int]] = (30_000 * DECIMAL, MAX_UINT256)

# Имена уведомлений в стиле исходных контрактов
EVENT_NAMES: Final[dict] = {
    'project_created': "ProjectCreated",
    'project_updated': "ProjectUpdated",
    'contributed': "Contributed",
    'queued': "QueuedUp",
    'allocated': "Allocated",
    'uncontributed': "Uncontributed",
    'unqueued': "Unqueued",
    'refunded': "Refunded",
    'capacity_updated': "CapacityUpdated",
    'membership_updated': "MinimumMembershipUpdated",
    'plan_created': "PlanCreated",
    'plan_activated': "PlanActivated",
    'plan_deactivated': "PlanDeactivated",
    'staked': "Staked",
    'unstaked': "Unstaked",
    'apr_updated': "UpdateStakeAPR",
    'range_amount_updated': "UpdateStakeRangeAmount",
    'months_updated': "UpdateStakeMonths",
    'stake_range_updated': "UpdateStakeRange",
    'tokens_purchased': "TokensPurchased",
    'sale_updated': "SaleUpdated",
    'donation_received': "DonationReceived",
}
