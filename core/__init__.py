"""
Модуль core - Ядро AHA Time-Locked Ledger: депозиты, очередь, награды, таблица ставок
"""

from .errors import (
    LedgerError, AuthorizationError, StateError, RangeError, TimingError,
    EligibilityError, PositionIndexError, UpstreamTransferError,
)
from .lifecycle import CampaignStatus
from .notifications import EventBus, EventType, LedgerEvent
from .reward_calculator import RewardEngine
from .tier_table import TierTable
from .contribute import ContributionCampaigns
from .staking_plans import PlanStaking
from .tiered_staking import TieredStaking
from .token_sale import TokenSale
from .donations import DonationLedger

__all__ = [
    'LedgerError',
    'AuthorizationError',
    'StateError',
    'RangeError',
    'TimingError',
    'EligibilityError',
    'PositionIndexError',
    'UpstreamTransferError',
    'CampaignStatus',
    'EventBus',
    'EventType',
    'LedgerEvent',
    'RewardEngine',
    'TierTable',
    'ContributionCampaigns',
    'PlanStaking',
    'TieredStaking',
    'TokenSale',
    'DonationLedger'
]
