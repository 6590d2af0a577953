"""AHA Time-Locked Ledger - Utilities"""

from .atomic import atomic_scope, atomic_state
from .clock import SystemClock, ManualClock

__all__ = [
    'atomic_scope',
    'atomic_state',
    'SystemClock',
    'ManualClock'
]
