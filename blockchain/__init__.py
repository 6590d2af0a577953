"""
Модуль blockchain - Граница с хранилищем актива (AssetLedger)
"""

from .asset_ledger import AssetLedger, InMemoryAssetLedger

__all__ = [
    'AssetLedger',
    'InMemoryAssetLedger'
]
