"""
Модуль: DonationLedger
Описание: Пожертвования в несколько токенов по ID проекта. Средства сразу
переводятся бенефициару, контракт хранит только учет сумм.
Автор: AHA Ledger Team
"""

from typing import Dict, Iterable, List, Optional, Tuple

from config.constants import EVENT_NAMES
from utils.atomic import remember_item
from utils.validators import validate_address, ValidationError
from core.contract_base import LedgerContract
from core.errors import RangeError, StateError, REASON_INVALID_AMOUNT
from core.notifications import EventType

REASON_ASSET_NOT_ACCEPTED = "token is not accepted"


class DonationLedger(LedgerContract):
    """Учет пожертвований (актив, проект, донор)"""

    def __init__(self,
                 address: str,
                 administrator: str,
                 assets: Iterable = (),
                 beneficiary: Optional[str] = None,
                 event_bus=None,
                 clock=None):
        super().__init__(address, administrator, None, event_bus, clock)
        self.beneficiary = validate_address(beneficiary) if beneficiary else self.administrator
        self.assets: Dict[str, object] = {}
        for asset in assets:
            self.assets[validate_address(asset.address)] = asset
        self._totals: Dict[Tuple[str, int], int] = {}
        self._donations: Dict[Tuple[str, int, str], int] = {}
        self._project_donors: Dict[Tuple[str, int], List[str]] = {}

        self.logger.info(f"🏗️ {self.contract_name} развернут: бенефициар {self.beneficiary}")

    def add_asset(self, caller: str, asset) -> None:
        """Разрешить прием нового токена"""
        self._require_admin(caller)
        self.assets[validate_address(asset.address)] = asset
        self.log.log_admin_action(self.contract_name, "add_asset", {'asset': asset.address})

    def _asset(self, asset):
        key = asset if isinstance(asset, str) else getattr(asset, 'address', None)
        try:
            key = validate_address(key)
        except ValidationError:
            self._reject(StateError(REASON_ASSET_NOT_ACCEPTED), asset=key)
        ledger = self.assets.get(key)
        if ledger is None:
            self._reject(StateError(REASON_ASSET_NOT_ACCEPTED), asset=key)
        return key, ledger

    def donate(self, donor: str, asset, amount: int, project_id: int) -> None:
        """Переслать пожертвование бенефициару и учесть его"""
        with self._operation():
            donor = self._holder(donor)
            asset_address, ledger = self._asset(asset)
            if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
                self._reject(RangeError(REASON_INVALID_AMOUNT), donor=donor, amount=amount)

            project_key = (asset_address, project_id)
            donor_key = (asset_address, project_id, donor)
            remember_item(self._totals, project_key)
            remember_item(self._donations, donor_key)

            self._totals[project_key] = self._totals.get(project_key, 0) + amount
            if donor_key not in self._donations:
                remember_item(self._project_donors, project_key)
                self._project_donors.setdefault(project_key, []).append(donor)
            self._donations[donor_key] = self._donations.get(donor_key, 0) + amount

            ledger.transfer_from(self.address, donor, self.beneficiary, amount)

            self._emit(
                EventType.DONATION_RECEIVED, EVENT_NAMES['donation_received'],
                holder=donor, asset=asset_address, amount=amount, project_id=project_id,
            )
            self.logger.info(f"🎁 DONATION: {donor} | Project: {project_id} | Asset: {asset_address} | {amount}")

    def total_donations(self, asset, project_id: int) -> int:
        asset_address, _ = self._asset(asset)
        return self._totals.get((asset_address, project_id), 0)

    def donations(self, asset, project_id: int, donor: str) -> int:
        asset_address, _ = self._asset(asset)
        return self._donations.get((asset_address, project_id, self._holder(donor)), 0)

    def project_donors(self, asset, project_id: int) -> List[str]:
        asset_address, _ = self._asset(asset)
        return list(self._project_donors.get((asset_address, project_id), []))
