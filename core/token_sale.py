"""
Модуль: TokenSale
Описание: Продажа токена по фиксированной цене за принимаемый актив в окне времени.
Оплата уходит в казну (администратор), проданные токены списываются из казны
по allowance, выданному контракту продажи.
Автор: AHA Ledger Team
"""

from typing import Dict, Optional

from config.constants import EVENT_NAMES, SECONDS_PER_DAY
from utils.atomic import remember_item
from utils.validators import AmountValidator, ValidationError
from core.contract_base import LedgerContract
from core.errors import (
    RangeError, TimingError,
    REASON_SALE_NOT_STARTED, REASON_SALE_ENDED, REASON_SALE_AMOUNT, REASON_INVALID_PRICE,
    REASON_INVALID_BOUNDS, REASON_INVALID_AMOUNT,
)
from core.notifications import EventType


class TokenSale(LedgerContract):
    """Продажа токена (sale asset) за принимаемый актив (accepted asset)"""

    _STATE_FIELDS = ('token_price', 'min_amount', 'max_amount', 'total_raised', 'total_sold')

    def __init__(self,
                 address: str,
                 administrator: str,
                 sale_ledger,
                 accepted_ledger,
                 token_price: int,
                 min_amount: int,
                 max_amount: int,
                 start_time: int,
                 duration_days: int,
                 event_bus=None,
                 clock=None):
        super().__init__(address, administrator, sale_ledger, event_bus, clock)
        self.accepted = accepted_ledger
        self.token_price = self._validate_price(token_price)
        self.min_amount = self._validate_bound(min_amount)
        self.max_amount = self._validate_bound(max_amount)
        if self.min_amount > self.max_amount:
            raise RangeError(REASON_INVALID_BOUNDS)
        self.start_time = int(start_time)
        self.end_time = self.start_time + int(duration_days) * SECONDS_PER_DAY
        self.total_raised = 0
        self.total_sold = 0
        self.purchases: Dict[str, int] = {}

        self.logger.info(
            f"🏗️ {self.contract_name} развернут: цена {self.token_price}, "
            f"окно {self.start_time}..{self.end_time}"
        )

    @property
    def treasury(self) -> str:
        return self.administrator

    @staticmethod
    def _validate_price(price: int) -> int:
        try:
            return AmountValidator.validate_amount(price)
        except ValidationError:
            raise RangeError(REASON_INVALID_PRICE) from None

    @staticmethod
    def _validate_bound(amount: int) -> int:
        try:
            return AmountValidator.validate_amount(amount, allow_zero=True)
        except ValidationError:
            raise RangeError(REASON_INVALID_AMOUNT) from None

    def quote(self, amount: int) -> int:
        """Количество токенов за `amount` принимаемого актива"""
        return amount * 10 ** self.asset.decimals // self.token_price

    def is_open(self) -> bool:
        return self.start_time <= self.now() < self.end_time

    def buy_tokens(self, buyer: str, amount: int) -> int:
        """
        Купить токены.

        Returns:
            Количество полученных токенов
        """
        with self._operation():
            buyer = self._holder(buyer)
            now = self.now()
            if now < self.start_time:
                self._reject(TimingError(REASON_SALE_NOT_STARTED), buyer=buyer)
            if now >= self.end_time:
                self._reject(TimingError(REASON_SALE_ENDED), buyer=buyer)
            if isinstance(amount, bool) or not isinstance(amount, int) \
                    or not self.min_amount <= amount <= self.max_amount:
                self._reject(RangeError(REASON_SALE_AMOUNT), buyer=buyer, amount=amount)

            tokens = self.quote(amount)
            if tokens <= 0:
                self._reject(RangeError(REASON_INVALID_AMOUNT), buyer=buyer, amount=amount)

            self.total_raised += amount
            self.total_sold += tokens
            remember_item(self.purchases, buyer)
            self.purchases[buyer] = self.purchases.get(buyer, 0) + tokens

            self.accepted.transfer_from(self.address, buyer, self.treasury, amount)
            self.asset.transfer_from(self.address, self.treasury, buyer, tokens)

            self._emit(
                EventType.TOKENS_PURCHASED, EVENT_NAMES['tokens_purchased'],
                holder=buyer, amount=amount, tokens=tokens, price=self.token_price,
            )
            self.logger.info(f"🛒 PURCHASE: {buyer} | Paid: {amount} | Tokens: {tokens}")
            return tokens

    def set_token_price(self, caller: str, price: int) -> None:
        with self._operation():
            self._require_admin(caller)
            self.token_price = self._validate_price(price)
            self._sale_updated("set_token_price", token_price=price)

    def change_minimum_buy(self, caller: str, amount: int) -> None:
        with self._operation():
            self._require_admin(caller)
            amount = self._validate_bound(amount)
            if amount > self.max_amount:
                self._reject(RangeError(REASON_INVALID_BOUNDS), min=amount, max=self.max_amount)
            self.min_amount = amount
            self._sale_updated("change_minimum_buy", min_amount=amount)

    def change_maximum_buy(self, caller: str, amount: int) -> None:
        with self._operation():
            self._require_admin(caller)
            amount = self._validate_bound(amount)
            if amount < self.min_amount:
                self._reject(RangeError(REASON_INVALID_BOUNDS), min=self.min_amount, max=amount)
            self.max_amount = amount
            self._sale_updated("change_maximum_buy", max_amount=amount)

    def _sale_updated(self, action: str, **changes) -> None:
        self._emit(EventType.SALE_UPDATED, EVENT_NAMES['sale_updated'], **changes)
        self.log.log_admin_action(self.contract_name, action, changes)

    def purchased(self, buyer: str) -> int:
        return self.purchases.get(self._holder(buyer), 0)

    def get_sale_info(self, now: Optional[int] = None) -> Dict:
        return {
            'token_price': self.token_price,
            'min_amount': self.min_amount,
            'max_amount': self.max_amount,
            'start_time': self.start_time,
            'end_time': self.end_time,
            'total_raised': self.total_raised,
            'total_sold': self.total_sold,
            'open': self.is_open() if now is None else self.start_time <= now < self.end_time,
        }
