"""
AHA Time-Locked Ledger - Тестирование TokenSale
Автор: AHA Ledger Team
Версия: 1.0.0
"""

import unittest

from web3 import Web3

from config.constants import DECIMAL
from utils.clock import ManualClock
from utils.logger import get_logger
from blockchain.asset_ledger import InMemoryAssetLedger
from core.errors import (
    AuthorizationError, RangeError, TimingError, UpstreamTransferError,
    REASON_SALE_NOT_STARTED, REASON_SALE_ENDED, REASON_SALE_AMOUNT, REASON_INVALID_PRICE,
    REASON_INVALID_BOUNDS, REASON_INVALID_AMOUNT,
)
from core.notifications import EventBus, EventType
from core.token_sale import TokenSale

logger = get_logger(__name__)

ADMIN = Web3.to_checksum_address("0x" + "ad" * 20)
BUYER = Web3.to_checksum_address("0x" + "11" * 20)
SALE = Web3.to_checksum_address("0x" + "c4" * 20)

PRICE = 15 * 10 ** 15  # 0.015 принимаемого актива за токен


class TestTokenSale(unittest.TestCase):
    """Покупка токенов по фиксированной цене в окне продажи."""

    def setUp(self):
        self.clock = ManualClock()
        self.bus = EventBus()
        self.token = InMemoryAssetLedger("0x" + "a0" * 20, ADMIN)
        self.usd = InMemoryAssetLedger("0x" + "a1" * 20, ADMIN, name="Test USD", symbol="tUSD")

        self.sale = TokenSale(
            SALE, ADMIN, self.token, self.usd,
            token_price=PRICE,
            min_amount=1 * DECIMAL,
            max_amount=1000 * DECIMAL,
            start_time=self.clock() + 86_400,
            duration_days=30,
            event_bus=self.bus,
            clock=self.clock,
        )

        # Казна держит продаваемые токены и разрешает контракту их выдавать
        self.token.mint(ADMIN, ADMIN, 1_000_000 * DECIMAL)
        self.token.approve(ADMIN, SALE, 1_000_000 * DECIMAL)
        self.usd.mint(ADMIN, BUYER, 5000 * DECIMAL)

    def _buy(self, amount):
        self.usd.approve(BUYER, SALE, amount)
        return self.sale.buy_tokens(BUYER, amount)

    def test_quote(self):
        self.assertEqual(self.sale.quote(15 * DECIMAL), 1000 * DECIMAL)
        self.assertEqual(self.sale.quote(8 * DECIMAL), 8 * DECIMAL * DECIMAL // PRICE)

    def test_sale_not_started(self):
        self.usd.approve(BUYER, SALE, 15 * DECIMAL)
        with self.assertRaises(TimingError) as ctx:
            self.sale.buy_tokens(BUYER, 15 * DECIMAL)
        self.assertEqual(ctx.exception.reason, REASON_SALE_NOT_STARTED)
        self.assertFalse(self.sale.is_open())

    def test_buy_tokens(self):
        self.clock.advance(days=1)
        tokens = self._buy(15 * DECIMAL)

        self.assertEqual(tokens, 1000 * DECIMAL)
        self.assertEqual(self.token.balance_of(BUYER), 1000 * DECIMAL)
        self.assertEqual(self.usd.balance_of(BUYER), 4985 * DECIMAL)
        self.assertEqual(self.usd.balance_of(ADMIN), 15 * DECIMAL)
        self.assertEqual(self.sale.purchased(BUYER), 1000 * DECIMAL)

        info = self.sale.get_sale_info()
        self.assertEqual(info['total_raised'], 15 * DECIMAL)
        self.assertEqual(info['total_sold'], 1000 * DECIMAL)
        self.assertTrue(info['open'])

        event = self.bus.events_of(EventType.TOKENS_PURCHASED)[0]
        self.assertEqual(event.name, "TokensPurchased")
        self.assertEqual(event.payload['tokens'], 1000 * DECIMAL)

    def test_sale_ended(self):
        self.clock.advance(days=31)
        self.usd.approve(BUYER, SALE, 15 * DECIMAL)
        with self.assertRaises(TimingError) as ctx:
            self.sale.buy_tokens(BUYER, 15 * DECIMAL)
        self.assertEqual(ctx.exception.reason, REASON_SALE_ENDED)

    def test_amount_bounds(self):
        self.clock.advance(days=1)
        self.usd.approve(BUYER, SALE, 2000 * DECIMAL)
        for amount in (DECIMAL - 1, 1000 * DECIMAL + 1):
            with self.assertRaises(RangeError) as ctx:
                self.sale.buy_tokens(BUYER, amount)
            self.assertEqual(ctx.exception.reason, REASON_SALE_AMOUNT)
        self.assertEqual(self.sale.get_sale_info()['total_raised'], 0)

    def test_treasury_without_allowance_rolls_back(self):
        self.clock.advance(days=1)
        self.token.approve(ADMIN, SALE, 0)
        self.usd.approve(BUYER, SALE, 15 * DECIMAL)

        with self.assertRaises(UpstreamTransferError):
            self.sale.buy_tokens(BUYER, 15 * DECIMAL)

        # Оплата покупателя откатывается вместе с учетом продажи
        self.assertEqual(self.usd.balance_of(BUYER), 5000 * DECIMAL)
        self.assertEqual(self.usd.allowance(BUYER, SALE), 15 * DECIMAL)
        self.assertEqual(self.sale.purchased(BUYER), 0)
        self.assertEqual(self.bus.events, [])

    def test_admin_setters(self):
        self.sale.set_token_price(ADMIN, 2 * PRICE)
        self.assertEqual(self.sale.quote(15 * DECIMAL), 500 * DECIMAL)
        with self.assertRaises(RangeError) as ctx:
            self.sale.set_token_price(ADMIN, 0)
        self.assertEqual(ctx.exception.reason, REASON_INVALID_PRICE)

        self.sale.change_minimum_buy(ADMIN, 10 * DECIMAL)
        self.sale.change_maximum_buy(ADMIN, 100 * DECIMAL)
        with self.assertRaises(RangeError) as ctx:
            self.sale.change_minimum_buy(ADMIN, 200 * DECIMAL)
        self.assertEqual(ctx.exception.reason, REASON_INVALID_BOUNDS)
        with self.assertRaises(RangeError):
            self.sale.change_maximum_buy(ADMIN, 5 * DECIMAL)

        info = self.sale.get_sale_info()
        self.assertEqual((info['min_amount'], info['max_amount']), (10 * DECIMAL, 100 * DECIMAL))
        self.assertEqual(len(self.bus.events_of(EventType.SALE_UPDATED)), 3)

    def test_bounds_must_be_non_negative_integers(self):
        for min_amount, max_amount in ((-1, DECIMAL), (0, "1000"), (0.5, DECIMAL)):
            with self.assertRaises(RangeError) as ctx:
                TokenSale(SALE, ADMIN, self.token, self.usd, PRICE, min_amount, max_amount,
                          start_time=0, duration_days=1, event_bus=self.bus, clock=self.clock)
            self.assertEqual(ctx.exception.reason, REASON_INVALID_AMOUNT)

        with self.assertRaises(RangeError) as ctx:
            self.sale.change_minimum_buy(ADMIN, -1)
        self.assertEqual(ctx.exception.reason, REASON_INVALID_AMOUNT)
        with self.assertRaises(RangeError) as ctx:
            self.sale.change_maximum_buy(ADMIN, 10.5)
        self.assertEqual(ctx.exception.reason, REASON_INVALID_AMOUNT)

        # Нулевой минимум допустим
        self.sale.change_minimum_buy(ADMIN, 0)
        self.assertEqual(self.sale.get_sale_info()['min_amount'], 0)
        self.assertEqual(len(self.bus.events_of(EventType.SALE_UPDATED)), 1)

    def test_setters_require_owner(self):
        with self.assertRaises(AuthorizationError):
            self.sale.set_token_price(BUYER, PRICE)
        with self.assertRaises(AuthorizationError):
            self.sale.change_minimum_buy(BUYER, 0)
        with self.assertRaises(AuthorizationError):
            self.sale.change_maximum_buy(BUYER, 0)


if __name__ == "__main__":
    unittest.main(verbosity=2)
