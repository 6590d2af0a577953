"""
AHA Time-Locked Ledger - Тестирование Web3AssetLedger
Нода подменяется MagicMock, сеть не используется.
Автор: AHA Ledger Team
Версия: 1.0.0
"""

import unittest
from unittest.mock import MagicMock, patch

from web3 import Web3
from web3.exceptions import ContractLogicError

from utils.logger import get_logger
from blockchain.erc20_ledger import Web3AssetLedger, ERC20_ABI, REASON_TX_REVERTED
from core.errors import UpstreamTransferError

logger = get_logger(__name__)

TOKEN = Web3.to_checksum_address("0x" + "a0" * 20)
ALICE = Web3.to_checksum_address("0x" + "11" * 20)
BOB = Web3.to_checksum_address("0x" + "22" * 20)


class TestWeb3AssetLedger(unittest.TestCase):
    """Адаптер ERC-20 контракта"""

    def setUp(self):
        self.w3 = MagicMock()
        self.contract = MagicMock()
        self.w3.eth.contract.return_value = self.contract
        self.w3.eth.wait_for_transaction_receipt.return_value = {'status': 1, 'blockNumber': 10}
        self.ledger = Web3AssetLedger(self.w3, TOKEN, receipt_timeout=5)

    def test_contract_bound_to_token(self):
        self.w3.eth.contract.assert_called_once_with(address=TOKEN, abi=ERC20_ABI)
        self.assertEqual(self.ledger.address, TOKEN)

    @patch("blockchain.erc20_ledger.Web3")
    def test_connect(self, web3_cls):
        web3_cls.return_value.is_connected.return_value = True
        ledger = Web3AssetLedger.connect("http://node:8545", TOKEN)
        web3_cls.HTTPProvider.assert_called_once()
        self.assertEqual(web3_cls.HTTPProvider.call_args[0][0], "http://node:8545")
        self.assertIs(ledger.w3, web3_cls.return_value)

        web3_cls.return_value.is_connected.return_value = False
        with self.assertRaises(ConnectionError):
            Web3AssetLedger.connect("http://node:8545", TOKEN)

    def test_reads(self):
        self.contract.functions.balanceOf.return_value.call.return_value = 42
        self.contract.functions.allowance.return_value.call.return_value = 7
        self.contract.functions.decimals.return_value.call.return_value = 6

        self.assertEqual(self.ledger.balance_of(ALICE.lower()), 42)
        self.contract.functions.balanceOf.assert_called_with(ALICE)
        self.assertEqual(self.ledger.allowance(ALICE, BOB), 7)
        self.assertEqual(self.ledger.decimals, 6)
        self.assertEqual(self.ledger.decimals, 6)
        self.assertEqual(self.contract.functions.decimals.call_count, 1)

    def test_transient_read_error_retried(self):
        self.contract.functions.balanceOf.return_value.call.side_effect = [ConnectionError("connection reset"), 5]
        self.assertEqual(self.ledger.balance_of(ALICE), 5)

    def test_logic_read_error_not_retried(self):
        self.contract.functions.balanceOf.return_value.call.side_effect = ValueError("bad call")
        with self.assertRaises(ValueError):
            self.ledger.balance_of(ALICE)
        self.assertEqual(self.contract.functions.balanceOf.return_value.call.call_count, 1)

    def test_transfer_from_sends_from_spender(self):
        self.assertTrue(self.ledger.transfer_from(BOB, ALICE, BOB, 100))
        self.contract.functions.transferFrom.assert_called_once_with(ALICE, BOB, 100)
        self.contract.functions.transferFrom.return_value.transact.assert_called_once_with({'from': BOB})
        self.w3.eth.wait_for_transaction_receipt.assert_called_once()

    def test_contract_revert_reason_propagated(self):
        self.contract.functions.transfer.return_value.transact.side_effect = ContractLogicError(
            "execution reverted: ERC20: transfer amount exceeds balance"
        )
        with self.assertRaises(UpstreamTransferError) as ctx:
            self.ledger.transfer(ALICE, BOB, 100)
        self.assertIn("exceeds balance", ctx.exception.reason)
        # Запись не повторяется
        self.assertEqual(self.contract.functions.transfer.return_value.transact.call_count, 1)

    def test_failed_receipt(self):
        self.w3.eth.wait_for_transaction_receipt.return_value = {'status': 0, 'transactionHash': "0xdead"}
        with self.assertRaises(UpstreamTransferError) as ctx:
            self.ledger.approve(ALICE, BOB, 100)
        self.assertEqual(ctx.exception.reason, REASON_TX_REVERTED)


if __name__ == "__main__":
    unittest.main(verbosity=2)
