"""
AHA Time-Locked Ledger - ERC-20 Ledger
AssetLedger поверх развернутого ERC-20 контракта через web3.

Транзакции отправляются от имени адреса, управляемого нодой
(hardhat / anvil / geth с разблокированными аккаунтами).
Чтения повторяются при временных ошибках ноды, записи - никогда.

Автор: AHA Ledger Team
Версия: 1.0.0
"""

from typing import Dict, Optional

from web3 import Web3
from web3.exceptions import ContractLogicError

from config.settings import settings
from utils.logger import get_logger
from utils.retry import node_read_retry
from utils.validators import validate_address
from core.errors import UpstreamTransferError
from blockchain.asset_ledger import AssetLedger

logger = get_logger(__name__)

REASON_TX_REVERTED = "transaction reverted"

# Минимальный ERC-20 ABI
ERC20_ABI = [
    {
        "constant": True,
        "inputs": [{"name": "_owner", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "balance", "type": "uint256"}],
        "type": "function"
    },
    {
        "constant": True,
        "inputs": [{"name": "_owner", "type": "address"}, {"name": "_spender", "type": "address"}],
        "name": "allowance",
        "outputs": [{"name": "", "type": "uint256"}],
        "type": "function"
    },
    {
        "constant": True,
        "inputs": [],
        "name": "decimals",
        "outputs": [{"name": "", "type": "uint8"}],
        "type": "function"
    },
    {
        "constant": True,
        "inputs": [],
        "name": "symbol",
        "outputs": [{"name": "", "type": "string"}],
        "type": "function"
    },
    {
        "constant": False,
        "inputs": [{"name": "_to", "type": "address"}, {"name": "_value", "type": "uint256"}],
        "name": "transfer",
        "outputs": [{"name": "", "type": "bool"}],
        "type": "function"
    },
    {
        "constant": False,
        "inputs": [
            {"name": "_from", "type": "address"},
            {"name": "_to", "type": "address"},
            {"name": "_value", "type": "uint256"}
        ],
        "name": "transferFrom",
        "outputs": [{"name": "", "type": "bool"}],
        "type": "function"
    },
    {
        "constant": False,
        "inputs": [{"name": "_spender", "type": "address"}, {"name": "_value", "type": "uint256"}],
        "name": "approve",
        "outputs": [{"name": "", "type": "bool"}],
        "type": "function"
    },
]


class Web3AssetLedger(AssetLedger):
    """
    ERC-20 токен в сети как AssetLedger.

    Функциональность:
    - balance_of / allowance / decimals с retry
    - transfer / transfer_from / approve с ожиданием receipt
    - ошибки контракта и reverted receipt -> UpstreamTransferError
    """

    def __init__(self, w3: Web3, token_address: Optional[str] = None, receipt_timeout: Optional[int] = None):
        """
        Args:
            w3: Подключенный экземпляр Web3
            token_address: Адрес ERC-20 контракта (по умолчанию из настроек)
            receipt_timeout: Таймаут ожидания receipt в секундах
        """
        self.w3 = w3
        self.address = validate_address(token_address or settings.token_address)
        self.receipt_timeout = receipt_timeout or settings.connection_timeout
        self.contract = self.w3.eth.contract(address=Web3.to_checksum_address(self.address), abi=ERC20_ABI)
        self._decimals: Optional[int] = None

        logger.info(f"✅ ERC-20 ledger инициализирован: {self.address}")

    @classmethod
    def connect(cls, rpc_url: Optional[str] = None, token_address: Optional[str] = None) -> "Web3AssetLedger":
        """Подключиться к ноде по HTTP"""
        url = rpc_url or settings.rpc_url
        w3 = Web3(Web3.HTTPProvider(url, request_kwargs={'timeout': settings.connection_timeout}))
        if not w3.is_connected():
            raise ConnectionError(f"Нет подключения к ноде {url}")
        logger.info(f"🔗 Подключено к {url}")
        return cls(w3, token_address)

    # --- Чтение -----------------------------------------------------------

    @property
    def decimals(self) -> int:
        if self._decimals is None:
            self._decimals = self._read_decimals()
        return self._decimals

    @node_read_retry()
    def _read_decimals(self) -> int:
        return int(self.contract.functions.decimals().call())

    @node_read_retry()
    def balance_of(self, account: str) -> int:
        return int(self.contract.functions.balanceOf(validate_address(account)).call())

    @node_read_retry()
    def allowance(self, owner: str, spender: str) -> int:
        return int(self.contract.functions.allowance(validate_address(owner), validate_address(spender)).call())

    # --- Запись -----------------------------------------------------------

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        call = self.contract.functions.transfer(validate_address(to), amount)
        return self._send(call, sender, "transfer")

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        call = self.contract.functions.transferFrom(validate_address(owner), validate_address(to), amount)
        return self._send(call, spender, "transferFrom")

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        call = self.contract.functions.approve(validate_address(spender), amount)
        return self._send(call, owner, "approve")

    def _send(self, call, sender: str, action: str) -> bool:
        """Отправить транзакцию и дождаться receipt; без повторов"""
        tx_params: Dict = {'from': validate_address(sender)}
        try:
            tx_hash = call.transact(tx_params)
            receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout)
        except ContractLogicError as e:
            reason = getattr(e, 'message', None) or str(e)
            logger.warning(f"⛔ {action} отклонен контрактом: {reason}")
            raise UpstreamTransferError(reason) from e

        if receipt.get('status', 1) != 1:
            logger.warning(f"⛔ {action} reverted: {receipt.get('transactionHash')}")
            raise UpstreamTransferError(REASON_TX_REVERTED)

        logger.debug(f"📤 {action} от {sender}: блок {receipt.get('blockNumber')}")
        return True
