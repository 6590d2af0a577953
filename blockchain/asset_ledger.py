"""
AHA Time-Locked Ledger - Asset Ledger
Граница с хранилищем взаимозаменяемого актива (ERC-20 семантика).

AssetLedger - контракт, который потребляет ядро: transfer, transfer_from
по allowance, approve, allowance, balance_of. InMemoryAssetLedger -
процессная реализация токена для тестов, симуляций и локального запуска.

Автор: AHA Ledger Team
Версия: 1.0.0
"""

from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Tuple

from config.constants import TOKEN_NAME, TOKEN_SYMBOL, TOKEN_DECIMALS, ZERO_ADDRESS
from utils.atomic import atomic_scope, remember_attrs, remember_item
from utils.logger import get_logger
from utils.validators import validate_address
from core.errors import UpstreamTransferError

logger = get_logger(__name__)

REASON_INSUFFICIENT_ALLOWANCE = "insufficient allowance"
REASON_INSUFFICIENT_BALANCE = "transfer amount exceeds balance"
REASON_INVALID_AMOUNT = "invalid amount"
REASON_NOT_TOKEN_OWNER = "caller is not the token owner"

# Хук получателя: (ledger, sender, recipient, amount)
ReceiveHook = Callable[["InMemoryAssetLedger", str, str, int], None]


class AssetLedger(ABC):
    """Контракт хранилища актива, который использует ядро"""

    address: str
    decimals: int = TOKEN_DECIMALS

    @abstractmethod
    def transfer(self, sender: str, to: str, amount: int) -> bool:
        """Перевод со счета sender"""

    @abstractmethod
    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        """Перевод со счета owner силами spender в пределах allowance"""

    @abstractmethod
    def approve(self, owner: str, spender: str, amount: int) -> bool:
        """Установить allowance"""

    @abstractmethod
    def allowance(self, owner: str, spender: str) -> int:
        """Текущий allowance"""

    @abstractmethod
    def balance_of(self, account: str) -> int:
        """Баланс счета"""


class InMemoryAssetLedger(AssetLedger):
    """
    ERC-20 подобный токен в памяти процесса.

    Функциональность:
    - mint (владелец токена), burn со своего счета
    - transfer / approve / transfer_from с расходом allowance
    - хуки получателя для моделирования логики держателя при входящем переводе
    - атомарность: ошибка хука откатывает перевод, а внутри операции
      контракта изменения балансов попадают в общий журнал отката
    """

    def __init__(self,
                 address: str,
                 owner: str,
                 name: str = TOKEN_NAME,
                 symbol: str = TOKEN_SYMBOL,
                 decimals: int = TOKEN_DECIMALS,
                 initial_supply: int = 0):
        self.address = validate_address(address)
        self.owner = validate_address(owner)
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self.total_supply = 0
        self._balances: Dict[str, int] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}
        self._hooks: Dict[str, List[ReceiveHook]] = {}

        if initial_supply:
            self.mint(self.owner, self.owner, initial_supply)

        logger.info(f"🪙 {self.symbol} ({self.address}) создан, эмиссия {self.total_supply}")

    def atomic(self):
        return atomic_scope()

    # --- Служебные --------------------------------------------------------

    @staticmethod
    def _check_amount(amount: int) -> int:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            raise UpstreamTransferError(REASON_INVALID_AMOUNT)
        return amount

    def _move(self, sender: str, to: str, amount: int) -> None:
        balance = self._balances.get(sender, 0)
        if balance < amount:
            raise UpstreamTransferError(REASON_INSUFFICIENT_BALANCE)
        remember_item(self._balances, sender)
        remember_item(self._balances, to)
        self._balances[sender] = balance - amount
        self._balances[to] = self._balances.get(to, 0) + amount

    def _notify(self, sender: str, to: str, amount: int) -> None:
        for hook in list(self._hooks.get(to, [])):
            hook(self, sender, to, amount)

    # --- Эмиссия ----------------------------------------------------------

    def mint(self, caller: str, to: str, amount: int) -> None:
        if validate_address(caller) != self.owner:
            raise UpstreamTransferError(REASON_NOT_TOKEN_OWNER)
        amount = self._check_amount(amount)
        to = validate_address(to)
        remember_item(self._balances, to)
        remember_attrs(self, 'total_supply')
        self._balances[to] = self._balances.get(to, 0) + amount
        self.total_supply += amount
        logger.debug(f"🪙 mint {amount} → {to}")

    def burn(self, caller: str, amount: int) -> None:
        """Сжечь токены со счета владельца токена"""
        caller = validate_address(caller)
        if caller != self.owner:
            raise UpstreamTransferError(REASON_NOT_TOKEN_OWNER)
        amount = self._check_amount(amount)
        with self.atomic():
            remember_attrs(self, 'total_supply')
            self._move(caller, ZERO_ADDRESS, amount)
            self._balances.pop(ZERO_ADDRESS, None)
            self.total_supply -= amount

    # --- ERC-20 -----------------------------------------------------------

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        sender, to = validate_address(sender), validate_address(to)
        amount = self._check_amount(amount)
        with self.atomic():
            self._move(sender, to, amount)
            self._notify(sender, to, amount)
        logger.debug(f"➡️ {self.symbol} transfer {sender} → {to}: {amount}")
        return True

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        spender, owner, to = validate_address(spender), validate_address(owner), validate_address(to)
        amount = self._check_amount(amount)
        with self.atomic():
            allowed = self._allowances.get((owner, spender), 0)
            if allowed < amount:
                raise UpstreamTransferError(REASON_INSUFFICIENT_ALLOWANCE)
            remember_item(self._allowances, (owner, spender))
            self._allowances[(owner, spender)] = allowed - amount
            self._move(owner, to, amount)
            self._notify(owner, to, amount)
        logger.debug(f"➡️ {self.symbol} transferFrom {owner} → {to} by {spender}: {amount}")
        return True

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        owner, spender = validate_address(owner), validate_address(spender)
        amount = self._check_amount(amount)
        remember_item(self._allowances, (owner, spender))
        self._allowances[(owner, spender)] = amount
        return True

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((validate_address(owner), validate_address(spender)), 0)

    def balance_of(self, account: str) -> int:
        return self._balances.get(validate_address(account), 0)

    # --- Хуки -------------------------------------------------------------

    def register_receive_hook(self, account: str, hook: ReceiveHook) -> None:
        """Вызвать hook после каждого входящего перевода на account"""
        self._hooks.setdefault(validate_address(account), []).append(hook)

    def clear_receive_hooks(self, account: Optional[str] = None) -> None:
        if account is None:
            self._hooks.clear()
        else:
            self._hooks.pop(validate_address(account), None)
