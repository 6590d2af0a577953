"""
Модуль: Retry декораторы для обращений к ноде
Описание: Повтор только читающих вызовов с экспоненциальным backoff; переводы никогда не повторяются
Зависимости: tenacity
Автор: AHA Ledger Team
"""

from typing import Callable, Optional
from tenacity import (
    retry, stop_after_attempt, wait_exponential, retry_if_exception, RetryCallState
)

from utils.logger import get_logger
from config.settings import settings

logger = get_logger("Retry")


class NodeRetryError(Exception):
    """Базовый класс для временных ошибок ноды"""
    pass


class RateLimitError(NodeRetryError):
    """Ошибка превышения лимита запросов"""
    pass


class NodeConnectionError(NodeRetryError):
    """Ошибка подключения к ноде"""
    pass


def extract_error_type(exception: BaseException) -> str:
    """Определить тип ошибки по сообщению"""
    error_msg = str(exception).lower()

    if "rate limit" in error_msg or "too many requests" in error_msg or "429" in error_msg:
        return "rate_limit"
    elif "connection" in error_msg or "timeout" in error_msg or "network" in error_msg:
        return "connection"
    elif "internal server error" in error_msg or "502" in error_msg or "503" in error_msg:
        return "temporary_node"
    else:
        return "unknown"


def is_transient_error(exception: BaseException) -> bool:
    """Повторяем только временные ошибки транспорта"""
    if isinstance(exception, (NodeRetryError, ConnectionError, TimeoutError)):
        return True
    return extract_error_type(exception) != "unknown"


def log_retry_attempt(retry_state: RetryCallState) -> None:
    """Логирование попыток retry"""
    attempt = retry_state.attempt_number
    if retry_state.outcome is not None and retry_state.outcome.failed:
        exception = retry_state.outcome.exception()
        logger.warning(f"🔄 Retry attempt {attempt} failed: {extract_error_type(exception)} - {exception}")
    else:
        logger.debug(f"🔄 Retry attempt {attempt}")


def node_read_retry(max_attempts: Optional[int] = None, base_delay: Optional[float] = None,
                    max_delay: float = 30.0) -> Callable:
    """
    Tenacity декоратор для читающих вызовов к ноде (balanceOf, allowance)

    Args:
        max_attempts: Максимальное количество попыток (по умолчанию из настроек)
        base_delay: Базовая задержка в секундах (по умолчанию из настроек)
        max_delay: Максимальная задержка в секундах
    """
    if max_attempts is None:
        max_attempts = settings.retry_attempts
    if base_delay is None:
        base_delay = settings.retry_delay_base

    return retry(
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait_exponential(multiplier=base_delay, min=0, max=max_delay),
        retry=retry_if_exception(is_transient_error),
        after=log_retry_attempt,
        reraise=True,
    )
