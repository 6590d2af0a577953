"""
Модуль: Атомарные операции над состоянием в памяти
Описание: Журнал отката (undo log), общий для всех контрактов и реестров
активов одного потока. Изменяемые записи сохраняются перед первым изменением,
ошибка внешней операции откатывает все изменения внутри нее, включая
вложенные операции других контрактов.
Автор: AHA Ledger Team
"""

import copy
import threading
from contextlib import contextmanager
from functools import partial
from typing import Any, Callable, Dict, Hashable, Iterable, Iterator, List, MutableMapping, Optional

from utils.logger import get_logger

logger = get_logger("Atomic")

_local = threading.local()


class UndoLog:
    """Журнал отката одной внешней операции"""

    def __init__(self):
        self.entries: List[Callable[[], None]] = []
        self.after_commit: List[Callable[[], None]] = []
        # Уже сохраненные ключи по вложенным областям; значение держит объект живым,
        # чтобы id() не переиспользовался до конца операции
        self.frames: List[Dict[Hashable, Any]] = []

    def seen(self, key: Hashable, owner: Any) -> bool:
        frame = self.frames[-1]
        if key in frame:
            return True
        frame[key] = owner
        return False


def current_log() -> Optional[UndoLog]:
    return getattr(_local, 'log', None)


@contextmanager
def atomic_scope() -> Iterator[UndoLog]:
    """
    Область атомарной операции.

    Внешняя область создает журнал, вложенные ставят в нем отметку.
    При исключении откатываются изменения от отметки (в обратном порядке)
    и отбрасываются отложенные коллбэки этой области. После успешного
    завершения внешней области выполняются коллбэки on_commit.
    """
    log = current_log()
    outermost = log is None
    if outermost:
        log = UndoLog()
        _local.log = log
    mark, commit_mark = len(log.entries), len(log.after_commit)
    log.frames.append({})
    try:
        yield log
    except BaseException:
        log.frames.pop()
        undo = log.entries[mark:]
        del log.entries[mark:]
        del log.after_commit[commit_mark:]
        for restore in reversed(undo):
            restore()
        if undo:
            logger.debug(f"↩️ Откатано изменений: {len(undo)}")
        raise
    finally:
        if outermost:
            _local.log = None

    frame = log.frames.pop()
    if log.frames:
        log.frames[-1].update(frame)
    if outermost:
        for callback in log.after_commit:
            callback()


def remember_attrs(owner: Any, *names: str) -> None:
    """Сохранить атрибуты объекта перед изменением; вне операции ничего не делает"""
    log = current_log()
    if log is None:
        return
    for name in names:
        if log.seen(('attr', id(owner), name), owner):
            continue
        value = copy.deepcopy(getattr(owner, name))
        log.entries.append(partial(setattr, owner, name, value))


def remember_item(mapping: MutableMapping, key: Hashable, deep: bool = True) -> None:
    """Сохранить одну запись словаря (или ее отсутствие) перед изменением"""
    log = current_log()
    if log is None or log.seen(('item', id(mapping), key), mapping):
        return
    if key in mapping:
        value = copy.deepcopy(mapping[key]) if deep else copy.copy(mapping[key])
        log.entries.append(partial(mapping.__setitem__, key, value))
    else:
        log.entries.append(partial(mapping.pop, key, None))


def on_rollback(callback: Callable[[], None]) -> None:
    log = current_log()
    if log is not None:
        log.entries.append(callback)


def on_commit(callback: Callable[[], None]) -> None:
    """Выполнить после успешной внешней операции; вне операции - сразу"""
    log = current_log()
    if log is None:
        callback()
    elif callback not in log.after_commit:
        log.after_commit.append(callback)


@contextmanager
def atomic_state(owner: Any, fields: Iterable[str]) -> Iterator[None]:
    """Атомарный блок со снимком перечисленных атрибутов `owner`"""
    with atomic_scope():
        remember_attrs(owner, *fields)
        yield
