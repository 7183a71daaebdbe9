"""
Per-dispatch logging context.

The dispatcher records which business number received a delivery and who sent
the message being handled. Loggers from ``get_logger`` read it back, so handler
code never threads these ids through its own calls.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import NamedTuple


class DispatchContext(NamedTuple):
    phone_number_id: str | None = None
    user_id: str | None = None


_EMPTY = DispatchContext()
_current: ContextVar[DispatchContext] = ContextVar("wabridge_dispatch", default=_EMPTY)


def set_dispatch_context(
    phone_number_id: str | None = None,
    user_id: str | None = None,
) -> None:
    """
    Record the ids for the running task.

    A None argument keeps whatever value is already recorded.
    """
    previous = _current.get()
    _current.set(
        DispatchContext(
            phone_number_id if phone_number_id is not None else previous.phone_number_id,
            user_id if user_id is not None else previous.user_id,
        )
    )


def get_current_phone_number_context() -> str | None:
    return _current.get().phone_number_id


def get_current_user_context() -> str | None:
    return _current.get().user_id


def clear_dispatch_context() -> None:
    _current.set(_EMPTY)


@contextmanager
def dispatch_context(
    phone_number_id: str | None, user_id: str | None
) -> Iterator[DispatchContext]:
    """Record the ids for the duration of a ``with`` block, then clear them."""
    set_dispatch_context(phone_number_id, user_id)
    try:
        yield _current.get()
    finally:
        clear_dispatch_context()


def get_context_info() -> dict[str, str | None]:
    """Snapshot of the recorded ids, keyed by field name."""
    return _current.get()._asdict()
