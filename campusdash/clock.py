from __future__ import annotations

import uuid
from datetime import datetime
from typing import Callable, Protocol

IdFactory = Callable[[], str]


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now()


def new_id() -> str:
    return str(uuid.uuid4())


def iso_now(clock: Clock) -> str:
    return clock.now().isoformat(timespec="seconds")
