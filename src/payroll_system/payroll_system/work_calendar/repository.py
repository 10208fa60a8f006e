from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import CalendarOverride, Holiday


class CalendarRepository(Protocol):
    def list_holidays(self) -> Sequence[Holiday]:
        raise NotImplementedError

    def get_override(self, *, year: int, month: int) -> Optional[CalendarOverride]:
        raise NotImplementedError
