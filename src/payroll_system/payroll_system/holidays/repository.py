from __future__ import annotations

from typing import Protocol, Sequence

from .model import HolidayRecord


class HolidayRepository(Protocol):
    def list_all(self) -> Sequence[HolidayRecord]:
        raise NotImplementedError
