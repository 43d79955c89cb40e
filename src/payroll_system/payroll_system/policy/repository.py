from __future__ import annotations

from typing import Optional, Protocol

from .model import CompensationPolicy


class PolicyRepository(Protocol):
    def get_current(self) -> Optional[CompensationPolicy]:
        """Return the live HR settings, or None when no document has been saved."""

        raise NotImplementedError
