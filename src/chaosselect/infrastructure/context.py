"""CallContext — cancellation and deadline carried through one selection call.

The pipeline checks the context before every provider call and hands it to
the provider, so a blocking backend can honour the same signal. Expiry and
cancellation both surface as :class:`ProviderCancelledError`.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field

from chaosselect.domain.errors import ProviderCancelledError


@dataclass
class CallContext:
    """Cancellation flag plus an optional monotonic deadline.

    Attributes:
        deadline: ``time.monotonic()`` value after which the call is expired,
            or None for no deadline.
    """

    deadline: float | None = None
    _cancelled: threading.Event = field(default_factory=threading.Event, repr=False)
    _reason: str = field(default="", repr=False)

    @classmethod
    def with_timeout(cls, seconds: float | None) -> CallContext:
        """Context that expires *seconds* from now (None = never)."""
        if seconds is None:
            return cls()
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self, reason: str = "context cancelled") -> None:
        """Cancel the call. Safe to invoke from another thread."""
        self._reason = reason
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def remaining(self) -> float | None:
        """Seconds left before the deadline, clamped at zero."""
        if self.deadline is None:
            return None
        return max(self.deadline - time.monotonic(), 0.0)

    def check(self, operation: str = "") -> None:
        """Raise if the call was cancelled or its deadline has passed."""
        if self._cancelled.is_set():
            msg = f"{operation}: {self._reason}" if operation else self._reason
            raise ProviderCancelledError(msg, operation=operation)
        if self.expired:
            msg = "context deadline exceeded"
            if operation:
                msg = f"{operation}: {msg}"
            raise ProviderCancelledError(msg, operation=operation)
