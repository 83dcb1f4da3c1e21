"""Sampling — pick the final targets from a filtered pod list.

Randomness always comes from an explicitly constructed ``random.Random``
owned by the :class:`Sampler`; module-level random state is never used.
Seed the generator for deterministic runs.
"""

from __future__ import annotations

import random
import re
import threading
from collections.abc import Sequence

from chaosselect.domain.errors import EmptyPoolError, InvalidModeValueError
from chaosselect.domain.types import PodMode

# Optional sign followed by ASCII digits; no whitespace, no underscores.
_INT_RE = re.compile(r"[+-]?[0-9]+")


def random_fixed_indexes(
    start: int,
    end: int,
    count: int,
    rng: random.Random | None = None,
) -> list[int]:
    """Return *count* distinct random indexes from the half-open range ``[start, end)``.

    - ``end < start``: empty list.
    - ``count >= end - start``: every index in ascending order (not shuffled).
    - Otherwise: *count* distinct indexes, uniformly drawn, in draw order.
    """
    if end < start:
        return []
    if count >= end - start:
        return list(range(start, end))
    if count <= 0:
        return []
    rng = rng if rng is not None else random.Random()
    return rng.sample(range(start, end), count)


def parse_mode_value(mode: PodMode, value: str) -> int:
    """Parse the integer carried by *value* for *mode*.

    Raises:
        InvalidModeValueError: If *value* is not a plain decimal integer.
    """
    if not _INT_RE.fullmatch(value):
        msg = f"{mode} value {value!r} is not an integer"
        raise InvalidModeValueError(msg, mode=str(mode), value=value)
    return int(value)


class Sampler:
    """Applies a :class:`PodMode` to a list of candidates.

    Safe to share across threads: draws from the owned generator are
    serialized by a lock.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng if rng is not None else random.Random()
        self._lock = threading.Lock()

    @classmethod
    def seeded(cls, seed: int | None) -> Sampler:
        """Sampler over a fresh generator seeded with *seed* (None = OS entropy)."""
        return cls(random.Random(seed))

    def target_count(self, total: int, mode: PodMode, value: str) -> int:
        """How many of *total* candidates *mode* selects.

        Random-max-percent draws its percentage here, so repeated calls may
        differ.
        """
        match mode:
            case PodMode.ONE:
                return 1
            case PodMode.ALL:
                return total
            case PodMode.FIXED:
                num = min(parse_mode_value(mode, value), total)
                if num <= 0:
                    msg = "cannot select any pod as value below or equal 0"
                    raise InvalidModeValueError(msg, mode=str(mode), value=value)
                return num
            case PodMode.FIXED_PERCENT:
                percentage = parse_mode_value(mode, value)
                if percentage == 0:
                    msg = "cannot select any pod as value below or equal 0"
                    raise InvalidModeValueError(msg, mode=str(mode), value=value)
                if percentage < 0 or percentage > 100:
                    msg = f"fixed percentage value of {percentage} is invalid, must be (0,100]"
                    raise InvalidModeValueError(msg, mode=str(mode), value=value)
                return total * percentage // 100
            case PodMode.RANDOM_MAX_PERCENT:
                max_percentage = parse_mode_value(mode, value)
                if max_percentage == 0:
                    msg = "cannot select any pod as value below or equal 0"
                    raise InvalidModeValueError(msg, mode=str(mode), value=value)
                if max_percentage < 0 or max_percentage > 100:
                    msg = f"max percentage value of {max_percentage} is invalid, must be [0,100]"
                    raise InvalidModeValueError(msg, mode=str(mode), value=value)
                with self._lock:
                    percentage = self._rng.randint(0, max_percentage)
                return total * percentage // 100
        msg = f"mode {mode} not supported"
        raise InvalidModeValueError(msg, mode=str(mode))

    def sample[T](self, items: Sequence[T], mode: PodMode | str, value: str = "") -> list[T]:
        """Select the final targets from *items* according to *mode*.

        Raises:
            EmptyPoolError: If *items* is empty (checked before the mode).
            InvalidModeValueError: If the mode is unknown or its value is
                invalid for it.
        """
        if not items:
            msg = "cannot generate pods from empty list"
            raise EmptyPoolError(msg)

        try:
            mode = PodMode(mode)
        except ValueError:
            msg = f"mode {mode} not supported"
            raise InvalidModeValueError(msg, mode=str(mode)) from None

        if mode == PodMode.ALL:
            return list(items)
        if mode == PodMode.ONE:
            with self._lock:
                return [items[self._rng.randrange(len(items))]]

        count = self.target_count(len(items), mode, value)
        with self._lock:
            indexes = random_fixed_indexes(0, len(items), count, self._rng)
        return [items[i] for i in indexes]
