"""Pod lifecycle phases and selection modes.

Phase values mirror the Kubernetes ``PodPhase`` strings so that phase
expressions like ``Running,!Pending`` read the same as in experiment specs.
"""

from __future__ import annotations

from enum import StrEnum


class PodPhase(StrEnum):
    """Lifecycle phase of a pod."""

    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"


class PodMode(StrEnum):
    """How many of the selected pods become targets."""

    ONE = "one"
    ALL = "all"
    FIXED = "fixed"
    FIXED_PERCENT = "fixed-percent"
    RANDOM_MAX_PERCENT = "random-max-percent"
