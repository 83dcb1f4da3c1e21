"""Error taxonomy for selection and sampling.

Every error carries a stable ``code`` so the service layer can turn it into
a :class:`~chaosselect.services.result.ServiceError` without inspecting
message text. Not-found on an explicit lookup is never an error.
"""

from __future__ import annotations

from typing import Any


class SelectionError(Exception):
    """Base class for all errors raised while selecting or sampling pods."""

    code: str = "SELECTION_ERROR"

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class ProviderError(SelectionError):
    """The candidate provider failed (transport or backend error)."""

    code = "PROVIDER_ERROR"


class ProviderCancelledError(ProviderError):
    """The call was cancelled or its deadline expired before a provider call."""

    code = "CANCELLED"


class SelectorParseError(SelectionError):
    """A requirement expression could not be parsed."""

    code = "PARSE_ERROR"


class UnsupportedOperatorError(SelectionError):
    """A requirement used an operator other than Exists/DoesNotExist."""

    code = "UNSUPPORTED_OPERATOR"


class InvalidModeValueError(SelectionError, ValueError):
    """The mode's value is not a valid integer for that mode, or the mode is unknown."""

    code = "INVALID_VALUE"


class EmptyPoolError(SelectionError):
    """Sampling was attempted on an empty pod list."""

    code = "NO_POD_SELECTED"
