"""Namespace allow/deny policy.

Two mutually exclusive regex modes, evaluated with an unanchored search:
- ``allowed``: a namespace passes only if the pattern matches. Wins if set.
- ``ignored``: a namespace passes only if the pattern does NOT match.

With neither configured every namespace passes. A malformed pattern makes
the policy deny every namespace it is asked about.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from chaosselect.config.models import PolicyConfig

logger = logging.getLogger(__name__)


class NamespacePolicy(Protocol):
    def is_allowed(self, namespace: str) -> bool: ...


class RegexNamespacePolicy:
    """Regex-backed :class:`NamespacePolicy`."""

    def __init__(self, allowed: str | None = None, ignored: str | None = None) -> None:
        self.allowed = allowed or None
        self.ignored = ignored or None
        self._pattern: re.Pattern[str] | None = None
        self._invalid = False

        source = self.allowed or self.ignored
        if source is None:
            return
        try:
            self._pattern = re.compile(source)
        except re.error as exc:
            logger.error("Invalid namespace pattern %r, denying all namespaces: %s", source, exc)
            self._invalid = True

    @classmethod
    def from_config(cls, config: PolicyConfig) -> RegexNamespacePolicy:
        return cls(allowed=config.allowed_namespaces, ignored=config.ignored_namespaces)

    def is_allowed(self, namespace: str) -> bool:
        """Whether chaos may act on pods in *namespace*."""
        if self._invalid:
            return False
        if self._pattern is None:
            return True
        matched = self._pattern.search(namespace) is not None
        if self.allowed is not None:
            return matched
        return not matched


ALLOW_ALL = RegexNamespacePolicy()
