"""BaseService — abstract foundation for chaosselect services.

Every service receives its collaborators at construction time: the
:class:`CandidateProvider` it reads from and the :class:`NamespacePolicy`
it enforces. Nothing is read from process-wide state, so services with
different policies can coexist.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from chaosselect.infrastructure.policy import ALLOW_ALL
from chaosselect.services.result import ServiceResult

if TYPE_CHECKING:
    from chaosselect.domain.errors import SelectionError
    from chaosselect.infrastructure.policy import NamespacePolicy
    from chaosselect.infrastructure.provider import CandidateProvider

logger = logging.getLogger(__name__)


class BaseService:
    """Abstract base for service-layer classes.

    Usage::

        class TargetingService(BaseService):
            def select_pods(self, selector) -> ServiceResult:
                try:
                    ...
                except SelectionError as exc:
                    return self._fail("select_pods", exc, warnings)
    """

    def __init__(
        self,
        provider: CandidateProvider,
        *,
        policy: NamespacePolicy | None = None,
    ) -> None:
        self._provider = provider
        self._policy = policy if policy is not None else ALLOW_ALL

    def _fail(
        self,
        op: str,
        exc: SelectionError,
        warnings: list[str] | None = None,
    ) -> ServiceResult:
        """Convert a domain error into a failed ServiceResult.

        INVARIANT: Only SelectionError is converted. Anything else is a bug
        and propagates.
        """
        logger.debug("%s failed: %s (%s)", op, exc.message, exc.code)
        return ServiceResult.failure(op, exc, warnings=warnings)
