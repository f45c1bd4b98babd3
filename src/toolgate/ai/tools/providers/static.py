"""Fixed-answer approval providers for tests and trusted scripts."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from toolgate.ai.tools.base import CapabilityDescriptor

logger = logging.getLogger(__name__)


class AlwaysApproveProvider:
    """Approves every invocation without asking."""

    def __init__(self) -> None:
        logger.warning(
            "AlwaysApproveProvider in use: every function call will run "
            "without confirmation."
        )

    def decide(self, descriptor: CapabilityDescriptor, arguments: Mapping[str, Any]) -> bool:
        return True


class AlwaysDenyProvider:
    """Denies every invocation."""

    def decide(self, descriptor: CapabilityDescriptor, arguments: Mapping[str, Any]) -> bool:
        return False
