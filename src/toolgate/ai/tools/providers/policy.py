"""Policy-based approval provider for unattended runs.

Decides from configuration without ever reading input:
- Deny list: capabilities that are always rejected
- Argument rules: ordered predicates on argument values, first match wins
- Allow list: capabilities approved when no rule matched
- Default: deny

Capabilities are named either by their qualified function name
("Lights-change_state"), by their bare name ("change_state"), by a plugin
wildcard ("Lights-*") or by "*".

Example:
    >>> provider = PolicyBasedApprovalProvider(
    ...     allow={"Lights-get_lights", "Lights-get_state"},
    ...     rules=[
    ...         ArgumentRule(
    ...             capability="Lights-change_state",
    ...             argument="id",
    ...             operator="in",
    ...             value=[1, 2],
    ...             effect="allow",
    ...         )
    ...     ],
    ... )
"""

from __future__ import annotations

import logging
import operator as op
import re
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from toolgate.ai.tools.base import CapabilityDescriptor

logger = logging.getLogger(__name__)

Operator = Literal["eq", "ne", "lt", "le", "gt", "ge", "in", "not_in", "matches", "exists"]

_MISSING = object()

_COMPARATORS: dict[str, Callable[[Any, Any], bool]] = {
    "eq": op.eq,
    "ne": op.ne,
    "lt": op.lt,
    "le": op.le,
    "gt": op.gt,
    "ge": op.ge,
    "in": lambda actual, expected: actual in expected,
    "not_in": lambda actual, expected: actual not in expected,
    "matches": lambda actual, expected: re.fullmatch(str(expected), str(actual)) is not None,
}


class ArgumentRule(BaseModel):
    """Predicate on one argument of a capability.

    The rule applies when the capability matches and the predicate holds;
    its ``effect`` then decides the request. ``exists`` ignores ``value`` and
    holds when the argument was supplied at all.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    capability: str = Field(description="Capability selector, e.g. 'Lights-change_state'")
    argument: str = Field(description="Argument name to inspect")
    operator: Operator = Field(default="eq", description="Comparison operator")
    value: Any = Field(default=None, description="Value compared against")
    effect: Literal["allow", "deny"] = Field(
        default="deny",
        description="Decision when the rule matches",
    )

    def applies_to(self, descriptor: CapabilityDescriptor) -> bool:
        """Check whether the rule's selector names this capability."""
        return capability_matches(self.capability, descriptor)

    def holds(self, arguments: Mapping[str, Any]) -> bool:
        """Evaluate the predicate against concrete arguments.

        A comparison that cannot be made (missing argument, incompatible
        types) does not hold.
        """
        actual = arguments.get(self.argument, _MISSING)
        if self.operator == "exists":
            return actual is not _MISSING
        if actual is _MISSING:
            return False
        try:
            return bool(_COMPARATORS[self.operator](actual, self.value))
        except (TypeError, re.error) as e:
            logger.debug(f"Rule {self!r} not evaluated: {e}")
            return False


def capability_matches(selector: str, descriptor: CapabilityDescriptor) -> bool:
    """Match a selector against a capability descriptor."""
    if selector in ("*", descriptor.name, descriptor.qualified_name):
        return True
    if selector.endswith("-*") and descriptor.plugin_name:
        return selector[:-2] == descriptor.plugin_name
    return False


class PolicyBasedApprovalProvider:
    """Non-blocking approval provider driven by configuration.

    Approval Rules (evaluated in order):
    1. Capability on the deny list: deny
    2. First argument rule that applies and holds: its effect
    3. Capability on the allow list: approve
    4. Otherwise: ``default`` (deny unless configured otherwise)

    Attributes:
        allow: Selectors always approved when no rule matched
        deny: Selectors always denied
        rules: Ordered argument rules
        default: Decision when nothing matched
    """

    def __init__(
        self,
        allow: Iterable[str] | None = None,
        deny: Iterable[str] | None = None,
        rules: Iterable[ArgumentRule] | None = None,
        default: bool = False,
    ) -> None:
        self.allow = frozenset(allow or ())
        self.deny = frozenset(deny or ())
        self.rules = tuple(rules or ())
        self.default = default

        if default:
            logger.warning(
                "PolicyBasedApprovalProvider created with default=True: calls "
                "not matched by any rule will run without confirmation."
            )

    def decide(
        self,
        descriptor: CapabilityDescriptor,
        arguments: Mapping[str, Any],
    ) -> bool:
        """Evaluate the policy and return the decision immediately."""
        name = descriptor.qualified_name

        if any(capability_matches(s, descriptor) for s in self.deny):
            logger.debug(f"'{name}' denied: on deny list")
            return False

        for rule in self.rules:
            if rule.applies_to(descriptor) and rule.holds(arguments):
                logger.debug(
                    f"'{name}' {rule.effect}: {rule.argument} {rule.operator} {rule.value!r}"
                )
                return rule.effect == "allow"

        if any(capability_matches(s, descriptor) for s in self.allow):
            logger.debug(f"'{name}' approved: on allow list")
            return True

        logger.debug(f"'{name}' {'approved' if self.default else 'denied'}: default")
        return self.default
