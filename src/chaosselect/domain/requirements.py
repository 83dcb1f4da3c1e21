"""Requirement expressions — parsing and existence-only matching.

An expression is a comma-joined list of requirements in label-selector
syntax::

    kube-system            key exists
    !kube-system           key does not exist
    tier=web, tier!=db     equality (parsed, never evaluated)
    env in (prod, stage)   set membership (parsed, never evaluated)

The matcher only evaluates ``Exists`` and ``DoesNotExist``. A single engine
serves three attributes through projections that turn a pod into a key set:
``{namespace: ""}``, ``{phase: ""}``, or the pod's annotations.

Matching rules:
- With no Exists requirement a key set is included by default; otherwise it
  is included when ANY Exists key is present.
- It is excluded when ANY DoesNotExist key is present.
- Any other operator raises :class:`UnsupportedOperatorError`.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from chaosselect.domain.errors import SelectorParseError, UnsupportedOperatorError

if TYPE_CHECKING:
    from chaosselect.domain.models import Pod


class Operator(StrEnum):
    """Requirement operators recognised by the parser."""

    EXISTS = "exists"
    DOES_NOT_EXIST = "!"
    EQUALS = "="
    DOUBLE_EQUALS = "=="
    NOT_EQUALS = "!="
    IN = "in"
    NOT_IN = "notin"
    GREATER_THAN = "gt"
    LESS_THAN = "lt"

    @property
    def is_existence(self) -> bool:
        """True for the only two operators the matcher evaluates."""
        return self in (Operator.EXISTS, Operator.DOES_NOT_EXIST)

# --- Qualified-name validation (Kubernetes label key/value rules) ---

_NAME_MAX = 63
_PREFIX_MAX = 253
_NAME_RE = re.compile(r"^([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9]$")
_PREFIX_RE = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$")

# --- Token grammar ---

_SET_RE = re.compile(r"^(?P<key>\S+)\s+(?P<op>in|notin)\s*\((?P<values>[^()]*)\)$")
_BINARY_RE = re.compile(r"^(?P<key>[^=!<>\s]+)\s*(?P<op>==|!=|=|>|<)\s*(?P<value>.*)$")
_BINARY_OPS: dict[str, Operator] = {
    "=": Operator.EQUALS,
    "==": Operator.DOUBLE_EQUALS,
    "!=": Operator.NOT_EQUALS,
    ">": Operator.GREATER_THAN,
    "<": Operator.LESS_THAN,
}


@dataclass(frozen=True)
class Requirement:
    """A single constraint on one key."""

    key: str
    operator: Operator
    values: tuple[str, ...] = ()

    def matches(self, key_set: Mapping[str, str]) -> bool:
        """Evaluate an existence requirement against *key_set*.

        Raises:
            UnsupportedOperatorError: For any operator other than
                Exists/DoesNotExist.
        """
        if self.operator == Operator.EXISTS:
            return self.key in key_set
        if self.operator == Operator.DOES_NOT_EXIST:
            return self.key not in key_set
        msg = f"unsupported operator: {self.operator.value}"
        raise UnsupportedOperatorError(msg, requirement=str(self))

    def __str__(self) -> str:
        match self.operator:
            case Operator.EXISTS:
                return self.key
            case Operator.DOES_NOT_EXIST:
                return f"!{self.key}"
            case Operator.IN | Operator.NOT_IN:
                return f"{self.key} {self.operator.value} ({','.join(self.values)})"
            case Operator.GREATER_THAN:
                return f"{self.key}>{self.values[0]}"
            case Operator.LESS_THAN:
                return f"{self.key}<{self.values[0]}"
            case _:
                return f"{self.key}{self.operator.value}{self.values[0]}"


@dataclass(frozen=True)
class RequirementExpression:
    """An ordered set of requirements parsed from one expression string."""

    requirements: tuple[Requirement, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.requirements

    def _partition(self) -> tuple[list[Requirement], list[Requirement]]:
        """Split into (including, excluding) requirements."""
        including: list[Requirement] = []
        excluding: list[Requirement] = []
        for req in self.requirements:
            if req.operator == Operator.EXISTS:
                including.append(req)
            elif req.operator == Operator.DOES_NOT_EXIST:
                excluding.append(req)
            else:
                msg = f"unsupported operator: {req.operator.value}"
                raise UnsupportedOperatorError(msg, requirement=str(req))
        return including, excluding

    @staticmethod
    def _admits(
        key_set: Mapping[str, str],
        including: list[Requirement],
        excluding: list[Requirement],
    ) -> bool:
        # with no including requirement, everything is in by default
        included = not including or any(req.matches(key_set) for req in including)
        if not included:
            return False
        # a single violated exclusion is enough to drop the item
        return all(req.matches(key_set) for req in excluding)

    def matches(self, key_set: Mapping[str, str]) -> bool:
        """Whether *key_set* satisfies this expression.

        An empty expression matches everything.
        """
        if self.is_empty:
            return True
        including, excluding = self._partition()
        return self._admits(key_set, including, excluding)

    def filter[T](
        self,
        items: Sequence[T],
        key_set_of: Callable[[T], Mapping[str, str]],
    ) -> list[T]:
        """Keep the items whose projected key set matches, in order.

        Operators are validated up front, so an unsupported operator fails
        even when *items* is empty.
        """
        if self.is_empty:
            return list(items)
        including, excluding = self._partition()
        return [item for item in items if self._admits(key_set_of(item), including, excluding)]

    def __str__(self) -> str:
        return ",".join(str(req) for req in self.requirements)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def validate_key(key: str) -> None:
    """Raise :class:`SelectorParseError` unless *key* is a qualified name."""
    parts = key.split("/")
    if len(parts) == 1:
        name = parts[0]
    elif len(parts) == 2:
        prefix, name = parts
        if not prefix or len(prefix) > _PREFIX_MAX or not _PREFIX_RE.match(prefix):
            msg = f"invalid key prefix in {key!r}: must be a DNS subdomain"
            raise SelectorParseError(msg, key=key)
    else:
        msg = f"invalid key {key!r}: at most one '/' is allowed"
        raise SelectorParseError(msg, key=key)

    if not name or len(name) > _NAME_MAX or not _NAME_RE.match(name):
        msg = (
            f"invalid key {key!r}: name must be 1-{_NAME_MAX} characters, "
            "alphanumeric at both ends, with '-', '_' or '.' inside"
        )
        raise SelectorParseError(msg, key=key)


def validate_value(value: str) -> None:
    """Raise :class:`SelectorParseError` unless *value* is a valid label value."""
    if not value:
        return
    if len(value) > _NAME_MAX or not _NAME_RE.match(value):
        msg = f"invalid value {value!r}"
        raise SelectorParseError(msg, value=value)


def _split_tokens(text: str) -> list[str]:
    """Split on commas that are not inside parentheses."""
    tokens: list[str] = []
    current: list[str] = []
    depth = 0
    for ch in text:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth < 0:
                msg = f"unbalanced ')' in {text!r}"
                raise SelectorParseError(msg, expression=text)
        elif ch == "," and depth == 0:
            tokens.append("".join(current))
            current = []
            continue
        current.append(ch)
    if depth != 0:
        msg = f"unbalanced '(' in {text!r}"
        raise SelectorParseError(msg, expression=text)
    tokens.append("".join(current))
    return tokens


def _parse_token(token: str, text: str) -> Requirement:
    token = token.strip()
    if not token:
        msg = f"empty requirement in {text!r}"
        raise SelectorParseError(msg, expression=text)

    if token.startswith("!"):
        key = token[1:].strip()
        validate_key(key)
        return Requirement(key, Operator.DOES_NOT_EXIST)

    set_match = _SET_RE.match(token)
    if set_match:
        key = set_match["key"]
        validate_key(key)
        values = tuple(sorted({v.strip() for v in set_match["values"].split(",")} - {""}))
        if not values:
            msg = f"{set_match['op']!r} requires at least one value in {token!r}"
            raise SelectorParseError(msg, expression=text)
        for value in values:
            validate_value(value)
        return Requirement(key, Operator(set_match["op"]), values)

    binary_match = _BINARY_RE.match(token)
    if binary_match:
        key = binary_match["key"]
        validate_key(key)
        op = _BINARY_OPS[binary_match["op"]]
        value = binary_match["value"].strip()
        if op in (Operator.GREATER_THAN, Operator.LESS_THAN):
            try:
                int(value)
            except ValueError:
                msg = f"{binary_match['op']!r} requires an integer value in {token!r}"
                raise SelectorParseError(msg, expression=text) from None
        else:
            validate_value(value)
        return Requirement(key, op, (value,))

    validate_key(token)
    return Requirement(token, Operator.EXISTS)


def parse_requirements(text: str) -> RequirementExpression:
    """Parse a comma-joined requirement expression.

    Empty or whitespace-only text yields an empty expression, which matches
    everything.

    Raises:
        SelectorParseError: If any token is malformed.

    Examples:
        >>> str(parse_requirements("default, !kube-system"))
        'default,!kube-system'
        >>> parse_requirements("").is_empty
        True
    """
    if not text.strip():
        return RequirementExpression()
    return RequirementExpression(tuple(_parse_token(t, text) for t in _split_tokens(text)))


# ---------------------------------------------------------------------------
# Pod projections
# ---------------------------------------------------------------------------


def namespace_key_set(pod: Pod) -> dict[str, str]:
    """Project a pod's namespace into a single-key set."""
    return {pod.namespace: ""}


def phase_key_set(pod: Pod) -> dict[str, str]:
    """Project a pod's phase into a single-key set."""
    return {str(pod.phase): ""}


def annotation_key_set(pod: Pod) -> Mapping[str, str]:
    return pod.annotations


def render_tokens(mapping: Mapping[str, str]) -> str:
    """Render a key/value map as comma-joined key tokens.

    Values are ignored and empty keys are skipped.
    """
    return ",".join(key for key in mapping if key)


def labels_match(selector: Mapping[str, str], labels: Mapping[str, str]) -> bool:
    """Equality match: every selector key is present with the same value.

    An empty selector matches every label set.
    """
    return all(key in labels and labels[key] == value for key, value in selector.items())
