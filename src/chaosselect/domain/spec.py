"""Targeting spec models — the declarative input of a selection call.

Field names are snake_case in Python and camelCase on the wire
(``labelSelectors``, ``podPhaseSelectors`` ...), matching experiment
manifests. Both spellings are accepted on input.

INVARIANT: ``namespaces`` and ``pod_phase_selectors`` are lists of bare or
``!``-negated tokens, not label selectors. They are joined with commas and
matched as existence requirements against ``{namespace: ""}`` and
``{phase: ""}`` respectively.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from chaosselect.domain.requirements import render_tokens
from chaosselect.domain.types import PodMode

_WIRE_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
    extra="forbid",
)


class SelectorSpec(BaseModel):
    """Which pods an experiment may act on."""

    model_config = _WIRE_CONFIG

    pods: dict[str, list[str]] = Field(default_factory=dict)
    label_selectors: dict[str, str] = Field(default_factory=dict)
    field_selectors: dict[str, str] = Field(default_factory=dict)
    nodes: list[str] = Field(default_factory=list)
    node_selectors: dict[str, str] = Field(default_factory=dict)
    namespaces: list[str] = Field(default_factory=list)
    annotation_selectors: dict[str, str] = Field(default_factory=dict)
    pod_phase_selectors: list[str] = Field(default_factory=list)

    @property
    def has_node_constraints(self) -> bool:
        return bool(self.nodes or self.node_selectors)

    def namespace_expression(self) -> str:
        """Comma-joined namespace tokens."""
        return ",".join(self.namespaces)

    def phase_expression(self) -> str:
        """Comma-joined phase tokens."""
        return ",".join(self.pod_phase_selectors)

    def annotation_expression(self) -> str:
        """Annotation keys rendered as tokens; values are ignored."""
        return render_tokens(self.annotation_selectors)

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the camelCase wire shape, omitting empty fields."""
        return self.model_dump(by_alias=True, exclude_defaults=True)


_SELECTOR_KEYS = frozenset(
    {name for name in SelectorSpec.model_fields}
    | {to_camel(name) for name in SelectorSpec.model_fields}
)


class TargetSpec(BaseModel):
    """A selector plus the sampling mode applied to its result."""

    model_config = _WIRE_CONFIG

    selector: SelectorSpec = Field(default_factory=SelectorSpec)
    mode: PodMode = PodMode.ONE
    value: str = ""

    @field_validator("value", mode="before")
    @classmethod
    def _stringify_value(cls, value: Any) -> Any:
        """YAML ``value: 50`` arrives as an int; the wire type is a string."""
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @model_validator(mode="before")
    @classmethod
    def _lift_flat_selector(cls, data: Any) -> Any:
        """Accept selector keys at the top level of a flat document."""
        if not isinstance(data, dict) or "selector" in data:
            return data
        flat = {k: v for k, v in data.items() if k in _SELECTOR_KEYS}
        if not flat:
            return data
        rest = {k: v for k, v in data.items() if k not in _SELECTOR_KEYS}
        return {**rest, "selector": flat}

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the camelCase wire shape."""
        data: dict[str, Any] = {"selector": self.selector.to_wire(), "mode": str(self.mode)}
        if self.value:
            data["value"] = self.value
        return data
