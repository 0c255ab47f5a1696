"""Animator controller graph models.

This module defines the read-only graph the classifier inspects:
- Parameter: a controller-wide named value (float/int/bool/trigger)
- Condition / Transition: gated edges between states
- State: a node playing a motion
- StateMachine: states, special transition sets and nested sub-graphs
- Layer / Controller: the layered container

Destinations are referenced by name. State names are unique within one
layer's state machine hierarchy, sub-graph names within their parent.
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from blendfold.core.motion.models import Motion


class ParameterType(str, Enum):
    """Value type of a controller parameter."""

    FLOAT = "float"
    INT = "int"
    BOOL = "bool"
    TRIGGER = "trigger"


class ConditionMode(str, Enum):
    """Comparison applied by a transition condition."""

    IF = "if"
    IF_NOT = "if_not"
    GREATER = "greater"
    LESS = "less"
    EQUALS = "equals"
    NOT_EQUAL = "not_equal"


class Parameter(BaseModel):
    """A controller parameter.

    Example:
        >>> Parameter(name="Toggle", type=ParameterType.BOOL)
        Parameter(name='Toggle', type=<ParameterType.BOOL: 'bool'>, default=0.0)
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1)
    type: ParameterType = ParameterType.FLOAT
    default: float = 0.0


class Condition(BaseModel):
    """A single transition condition."""

    model_config = ConfigDict(extra="forbid")

    parameter: str
    mode: ConditionMode = ConditionMode.IF
    threshold: float = 0.0


class Transition(BaseModel):
    """A conditionally gated edge.

    A transition leads to ``destination_state``, to the nested sub-graph
    ``destination_graph``, or exits the state machine when neither is set.

    Attributes:
        name: Optional transition name.
        conditions: Conditions that must all hold.
        destination_state: Name of the target state.
        destination_graph: Name of the target sub-graph.
        is_exit: Explicit exit transition flag.
        mute: Muted transitions never fire.
        has_exit_time: Whether exit_time gates the transition.
        exit_time: Normalized exit time.
        duration: Blend duration.
        offset: Normalized start offset in the destination state.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = ""
    conditions: list[Condition] = Field(default_factory=list)
    destination_state: str | None = None
    destination_graph: str | None = None
    is_exit: bool = False
    mute: bool = False
    has_exit_time: bool = False
    exit_time: float = 0.0
    duration: float = 0.0
    offset: float = 0.0

    @model_validator(mode="after")
    def _validate_single_destination(self) -> Transition:
        if self.destination_state is not None and self.destination_graph is not None:
            raise ValueError("Transition cannot target both a state and a sub-graph")
        return self

    @property
    def targets_graph(self) -> bool:
        return self.destination_graph is not None

    @property
    def is_non_instant(self) -> bool:
        """True if the transition waits, blends or starts mid-motion."""
        return (self.has_exit_time and self.exit_time > 0) or self.duration > 0 or self.offset > 0


class State(BaseModel):
    """A state playing one motion.

    Attributes:
        name: State name.
        motion: Motion played by the state, or None.
        speed: Playback speed; 0 freezes the motion.
        time_parameter: Parameter driving normalized playback position.
        time_parameter_active: Whether time_parameter is in effect.
        behaviors: Names of attached state behavior scripts.
        transitions: Outbound transitions.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1)
    motion: Motion | None = None
    speed: float = 1.0
    time_parameter: str = ""
    time_parameter_active: bool = False
    behaviors: list[str] = Field(default_factory=list)
    transitions: list[Transition] = Field(default_factory=list)

    @property
    def has_behaviors(self) -> bool:
        return bool(self.behaviors)

    @property
    def is_motion_timed(self) -> bool:
        return self.time_parameter_active and bool(self.time_parameter)


class StateMachine(BaseModel):
    """A state machine graph, possibly holding nested sub-graphs.

    Attributes:
        name: Graph name.
        states: States owned directly by this graph, in declared order.
        default_state: Name of the default state (first state if unset).
        entry_transitions: Transitions leaving the entry node.
        any_state_transitions: Transitions that may fire from any state.
        sub_graphs: Nested state machines.
        sub_graph_transitions: Transitions leaving a nested sub-graph node,
            keyed by sub-graph name.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = ""
    states: list[State] = Field(default_factory=list)
    default_state: str | None = None
    entry_transitions: list[Transition] = Field(default_factory=list)
    any_state_transitions: list[Transition] = Field(default_factory=list)
    sub_graphs: list[StateMachine] = Field(default_factory=list)
    sub_graph_transitions: dict[str, list[Transition]] = Field(default_factory=dict)

    def get_default_state(self) -> State | None:
        """Return the default state, falling back to the first state."""
        if self.default_state is not None:
            state = self.find_state(self.default_state)
            if state is not None:
                return state
        return self.states[0] if self.states else None

    def iter_states(self, deep: bool = True) -> Iterator[State]:
        """Yield states in declared order, then states of sub-graphs."""
        yield from self.states
        if deep:
            for sub in self.sub_graphs:
                yield from sub.iter_states(deep=True)

    def find_state(self, name: str) -> State | None:
        """Find a state by name anywhere in the hierarchy."""
        return next((s for s in self.iter_states() if s.name == name), None)


class Layer(BaseModel):
    """A controller layer owning one root state machine."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1)
    state_machine: StateMachine | None = None
    default_weight: float = Field(default=1.0, ge=0.0, le=1.0)


class Controller(BaseModel):
    """A layered animator controller.

    Example:
        >>> controller = Controller(name="FX", layers=[Layer(name="Base Layer")])
        >>> controller.layer_index("Base Layer")
        0
    """

    model_config = ConfigDict(extra="forbid")

    name: str = ""
    layers: list[Layer] = Field(default_factory=list)
    parameters: list[Parameter] = Field(default_factory=list)

    @model_validator(mode="after")
    def _validate_unique_layer_names(self) -> Controller:
        names = [layer.name for layer in self.layers]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate layer names: {duplicates}")
        return self

    def get_parameter(self, name: str) -> Parameter | None:
        return next((p for p in self.parameters if p.name == name), None)

    def get_layer(self, name: str) -> Layer | None:
        return next((layer for layer in self.layers if layer.name == name), None)

    def layer_index(self, name: str) -> int | None:
        """Index of the layer named ``name``, or None."""
        for i, layer in enumerate(self.layers):
            if layer.name == name:
                return i
        return None

    def unique_layer_name(self, base: str) -> str:
        """Return ``base`` or ``"base N"`` so that no layer already uses it."""
        taken = {layer.name for layer in self.layers}
        if base not in taken:
            return base
        n = 1
        while f"{base} {n}" in taken:
            n += 1
        return f"{base} {n}"


StateMachine.model_rebuild()
