"""Shared pytest fixtures for blendfold tests."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from blendfold.core.graph.models import (
    Condition,
    ConditionMode,
    Controller,
    Layer,
    Parameter,
    ParameterType,
    State,
    StateMachine,
    Transition,
)
from blendfold.core.motion.models import Clip, FloatCurve, Keyframe

# ============================================================================
# Motion Fixtures
# ============================================================================


@pytest.fixture
def make_clip() -> Callable[..., Clip]:
    """Factory for clips; ``animated`` adds a curve ramping from 0 to 1."""

    def _make(name: str, length: float = 1.0, loop: bool = False, animated: bool = False) -> Clip:
        if animated:
            keys = [
                Keyframe(time=0.0, value=0.0, out_tangent=1.0 / length),
                Keyframe(time=length, value=1.0, in_tangent=1.0 / length),
            ]
        else:
            keys = [Keyframe(time=0.0, value=1.0)]
        curve = FloatCurve(path="Body", property_name="m_IsActive", keys=keys)
        return Clip(name=name, length=length, loop=loop, curves=[curve])

    return _make


@pytest.fixture
def off_clip(make_clip: Callable[..., Clip]) -> Clip:
    return make_clip("Off")


@pytest.fixture
def on_clip(make_clip: Callable[..., Clip]) -> Clip:
    return make_clip("On")


# ============================================================================
# Graph Fixtures
# ============================================================================


def condition_to(
    destination: str,
    parameter: str,
    mode: ConditionMode = ConditionMode.IF,
    threshold: float = 0.0,
    **kwargs,
) -> Transition:
    """Transition to ``destination`` gated by one condition."""
    return Transition(
        destination_state=destination,
        conditions=[Condition(parameter=parameter, mode=mode, threshold=threshold)],
        **kwargs,
    )


@pytest.fixture
def transition_to() -> Callable[..., Transition]:
    return condition_to


@pytest.fixture
def toggle_layer(off_clip: Clip, on_clip: Clip) -> Layer:
    """Two-state layer switching Off/On on bool parameter "Toggle"."""
    off = State(
        name="Off",
        motion=off_clip,
        transitions=[condition_to("On", "Toggle", ConditionMode.IF)],
    )
    on = State(
        name="On",
        motion=on_clip,
        transitions=[condition_to("Off", "Toggle", ConditionMode.IF_NOT)],
    )
    return Layer(name="Toggle", state_machine=StateMachine(name="Toggle", states=[off, on]))


@pytest.fixture
def base_layer() -> Layer:
    """Empty base layer, as controllers usually start with one."""
    return Layer(name="Base Layer", state_machine=StateMachine(name="Base Layer"))


@pytest.fixture
def toggle_controller(base_layer: Layer, toggle_layer: Layer) -> Controller:
    return Controller(
        name="FX",
        layers=[base_layer, toggle_layer],
        parameters=[Parameter(name="Toggle", type=ParameterType.BOOL)],
    )


@pytest.fixture
def make_exclusive_layer(make_clip: Callable[..., Clip]) -> Callable[..., Layer]:
    """Factory for a layer selecting one of ``count`` states by Equals on ``parameter``."""

    def _make(name: str, parameter: str, count: int = 3) -> Layer:
        names = [f"{name} {i}" for i in range(count)]
        any_state = [
            condition_to(state_name, parameter, ConditionMode.EQUALS, float(i))
            for i, state_name in enumerate(names)
        ]
        states = [State(name=n, motion=make_clip(n)) for n in names]
        graph = StateMachine(name=name, states=states, any_state_transitions=any_state)
        return Layer(name=name, state_machine=graph)

    return _make
