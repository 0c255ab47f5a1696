"""Tests for controller graph models."""

from __future__ import annotations

from pydantic import ValidationError
import pytest

from blendfold.core.graph.models import (
    Controller,
    Layer,
    State,
    StateMachine,
    Transition,
)


class TestTransition:
    """Tests for Transition."""

    def test_single_destination(self):
        """A transition cannot target a state and a sub-graph at once."""
        with pytest.raises(ValidationError):
            Transition(destination_state="On", destination_graph="Sub")

    def test_instant_by_default(self):
        assert Transition(destination_state="On").is_non_instant is False

    @pytest.mark.parametrize(
        "timing",
        [
            {"has_exit_time": True, "exit_time": 0.75},
            {"duration": 0.1},
            {"offset": 0.5},
        ],
    )
    def test_non_instant(self, timing: dict):
        assert Transition(destination_state="On", **timing).is_non_instant is True

    def test_inactive_exit_time_is_instant(self):
        """Exit time only counts while it is enabled."""
        assert Transition(exit_time=0.75).is_non_instant is False


class TestStateMachine:
    """Tests for StateMachine lookups."""

    @pytest.fixture
    def nested(self) -> StateMachine:
        sub = StateMachine(name="Sub", states=[State(name="Inner")])
        return StateMachine(
            name="Root",
            states=[State(name="A"), State(name="B")],
            sub_graphs=[sub],
        )

    def test_default_state_falls_back_to_first(self, nested: StateMachine):
        assert nested.get_default_state().name == "A"

    def test_default_state_by_name(self, nested: StateMachine):
        nested.default_state = "B"
        assert nested.get_default_state().name == "B"

    def test_find_state_is_deep(self, nested: StateMachine):
        assert nested.find_state("Inner") is not None
        assert nested.find_state("Missing") is None

    def test_iter_states_shallow(self, nested: StateMachine):
        assert [s.name for s in nested.iter_states(deep=False)] == ["A", "B"]

    def test_empty_graph_has_no_default(self):
        assert StateMachine().get_default_state() is None


class TestController:
    """Tests for Controller helpers."""

    def test_duplicate_layer_names_rejected(self):
        with pytest.raises(ValidationError, match="Duplicate layer names"):
            Controller(layers=[Layer(name="Hat"), Layer(name="Hat")])

    def test_layer_index(self, toggle_controller: Controller):
        assert toggle_controller.layer_index("Toggle") == 1
        assert toggle_controller.layer_index("Missing") is None

    def test_unique_layer_name(self):
        controller = Controller(
            layers=[Layer(name="Blendfold/MasterTree"), Layer(name="Blendfold/MasterTree 1")]
        )
        assert controller.unique_layer_name("Blendfold/MasterTree") == "Blendfold/MasterTree 2"
        assert controller.unique_layer_name("Hat") == "Hat"

    def test_get_parameter(self, toggle_controller: Controller):
        assert toggle_controller.get_parameter("Toggle") is not None
        assert toggle_controller.get_parameter("Missing") is None
