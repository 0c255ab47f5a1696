"""Tests for transition traversal."""

from __future__ import annotations

import pytest

from blendfold.core.graph.models import State, StateMachine, Transition
from blendfold.core.graph.walker import find_transition, iter_transitions, walk


@pytest.fixture
def graph() -> StateMachine:
    """Root graph touching every transition source once."""
    sub = StateMachine(
        name="Sub",
        states=[State(name="Inner", transitions=[Transition(name="inner", destination_state="A")])],
    )
    return StateMachine(
        name="Root",
        states=[State(name="A", transitions=[Transition(name="state", destination_state="A")])],
        entry_transitions=[Transition(name="entry", destination_state="A")],
        any_state_transitions=[Transition(name="any", destination_state="A")],
        sub_graphs=[sub],
        sub_graph_transitions={"Sub": [Transition(name="sub_node", destination_state="A")]},
    )


class TestIterTransitions:
    """Tests for iter_transitions ordering."""

    def test_deep_order(self, graph: StateMachine):
        names = [t.name for t in iter_transitions(graph)]
        assert names == ["entry", "any", "state", "sub_node", "inner"]

    def test_shallow_skips_sub_graph_contents(self, graph: StateMachine):
        """Sub-graph node transitions belong to the parent graph."""
        names = [t.name for t in iter_transitions(graph, deep=False)]
        assert names == ["entry", "any", "state", "sub_node"]

    def test_empty_graph(self):
        assert list(iter_transitions(StateMachine())) == []


class TestWalk:
    """Tests for early-exit walking."""

    def test_stops_at_first_true(self, graph: StateMachine):
        seen: list[str] = []

        def visit(t: Transition) -> bool:
            seen.append(t.name)
            return t.name == "any"

        walk(graph, visit)
        assert seen == ["entry", "any"]

    def test_visits_all_when_never_true(self, graph: StateMachine):
        seen: list[str] = []
        walk(graph, lambda t: seen.append(t.name) is not None)
        assert len(seen) == 5

    def test_walk_does_not_modify_graph(self, graph: StateMachine):
        before = graph.model_dump()
        walk(graph, lambda t: False)
        assert graph.model_dump() == before


def test_find_transition(graph: StateMachine):
    assert find_transition(graph, lambda t: t.name == "inner").name == "inner"
    assert find_transition(graph, lambda t: t.name == "inner", deep=False) is None
