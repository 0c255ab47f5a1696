"""Transition traversal over state machine graphs.

Entry, any-state, per-state and sub-graph node transitions are flattened
into one logical edge sequence, so callers scan a single stream instead of
recursing through the graph themselves.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator

from blendfold.core.graph.models import StateMachine, Transition

TransitionPredicate = Callable[[Transition], bool]


def iter_transitions(graph: StateMachine, deep: bool = True) -> Iterator[Transition]:
    """Yield every transition of a graph in traversal order.

    Order:
    1. Entry transitions
    2. Any-state transitions
    3. Each state's own transitions, states in declared order
    4. Transitions leaving nested sub-graph nodes, treated as edges of
       this graph
    5. If ``deep``, the same sequence for each sub-graph, recursively

    Args:
        graph: Root state machine.
        deep: Whether to descend into sub-graphs.

    Yields:
        Transitions; the graph is never modified.
    """
    yield from graph.entry_transitions
    yield from graph.any_state_transitions
    for state in graph.states:
        yield from state.transitions
    for sub in graph.sub_graphs:
        yield from graph.sub_graph_transitions.get(sub.name, [])

    if not deep:
        return
    for sub in graph.sub_graphs:
        if sub is not graph:
            yield from iter_transitions(sub, deep=True)


def walk(graph: StateMachine, predicate: TransitionPredicate, deep: bool = True) -> None:
    """Invoke ``predicate`` on each transition until it returns True.

    A True result stops the whole walk at that transition. What True means
    (found, or disqualified) is up to the caller.

    Example:
        >>> seen: list[Transition] = []
        >>> walk(graph, lambda t: seen.append(t) or t.mute)
    """
    for transition in iter_transitions(graph, deep=deep):
        if predicate(transition):
            return


def find_transition(
    graph: StateMachine, predicate: TransitionPredicate, deep: bool = True
) -> Transition | None:
    """Return the first transition matching ``predicate``, or None."""
    return next((t for t in iter_transitions(graph, deep=deep) if predicate(t)), None)
