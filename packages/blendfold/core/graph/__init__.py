"""Animator controller graph models and traversal."""

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
from blendfold.core.graph.walker import find_transition, iter_transitions, walk

__all__ = [
    "Condition",
    "ConditionMode",
    "Controller",
    "Layer",
    "Parameter",
    "ParameterType",
    "State",
    "StateMachine",
    "Transition",
    "find_transition",
    "iter_transitions",
    "walk",
]
