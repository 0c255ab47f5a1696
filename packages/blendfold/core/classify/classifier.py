"""Layer pattern classification.

Decides whether one controller layer can be flattened into a blend tree
branch and, if so, builds the BranchDescriptor. Recognised patterns:

- SINGLE_STATE: the layer only ever plays one motion.
- MOTION_TIME_STATE: one state whose clip position follows a float
  parameter; assembled as a 1D blend over the clip's sliced frames.
- TOGGLE / EXCLUSIVE_TOGGLE: every transition is gated by the same
  parameter, and each value of that parameter selects exactly one state.

Layers that fit none of these are rejected (``None``). A rejection is not
an error; the layer is simply left as it is.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import NamedTuple

from blendfold.core.classify.models import (
    BranchDescriptor,
    BranchEntry,
    BranchPattern,
    Diagnostic,
    DiagnosticSeverity,
)
from blendfold.core.config.models import OptimizerConfig
from blendfold.core.graph.models import (
    Condition,
    ConditionMode,
    Controller,
    Layer,
    ParameterType,
    State,
    StateMachine,
    Transition,
)
from blendfold.core.graph.walker import find_transition, iter_transitions
from blendfold.core.motion.analyzer import MotionAnalyzer
from blendfold.core.motion.models import Clip

logger = logging.getLogger(__name__)


class Outcome(Enum):
    """Result of examining one transition."""

    CONTINUE = auto()
    REJECT = auto()


class StepResult(NamedTuple):
    outcome: Outcome
    reason: str = ""


_CONTINUE = StepResult(Outcome.CONTINUE)


def _reject(reason: str) -> StepResult:
    return StepResult(Outcome.REJECT, reason)


@dataclass
class _DiagnosticLog:
    """Ordered diagnostics without duplicates."""

    items: list[Diagnostic] = field(default_factory=list)

    def add(self, severity: DiagnosticSeverity, message: str) -> None:
        diagnostic = Diagnostic(severity=severity, message=message)
        if diagnostic not in self.items:
            self.items.append(diagnostic)

    def info(self, message: str) -> None:
        self.add(DiagnosticSeverity.INFO, message)

    def warning(self, message: str) -> None:
        self.add(DiagnosticSeverity.WARNING, message)

    def error(self, message: str) -> None:
        self.add(DiagnosticSeverity.ERROR, message)

    @property
    def has_errors(self) -> bool:
        return any(d.severity == DiagnosticSeverity.ERROR for d in self.items)

    @property
    def has_warnings(self) -> bool:
        return any(d.severity == DiagnosticSeverity.WARNING for d in self.items)


@dataclass
class _ToggleScan:
    """Accumulated facts about a multi-state layer."""

    graph: StateMachine
    config: OptimizerConfig
    parameter: str = ""
    state_by_threshold: dict[float, State] = field(default_factory=dict)
    threshold_by_state: dict[str, float] = field(default_factory=dict)
    diagnostics: _DiagnosticLog = field(default_factory=_DiagnosticLog)
    timing_noted: bool = False

    @property
    def succeeded(self) -> bool:
        return bool(self.parameter) and len(self.state_by_threshold) >= 2

    def step(self, transition: Transition) -> StepResult:
        """Examine one transition of the layer."""
        if transition.mute:
            return _CONTINUE
        if transition.targets_graph:
            return _reject(f"transition into sub-graph {transition.destination_graph!r}")
        if not transition.conditions:
            return _reject("unconditional transition")

        first = transition.conditions[0]
        if first.parameter in self.config.builtin_parameters:
            return _reject(f"transition driven by built-in parameter {first.parameter!r}")

        for extra in transition.conditions[1:]:
            if not self._is_gating_parameter(extra.parameter):
                return _reject(f"transition gated by second parameter {extra.parameter!r}")

        if transition.destination_state is not None:
            result = self._record(transition, first)
            if result.outcome is Outcome.REJECT:
                return result

        if transition.is_non_instant and not self.timing_noted:
            self.timing_noted = True
            self.diagnostics.info(
                "Transitions use exit time, blend duration or offset; "
                "the flattened branch switches instantly, so timing may change"
            )
        return _CONTINUE

    def _record(self, transition: Transition, condition: Condition) -> StepResult:
        if self.parameter and self.parameter != condition.parameter:
            return _reject(
                f"transitions driven by both {self.parameter!r} and {condition.parameter!r}"
            )
        self.parameter = condition.parameter

        threshold = self._normalize(condition)
        if threshold is None:
            return _reject(f"NotEqual condition on {condition.parameter!r}")

        destination = self.graph.find_state(transition.destination_state or "")
        if destination is None:
            return _reject(f"unknown destination state {transition.destination_state!r}")

        recorded = self.state_by_threshold.get(threshold)
        if recorded is not None and recorded.name != destination.name:
            return _reject(
                f"threshold {threshold} leads to both {recorded.name!r} and {destination.name!r}"
            )
        previous = self.threshold_by_state.get(destination.name)
        if previous is not None and previous != threshold:
            return _reject(
                f"state {destination.name!r} reached at thresholds {previous} and {threshold}"
            )

        if recorded is None and previous is None:
            self.state_by_threshold[threshold] = destination
            self.threshold_by_state[destination.name] = threshold
            if (
                destination.speed == 0
                and destination.motion is not None
                and destination.motion.is_looping
            ):
                self.diagnostics.warning(
                    f"State {destination.name!r} has speed 0 and a looping motion; "
                    "it will play at speed -1 instead"
                )

        if destination.has_behaviors:
            self.diagnostics.error(
                f"State {destination.name!r} has behavior scripts "
                f"({', '.join(destination.behaviors)}) that will no longer run"
            )
        return _CONTINUE

    def _normalize(self, condition: Condition) -> float | None:
        mode = condition.mode
        if mode == ConditionMode.IF_NOT:
            return 0.0
        if mode == ConditionMode.IF:
            return 1.0
        if mode == ConditionMode.EQUALS:
            return condition.threshold
        if mode in (ConditionMode.GREATER, ConditionMode.LESS):
            self.diagnostics.warning(
                f"Condition {condition.parameter} {mode.value} {condition.threshold:g} "
                f"is flattened to threshold {condition.threshold:g}; "
                "inexact comparisons are not modelled precisely"
            )
            return condition.threshold
        return None

    def _is_gating_parameter(self, name: str) -> bool:
        return name.lower().startswith(tuple(p.lower() for p in self.config.gating_prefixes))


class LayerClassifier:
    """Recognises flattenable layer patterns.

    The classifier keeps no state between calls; every call reads the
    controller and returns a fresh descriptor.

    Example:
        >>> classifier = LayerClassifier()
        >>> branch = classifier.classify(controller, 1)
        >>> branch.pattern if branch else None
        <BranchPattern.TOGGLE: 'toggle'>
    """

    def __init__(
        self,
        config: OptimizerConfig | None = None,
        analyzer: MotionAnalyzer | None = None,
    ) -> None:
        self.config = config or OptimizerConfig()
        self.analyzer = analyzer or MotionAnalyzer()

    def classify(self, controller: Controller, layer_index: int) -> BranchDescriptor | None:
        """Classify one layer.

        Args:
            controller: Controller owning the layer.
            layer_index: Index of the layer in ``controller.layers``.

        Returns:
            BranchDescriptor, or None if the layer is not flattenable.

        Raises:
            IndexError: If ``layer_index`` is out of range.
        """
        layer = controller.layers[layer_index]
        graph = layer.state_machine
        if graph is None or not graph.states:
            logger.debug(f"Layer {layer.name!r} rejected: empty graph")
            return None

        if len(graph.states) == 1:
            return self._classify_single_state(layer, graph)
        return self._classify_toggle(controller, layer, graph)

    def classify_all(self, controller: Controller) -> list[BranchDescriptor]:
        """Classify every layer, keeping accepted branches in layer order."""
        branches: list[BranchDescriptor] = []
        for i in range(len(controller.layers)):
            branch = self.classify(controller, i)
            if branch is not None:
                branches.append(branch)
        return branches

    def _classify_single_state(
        self, layer: Layer, graph: StateMachine
    ) -> BranchDescriptor | None:
        state = graph.get_default_state()
        if state is None or state.motion is None:
            logger.debug(f"Layer {layer.name!r} rejected: single state without motion")
            return None

        escaping = find_transition(
            graph,
            lambda t: not t.mute
            and (t.targets_graph or t.destination_state not in (None, state.name)),
        )
        if escaping is not None:
            logger.debug(f"Layer {layer.name!r} rejected: transition leaves the only state")
            return None

        diagnostics = _DiagnosticLog()
        # Self-loop and exit transitions are tolerated, but flagged
        if find_transition(graph, lambda t: not t.mute) is not None:
            diagnostics.error(
                f"State {state.name!r} has transitions to itself or to exit; "
                "they are dropped when the layer is flattened"
            )

        if not state.is_motion_timed:
            return BranchDescriptor(
                name=layer.name,
                pattern=BranchPattern.SINGLE_STATE,
                entries=[BranchEntry(motion=state.motion, time_scale=state.speed or 1.0)],
                diagnostics=diagnostics.items,
                is_active=not diagnostics.has_errors,
                layer_name=layer.name,
            )

        if isinstance(state.motion, Clip):
            return BranchDescriptor(
                name=layer.name,
                pattern=BranchPattern.MOTION_TIME_STATE,
                parameter=state.time_parameter,
                entries=[BranchEntry(motion=state.motion)],
                diagnostics=diagnostics.items,
                is_active=not diagnostics.has_errors,
                layer_name=layer.name,
                can_edit=False,
                is_motion_timed=True,
            )

        logger.debug(f"Layer {layer.name!r} rejected: time parameter drives a blend tree")
        return None

    def _classify_toggle(
        self, controller: Controller, layer: Layer, graph: StateMachine
    ) -> BranchDescriptor | None:
        scan = _ToggleScan(graph=graph, config=self.config)
        for transition in iter_transitions(graph):
            result = scan.step(transition)
            if result.outcome is Outcome.REJECT:
                logger.debug(f"Layer {layer.name!r} rejected: {result.reason}")
                return None

        if not scan.succeeded:
            logger.debug(f"Layer {layer.name!r} rejected: fewer than two selectable states")
            return None

        diagnostics = scan.diagnostics
        reuse_layers = self._check_parameter(controller, layer, scan.parameter, diagnostics)

        for state in scan.state_by_threshold.values():
            motion = state.motion
            if motion is not None and motion.is_looping and not self.analyzer.is_constant(motion):
                diagnostics.warning(
                    f"State {state.name!r} loops an animated motion; "
                    "the blend will not play the loop as expected, only its terminal samples"
                )

        entries = [
            BranchEntry(
                threshold=threshold,
                motion=state.motion,
                time_scale=state.speed if state.speed != 0 else -1.0,
            )
            for threshold, state in sorted(scan.state_by_threshold.items())
        ]
        pattern = BranchPattern.TOGGLE if len(entries) == 2 else BranchPattern.EXCLUSIVE_TOGGLE

        return BranchDescriptor(
            name=layer.name,
            pattern=pattern,
            parameter=scan.parameter,
            entries=entries,
            diagnostics=diagnostics.items,
            is_active=not (diagnostics.has_errors or diagnostics.has_warnings),
            layer_name=layer.name,
            reuse_layers=reuse_layers,
        )

    def _check_parameter(
        self,
        controller: Controller,
        layer: Layer,
        parameter: str,
        diagnostics: _DiagnosticLog,
    ) -> list[str]:
        declared = controller.get_parameter(parameter)
        if declared is None:
            diagnostics.error(
                f"Parameter {parameter!r} is not declared on the controller; "
                "it will be created as a float"
            )
            return []
        if declared.type == ParameterType.FLOAT:
            return []

        reuse_layers = [
            other.name
            for other in controller.layers
            if other.name != layer.name and _layer_uses_parameter(other, parameter)
        ]
        for name in reuse_layers:
            diagnostics.error(
                f"Parameter {parameter!r} is {declared.type.value} and also used by layer "
                f"{name!r}; changing it to float would break that layer"
            )
        return reuse_layers


def _layer_uses_parameter(layer: Layer, parameter: str) -> bool:
    if layer.state_machine is None:
        return False
    match = find_transition(
        layer.state_machine,
        lambda t: any(c.parameter == parameter for c in t.conditions),
    )
    return match is not None


def classify(controller: Controller, layer_index: int) -> BranchDescriptor | None:
    """Classify one layer with default settings."""
    return LayerClassifier().classify(controller, layer_index)
