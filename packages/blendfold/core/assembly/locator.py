"""Master tree discovery and creation.

The master tree is the direct blend tree every flattened branch is attached
to. It lives as the default state's motion of a dedicated layer, recognised
either by the layer name or by a muted exit any-state transition carrying
the identifier name, so renamed layers are still found.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from blendfold.core.assembly.errors import AssemblyError
from blendfold.core.config.models import OptimizerConfig
from blendfold.core.graph.models import (
    Controller,
    Layer,
    Parameter,
    ParameterType,
    State,
    StateMachine,
    Transition,
)
from blendfold.core.motion.models import BlendTree, BlendTreeType

logger = logging.getLogger(__name__)


@runtime_checkable
class MasterLocator(Protocol):
    """Find-or-create capability for the master tree attachment point."""

    def find(self, controller: Controller) -> BlendTree | None:
        """Return the controller's master tree, or None."""
        ...

    def create(self, controller: Controller) -> tuple[Controller, BlendTree]:
        """Add a master tree layer; return the new controller and its tree."""
        ...

    def replace(self, controller: Controller, tree: BlendTree) -> Controller:
        """Write ``tree`` back as the master tree."""
        ...


def ready_parameter(
    controller: Controller,
    name: str,
    param_type: ParameterType,
    default: float,
) -> Controller:
    """Ensure a parameter exists.

    An existing parameter of another type is kept as it is; the mismatch is
    logged.

    Returns:
        The controller, with the parameter appended if it was missing.
    """
    existing = controller.get_parameter(name)
    if existing is not None:
        if existing.type != param_type:
            logger.warning(
                f"Type mismatch! Parameter {name!r} already exists in {controller.name!r} "
                f"with type {existing.type.value} rather than {param_type.value}"
            )
        return controller

    parameter = Parameter(name=name, type=param_type, default=default)
    return controller.model_copy(update={"parameters": [*controller.parameters, parameter]})


class MasterTreeLocator:
    """Default MasterLocator keyed by the optimizer config's names.

    Example:
        >>> locator = MasterTreeLocator()
        >>> controller, tree = locator.create(Controller(name="FX"))
        >>> tree.name
        'FX MasterTree'
    """

    def __init__(self, config: OptimizerConfig | None = None) -> None:
        self.config = config or OptimizerConfig()

    def is_master_layer(self, layer: Layer) -> bool:
        """True if ``layer`` is named or marked as the master layer."""
        if layer.state_machine is None:
            return False
        if layer.name == self.config.master_layer_name:
            return True
        return any(
            t.is_exit and t.mute and t.name == self.config.master_identifier
            for t in layer.state_machine.any_state_transitions
        )

    def find(self, controller: Controller) -> BlendTree | None:
        index = self._find_index(controller)
        if index is None:
            return None
        state = self._master_state(controller.layers[index])
        return state.motion if state is not None and isinstance(state.motion, BlendTree) else None

    def create(self, controller: Controller) -> tuple[Controller, BlendTree]:
        controller = ready_parameter(
            controller, self.config.weight_parameter, ParameterType.FLOAT, 1.0
        )

        name = controller.unique_layer_name(self.config.master_layer_name)
        tree = BlendTree(name=f"{controller.name} MasterTree", blend_type=BlendTreeType.DIRECT)
        identifier = Transition(name=self.config.master_identifier, is_exit=True, mute=True)
        graph = StateMachine(
            name=name,
            states=[State(name=self.config.master_state_name, motion=tree)],
            default_state=self.config.master_state_name,
            any_state_transitions=[identifier],
        )
        layer = Layer(name=name, state_machine=graph, default_weight=1.0)

        logger.debug(f"Created master tree layer {name!r} in {controller.name!r}")
        return controller.model_copy(update={"layers": [*controller.layers, layer]}), tree

    def replace(self, controller: Controller, tree: BlendTree) -> Controller:
        """Write ``tree`` back as the master layer's default state motion.

        Raises:
            AssemblyError: If the controller has no master tree.
        """
        index = self._find_index(controller)
        if index is None:
            raise AssemblyError(f"Controller {controller.name!r} has no master tree to replace")

        layer = controller.layers[index]
        state = self._master_state(layer)
        assert layer.state_machine is not None and state is not None
        graph = _with_state_motion(layer.state_machine, state.name, tree)

        layers = list(controller.layers)
        layers[index] = layer.model_copy(update={"state_machine": graph})
        return controller.model_copy(update={"layers": layers})

    def _find_index(self, controller: Controller) -> int | None:
        for i, layer in enumerate(controller.layers):
            if layer.state_machine is None:
                logger.warning(
                    f"Layer {layer.name!r} in {controller.name!r} has a blank graph "
                    "(null state machine)"
                )
                continue
            if not self.is_master_layer(layer):
                continue
            state = self._master_state(layer)
            if state is not None and isinstance(state.motion, BlendTree):
                return i
        return None

    @staticmethod
    def _master_state(layer: Layer) -> State | None:
        if layer.state_machine is None:
            return None
        return layer.state_machine.get_default_state()


def _with_state_motion(graph: StateMachine, state_name: str, motion: BlendTree) -> StateMachine:
    """Copy of ``graph`` with the named state's motion replaced."""
    states = [
        s.model_copy(update={"motion": motion}) if s.name == state_name else s
        for s in graph.states
    ]
    subs = [_with_state_motion(sub, state_name, motion) for sub in graph.sub_graphs]
    return graph.model_copy(update={"states": states, "sub_graphs": subs})
