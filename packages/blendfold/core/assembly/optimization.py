"""Optimization runs over a whole controller.

``collect_optimization_info`` classifies every layer and gathers the
accepted branches with the current master tree; the caller may toggle the
branches' activation and replacement flags before ``apply_optimization``
assembles them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

from blendfold.core.assembly.assembler import TreeAssembler
from blendfold.core.assembly.errors import AssemblyError
from blendfold.core.assembly.locator import MasterTreeLocator
from blendfold.core.classify.classifier import LayerClassifier
from blendfold.core.classify.models import BranchDescriptor
from blendfold.core.config.models import AppConfig
from blendfold.core.graph.models import Controller
from blendfold.core.motion.analyzer import MotionAnalyzer
from blendfold.core.motion.models import BlendTree

logger = logging.getLogger(__name__)

ALL_FALSE = 0
ALL_TRUE = 1
MIXED = 2


def bool_state(values: Iterable[bool]) -> int:
    """Aggregate flags into a tri-state.

    Returns:
        ALL_FALSE (0), ALL_TRUE (1) or MIXED (2). An empty input is ALL_FALSE.

    Example:
        >>> bool_state([True, False])
        2
    """
    seen = set(values)
    if seen == {True}:
        return ALL_TRUE
    if seen == {True, False}:
        return MIXED
    return ALL_FALSE


class OptimizationInfo(BaseModel):
    """Accepted branches of one controller awaiting assembly.

    Attributes:
        controller: Controller the branches were classified from.
        master_tree: Existing master tree, or None if one will be created.
        branches: Accepted branches in layer order.
    """

    model_config = ConfigDict(extra="forbid")

    controller: Controller | None
    master_tree: BlendTree | None = None
    branches: list[BranchDescriptor] = Field(default_factory=list)

    @property
    def all_active(self) -> int:
        return bool_state(b.is_active for b in self.branches)

    @property
    def all_replacing(self) -> int:
        return bool_state(b.is_replacing for b in self.branches)

    def set_all_active(self, value: bool) -> None:
        for branch in self.branches:
            branch.is_active = value

    def set_all_replacing(self, value: bool) -> None:
        for branch in self.branches:
            branch.is_replacing = value

    @property
    def active_branches(self) -> list[BranchDescriptor]:
        return [b for b in self.branches if b.is_active]


def collect_optimization_info(
    controller: Controller, config: AppConfig | None = None
) -> OptimizationInfo:
    """Classify every layer of ``controller``.

    The master tree layer itself is never offered as a branch.
    """
    config = config or AppConfig()
    locator = MasterTreeLocator(config.optimizer)
    classifier = LayerClassifier(config.optimizer, MotionAnalyzer(config.analysis))

    branches: list[BranchDescriptor] = []
    for i, layer in enumerate(controller.layers):
        if locator.is_master_layer(layer):
            continue
        branch = classifier.classify(controller, i)
        if branch is not None:
            branches.append(branch)

    logger.debug(
        f"Controller {controller.name!r}: {len(branches)} of {len(controller.layers)} "
        "layers can be flattened"
    )
    return OptimizationInfo(
        controller=controller, master_tree=locator.find(controller), branches=branches
    )


def apply_optimization(info: OptimizationInfo, config: AppConfig | None = None) -> Controller:
    """Assemble the active branches of ``info`` into its controller.

    Returns:
        The optimised controller.

    Raises:
        AssemblyError: If ``info`` has no controller or the master tree is
            unusable.
    """
    if info.controller is None:
        raise AssemblyError("Optimization target controller cannot be None")

    config = config or AppConfig()
    assembler = TreeAssembler(config.optimizer, config.speed)
    return assembler.apply(
        info.controller, info.active_branches, MasterTreeLocator(config.optimizer)
    )
