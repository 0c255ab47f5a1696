"""Branch assembly into the master tree.

Accepted branches are attached as siblings of one direct blend tree, each
weighted by the always-1.0 weight parameter so that all branches play
additively. Source layers are removed, driving parameters are promoted to
float, sibling speeds are synchronised, and empty motion slots are filled
with a placeholder clip.

Assembly is a single serialized pass returning new values: the master tree
and the controller passed in are never modified. A caller aborting midway
simply discards the result.
"""

from __future__ import annotations

from collections.abc import Sequence

from blendfold.core.assembly.errors import AssemblyError
from blendfold.core.assembly.locator import MasterLocator, MasterTreeLocator, ready_parameter
from blendfold.core.classify.models import BranchDescriptor, BranchEntry
from blendfold.core.config.models import OptimizerConfig, SpeedConfig
from blendfold.core.graph.models import Controller, Parameter, ParameterType
from blendfold.core.motion.models import BlendTree, BlendTreeType, ChildMotion, Clip
from blendfold.core.motion.slicing import slice_clip_frames
from blendfold.core.speed.tree import TreeSpeedSynchronizer
from blendfold.core.utils.logging import get_logger

logger = get_logger(__name__)


def branch_entries(branch: BranchDescriptor) -> list[BranchEntry]:
    """Entries a branch contributes to the master tree.

    Motion-timed branches are expanded into one single-frame clip per key
    time of their clip, thresholded by normalized time.
    """
    if not branch.is_motion_timed:
        return list(branch.entries)

    clip = branch.entries[0].motion if branch.entries else None
    if not isinstance(clip, Clip):
        return list(branch.entries)
    return [
        BranchEntry(threshold=frame.normalized_time, motion=frame.clip, time_scale=1.0)
        for frame in slice_clip_frames(clip)
    ]


def attachable_branches(branches: Sequence[BranchDescriptor]) -> list[BranchDescriptor]:
    """Active branches that contribute at least one entry, in input order."""
    return [b for b in branches if b.is_active and branch_entries(b)]


def fill_empty(tree: BlendTree, placeholder: Clip) -> BlendTree:
    """Copy of ``tree`` with every empty motion slot holding ``placeholder``."""
    children = []
    for child in tree.children:
        if child.motion is None:
            child = child.model_copy(update={"motion": placeholder})
        elif isinstance(child.motion, BlendTree):
            child = child.model_copy(update={"motion": fill_empty(child.motion, placeholder)})
        children.append(child)
    return tree.with_children(children)


def promote_parameter(controller: Controller, name: str) -> Controller:
    """Retype a parameter to float, creating it with default 0 if missing."""
    parameters = list(controller.parameters)
    for i, parameter in enumerate(parameters):
        if parameter.name == name:
            if parameter.type != ParameterType.FLOAT:
                logger.debug(f"Promoting parameter {name!r} from {parameter.type.value} to float")
                parameters[i] = parameter.model_copy(update={"type": ParameterType.FLOAT})
            return controller.model_copy(update={"parameters": parameters})

    parameters.append(Parameter(name=name, type=ParameterType.FLOAT, default=0.0))
    return controller.model_copy(update={"parameters": parameters})


class TreeAssembler:
    """Merges branch descriptors into the master tree.

    Example:
        >>> assembler = TreeAssembler()
        >>> master = BlendTree(name="Master", blend_type=BlendTreeType.DIRECT)
        >>> assembled = assembler.assemble(master, [branch])
        >>> assembled.children[0].direct_parameter
        'Blendfold/One'
    """

    def __init__(
        self,
        config: OptimizerConfig | None = None,
        speed_config: SpeedConfig | None = None,
    ) -> None:
        self.config = config or OptimizerConfig()
        self.synchronizer = TreeSpeedSynchronizer(speed_config)

    @property
    def placeholder(self) -> Clip:
        return Clip(name=self.config.placeholder_clip_name)

    def assemble(
        self, master: BlendTree | None, branches: Sequence[BranchDescriptor]
    ) -> BlendTree:
        """Attach every active branch to ``master``.

        Branches are attached in reverse order. Afterwards sibling speeds
        are synchronised bottom-up and empty slots are filled.

        Args:
            master: The direct master tree.
            branches: Accepted branches; inactive ones are skipped.

        Returns:
            The assembled master tree.

        Raises:
            AssemblyError: If ``master`` is None or not a direct tree.
        """
        if master is None:
            raise AssemblyError("Master tree is missing")
        if not master.is_direct:
            raise AssemblyError(f"Master tree {master.name!r} is not a direct blend tree")

        attached: list[ChildMotion] = []
        for branch in reversed(branches):
            if not branch.is_active:
                continue
            child = self.attach(branch)
            if child is not None:
                attached.append(child)

        tree = master.with_children([*master.children, *attached])
        tree, _ = self.synchronizer.fix(tree)
        return fill_empty(tree, self.placeholder)

    def attach(self, branch: BranchDescriptor) -> ChildMotion | None:
        """Build the master tree child for one branch.

        A single entry is attached as its raw motion. Several entries are
        wrapped in a 1D tree driven by the branch parameter.
        """
        entries = branch_entries(branch)
        weight = self.config.weight_parameter
        if not entries:
            logger.warning(f"Branch {branch.name!r} has no entries; skipped")
            return None

        if len(entries) == 1:
            entry = entries[0]
            return ChildMotion(
                motion=entry.motion, direct_parameter=weight, time_scale=entry.time_scale
            )

        tree = BlendTree(
            name=branch.name,
            blend_type=BlendTreeType.SIMPLE_1D,
            blend_parameter=branch.parameter,
            children=[
                ChildMotion(motion=e.motion, threshold=e.threshold, time_scale=e.time_scale)
                for e in entries
            ],
        )
        return ChildMotion(motion=tree, direct_parameter=weight, time_scale=1.0)

    def apply(
        self,
        controller: Controller,
        branches: Sequence[BranchDescriptor],
        locator: MasterLocator | None = None,
    ) -> Controller:
        """Assemble branches into a controller.

        Only branches that contribute entries touch the controller: their
        replaced source layers are removed and their driving parameters
        promoted before the master tree is found (or created), assembled and
        written back. Active branches with no entries are skipped whole.

        Returns:
            The optimised controller.

        Raises:
            AssemblyError: If the master tree cannot be used.
        """
        locator = locator or MasterTreeLocator(self.config)
        log = get_logger(__name__, controller=controller.name)

        attachable = attachable_branches(branches)
        kept = {id(b) for b in attachable}
        for branch in branches:
            if branch.is_active and id(branch) not in kept:
                log.warning(f"Branch {branch.name!r} has no entries; layer and parameter kept")

        for branch in reversed(attachable):
            if branch.is_replacing and branch.layer_name:
                index = controller.layer_index(branch.layer_name)
                if index is None:
                    log.warning(
                        f"Couldn't find layer {branch.layer_name!r} to remove for branch "
                        f"{branch.name!r}"
                    )
                else:
                    layers = [layer for i, layer in enumerate(controller.layers) if i != index]
                    controller = controller.model_copy(update={"layers": layers})
                    log.info(f"Removed {branch.layer_name}")
            if branch.parameter:
                controller = promote_parameter(controller, branch.parameter)

        controller = ready_parameter(
            controller, self.config.weight_parameter, ParameterType.FLOAT, 1.0
        )
        master = locator.find(controller)
        if master is None:
            controller, master = locator.create(controller)

        return locator.replace(controller, self.assemble(master, attachable))
