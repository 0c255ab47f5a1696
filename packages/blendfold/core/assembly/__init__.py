"""Assembly of accepted branches into the master tree."""

from blendfold.core.assembly.assembler import (
    TreeAssembler,
    attachable_branches,
    branch_entries,
    fill_empty,
    promote_parameter,
)
from blendfold.core.assembly.errors import AssemblyError
from blendfold.core.assembly.locator import MasterLocator, MasterTreeLocator, ready_parameter
from blendfold.core.assembly.optimization import (
    OptimizationInfo,
    apply_optimization,
    bool_state,
    collect_optimization_info,
)

__all__ = [
    "AssemblyError",
    "MasterLocator",
    "MasterTreeLocator",
    "OptimizationInfo",
    "TreeAssembler",
    "apply_optimization",
    "attachable_branches",
    "bool_state",
    "branch_entries",
    "collect_optimization_info",
    "fill_empty",
    "promote_parameter",
    "ready_parameter",
]
