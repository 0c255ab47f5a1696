"""Branch descriptor models.

A branch is the flattened form of one state machine layer: a driving
parameter plus the motions it selects between. Branches are produced by the
classifier, optionally edited by the caller, then consumed by the assembler.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from blendfold.core.motion.models import Motion


class BranchPattern(str, Enum):
    """Layer pattern recognised by the classifier.

    Attributes:
        SINGLE_STATE: One state playing one motion.
        MOTION_TIME_STATE: One state whose clip position follows a parameter.
        TOGGLE: Two states selected by one parameter.
        EXCLUSIVE_TOGGLE: Three or more states selected by one parameter.
    """

    SINGLE_STATE = "single_state"
    MOTION_TIME_STATE = "motion_time_state"
    TOGGLE = "toggle"
    EXCLUSIVE_TOGGLE = "exclusive_toggle"


class DiagnosticSeverity(str, Enum):
    """How likely the flattened branch is to behave differently."""

    INFO = "info"  # Behavior may differ
    WARNING = "warning"  # Behavior likely differs
    ERROR = "error"  # Something observable breaks


class Diagnostic(BaseModel):
    """A message attached to an accepted branch."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    severity: DiagnosticSeverity
    message: str


class BranchEntry(BaseModel):
    """One motion of a branch.

    Attributes:
        threshold: Driving parameter value selecting this motion.
        motion: The motion, or None for an empty slot.
        time_scale: Playback speed; -1 marks a zero-speed source state.
    """

    model_config = ConfigDict(extra="forbid")

    threshold: float = 0.0
    motion: Motion | None = None
    time_scale: float = 1.0


class BranchDescriptor(BaseModel):
    """Classifier output for one layer.

    ``is_active`` and ``is_replacing`` are defaults the caller may override
    before assembly.

    Attributes:
        name: Branch name (the source layer name).
        pattern: Recognised pattern.
        parameter: Driving parameter; empty for single-state branches.
        entries: Motions ordered by threshold.
        diagnostics: Info, warning and error messages.
        is_active: Whether the branch is assembled.
        is_replacing: Whether the source layer is removed on assembly.
        layer_name: Source layer, for removal.
        can_edit: Whether entries may be edited by the caller.
        is_motion_timed: Whether entries are produced by clip frame slicing.
        reuse_layers: Other layers reading the driving parameter.

    Example:
        >>> branch = BranchDescriptor(name="Hat", pattern=BranchPattern.TOGGLE, parameter="Hat")
        >>> branch.has_errors
        False
    """

    model_config = ConfigDict(extra="forbid")

    name: str
    pattern: BranchPattern
    parameter: str = ""
    entries: list[BranchEntry] = Field(default_factory=list)
    diagnostics: list[Diagnostic] = Field(default_factory=list)
    is_active: bool = True
    is_replacing: bool = True
    layer_name: str = ""
    can_edit: bool = True
    is_motion_timed: bool = False
    reuse_layers: list[str] = Field(default_factory=list)

    def messages(self, severity: DiagnosticSeverity) -> list[str]:
        return [d.message for d in self.diagnostics if d.severity == severity]

    @property
    def infos(self) -> list[str]:
        return self.messages(DiagnosticSeverity.INFO)

    @property
    def warnings(self) -> list[str]:
        return self.messages(DiagnosticSeverity.WARNING)

    @property
    def errors(self) -> list[str]:
        return self.messages(DiagnosticSeverity.ERROR)

    @property
    def has_errors(self) -> bool:
        return any(d.severity == DiagnosticSeverity.ERROR for d in self.diagnostics)

    @property
    def has_warnings(self) -> bool:
        return any(d.severity == DiagnosticSeverity.WARNING for d in self.diagnostics)
