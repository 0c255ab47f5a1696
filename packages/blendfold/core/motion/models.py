"""Motion schema models.

This module defines the motion primitives consumed by the analyzers:
- Keyframe / FloatCurve: a value-typed animated property (Hermite spline)
- ReferenceKeyframe / ReferenceCurve: an object-reference animated property
- Clip: an atomic, fixed-length motion
- ChildMotion: one entry of a blend tree
- BlendTree: a composite motion, either 1D threshold blend or direct sum
- Motion: discriminated union of Clip and BlendTree
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class BlendTreeType(str, Enum):
    """Composite kind of a blend tree."""

    SIMPLE_1D = "simple_1d"  # Children selected/blended by one threshold parameter
    DIRECT = "direct"  # Weighted sum, one weight parameter per child


class Keyframe(BaseModel):
    """A single key of a float curve.

    Tangents are slopes (value per second). An infinite tangent on either
    side of a segment makes that segment stepped.

    Example:
        >>> Keyframe(time=0.5, value=1.0)
        Keyframe(time=0.5, value=1.0, in_tangent=0.0, out_tangent=0.0)
    """

    model_config = ConfigDict(extra="forbid", frozen=True, ser_json_inf_nan="constants")

    time: float = Field(..., ge=0.0, description="Key time in seconds")
    value: float
    in_tangent: float = 0.0
    out_tangent: float = 0.0


class FloatCurve(BaseModel):
    """Value-typed animated property with keys ordered by time."""

    model_config = ConfigDict(extra="forbid")

    path: str = ""
    property_name: str
    keys: list[Keyframe] = Field(default_factory=list)

    @model_validator(mode="after")
    def _validate_monotonic_time(self) -> FloatCurve:
        last_t = -1.0
        for key in self.keys:
            if key.time < last_t:
                raise ValueError("FloatCurve.keys must have non-decreasing time")
            last_t = key.time
        return self


class ReferenceKeyframe(BaseModel):
    """A single key of an object-reference curve (e.g. a swapped material)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    time: float = Field(..., ge=0.0)
    value: str | None = None


class ReferenceCurve(BaseModel):
    """Object-reference animated property with keys ordered by time."""

    model_config = ConfigDict(extra="forbid")

    path: str = ""
    property_name: str
    keys: list[ReferenceKeyframe] = Field(default_factory=list)

    @model_validator(mode="after")
    def _validate_monotonic_time(self) -> ReferenceCurve:
        last_t = -1.0
        for key in self.keys:
            if key.time < last_t:
                raise ValueError("ReferenceCurve.keys must have non-decreasing time")
            last_t = key.time
        return self


class Clip(BaseModel):
    """Atomic motion with a fixed length and time-sampled curves.

    Attributes:
        kind: Discriminator field, always "clip".
        name: Clip name.
        length: Clip length in seconds.
        loop: Whether the clip loops when played.
        curves: Value-typed curves.
        reference_curves: Object-reference curves.

    Example:
        >>> clip = Clip(name="On", length=1.0)
        >>> clip.is_looping
        False
    """

    model_config = ConfigDict(extra="forbid")

    kind: Literal["clip"] = "clip"
    name: str = ""
    length: float = Field(default=0.0, ge=0.0)
    loop: bool = False
    curves: list[FloatCurve] = Field(default_factory=list)
    reference_curves: list[ReferenceCurve] = Field(default_factory=list)

    @property
    def is_looping(self) -> bool:
        return self.loop

    def key_times(self) -> list[float]:
        """Sorted distinct key times across every curve of the clip."""
        times = {k.time for c in self.curves for k in c.keys}
        times.update(k.time for c in self.reference_curves for k in c.keys)
        return sorted(times)


class ChildMotion(BaseModel):
    """One child entry of a blend tree.

    Attributes:
        motion: Child motion, or None for an empty slot.
        threshold: Threshold for 1D blend trees.
        direct_parameter: Weight parameter for direct blend trees.
        time_scale: Playback speed multiplier; the sign encodes direction.
    """

    model_config = ConfigDict(extra="forbid")

    motion: Motion | None = None
    threshold: float = 0.0
    direct_parameter: str = ""
    time_scale: float = 1.0


class BlendTree(BaseModel):
    """Composite motion.

    Example:
        >>> tree = BlendTree(name="Toggle", blend_parameter="Toggle")
        >>> tree.blend_type
        <BlendTreeType.SIMPLE_1D: 'simple_1d'>
    """

    model_config = ConfigDict(extra="forbid")

    kind: Literal["blend_tree"] = "blend_tree"
    name: str = ""
    blend_type: BlendTreeType = BlendTreeType.SIMPLE_1D
    blend_parameter: str = ""
    children: list[ChildMotion] = Field(default_factory=list)

    @property
    def is_direct(self) -> bool:
        return self.blend_type == BlendTreeType.DIRECT

    @property
    def is_looping(self) -> bool:
        return any(c.motion is not None and c.motion.is_looping for c in self.children)

    def with_children(self, children: list[ChildMotion]) -> BlendTree:
        """Return a copy of this tree holding ``children``."""
        return self.model_copy(update={"children": children})


# Union type for any motion.
Motion = Annotated[Clip | BlendTree, Field(discriminator="kind")]

ChildMotion.model_rebuild()
BlendTree.model_rebuild()
