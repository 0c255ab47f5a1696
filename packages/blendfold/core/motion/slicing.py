"""Clip frame slicing.

A state whose playback position is driven by a time parameter behaves like a
1D blend over the clip's poses. Slicing the clip at every key time produces
one single-frame clip per pose, keyed by normalized time.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from blendfold.core.motion.models import (
    Clip,
    FloatCurve,
    Keyframe,
    ReferenceCurve,
    ReferenceKeyframe,
)
from blendfold.core.motion.sampling import evaluate_curve, lookup_reference


class ClipFrame(BaseModel):
    """A single-frame clip and its normalized position in the source clip."""

    model_config = ConfigDict(extra="forbid")

    normalized_time: float
    clip: Clip


def slice_clip_frames(clip: Clip) -> list[ClipFrame]:
    """Split a clip into single-frame clips, one per distinct key time.

    Each frame clip holds every curve of the source clip sampled at that
    time. Float curves are evaluated, reference curves resolved by key
    lookup.

    Args:
        clip: Source clip.

    Returns:
        Frames ordered by time. Normalized time is ``time / clip.length``
        (0 for zero-length clips).

    Example:
        >>> frames = slice_clip_frames(clip)
        >>> [f.normalized_time for f in frames]
        [0.0, 0.5, 1.0]
    """
    frames: list[ClipFrame] = []
    for index, time in enumerate(clip.key_times()):
        curves = [
            FloatCurve(
                path=c.path,
                property_name=c.property_name,
                keys=[Keyframe(time=0.0, value=float(evaluate_curve(c, time)))],
            )
            for c in clip.curves
            if c.keys
        ]
        reference_curves = [
            ReferenceCurve(
                path=c.path,
                property_name=c.property_name,
                keys=[ReferenceKeyframe(time=0.0, value=lookup_reference(c, time))],
            )
            for c in clip.reference_curves
            if c.keys
        ]
        frame_clip = Clip(
            name=f"{clip.name} {index}",
            curves=curves,
            reference_curves=reference_curves,
        )
        normalized = time / clip.length if clip.length > 0 else 0.0
        frames.append(ClipFrame(normalized_time=normalized, clip=frame_clip))
    return frames
