"""Motion constancy analysis.

A motion is constant when playing it at any time yields the same pose.
Constant motions can be blended at a fixed weight without losing anything,
which is what makes end-of-clip sampling of looping states safe.
"""

from __future__ import annotations

import logging

import numpy as np

from blendfold.core.config.models import AnalysisConfig
from blendfold.core.motion.models import BlendTree, Clip, FloatCurve, Motion, ReferenceCurve
from blendfold.core.motion.sampling import check_sample_times, evaluate_curve

logger = logging.getLogger(__name__)


class MotionAnalyzer:
    """Determines whether motions are constant over their timeline."""

    def __init__(self, config: AnalysisConfig | None = None) -> None:
        self.config = config or AnalysisConfig()

    def is_constant(self, motion: Motion | None) -> bool:
        """Check whether a motion has no animated change.

        Blend trees are scanned in full: every descendant clip is checked,
        since a single animated clip breaks constancy for any parent that
        blends it.

        Args:
            motion: Clip, blend tree, or None.

        Returns:
            True if the motion is constant. None is constant.
        """
        if motion is None:
            return True
        if isinstance(motion, BlendTree):
            results = [self.is_constant(child.motion) for child in motion.children]
            return all(results)
        return self._is_clip_constant(motion)

    def _is_clip_constant(self, clip: Clip) -> bool:
        for curve in clip.curves:
            if not self._is_float_curve_constant(curve):
                logger.debug(f"Clip {clip.name!r} animates {curve.path}.{curve.property_name}")
                return False
        for ref_curve in clip.reference_curves:
            if not _is_reference_curve_constant(ref_curve):
                logger.debug(
                    f"Clip {clip.name!r} swaps {ref_curve.path}.{ref_curve.property_name}"
                )
                return False
        return True

    def _is_float_curve_constant(self, curve: FloatCurve) -> bool:
        if len(curve.keys) <= 1 and (not curve.keys or curve.keys[0].time == 0):
            return True

        times = check_sample_times([k.time for k in curve.keys])
        values = evaluate_curve(curve, times)
        first = curve.keys[0].value
        return bool(np.all(np.abs(values - first) <= self.config.constancy_tolerance))


def _is_reference_curve_constant(curve: ReferenceCurve) -> bool:
    if len(curve.keys) <= 1 and (not curve.keys or curve.keys[0].time == 0):
        return True
    first = curve.keys[0].value
    return all(k.value == first for k in curve.keys)


def is_constant(motion: Motion | None) -> bool:
    """Check whether a motion is constant using default analysis settings."""
    return MotionAnalyzer().is_constant(motion)
