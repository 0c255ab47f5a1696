"""Curve sampling infrastructure.

Float curves are evaluated as cubic Hermite splines between keys, the
interpolation animation runtimes use for keyframed properties. Reference
curves hold discrete values and resolve to a key rather than interpolating.
"""

from __future__ import annotations

import numpy as np

from blendfold.core.motion.models import FloatCurve, ReferenceCurve


def evaluate_curve(curve: FloatCurve, times: np.ndarray | list[float] | float) -> np.ndarray:
    """Evaluate a float curve at one or more times.

    Times before the first key return the first value, times after the last
    key return the last value.

    Args:
        curve: Curve to evaluate.
        times: Sample times in seconds.

    Returns:
        Array of sampled values with the same shape as ``times``.

    Raises:
        ValueError: If the curve has no keys.

    Example:
        >>> curve = FloatCurve(property_name="x", keys=[
        ...     Keyframe(time=0.0, value=0.0, out_tangent=1.0),
        ...     Keyframe(time=1.0, value=1.0, in_tangent=1.0),
        ... ])
        >>> float(evaluate_curve(curve, 0.5))
        0.5
    """
    if not curve.keys:
        raise ValueError("curve has no keys")

    t = np.asarray(times, dtype=float)
    key_t = np.array([k.time for k in curve.keys])
    key_v = np.array([k.value for k in curve.keys])

    if len(curve.keys) == 1:
        return np.full_like(t, key_v[0])

    out_tan = np.array([k.out_tangent for k in curve.keys])
    in_tan = np.array([k.in_tangent for k in curve.keys])

    # Segment index i covers [key_t[i], key_t[i + 1]]
    idx = np.clip(np.searchsorted(key_t, t, side="right") - 1, 0, len(key_t) - 2)
    t0, t1 = key_t[idx], key_t[idx + 1]
    v0, v1 = key_v[idx], key_v[idx + 1]
    m0, m1 = out_tan[idx], in_tan[idx + 1]

    dt = t1 - t0
    with np.errstate(divide="ignore", invalid="ignore"):
        s = np.where(dt > 0, (t - t0) / np.where(dt > 0, dt, 1.0), 0.0)
    s2 = s * s
    s3 = s2 * s
    h00 = 2 * s3 - 3 * s2 + 1
    h10 = s3 - 2 * s2 + s
    h01 = -2 * s3 + 3 * s2
    h11 = s3 - s2

    stepped = ~(np.isfinite(m0) & np.isfinite(m1))
    safe_m0 = np.where(stepped, 0.0, m0)
    safe_m1 = np.where(stepped, 0.0, m1)
    value = h00 * v0 + h10 * dt * safe_m0 + h01 * v1 + h11 * dt * safe_m1
    value = np.where(stepped, v0, value)

    value = np.where(t <= key_t[0], key_v[0], value)
    value = np.where(t >= key_t[-1], key_v[-1], value)
    return value


def lookup_reference(curve: ReferenceCurve, time: float) -> str | None:
    """Resolve a reference curve value at ``time``.

    Returns the value of a key exactly at ``time``, else the latest key
    before it, else the final key.

    Raises:
        ValueError: If the curve has no keys.
    """
    if not curve.keys:
        raise ValueError("curve has no keys")

    earlier = None
    for key in curve.keys:
        if key.time == time:
            return key.value
        if key.time < time:
            earlier = key
    if earlier is not None:
        return earlier.value
    return curve.keys[-1].value


def check_sample_times(key_times: list[float]) -> np.ndarray:
    """Key times plus the midpoint of every segment between consecutive keys.

    Midpoints catch spline overshoot between keys holding equal values.

    Example:
        >>> check_sample_times([0.0, 1.0, 3.0]).tolist()
        [0.0, 0.5, 1.0, 2.0, 3.0]
    """
    keys = np.asarray(key_times, dtype=float)
    if keys.size < 2:
        return keys
    mids = (keys[:-1] + keys[1:]) / 2.0
    return np.sort(np.concatenate([keys, mids]))
