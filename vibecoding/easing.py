"""Ramp shapes for gain transitions.

An easing function maps normalised progress *t* in [0, 1] to an eased
output in [0, 1]. :class:`vibecoding.gain.GainRamp` applies one to move a
level from its start value to its target over the ramp duration.

Pass a name string or a plain callable to any ``shape`` parameter:

    engine.gains.fade_in(Voice.PAD, 0.8, shape="ease_out")

    # Custom callable, receives and returns a float in [0, 1]:
    engine.gains.fade_out(Voice.PAD, shape=lambda t: t ** 0.5)

Available shapes:

    "linear"      Constant rate (default). Every stem fade uses it unless told otherwise.
    "ease_in"     Slow start, accelerates.
    "ease_out"    Fast start, decelerates.
    "ease_in_out" Hermite smoothstep S-curve.
    "logarithmic" Rapid start, very gradual end (cubic). Natural for long fade-outs.

All functions satisfy f(0) = 0 and f(1) = 1 and are monotonically non-decreasing.
"""

from __future__ import annotations

import typing


def linear (t: float) -> float:
    """No transformation."""
    return t


def ease_in (t: float) -> float:
    """Quadratic ease-in."""
    return t * t


def ease_out (t: float) -> float:
    """Quadratic ease-out."""
    return 1.0 - (1.0 - t) * (1.0 - t)


def ease_in_out (t: float) -> float:
    """Hermite smoothstep: smooth start and end, faster in the middle."""
    return t * t * (3.0 - 2.0 * t)


def logarithmic (t: float) -> float:
    """Cubic ease-out.

    Most of the audible change happens early and the tail fades out
    imperceptibly, which suits stem fade-outs.
    """
    return 1.0 - (1.0 - t) * (1.0 - t) * (1.0 - t)


EasingFn = typing.Callable[[float], float]

EASING_FUNCTIONS: typing.Dict[str, EasingFn] = {
    "linear":      linear,
    "ease_in":     ease_in,
    "ease_out":    ease_out,
    "ease_in_out": ease_in_out,
    "logarithmic": logarithmic,
}


def get_easing (shape: typing.Union[str, EasingFn]) -> EasingFn:
    """Return the easing function for *shape*.

    *shape* may be a name string (see :data:`EASING_FUNCTIONS`) or any
    callable that maps a float in [0, 1] to a float in [0, 1].

    Raises :class:`ValueError` for unknown string names.
    """
    if callable(shape):
        return shape
    if shape not in EASING_FUNCTIONS:
        available = ", ".join(f'"{k}"' for k in sorted(EASING_FUNCTIONS))
        raise ValueError(
            f"Unknown easing shape {shape!r}. Available shapes: {available}"
        )
    return EASING_FUNCTIONS[shape]


def interpolate (
    start: float,
    end: float,
    progress: float,
    shape: typing.Union[str, EasingFn] = "linear"
) -> float:
    """Return the eased value *progress* of the way from *start* to *end*.

    *progress* is clamped to [0, 1], so callers can pass raw elapsed/duration
    ratios that overshoot at the end of a ramp.
    """
    t = max(0.0, min(1.0, progress))
    return start + (end - start) * get_easing(shape)(t)
