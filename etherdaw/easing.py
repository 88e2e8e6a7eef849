"""Easing functions for density and automation ramps.

Easing functions map a normalised section position *t* in [0, 1] to an eased
output in [0, 1].  Density curves and automation curves use them to shape how
a value moves from a start to an end across a section.

Curve names as written in a score:

    "linear"       Constant rate (default).
    "exponential"  Fast start, slow end (exponential ease-out) - build-ups that
                   fill in early.
    "logarithmic"  Slow start, fast end (exponential ease-in) - sparse intros
                   that fill in late.
    "sine"         Smooth S-curve (sine ease-in-out).
    "step"         Jumps from start to end at the midpoint.

All functions satisfy f(0) = 0 and f(1) = 1 and are monotonically non-decreasing.
Input outside [0, 1] is clamped by :func:`interpolate`.

Automation curves named ``"exponential"`` are not eased this way; they
interpolate multiplicatively, see :func:`etherdaw.automation.interpolate_curve`.
"""

from __future__ import annotations

import math
import typing


# ─── Easing functions ─────────────────────────────────────────────────────────


def linear (t: float) -> float:
    """No transformation - constant rate of change."""
    return t


def ease_out_expo (t: float) -> float:
    """Exponential ease-out: most of the change happens early."""
    return 1.0 if t >= 1.0 else 1.0 - math.pow(2.0, -10.0 * t)


def ease_in_expo (t: float) -> float:
    """Exponential ease-in: most of the change happens late."""
    return 0.0 if t <= 0.0 else math.pow(2.0, 10.0 * t - 10.0)


def ease_in_out_sine (t: float) -> float:
    """Sine S-curve: smooth start and end, faster in the middle."""
    return -(math.cos(math.pi * t) - 1.0) / 2.0


def step (t: float) -> float:
    """Hold the start value until halfway, then jump to the end."""
    return 0.0 if t < 0.5 else 1.0


# ─── Registry and lookup ──────────────────────────────────────────────────────

EasingFn = typing.Callable[[float], float]

EASING_FUNCTIONS: typing.Dict[str, EasingFn] = {
    "linear":      linear,
    "exponential": ease_out_expo,
    "logarithmic": ease_in_expo,
    "sine":        ease_in_out_sine,
    "step":        step,
}

DENSITY_CURVES = ("linear", "exponential", "logarithmic", "sine")


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
            f"Unknown curve {shape!r}. Available curves: {available}"
        )
    return EASING_FUNCTIONS[shape]


def clamp01 (value: float) -> float:
    """Clamp a value to [0, 1]."""
    return max(0.0, min(1.0, value))


def interpolate (
    start: float,
    end: float,
    position: float,
    shape: typing.Union[str, EasingFn] = "linear",
) -> float:
    """Move from *start* to *end* along an eased curve.

    *position* is clamped to [0, 1] before easing.  The result is not
    clamped; callers that need a bounded value clamp it themselves.
    """

    t = clamp01(position)

    return start + (end - start) * get_easing(shape)(t)
