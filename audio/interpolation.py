""" Curve fits used to fill the gaps a warped frequency axis leaves between columns. """
from typing import Callable

import numpy as np
from scipy.interpolate import CubicHermiteSpline, CubicSpline, make_interp_spline

from models import InterpType, InvalidArgument

MIN_POINTS = 3


def fit(interp: InterpType, xs: np.ndarray, ys: np.ndarray) -> Callable[[np.ndarray], np.ndarray]:
    """
        Fits a curve through the (x, y) control points and returns it as a callable.
        xs must be strictly increasing. All curves extrapolate past the first and last point.
    """
    xs = np.asarray(xs, dtype=np.float64)
    ys = np.asarray(ys, dtype=np.float64)

    if len(xs) < MIN_POINTS:
        raise InvalidArgument(f"need at least {MIN_POINTS} points to fit a curve, got {len(xs)}")

    if interp == InterpType.LINEAR:
        return make_interp_spline(xs, ys, k=1)
    elif interp == InterpType.CUBIC:
        return CubicSpline(xs, ys, bc_type="natural")
    elif interp == InterpType.CUBIC_HERMITE:
        # Slopes from finite differences of the neighbouring points
        return CubicHermiteSpline(xs, ys, np.gradient(ys, xs))

    raise InvalidArgument(f"cannot fit a curve with interpolation {interp}")
