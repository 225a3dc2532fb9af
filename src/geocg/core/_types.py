"""
Common NumPy typing aliases used throughout *geocg*.

Import with::

    from geocg.core._types import Float64Array, Point, Vector
"""

from typing import Any, TypeAlias

import numpy as np
from numpy.typing import NDArray

Float64Array: TypeAlias = NDArray[np.float64]
"""Shorthand for an ndarray of float64."""

Point: TypeAlias = NDArray[Any]
"""A point on a manifold, stored as an ndarray of the manifold's shape."""

Vector: TypeAlias = NDArray[Any]
"""A tangent vector; same shape as the point it is attached to."""
