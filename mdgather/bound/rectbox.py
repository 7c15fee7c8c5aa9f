"""Rectangular periodic boundary."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..system.box import BoxShape
from .base import Boundary

if TYPE_CHECKING:
    from ..system import Box


def rectangular_image(r1: ArrayLike, r2: ArrayLike, box: Box) -> NDArray[np.floating]:
    """
    Minimum image of ``r2`` with respect to ``r1`` in a rectangular cell.

    Each component of the result differs from ``r1`` by at most half
    the box edge along that axis.
    """
    r1 = np.asarray(r1, dtype=np.float64)
    diff = np.asarray(r2, dtype=np.float64) - r1
    lengths = np.diag(box.vectors)
    return r1 + (diff - lengths * np.rint(diff / lengths))


class RectBox(Boundary):
    """Rectangular (orthorhombic) periodic cell."""

    shape = BoxShape.RECTANGULAR

    @staticmethod
    def image(r1: ArrayLike, r2: ArrayLike, box: Box) -> NDArray[np.floating]:
        return rectangular_image(r1, r2, box)
