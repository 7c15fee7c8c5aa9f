"""Truncated-octahedron periodic boundary."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..system.box import BoxShape
from .base import Boundary

if TYPE_CHECKING:
    from ..system import Box


def truncated_octahedron_image(
    r1: ArrayLike, r2: ArrayLike, box: Box
) -> NDArray[np.floating]:
    """
    Minimum image of ``r2`` with respect to ``r1`` in a truncated octahedron.

    The lattice of a truncated octahedron inscribed in a cube of edge L
    is the cubic lattice plus its body centre. After the cubic
    correction the two candidates left are the cubic image and the one
    shifted by (L/2) towards the nearest cube corner; the shorter one
    wins. This is the same as applying the corner shift whenever
    |x| + |y| + |z| > 3L/4.
    """
    r1 = np.asarray(r1, dtype=np.float64)
    diff = np.asarray(r2, dtype=np.float64) - r1
    length = box.vectors[0, 0]
    diff = diff - length * np.rint(diff / length)

    corner = diff - 0.5 * length * np.sign(diff)
    use_corner = np.linalg.norm(corner, axis=-1) < np.linalg.norm(diff, axis=-1)
    return r1 + np.where(np.asarray(use_corner)[..., np.newaxis], corner, diff)


class TruncOct(Boundary):
    """Truncated-octahedron periodic cell, given by its enclosing cube."""

    shape = BoxShape.TRUNCATED_OCTAHEDRON

    @staticmethod
    def image(r1: ArrayLike, r2: ArrayLike, box: Box) -> NDArray[np.floating]:
        return truncated_octahedron_image(r1, r2, box)
