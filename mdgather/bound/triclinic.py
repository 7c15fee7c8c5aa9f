"""General (triclinic) periodic boundary."""

from __future__ import annotations

import itertools
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..system.box import BoxShape
from .base import Boundary

if TYPE_CHECKING:
    from ..system import Box

# neighbouring lattice cells, the home cell first so it wins ties
_NEIGHBOR_CELLS = np.array(
    sorted(itertools.product((-1, 0, 1), repeat=3), key=lambda s: sum(map(abs, s))),
    dtype=np.float64,
)


def triclinic_image(r1: ArrayLike, r2: ArrayLike, box: Box) -> NDArray[np.floating]:
    """
    Minimum image of ``r2`` with respect to ``r1`` in a general cell.

    Rounding the fractional displacement only finds the closest image
    for near-orthogonal cells, so the 27 images around the rounded one
    are enumerated and the shortest is kept.
    """
    r1 = np.asarray(r1, dtype=np.float64)
    diff = np.asarray(r2, dtype=np.float64) - r1
    vectors = box.vectors

    fractional = diff @ np.linalg.inv(vectors)
    diff = (fractional - np.rint(fractional)) @ vectors

    candidates = diff[..., np.newaxis, :] + _NEIGHBOR_CELLS @ vectors
    best = np.argmin(np.linalg.norm(candidates, axis=-1), axis=-1)
    diff = np.take_along_axis(candidates, best[..., np.newaxis, np.newaxis], axis=-2)
    return r1 + diff[..., 0, :]


class Triclinic(Boundary):
    """Periodic cell spanned by three arbitrary edge vectors."""

    shape = BoxShape.TRICLINIC

    @staticmethod
    def image(r1: ArrayLike, r2: ArrayLike, box: Box) -> NDArray[np.floating]:
        return triclinic_image(r1, r2, box)
