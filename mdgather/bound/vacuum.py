"""Non-periodic boundary."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..system.box import BoxShape
from .base import Boundary

if TYPE_CHECKING:
    from ..system import Box


def vacuum_image(r1: ArrayLike, r2: ArrayLike, box: Box | None = None) -> NDArray[np.floating]:
    """Return ``r2`` unchanged (broadcast against ``r1``)."""
    _, r2 = np.broadcast_arrays(np.asarray(r1, dtype=np.float64), np.asarray(r2, dtype=np.float64))
    return np.array(r2)


class Vacuum(Boundary):
    """
    Boundary of a system without periodicity.

    Every gathering method leaves the positions where they are, and a
    frame does not need a box block.
    """

    shape = BoxShape.VACUUM

    @staticmethod
    def image(r1: ArrayLike, r2: ArrayLike, box: Box | None = None) -> NDArray[np.floating]:
        return vacuum_image(r1, r2, box)

    def check_box(self) -> None:
        """Nothing to check without periodicity."""
        pass
