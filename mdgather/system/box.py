"""Periodic cell representation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..exceptions import DegenerateBoxError


class BoxShape(Enum):
    """Geometry of the periodic cell."""

    RECTANGULAR = "rectangular"
    TRUNCATED_OCTAHEDRON = "truncated_octahedron"
    TRICLINIC = "triclinic"
    VACUUM = "vacuum"


@dataclass(frozen=True)
class Box:
    """
    Periodic cell of a trajectory frame.

    The cell is stored as a 3x3 matrix whose rows are the edge vectors
    K, L and M. Rectangular and truncated-octahedron cells are diagonal;
    for a truncated octahedron the diagonal holds the edge of the
    enclosing cube.

    Without an explicit shape, a diagonal matrix is rectangular and any
    other matrix is triclinic.

    A box with zero edges may be constructed (readers fill in empty box
    blocks), but it is rejected by ``validate`` before any gathering.

    Attributes:
        vectors: 3x3 array where rows are box vectors [K, L, M].
        shape: Cell geometry.
    """

    vectors: NDArray[np.floating]
    shape: BoxShape | None = None

    def __post_init__(self) -> None:
        """Validate and convert vectors to proper shape."""
        vectors = np.asarray(self.vectors, dtype=np.float64)
        if vectors.shape == (3,):
            vectors = np.diag(vectors)
        if vectors.shape != (3, 3):
            raise ValueError(f"Box vectors must be (3,) or (3, 3), got {vectors.shape}")
        object.__setattr__(self, "vectors", vectors)
        if self.shape is None:
            shape = BoxShape.RECTANGULAR if self.is_orthorhombic else BoxShape.TRICLINIC
        else:
            shape = BoxShape(self.shape)
        object.__setattr__(self, "shape", shape)

    @classmethod
    def orthorhombic(cls, lx: float, ly: float, lz: float) -> Box:
        """Create a rectangular box with given side lengths."""
        return cls(np.array([lx, ly, lz]), BoxShape.RECTANGULAR)

    @classmethod
    def cubic(cls, length: float) -> Box:
        """Create a cubic box with given side length."""
        return cls.orthorhombic(length, length, length)

    @classmethod
    def triclinic(cls, vectors: ArrayLike) -> Box:
        """Create a triclinic box from 3x3 matrix of box vectors."""
        return cls(np.asarray(vectors), BoxShape.TRICLINIC)

    @classmethod
    def truncated_octahedron(cls, length: float) -> Box:
        """Create a truncated octahedron inscribed in a cube of edge ``length``."""
        return cls(np.array([length, length, length]), BoxShape.TRUNCATED_OCTAHEDRON)

    @classmethod
    def vacuum(cls) -> Box:
        """Create the null box of a non-periodic system."""
        return cls(np.zeros(3), BoxShape.VACUUM)

    @property
    def lengths(self) -> NDArray[np.floating]:
        """Return box vector lengths [|K|, |L|, |M|]."""
        return np.linalg.norm(self.vectors, axis=1)

    @property
    def is_orthorhombic(self) -> bool:
        """Check if box is orthorhombic (diagonal matrix)."""
        off_diag = self.vectors.copy()
        np.fill_diagonal(off_diag, 0)
        return np.allclose(off_diag, 0)

    @property
    def center(self) -> NDArray[np.floating]:
        """Return the centre of the cell, 0.5 * (K + L + M)."""
        return 0.5 * self.vectors.sum(axis=0)

    def validate(self) -> None:
        """
        Check that the box can be used as a periodic cell.

        The shape tag does not matter here: a vacuum box fails as well,
        only the vacuum boundary skips this check.

        Raises:
            DegenerateBoxError: If any edge has zero length or the edge
                vectors do not span a volume.
        """
        lengths = self.lengths
        if np.any(lengths == 0.0):
            raise DegenerateBoxError(
                "Box block contains element(s) of value 0.0: "
                f"edge lengths {lengths.tolist()}"
            )
        if abs(np.linalg.det(self.vectors)) <= 1e-12 * np.prod(lengths):
            raise DegenerateBoxError(
                f"Box vectors {self.vectors.tolist()} are coplanar and span no volume"
            )
