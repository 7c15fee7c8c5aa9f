"""Trajectory frame representation."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..topology import MoleculeTopology
from .box import Box


def _as_positions(positions: ArrayLike) -> NDArray[np.floating]:
    positions = np.array(positions, dtype=np.float64)
    if positions.size == 0:
        return positions.reshape(0, 3)
    if positions.ndim != 2 or positions.shape[1] != 3:
        raise ValueError(f"positions must have shape (N, 3), got {positions.shape}")
    return positions


@dataclass
class Molecule:
    """
    Solute molecule of a frame.

    Atom order is assumed to follow connectivity closely enough that
    consecutive atoms are near each other; atom 0 is the anchor atom.

    Attributes:
        positions: Atomic positions, shape (N, 3).
        topology: Optional bond graph, used by bond-driven gathering.
    """

    positions: NDArray[np.floating]
    topology: MoleculeTopology | None = None

    def __post_init__(self) -> None:
        """Validate and convert arrays."""
        self.positions = _as_positions(self.positions)
        if self.topology is not None and self.topology.n_atoms != self.n_atoms:
            raise ValueError(
                f"topology has {self.topology.n_atoms} atoms, "
                f"positions have {self.n_atoms}"
            )

    @property
    def n_atoms(self) -> int:
        """Return number of atoms."""
        return len(self.positions)

    def cog(self) -> NDArray[np.floating]:
        """Return the centre of geometry."""
        return self.positions.mean(axis=0)

    def translate(self, shift: ArrayLike) -> None:
        """Rigidly translate all atoms by ``shift``."""
        self.positions += np.asarray(shift, dtype=np.float64)

    def copy(self) -> Molecule:
        """Create a copy with independent positions."""
        return Molecule(positions=self.positions.copy(), topology=self.topology)


@dataclass
class Solvent:
    """
    Solvent block: many identical small molecules stored back to back.

    Attributes:
        positions: Atomic positions, shape (N, 3); N is a multiple of
            ``atoms_per_molecule``.
        atoms_per_molecule: Number of atoms of one solvent molecule.
    """

    positions: NDArray[np.floating]
    atoms_per_molecule: int

    def __post_init__(self) -> None:
        """Validate and convert arrays."""
        self.positions = _as_positions(self.positions)
        if self.atoms_per_molecule <= 0:
            raise ValueError(
                f"atoms_per_molecule must be positive, got {self.atoms_per_molecule}"
            )
        if len(self.positions) % self.atoms_per_molecule != 0:
            raise ValueError(
                f"{len(self.positions)} solvent positions is not a multiple of "
                f"{self.atoms_per_molecule} atoms per molecule"
            )

    @property
    def n_atoms(self) -> int:
        """Return number of solvent atoms."""
        return len(self.positions)

    @property
    def n_molecules(self) -> int:
        """Return number of solvent molecules."""
        return len(self.positions) // self.atoms_per_molecule

    def chunks(self) -> Iterator[NDArray[np.floating]]:
        """Yield a writable view of each solvent molecule's positions."""
        for start in range(0, len(self.positions), self.atoms_per_molecule):
            yield self.positions[start : start + self.atoms_per_molecule]

    def copy(self) -> Solvent:
        """Create a copy with independent positions."""
        return Solvent(
            positions=self.positions.copy(),
            atoms_per_molecule=self.atoms_per_molecule,
        )


@dataclass
class Snapshot:
    """
    One trajectory frame as handed over by a reader.

    Positions are stored per molecule so that gathering can work on
    one molecule at a time. Gathering mutates the arrays in place.

    Attributes:
        molecules: Solute molecules in topology order.
        solvents: Solvent blocks.
        box: Periodic cell, or None if the frame had no box block.
    """

    molecules: list[Molecule] = field(default_factory=list)
    solvents: list[Solvent] = field(default_factory=list)
    box: Box | None = None

    @property
    def has_box(self) -> bool:
        """Whether the frame carries a box block."""
        return self.box is not None

    @property
    def n_molecules(self) -> int:
        """Return number of solute molecules."""
        return len(self.molecules)

    @property
    def n_atoms(self) -> int:
        """Return total number of atoms, solute and solvent."""
        return sum(m.n_atoms for m in self.molecules) + sum(
            s.n_atoms for s in self.solvents
        )

    @classmethod
    def create(
        cls,
        molecules: list[ArrayLike] | None = None,
        box: Box | None = None,
        solvent: ArrayLike | None = None,
        atoms_per_solvent: int = 3,
    ) -> Snapshot:
        """
        Create a Snapshot from plain position arrays.

        Args:
            molecules: One (N_i, 3) position array per solute molecule.
            box: Periodic cell.
            solvent: Solvent positions, shape (M, 3).
            atoms_per_solvent: Atoms per solvent molecule.

        Returns:
            New Snapshot instance.
        """
        mols = [Molecule(positions=p) for p in (molecules or [])]
        solvents = []
        if solvent is not None:
            solvents.append(
                Solvent(positions=solvent, atoms_per_molecule=atoms_per_solvent)
            )
        return cls(molecules=mols, solvents=solvents, box=box)

    def solute_cog(self) -> NDArray[np.floating]:
        """Return the centre of geometry of all solute atoms."""
        if not self.molecules:
            return np.zeros(3)
        return np.concatenate([m.positions for m in self.molecules]).mean(axis=0)

    def copy(self) -> Snapshot:
        """Create a deep copy of this frame."""
        return Snapshot(
            molecules=[m.copy() for m in self.molecules],
            solvents=[s.copy() for s in self.solvents],
            box=self.box,  # Box is immutable
        )

    def same_layout(self, other: Snapshot) -> bool:
        """Check that ``other`` has the same molecule and solvent sizes."""
        return [m.n_atoms for m in self.molecules] == [
            m.n_atoms for m in other.molecules
        ] and [s.n_atoms for s in self.solvents] == [s.n_atoms for s in other.solvents]
