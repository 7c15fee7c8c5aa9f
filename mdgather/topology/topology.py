"""Bond graph of a single molecule."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray


@dataclass
class MoleculeTopology:
    """
    Covalent connectivity of one molecule.

    Index-based design (no objects per atom). Only the bonds are kept,
    which is all that bond-driven reconnection needs.

    Attributes:
        n_atoms: Number of atoms in the molecule.
        bonds: Bond pairs as (i, j) indices, shape (N_bonds, 2).
    """

    n_atoms: int
    bonds: NDArray[np.integer] = field(
        default_factory=lambda: np.empty((0, 2), dtype=np.int32)
    )

    def __post_init__(self) -> None:
        """Validate and convert arrays."""
        self.bonds = (
            np.asarray(self.bonds, dtype=np.int32).reshape(-1, 2)
            if len(self.bonds) > 0
            else np.empty((0, 2), dtype=np.int32)
        )
        for i, j in self.bonds:
            self._validate_atom_index(int(i))
            self._validate_atom_index(int(j))

    @property
    def n_bonds(self) -> int:
        """Return number of bonds."""
        return len(self.bonds)

    def traversal(self, root: int = 0) -> list[tuple[int, int]]:
        """
        Order the atoms for reconnection along bonds.

        Breadth-first walk from ``root``; every atom is reported together
        with the already visited atom it is bonded to. The root has parent
        -1. Atoms that cannot be reached through bonds are picked up in
        index order and attached to the preceding atom index.

        Args:
            root: Atom to start from.

        Returns:
            List of (atom, parent) pairs covering every atom once.
        """
        if self.n_atoms == 0:
            return []
        self._validate_atom_index(root)

        adjacency: list[list[int]] = [[] for _ in range(self.n_atoms)]
        for i, j in self.bonds:
            adjacency[i].append(int(j))
            adjacency[j].append(int(i))
        for neighbors in adjacency:
            neighbors.sort()

        visited = [False] * self.n_atoms
        order: list[tuple[int, int]] = []
        start, parent = root, -1
        while True:
            visited[start] = True
            order.append((start, parent))
            queue = deque([start])
            while queue:
                atom = queue.popleft()
                for neighbor in adjacency[atom]:
                    if not visited[neighbor]:
                        visited[neighbor] = True
                        order.append((neighbor, atom))
                        queue.append(neighbor)

            remaining = [i for i in range(self.n_atoms) if not visited[i]]
            if not remaining:
                return order
            start = remaining[0]
            # a molecule with root > 0 may leave atom 0 disconnected
            parent = start - 1 if start > 0 else root

    def _validate_atom_index(self, index: int) -> None:
        """Validate that atom index is in range."""
        if index < 0 or index >= self.n_atoms:
            raise IndexError(f"Atom index {index} out of range [0, {self.n_atoms})")
