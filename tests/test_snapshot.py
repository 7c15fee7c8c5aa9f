"""Tests for Snapshot, Molecule and Solvent."""

import numpy as np
import pytest

from mdgather.system import Box, Molecule, Snapshot, Solvent
from mdgather.topology import MoleculeTopology


class TestMolecule:
    """Test Molecule container."""

    def test_basic_creation(self):
        """Test creating a molecule from a nested list."""
        mol = Molecule(positions=[[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]])

        assert mol.n_atoms == 2
        assert mol.positions.dtype == np.float64
        assert mol.topology is None

    def test_bad_shape(self):
        """Test that non (N, 3) positions raise errors."""
        with pytest.raises(ValueError):
            Molecule(positions=np.zeros((4, 2)))

    def test_topology_size_mismatch(self):
        """Test that topology and positions must agree on atom count."""
        with pytest.raises(ValueError):
            Molecule(positions=np.zeros((3, 3)), topology=MoleculeTopology(n_atoms=2))

    def test_cog_and_translate(self):
        """Test centre of geometry and rigid translation."""
        mol = Molecule(positions=[[0.0, 0.0, 0.0], [2.0, 0.0, 0.0], [1.0, 3.0, 0.0]])

        assert np.allclose(mol.cog(), [1.0, 1.0, 0.0])
        mol.translate([1.0, -1.0, 2.0])
        assert np.allclose(mol.cog(), [2.0, 0.0, 2.0])

    def test_positions_are_copied(self):
        """Test that the input array is not shared."""
        source = np.zeros((2, 3))
        mol = Molecule(positions=source)
        mol.positions[0, 0] = 5.0

        assert source[0, 0] == 0.0


class TestSolvent:
    """Test Solvent container."""

    def test_chunks(self):
        """Test per-molecule views."""
        positions = np.arange(18, dtype=float).reshape(6, 3)
        sol = Solvent(positions=positions, atoms_per_molecule=3)

        chunks = list(sol.chunks())
        assert sol.n_molecules == 2
        assert len(chunks) == 2
        assert np.allclose(chunks[1], positions[3:])

    def test_chunks_are_views(self):
        """Test that writing to a chunk changes the solvent."""
        sol = Solvent(positions=np.zeros((6, 3)), atoms_per_molecule=3)
        for chunk in sol.chunks():
            chunk += 1.0

        assert np.allclose(sol.positions, 1.0)

    def test_size_not_multiple(self):
        """Test that a partial solvent molecule is rejected."""
        with pytest.raises(ValueError):
            Solvent(positions=np.zeros((5, 3)), atoms_per_molecule=3)

    def test_nonpositive_atoms_per_molecule(self):
        """Test that atoms_per_molecule must be positive."""
        with pytest.raises(ValueError):
            Solvent(positions=np.zeros((3, 3)), atoms_per_molecule=0)

    def test_empty(self):
        """Test an empty solvent block."""
        sol = Solvent(positions=np.empty((0, 3)), atoms_per_molecule=3)

        assert sol.n_molecules == 0
        assert list(sol.chunks()) == []


class TestSnapshot:
    """Test Snapshot container."""

    def test_create_factory(self):
        """Test Snapshot.create from plain arrays."""
        snap = Snapshot.create(
            molecules=[np.zeros((3, 3)), np.ones((2, 3))],
            box=Box.cubic(3.0),
            solvent=np.zeros((6, 3)),
            atoms_per_solvent=3,
        )

        assert snap.n_molecules == 2
        assert snap.has_box
        assert snap.n_atoms == 11
        assert snap.solvents[0].n_molecules == 2

    def test_has_box(self):
        """Test that a frame without box block reports it."""
        snap = Snapshot.create(molecules=[np.zeros((1, 3))])

        assert not snap.has_box

    def test_solute_cog(self):
        """Test the cog over all solute atoms."""
        snap = Snapshot.create(
            molecules=[[[0.0, 0.0, 0.0]], [[2.0, 0.0, 0.0], [4.0, 3.0, 0.0]]]
        )

        assert np.allclose(snap.solute_cog(), [2.0, 1.0, 0.0])

    def test_copy_is_independent(self):
        """Test that copy creates independent arrays."""
        snap = Snapshot.create(
            molecules=[np.zeros((2, 3))], box=Box.cubic(2.0), solvent=np.zeros((3, 3))
        )
        snap_copy = snap.copy()

        snap.molecules[0].positions[0, 0] = 999.0
        snap.solvents[0].positions[0, 0] = 999.0

        assert snap_copy.molecules[0].positions[0, 0] == 0.0
        assert snap_copy.solvents[0].positions[0, 0] == 0.0
        assert snap_copy.box is snap.box

    def test_same_layout(self):
        """Test layout comparison."""
        snap = Snapshot.create(molecules=[np.zeros((2, 3))], solvent=np.zeros((3, 3)))

        assert snap.same_layout(snap.copy())
        other = Snapshot.create(molecules=[np.zeros((3, 3))], solvent=np.zeros((3, 3)))
        assert not snap.same_layout(other)
