"""Tests for MoleculeTopology class."""

import numpy as np
import pytest

from mdgather.topology import MoleculeTopology


class TestTopologyCreation:
    """Test MoleculeTopology creation."""

    def test_basic_creation(self):
        """Test creating a topology without bonds."""
        topo = MoleculeTopology(n_atoms=4)

        assert topo.n_atoms == 4
        assert topo.n_bonds == 0
        assert topo.bonds.shape == (0, 2)

    def test_creation_with_bonds(self):
        """Test creating topology with bond array."""
        topo = MoleculeTopology(n_atoms=3, bonds=np.array([[0, 1], [1, 2]]))

        assert topo.n_bonds == 2
        assert topo.bonds.dtype.kind == "i"

    def test_bond_out_of_range(self):
        """Test that bonds to unknown atoms are rejected."""
        with pytest.raises(IndexError):
            MoleculeTopology(n_atoms=2, bonds=[[0, 2]])


class TestTraversal:
    """Test the reconnection order along bonds."""

    def test_linear_chain(self):
        """Test that a chain is walked in order."""
        topo = MoleculeTopology(n_atoms=4, bonds=[[0, 1], [1, 2], [2, 3]])

        assert topo.traversal(0) == [(0, -1), (1, 0), (2, 1), (3, 2)]

    def test_branched_from_middle(self):
        """Test breadth-first order from an inner atom."""
        topo = MoleculeTopology(n_atoms=5, bonds=[[0, 1], [1, 2], [2, 3], [2, 4]])

        assert topo.traversal(2) == [(2, -1), (1, 2), (3, 2), (4, 2), (0, 1)]

    def test_ring_bonds_out_of_order(self):
        """Test that ring closure follows bonds, not numbering."""
        # ring 0-2-1-3-0
        topo = MoleculeTopology(n_atoms=4, bonds=[[0, 2], [1, 2], [1, 3], [0, 3]])

        order = topo.traversal(0)
        assert order[0] == (0, -1)
        parents = dict(order)
        assert parents[2] == 0
        assert parents[3] == 0
        assert parents[1] in (2, 3)

    def test_disconnected_atoms(self):
        """Test that unbonded atoms are attached to the previous index."""
        topo = MoleculeTopology(n_atoms=4, bonds=[[0, 1]])

        assert topo.traversal(0) == [(0, -1), (1, 0), (2, 1), (3, 2)]

    def test_every_atom_once(self):
        """Test that the traversal covers each atom exactly once."""
        topo = MoleculeTopology(n_atoms=6, bonds=[[0, 1], [2, 3], [3, 4]])

        order = topo.traversal(3)
        assert sorted(atom for atom, _ in order) == list(range(6))

    def test_empty(self):
        """Test a molecule without atoms."""
        assert MoleculeTopology(n_atoms=0).traversal() == []
