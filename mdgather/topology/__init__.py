"""Molecular connectivity."""

from .topology import MoleculeTopology

__all__ = ["MoleculeTopology"]
