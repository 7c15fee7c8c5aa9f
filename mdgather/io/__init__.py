"""Persistence of reference frames."""

from .reference import DEFAULT_REFERENCE_FILE, ReferenceFrame, ReferenceStore

__all__ = ["DEFAULT_REFERENCE_FILE", "ReferenceFrame", "ReferenceStore"]
