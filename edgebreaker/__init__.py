"""Edgebreaker connectivity compression for triangle meshes in OBJ format."""

__version__ = "0.1.0"