"""Client facades."""

from __future__ import annotations

from .chain_reader import ChainReader

__all__ = ["ChainReader"]
