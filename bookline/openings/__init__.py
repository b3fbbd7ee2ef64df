"""
Openings - Bundled and file-based opening sources.

This module contains:
- The opening catalog and its loaders
- The bundled Scotch Gambit tree
"""

from .catalog import (
    OPENINGS,
    OpeningSource,
    LoadedOpening,
    VariationInfo,
    UnknownOpeningError,
    list_openings,
    load_opening,
    load_opening_file,
    available_variations,
)
from .scotch_gambit import SCOTCH_GAMBIT_PREFIX, create_scotch_gambit_tree

__all__ = [
    "OPENINGS",
    "OpeningSource",
    "LoadedOpening",
    "VariationInfo",
    "UnknownOpeningError",
    "list_openings",
    "load_opening",
    "load_opening_file",
    "available_variations",
    "SCOTCH_GAMBIT_PREFIX",
    "create_scotch_gambit_tree",
]
