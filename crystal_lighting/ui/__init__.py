"""User interface package for the crystal lighting evaluator."""

from .main import create_window, run_window
from .toolkit import CrystalLightingUI

__all__ = [
    "CrystalLightingUI",
    "create_window",
    "run_window",
]
