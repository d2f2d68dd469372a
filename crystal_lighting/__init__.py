"""Crystal Lighting evaluator package."""

from .evaluation import EvaluationResult, Evaluator, ManualSession, SimulationContext
from .generator import generate
from .model import Board, Item, ItemKind, ItemRegistry, PuzzleInstance
from .scoring import INVALID_SCORE, Score

__all__ = [
    "Board",
    "EvaluationResult",
    "Evaluator",
    "INVALID_SCORE",
    "Item",
    "ItemKind",
    "ItemRegistry",
    "ManualSession",
    "PuzzleInstance",
    "Score",
    "SimulationContext",
    "generate",
]
