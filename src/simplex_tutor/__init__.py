"""Simplex Tutor: tableau simplex with a step-by-step pivot trace."""

from .lp import InvalidModel, simplex_solve
from .schemas import (
    Constraint,
    ConstraintRelation,
    LPModel,
    OptimizationDirection,
    SimplexResult,
    SimplexStep,
    SolveOptions,
    SolveStatus,
)

__all__ = [
    "simplex_solve",
    "InvalidModel",
    "Constraint",
    "ConstraintRelation",
    "LPModel",
    "OptimizationDirection",
    "SimplexResult",
    "SimplexStep",
    "SolveOptions",
    "SolveStatus",
]
