import logging
import math
from typing import List, Tuple

import numpy as np

from ..schemas import ConstraintRelation, LPModel, OptimizationDirection

logger = logging.getLogger(__name__)


class InvalidModel(ValueError):
    """Raised when a model cannot be turned into an initial tableau."""


def validate_model(model: LPModel) -> None:
    """
    Check shapes before any tableau is built.
    Every coefficient sequence must have exactly ``num_variables`` entries.
    """

    n = model.num_variables
    if n < 1:
        raise InvalidModel("Model must have at least one decision variable.")
    if not model.objective:
        raise InvalidModel("Objective has no coefficients.")
    if len(model.objective) != n:
        raise InvalidModel(
            f"Objective has {len(model.objective)} coefficients, expected {n}."
        )
    if model.variable_names and len(model.variable_names) != n:
        raise InvalidModel(
            f"Model names {len(model.variable_names)} variables, expected {n}."
        )
    if not all(math.isfinite(value) for value in model.objective):
        raise InvalidModel("Objective contains a non-finite coefficient.")

    for cons in model.constraints:
        if len(cons.coefficients) != n:
            raise InvalidModel(
                f"Constraint '{cons.id}' has {len(cons.coefficients)} coefficients, expected {n}."
            )
        if not all(math.isfinite(value) for value in cons.coefficients) or not math.isfinite(cons.rhs):
            raise InvalidModel(f"Constraint '{cons.id}' contains a non-finite value.")


def standardize_constraints(model: LPModel) -> List[Tuple[List[float], float]]:
    """
    Rewrite every constraint as ``a.x <= b`` with ``b >= 0``.
    Rows with a negative right-hand side are negated first, which flips the relation.
    Whatever is still not ``<=`` needs artificial variables and is rejected.
    """

    rows: List[Tuple[List[float], float]] = []
    for cons in model.constraints:
        if cons.relation == ConstraintRelation.EQUAL:
            raise InvalidModel(
                f"Constraint '{cons.id}' is an equality; only '<=' rows with an all-slack start are supported."
            )

        coefficients = list(cons.coefficients)
        rhs = cons.rhs
        relation = cons.relation
        if rhs < 0 or (rhs == 0 and relation == ConstraintRelation.GREATER_OR_EQUAL):
            coefficients = [-value for value in coefficients]
            rhs = -rhs
            if relation == ConstraintRelation.LESS_OR_EQUAL:
                relation = ConstraintRelation.GREATER_OR_EQUAL
            else:
                relation = ConstraintRelation.LESS_OR_EQUAL

        if relation != ConstraintRelation.LESS_OR_EQUAL:
            raise InvalidModel(
                f"Constraint '{cons.id}' is not satisfied by the origin; it needs a Phase I start."
            )
        rows.append((coefficients, rhs + 0.0))
    return rows


def build_initial_tableau(model: LPModel) -> Tuple[np.ndarray, List[int]]:
    """
    Build the dense starting tableau and its all-slack basis.

    Layout: decision columns, one slack column per constraint, RHS last.
    The last row holds ``Z - sum(c_i x_i) = 0`` for the maximisation form.
    """

    validate_model(model)
    rows = standardize_constraints(model)

    n = model.num_variables
    m = len(rows)
    tableau = np.zeros((m + 1, n + m + 1), dtype=float)
    basis: List[int] = []

    for i, (coefficients, rhs) in enumerate(rows):
        tableau[i, :n] = coefficients
        tableau[i, n + i] = 1.0
        tableau[i, -1] = rhs
        basis.append(n + i)

    costs = np.array(model.objective, dtype=float)
    if model.direction == OptimizationDirection.MINIMIZE:
        costs = -costs
    tableau[-1, :n] = -costs

    logger.debug("Initial tableau %s with basis %s", tableau.shape, basis)
    return tableau, basis


def pivot(tableau: np.ndarray, row: int, col: int) -> np.ndarray:
    """Gauss-Jordan step on ``tableau[row, col]``, in place."""

    tableau[row, :] = tableau[row, :] / tableau[row, col]
    for i in range(tableau.shape[0]):
        if i != row:
            factor = tableau[i, col]
            if factor != 0.0:
                tableau[i, :] -= factor * tableau[row, :]
    return tableau


def column_label(model: LPModel, col: int) -> str:
    n = model.num_variables
    if col < n:
        return model.variable_name(col)
    return f"s{col - n + 1}"
