import logging
from typing import List, Optional

import numpy as np

from .tableau import build_initial_tableau, column_label, pivot
from ..schemas import (
    LPModel,
    OptimizationDirection,
    SimplexResult,
    SimplexStep,
    SolveOptions,
    SolveStatus,
)

logger = logging.getLogger(__name__)


def simplex_solve(model: LPModel, opts: Optional[SolveOptions] = None) -> SimplexResult:
    """
    Tableau simplex from the all-slack basis, recording a step before every pivot.
    Dantzig's rule by default; Bland's rule on request.
    Raises InvalidModel before any work if the model is malformed.
    """

    opts = opts or SolveOptions()
    tableau, basis = build_initial_tableau(model)
    use_bland = opts.pivot_rule == "bland"
    steps: List[SimplexStep] = []
    iterations = 0

    while True:
        entering = _entering_column(tableau[-1, :-1], opts.tol, use_bland)
        if entering is None:
            steps.append(
                _snapshot(
                    tableau,
                    basis,
                    "Optimality condition satisfied: no negative coefficient in the objective row.",
                    is_optimal=True,
                )
            )
            break

        if iterations >= opts.max_iters:
            logger.warning("Max iterations (%d) reached without optimality", opts.max_iters)
            return SimplexResult(
                status=SolveStatus.ITERATION_LIMIT,
                steps=steps,
                iterations=iterations,
                message=f"Hit iteration limit ({opts.max_iters}) before reaching optimality.",
            )

        leaving = _leaving_row(tableau, entering, basis, opts.tol, use_bland)
        if leaving is None:
            label = column_label(model, entering)
            logger.info("Unbounded: %s can increase without limit", label)
            return SimplexResult(
                status=SolveStatus.UNBOUNDED,
                steps=steps,
                iterations=iterations,
                message=f"Unbounded: no positive entry in the column of {label}.",
            )

        description = (
            f"Pivot at row {leaving + 1}, column {entering + 1}. "
            f"Entering: {column_label(model, entering)}. "
            f"Leaving: {column_label(model, basis[leaving])}."
        )
        steps.append(_snapshot(tableau, basis, description, leaving, entering))
        logger.debug("Iter %d: %s", iterations, description)

        pivot(tableau, leaving, entering)
        basis[leaving] = entering
        iterations += 1

    values = _extract_values(tableau, basis, model.num_variables)
    objective = float(tableau[-1, -1])
    if model.direction == OptimizationDirection.MINIMIZE:
        objective = -objective

    logger.info("Optimal after %d pivots: objective=%s", iterations, objective)
    return SimplexResult(
        status=SolveStatus.OPTIMAL,
        optimal_value=objective + 0.0,  # drop -0.0
        variable_values=values,
        steps=steps,
        iterations=iterations,
    )


def _entering_column(objective_row: np.ndarray, tol: float, use_bland: bool) -> Optional[int]:
    improving = np.flatnonzero(objective_row < -tol)
    if improving.size == 0:
        return None
    if use_bland:
        return int(improving[0])
    # argmin keeps the first index on ties
    return int(np.argmin(objective_row))


def _leaving_row(
    tableau: np.ndarray,
    entering: int,
    basis: List[int],
    tol: float,
    use_bland: bool,
) -> Optional[int]:
    best_row: Optional[int] = None
    best_ratio = np.inf
    for i in range(tableau.shape[0] - 1):
        coeff = tableau[i, entering]
        if coeff <= tol:
            continue
        # round-off can leave a basic value at -1e-17; treat it as 0
        ratio = max(tableau[i, -1], 0.0) / coeff
        if ratio < best_ratio:
            best_row, best_ratio = i, ratio
        elif use_bland and ratio == best_ratio and basis[i] < basis[best_row]:
            best_row = i
    return best_row


def _snapshot(
    tableau: np.ndarray,
    basis: List[int],
    description: str,
    pivot_row: Optional[int] = None,
    pivot_col: Optional[int] = None,
    is_optimal: bool = False,
) -> SimplexStep:
    return SimplexStep(
        tableau=tuple(tuple(row) for row in tableau.tolist()),
        pivot_row=pivot_row,
        pivot_col=pivot_col,
        basis=tuple(basis),
        description=description,
        is_optimal=is_optimal,
    )


def _extract_values(tableau: np.ndarray, basis: List[int], n: int) -> List[float]:
    values = [0.0] * n
    for row, col in enumerate(basis):
        if col < n:
            value = float(tableau[row, -1])
            if abs(value) < 1e-12:
                value = 0.0
            values[col] = value
    return values
